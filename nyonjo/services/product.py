import logging
from typing import Any, Dict, List, Optional, Union

from sqlmodel import Session, select

from nyonjo.core.clock import utcnow
from nyonjo.core.exceptions import NotFoundError, StorageError, ValidationError
from nyonjo.models.product import Product
from nyonjo.services.featured import FeaturedService, clear_if_ineligible
from nyonjo.services.storage import PRODUCT_IMAGES, StorageClient, key_from_public_url

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "short_description",
    "description",
    "price",
    "category",
    "benefits",
    "usage_instructions",
    "images",
    "in_stock",
)


def normalize_benefits(benefits: Union[List[str], str, None]) -> List[str]:
    """Benefits arrive either as a list or as one benefit per line."""
    if not benefits:
        return []
    if isinstance(benefits, str):
        return [line.strip() for line in benefits.split("\n") if line.strip()]
    return [b.strip() for b in benefits if isinstance(b, str) and b.strip()]


def normalize_images(images: Optional[List[str]]) -> List[str]:
    if not images:
        return []
    return [img.strip() for img in images if isinstance(img, str) and img.strip()]


class ProductService:
    def __init__(self, session: Session):
        self.session = session

    def list_products(self, in_stock_only: bool = False, category: Optional[str] = None) -> List[Product]:
        query = select(Product)
        if in_stock_only:
            query = query.where(Product.in_stock == True)  # noqa: E712
        if category:
            query = query.where(Product.category == category)
        return self.session.exec(query.order_by(Product.created_at.desc(), Product.id.desc())).all()

    def list_featured(self) -> List[Product]:
        return FeaturedService(self.session).featured_items(Product)

    def get(self, product_id: int) -> Product:
        product = self.session.get(Product, product_id)
        if not product:
            raise NotFoundError("Product", product_id)
        return product

    def create(self, data: Dict[str, Any]) -> Product:
        if not data.get("name") or data.get("price") in (None, "") or not data.get("category"):
            raise ValidationError("Name, price, and category are required")

        short_description = data.get("short_description") or ""
        product = Product(
            name=data["name"],
            short_description=short_description,
            description=data.get("description") or short_description,
            price=float(data["price"]),
            category=data["category"],
            benefits=normalize_benefits(data.get("benefits")),
            usage_instructions=data.get("usage_instructions") or "",
            images=normalize_images(data.get("images")),
            in_stock=bool(data.get("in_stock", False)),
        )
        self.session.add(product)
        # The insert and the featured exchange share one transaction.
        self.session.flush()
        if data.get("featured"):
            product, _ = FeaturedService(self.session).set_featured(Product, product.id, True)
        else:
            self.session.commit()
            self.session.refresh(product)
        logger.info("Created product %s (%s)", product.id, product.name)
        return product

    def update(self, product_id: int, data: Dict[str, Any]) -> Product:
        product = self.get(product_id)

        for field in UPDATABLE_FIELDS:
            if field not in data or data[field] is None:
                continue
            value = data[field]
            if field == "benefits":
                value = normalize_benefits(value)
            elif field == "images":
                value = normalize_images(value)
            elif field == "price":
                value = float(value)
            setattr(product, field, value)

        product.updated_at = utcnow()
        self.session.add(product)

        if data.get("featured") is not None:
            product, _ = FeaturedService(self.session).set_featured(Product, product_id, bool(data["featured"]))
            return product

        clear_if_ineligible(product)
        self.session.commit()
        self.session.refresh(product)
        return product

    def set_featured(self, product_id: int, featured: bool) -> Dict[str, Any]:
        product, displaced = FeaturedService(self.session).set_featured(Product, product_id, featured)
        return {"product": product, "unfeatured": [p.id for p in displaced]}

    def delete(self, product_id: int, storage: StorageClient) -> None:
        """Delete the product and, best effort, its images in the product bucket."""
        product = self.get(product_id)

        keys = [key for key in (key_from_public_url(url, PRODUCT_IMAGES) for url in product.images or []) if key]
        if keys:
            try:
                storage.delete_files(PRODUCT_IMAGES, keys)
            except StorageError as e:
                logger.warning("Could not delete images for product %s: %s", product_id, e.message)

        self.session.delete(product)
        self.session.commit()
        logger.info("Deleted product %s", product_id)
