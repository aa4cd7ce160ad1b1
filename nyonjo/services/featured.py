"""
Homepage "featured" slots.

Each collection has a cap (products 2, blog posts 1, community posts 1)
and an eligibility rule. Featuring an item when the cap is full unfeatures
the oldest featured items first. The check, the unfeaturing and the final
write all happen in one transaction with the featured rows locked, so two
admins toggling at once cannot leave more than the cap featured.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple, Type

from sqlmodel import Session, SQLModel, select

from nyonjo.core.clock import utcnow
from nyonjo.core.config import settings
from nyonjo.core.exceptions import NotFoundError, ValidationError
from nyonjo.models.blog import BlogPost
from nyonjo.models.product import Product
from nyonjo.models.sisterhood import SisterhoodPost

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeatureRule:
    label: str
    limit: Callable[[], int]
    is_eligible: Callable[[Any], bool]
    ineligible_message: str


FEATURE_RULES: Dict[Type[SQLModel], FeatureRule] = {
    Product: FeatureRule(
        label="Product",
        limit=lambda: settings.FEATURED_PRODUCT_LIMIT,
        is_eligible=lambda item: bool(item.in_stock),
        ineligible_message="Only in-stock products can be featured",
    ),
    BlogPost: FeatureRule(
        label="Blog post",
        limit=lambda: settings.FEATURED_BLOG_LIMIT,
        is_eligible=lambda item: bool(item.published),
        ineligible_message="Only published posts can be featured on the homepage",
    ),
    SisterhoodPost: FeatureRule(
        label="Post",
        limit=lambda: settings.FEATURED_SISTERHOOD_LIMIT,
        is_eligible=lambda item: bool(item.is_approved),
        ineligible_message="Only approved posts can be featured on the homepage",
    ),
}


def clear_if_ineligible(item: Any) -> bool:
    """Drop the featured flag from an item that no longer qualifies. Does not commit."""
    rule = FEATURE_RULES[type(item)]
    if item.featured and not rule.is_eligible(item):
        item.featured = False
        logger.info("%s %s lost its featured slot after becoming ineligible", rule.label, item.id)
        return True
    return False


class FeaturedService:
    def __init__(self, session: Session):
        self.session = session

    def set_featured(self, model: Type[SQLModel], item_id: int, featured: bool) -> Tuple[Any, List[Any]]:
        """
        Feature or unfeature one item.

        Returns the updated item and the items that were unfeatured to make room.
        Pending changes on the session (e.g. an in-flight update of the same row)
        are committed together with the exchange.
        """
        rule = FEATURE_RULES[model]
        item = self.session.exec(select(model).where(model.id == item_id).with_for_update()).first()
        if not item:
            raise NotFoundError(rule.label, item_id)

        displaced: List[Any] = []
        now = utcnow()

        if featured:
            if not rule.is_eligible(item):
                self.session.rollback()
                raise ValidationError(rule.ineligible_message, field="featured")
            limit = rule.limit()
            if limit < 1:
                self.session.rollback()
                raise ValidationError(f"Featuring is disabled for {rule.label.lower()}s", field="featured")

            if not item.featured:
                others = self.session.exec(
                    select(model)
                    .where(model.featured == True, model.id != item_id)  # noqa: E712
                    .order_by(model.created_at, model.id)
                    .with_for_update()
                ).all()
                overflow = len(others) - (limit - 1)
                for old in others[:max(overflow, 0)]:
                    old.featured = False
                    old.updated_at = now
                    self.session.add(old)
                    displaced.append(old)
            item.featured = True
        else:
            item.featured = False

        item.updated_at = now
        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)
        for old in displaced:
            self.session.refresh(old)
            logger.info("%s %s unfeatured to make room for %s", rule.label, old.id, item.id)
        logger.info("%s %s featured=%s", rule.label, item.id, item.featured)
        return item, displaced

    def featured_items(self, model: Type[SQLModel]) -> List[Any]:
        """Featured items that still qualify, oldest first, capped at the collection limit."""
        rule = FEATURE_RULES[model]
        rows = self.session.exec(
            select(model).where(model.featured == True).order_by(model.created_at, model.id)  # noqa: E712
        ).all()
        return [row for row in rows if rule.is_eligible(row)][: max(rule.limit(), 0)]
