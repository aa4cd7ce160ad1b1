from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session
from nyonjo.db.session import get_session
from nyonjo.models.product import Product
from nyonjo.services.product import ProductService

router = APIRouter()

def get_product_service(session: Session = Depends(get_session)) -> ProductService:
    return ProductService(session)

@router.get("", response_model=List[Product])
def read_products(
    category: Optional[str] = None,
    service: ProductService = Depends(get_product_service)
):
    return service.list_products(in_stock_only=True, category=category)

@router.get("/featured", response_model=List[Product])
def read_featured_products(service: ProductService = Depends(get_product_service)):
    """Up to two featured, in-stock products for the homepage"""
    return service.list_featured()

@router.get("/{product_id}", response_model=Product)
def read_product(product_id: int, service: ProductService = Depends(get_product_service)):
    return service.get(product_id)
