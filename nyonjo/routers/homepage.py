from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session
from nyonjo.db.session import get_session
from nyonjo.models.blog import BlogPost
from nyonjo.models.product import Product
from nyonjo.models.sisterhood import SisterhoodPost
from nyonjo.services.blog import BlogService
from nyonjo.services.product import ProductService
from nyonjo.services.sisterhood import SisterhoodService
from nyonjo.services.site_setting import SiteSettingService
from pydantic import BaseModel

router = APIRouter()

class HomepageData(BaseModel):
    featured_products: List[Product]
    featured_blog_post: Optional[BlogPost]
    featured_community_post: Optional[SisterhoodPost]
    logo_url: str

@router.get("", response_model=HomepageData)
def get_homepage_data(session: Session = Depends(get_session)):
    """Everything the landing page shows in one request: the featured slots and the site logo"""
    return HomepageData(
        featured_products=ProductService(session).list_featured(),
        featured_blog_post=BlogService(session).get_featured(),
        featured_community_post=SisterhoodService(session).get_featured(),
        logo_url=SiteSettingService(session).get_logo_url(),
    )
