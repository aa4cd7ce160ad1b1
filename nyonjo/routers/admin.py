import logging
from typing import Any, Dict, List, Optional, Union
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy import func
from sqlmodel import Session, select
from nyonjo.core.exceptions import ValidationError
from nyonjo.db.session import get_session
from nyonjo.models.blog import BlogComment, BlogPost
from nyonjo.models.message import Message, MessageStatus
from nyonjo.models.product import Product
from nyonjo.models.sisterhood import SisterhoodPost
from nyonjo.routers.auth import get_current_admin
from nyonjo.services.blog import BlogService
from nyonjo.services.message import MessageService
from nyonjo.services.product import ProductService
from nyonjo.services.sisterhood import SisterhoodService
from nyonjo.services.site_setting import SiteSettingService
from nyonjo.services.storage import StorageClient, get_storage
from nyonjo.services.uploads import UploadService
from pydantic import BaseModel

logger = logging.getLogger(__name__)

router = APIRouter()

# Pydantic models for requests/responses
class DashboardStats(BaseModel):
    totalProducts: int
    inStockProducts: int
    totalBlogPosts: int
    publishedBlogPosts: int
    pendingComments: int
    totalSisterhoodPosts: int
    unreadMessages: int
    totalMessages: int

class ProductPayload(BaseModel):
    name: Optional[str] = None
    short_description: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    benefits: Union[List[str], str, None] = None
    usage_instructions: Optional[str] = None
    images: Optional[List[str]] = None
    in_stock: Optional[bool] = None
    featured: Optional[bool] = None

class BlogPayload(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    category: Optional[str] = None
    cover_image: Optional[str] = None
    media_type: Optional[str] = None
    published: Optional[bool] = None
    featured: Optional[bool] = None

class SisterhoodUpdate(BaseModel):
    is_approved: Optional[bool] = None
    category: Optional[str] = None
    featured: Optional[bool] = None

class FeaturedUpdate(BaseModel):
    featured: bool

class ApprovalUpdate(BaseModel):
    is_approved: bool

class MessageStatusUpdate(BaseModel):
    status: Optional[str] = None

def _count(session: Session, model, *criteria) -> int:
    return session.exec(select(func.count(model.id)).where(*criteria)).one()

@router.get("/dashboard/stats", response_model=DashboardStats)
def get_dashboard_stats(
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    """Counts shown on the back-office landing page"""
    return DashboardStats(
        totalProducts=_count(session, Product),
        inStockProducts=_count(session, Product, Product.in_stock == True),  # noqa: E712
        totalBlogPosts=_count(session, BlogPost),
        publishedBlogPosts=_count(session, BlogPost, BlogPost.published == True),  # noqa: E712
        pendingComments=_count(session, BlogComment, BlogComment.is_approved == False),  # noqa: E712
        totalSisterhoodPosts=_count(session, SisterhoodPost),
        unreadMessages=_count(session, Message, Message.status == MessageStatus.UNREAD),
        totalMessages=_count(session, Message),
    )

# Products

@router.get("/products")
def get_products(
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    return {"products": ProductService(session).list_products()}

@router.post("/products")
def create_product(
    data: ProductPayload,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    product = ProductService(session).create(data.model_dump(exclude_unset=True))
    return {"success": True, "product": product, "message": "Product created successfully"}

@router.get("/products/{product_id}")
def get_product(
    product_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    return {"product": ProductService(session).get(product_id)}

@router.put("/products/{product_id}")
def update_product(
    product_id: int,
    data: ProductPayload,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    product = ProductService(session).update(product_id, data.model_dump(exclude_unset=True))
    return {"success": True, "product": product}

@router.put("/products/{product_id}/featured")
def set_product_featured(
    product_id: int,
    data: FeaturedUpdate,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    result = ProductService(session).set_featured(product_id, data.featured)
    return {"success": True, **result}

@router.delete("/products/{product_id}")
def delete_product(
    product_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session),
    storage: StorageClient = Depends(get_storage)
):
    ProductService(session).delete(product_id, storage)
    return {"success": True, "message": "Product deleted successfully"}

# Blog comments come before /blog/{post_id} so the static path wins

@router.get("/blog/comments")
def get_blog_comments(
    approved: Optional[bool] = None,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    return {"comments": BlogService(session).list_comments_with_titles(approved)}

@router.get("/blog/comments/{comment_id}")
def get_blog_comment(
    comment_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    return {"comment": BlogService(session).get_comment_with_title(comment_id)}

@router.put("/blog/comments/{comment_id}")
def update_blog_comment(
    comment_id: int,
    data: ApprovalUpdate,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    comment = BlogService(session).set_comment_approval(comment_id, data.is_approved)
    return {"success": True, "comment": comment}

@router.delete("/blog/comments/{comment_id}")
def delete_blog_comment(
    comment_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    BlogService(session).delete_comment(comment_id)
    return {"success": True}

# Blog posts

@router.get("/blog")
def get_blog_posts(
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    return {"posts": BlogService(session).list_all()}

@router.post("/blog")
def create_blog_post(
    data: BlogPayload,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    post = BlogService(session).create(data.model_dump(exclude_unset=True))
    return {"success": True, "post": post, "message": "Blog post created successfully"}

@router.get("/blog/{post_id}")
def get_blog_post(
    post_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    return {"post": BlogService(session).get(post_id)}

@router.put("/blog/{post_id}")
@router.patch("/blog/{post_id}")
def update_blog_post(
    post_id: int,
    data: BlogPayload,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    """Fields left out of the body keep their current values"""
    post = BlogService(session).update(post_id, data.model_dump(exclude_unset=True))
    return {"success": True, "post": post, "message": "Blog post updated successfully"}

@router.put("/blog/{post_id}/featured")
def set_blog_post_featured(
    post_id: int,
    data: FeaturedUpdate,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    result = BlogService(session).set_featured(post_id, data.featured)
    return {"success": True, **result}

@router.delete("/blog/{post_id}")
def delete_blog_post(
    post_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    BlogService(session).delete(post_id)
    return {"success": True, "message": "Blog post deleted successfully"}

# Sisterhood

@router.get("/sisterhood")
def get_sisterhood_posts(
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    return {"posts": SisterhoodService(session).list_all()}

@router.put("/sisterhood/comments/{comment_id}")
def update_sisterhood_comment(
    comment_id: int,
    data: ApprovalUpdate,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    comment = SisterhoodService(session).set_comment_approval(comment_id, data.is_approved)
    return {"success": True, "comment": comment}

@router.delete("/sisterhood/comments/{comment_id}")
def delete_sisterhood_comment(
    comment_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    SisterhoodService(session).delete_comment(comment_id)
    return {"success": True}

@router.get("/sisterhood/{post_id}")
def get_sisterhood_post(
    post_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    return {"post": SisterhoodService(session).get(post_id)}

@router.put("/sisterhood/{post_id}")
def update_sisterhood_post(
    post_id: int,
    data: SisterhoodUpdate,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    post = SisterhoodService(session).update_post(post_id, data.model_dump(exclude_unset=True))
    return {"success": True, "post": post}

@router.put("/sisterhood/{post_id}/featured")
def set_sisterhood_post_featured(
    post_id: int,
    data: FeaturedUpdate,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    result = SisterhoodService(session).set_featured(post_id, data.featured)
    return {"success": True, **result}

@router.get("/sisterhood/{post_id}/comments")
def get_sisterhood_post_comments(
    post_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    service = SisterhoodService(session)
    service.get(post_id)
    return {"comments": service.list_comments(post_id, include_hidden=True)}

@router.delete("/sisterhood/{post_id}")
def delete_sisterhood_post(
    post_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    SisterhoodService(session).delete_post(post_id)
    return {"success": True}

# Messages

@router.get("/messages")
def get_messages(
    status: Optional[str] = None,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    return {"messages": MessageService(session).list_messages(status)}

@router.get("/messages/{message_id}")
def get_message(
    message_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    return {"message": MessageService(session).get(message_id)}

@router.put("/messages/{message_id}")
def update_message(
    message_id: int,
    data: MessageStatusUpdate,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    return {"success": True, "message": MessageService(session).update_status(message_id, data.status)}

@router.delete("/messages/{message_id}")
def delete_message(
    message_id: int,
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session)
):
    MessageService(session).delete(message_id)
    return {"success": True}

# Media

@router.post("/upload")
async def upload_file(
    file: UploadFile = File(...),
    bucket: Optional[str] = Form(None),
    admin: Dict[str, Any] = Depends(get_current_admin),
    storage: StorageClient = Depends(get_storage)
):
    content = await file.read()
    result = UploadService(storage).upload_media(content, file.filename or "", file.content_type, bucket)
    logger.info("Uploaded %s to %s", result["fileName"], result["bucket"])
    return result

@router.get("/logo")
def get_logo(session: Session = Depends(get_session)):
    """Public: the storefront reads the logo from here"""
    return {"logoUrl": SiteSettingService(session).get_logo_url()}

@router.post("/logo")
async def upload_logo(
    logo: Optional[UploadFile] = File(None),
    admin: Dict[str, Any] = Depends(get_current_admin),
    session: Session = Depends(get_session),
    storage: StorageClient = Depends(get_storage)
):
    if logo is None:
        raise ValidationError("No file uploaded", field="logo")
    content = await logo.read()
    url = UploadService(storage).upload_logo(content, logo.filename or "", logo.content_type)
    SiteSettingService(session).set_logo_url(url)
    return {"success": True, "message": "Logo uploaded successfully", "logoUrl": url}
