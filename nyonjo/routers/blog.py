from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session
from nyonjo.core.anonymous import get_anonymous_id
from nyonjo.db.session import get_session
from nyonjo.models.blog import BlogPost
from nyonjo.services.blog import BlogService

router = APIRouter()

class CommentCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    comment: Optional[str] = None

def get_blog_service(session: Session = Depends(get_session)) -> BlogService:
    return BlogService(session)

@router.get("", response_model=List[BlogPost])
def read_posts(category: Optional[str] = None, service: BlogService = Depends(get_blog_service)):
    return service.list_published(category=category)

@router.get("/featured", response_model=Optional[BlogPost])
def read_featured_post(service: BlogService = Depends(get_blog_service)):
    return service.get_featured()

@router.get("/{post_id}", response_model=BlogPost)
def read_post(post_id: int, service: BlogService = Depends(get_blog_service)):
    """Published post; every call counts as one page view"""
    return service.view_post(post_id)

@router.get("/{post_id}/comments")
def read_comments(post_id: int, service: BlogService = Depends(get_blog_service)):
    return {"comments": service.list_approved_comments(post_id)}

@router.post("/{post_id}/comments")
def create_comment(post_id: int, data: CommentCreate, service: BlogService = Depends(get_blog_service)):
    comment = service.add_comment(post_id, data.name, data.email, data.comment)
    return {"success": True, "comment": comment, "message": "Comment submitted for approval"}

@router.get("/{post_id}/reactions")
def read_reactions(
    post_id: int,
    anonymous_id: str = Depends(get_anonymous_id),
    service: BlogService = Depends(get_blog_service)
):
    return service.reaction_status(post_id, anonymous_id)

@router.post("/{post_id}/reactions")
def toggle_reaction(
    post_id: int,
    anonymous_id: str = Depends(get_anonymous_id),
    service: BlogService = Depends(get_blog_service)
):
    return service.toggle_reaction(post_id, anonymous_id)
