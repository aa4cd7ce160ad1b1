from typing import List, Optional
from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel
from sqlmodel import Session
from nyonjo.db.session import get_session
from nyonjo.models.sisterhood import SisterhoodComment, SisterhoodPost
from nyonjo.services.sisterhood import SisterhoodService
from nyonjo.services.storage import StorageClient, get_storage
from nyonjo.services.uploads import UploadService

router = APIRouter()

class PostCreate(BaseModel):
    username: Optional[str] = None
    content: Optional[str] = None
    media_url: Optional[str] = None
    category: Optional[str] = None

class PostDelete(BaseModel):
    username: Optional[str] = None

class CommentCreate(BaseModel):
    username: Optional[str] = None
    content: Optional[str] = None
    parent_id: Optional[int] = None

class LikeAction(BaseModel):
    action: str = "like"

def get_sisterhood_service(session: Session = Depends(get_session)) -> SisterhoodService:
    return SisterhoodService(session)

@router.get("/posts", response_model=List[SisterhoodPost])
def read_posts(service: SisterhoodService = Depends(get_sisterhood_service)):
    return service.list_feed()

@router.post("/posts", response_model=SisterhoodPost, status_code=201)
def create_post(data: PostCreate, service: SisterhoodService = Depends(get_sisterhood_service)):
    return service.create_post(data.username, data.content, data.media_url, data.category)

@router.get("/posts/featured", response_model=Optional[SisterhoodPost])
def read_featured_post(service: SisterhoodService = Depends(get_sisterhood_service)):
    return service.get_featured()

@router.delete("/posts/{post_id}")
def delete_post(post_id: int, data: PostDelete, service: SisterhoodService = Depends(get_sisterhood_service)):
    """Authors delete their own posts by presenting the username they posted under"""
    service.delete_own_post(post_id, data.username)
    return {"success": True}

@router.post("/posts/{post_id}/like", response_model=SisterhoodPost)
def like_post(post_id: int, data: Optional[LikeAction] = None, service: SisterhoodService = Depends(get_sisterhood_service)):
    return service.like_post(post_id, data.action if data else "like")

@router.get("/posts/{post_id}/comments")
def read_comments(post_id: int, tree: bool = False, service: SisterhoodService = Depends(get_sisterhood_service)):
    service.get_visible(post_id)
    if tree:
        return service.comment_tree(post_id)
    return service.list_comments(post_id)

@router.post("/posts/{post_id}/comments", response_model=SisterhoodComment, status_code=201)
def create_comment(post_id: int, data: CommentCreate, service: SisterhoodService = Depends(get_sisterhood_service)):
    return service.add_comment(post_id, data.username, data.content, data.parent_id)

@router.post("/comments/{comment_id}/like", response_model=SisterhoodComment)
def like_comment(comment_id: int, data: Optional[LikeAction] = None, service: SisterhoodService = Depends(get_sisterhood_service)):
    return service.like_comment(comment_id, data.action if data else "like")

@router.post("/upload")
async def upload_media(file: UploadFile = File(...), storage: StorageClient = Depends(get_storage)):
    content = await file.read()
    return UploadService(storage).upload_sisterhood_media(content, file.filename or "", file.content_type)
