from typing import Optional
from datetime import datetime
from nyonjo.core.clock import utcnow
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import Text

class SisterhoodPost(SQLModel, table=True):
    __tablename__ = "sisterhood_posts"

    id: Optional[int] = Field(default=None, primary_key=True)

    # Author is free text, never authenticated
    username: str = Field(index=True)
    content: str = Field(sa_column=Column(Text))
    media_url: Optional[str] = None
    category: Optional[str] = None

    likes: int = Field(default=0)

    # Moderation
    is_approved: bool = Field(default=True, index=True)
    featured: bool = Field(default=False, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

class SisterhoodComment(SQLModel, table=True):
    __tablename__ = "sisterhood_comments"

    id: Optional[int] = Field(default=None, primary_key=True)
    post_id: int = Field(foreign_key="sisterhood_posts.id", index=True)
    parent_id: Optional[int] = Field(default=None, foreign_key="sisterhood_comments.id", index=True)

    username: str
    content: str = Field(sa_column=Column(Text))
    likes: int = Field(default=0)
    is_approved: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
