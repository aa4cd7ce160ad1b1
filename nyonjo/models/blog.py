from typing import Optional
from datetime import datetime
from nyonjo.core.clock import utcnow
from enum import Enum
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import Text, UniqueConstraint

class MediaType(str, Enum):
    ARTICLE = "article"
    IMAGE = "image"
    VIDEO = "video"

class BlogPost(SQLModel, table=True):
    __tablename__ = "blog_posts"

    id: Optional[int] = Field(default=None, primary_key=True)

    # Content
    title: str = Field(index=True)
    content: str = Field(sa_column=Column(Text))  # HTML
    excerpt: str = ""
    category: str = Field(default="Wellness", index=True)

    # Media
    cover_image: str = ""
    media_type: MediaType = Field(default=MediaType.ARTICLE)

    # Status
    published: bool = Field(default=False, index=True)
    featured: bool = Field(default=False, index=True)
    view_count: int = Field(default=0)
    published_at: Optional[datetime] = None

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

class BlogComment(SQLModel, table=True):
    __tablename__ = "blog_comments"

    id: Optional[int] = Field(default=None, primary_key=True)
    post_id: int = Field(foreign_key="blog_posts.id", index=True)

    name: str
    email: Optional[str] = None
    comment: str = Field(sa_column=Column(Text))

    # Moderation
    is_approved: bool = Field(default=False)  # Admin approval required

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

class BlogReaction(SQLModel, table=True):
    __tablename__ = "blog_reactions"
    __table_args__ = (UniqueConstraint("post_id", "anonymous_id", name="uq_blog_reaction_post_anon"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    post_id: int = Field(foreign_key="blog_posts.id", index=True)
    anonymous_id: str = Field(index=True)
    reaction_type: str = "like"

    created_at: datetime = Field(default_factory=utcnow)
