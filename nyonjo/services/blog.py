import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from nyonjo.core.clock import utcnow
from nyonjo.core.exceptions import NotFoundError, ValidationError
from nyonjo.models.blog import BlogComment, BlogPost, BlogReaction, MediaType
from nyonjo.services.featured import FeaturedService, clear_if_ineligible

logger = logging.getLogger(__name__)

VIDEO_PATTERN = re.compile(r"\.(mp4|webm|mov|avi)$", re.IGNORECASE)
EXCERPT_LENGTH = 150

UPDATABLE_FIELDS = ("title", "content", "excerpt", "category", "cover_image", "media_type", "published", "published_at")


def is_video_url(url: Optional[str]) -> bool:
    return bool(url) and bool(VIDEO_PATTERN.search(url))


def detect_media_type(cover_image: Optional[str], requested: Optional[str] = None) -> MediaType:
    if is_video_url(cover_image):
        return MediaType.VIDEO
    if requested:
        try:
            return MediaType(requested)
        except ValueError:
            raise ValidationError(f"Unknown media type '{requested}'", field="media_type")
    return MediaType.IMAGE if cover_image else MediaType.ARTICLE


def default_excerpt(content: str) -> str:
    return content[:EXCERPT_LENGTH] + "..."


class BlogService:
    def __init__(self, session: Session):
        self.session = session

    # Posts

    def list_published(self, category: Optional[str] = None) -> List[BlogPost]:
        query = select(BlogPost).where(BlogPost.published == True)  # noqa: E712
        if category:
            query = query.where(BlogPost.category == category)
        return self.session.exec(query.order_by(BlogPost.published_at.desc(), BlogPost.id.desc())).all()

    def list_all(self) -> List[BlogPost]:
        return self.session.exec(select(BlogPost).order_by(BlogPost.created_at.desc(), BlogPost.id.desc())).all()

    def get_featured(self) -> Optional[BlogPost]:
        posts = FeaturedService(self.session).featured_items(BlogPost)
        return posts[0] if posts else None

    def get(self, post_id: int) -> BlogPost:
        post = self.session.get(BlogPost, post_id)
        if not post:
            raise NotFoundError("Blog post", post_id)
        return post

    def get_published(self, post_id: int) -> BlogPost:
        post = self.get(post_id)
        if not post.published:
            raise NotFoundError("Blog post", post_id)
        return post

    def view_post(self, post_id: int) -> BlogPost:
        """Fetch a published post for display and count the view."""
        self.get_published(post_id)
        self.session.execute(
            update(BlogPost)
            .where(BlogPost.id == post_id)
            .values(view_count=func.coalesce(BlogPost.view_count, 0) + 1)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        post = self.get(post_id)
        self.session.refresh(post)
        return post

    def create(self, data: Dict[str, Any]) -> BlogPost:
        if not data.get("title") or not data.get("content"):
            raise ValidationError("Title and content are required")

        cover_image = data.get("cover_image") or ""
        published = bool(data.get("published"))
        published_at = data.get("published_at") if published else None
        if published and not published_at:
            published_at = utcnow()

        post = BlogPost(
            title=data["title"],
            content=data["content"],
            excerpt=data.get("excerpt") or default_excerpt(data["content"]),
            category=data.get("category") or "Wellness",
            cover_image=cover_image,
            media_type=detect_media_type(cover_image, data.get("media_type")),
            published=published,
            published_at=published_at,
        )
        self.session.add(post)
        self.session.flush()
        if data.get("featured"):
            post, _ = FeaturedService(self.session).set_featured(BlogPost, post.id, True)
        else:
            self.session.commit()
            self.session.refresh(post)
        logger.info("Created blog post %s (published=%s)", post.id, post.published)
        return post

    def update(self, post_id: int, data: Dict[str, Any]) -> BlogPost:
        post = self.get(post_id)

        for field in UPDATABLE_FIELDS:
            if field in data and data[field] is not None:
                setattr(post, field, data[field])

        if data.get("cover_image"):
            post.media_type = detect_media_type(data["cover_image"], data.get("media_type"))
        elif data.get("media_type"):
            post.media_type = detect_media_type(None, data["media_type"])

        if post.published and not post.published_at:
            post.published_at = utcnow()

        post.updated_at = utcnow()
        self.session.add(post)

        if data.get("featured") is not None:
            post, _ = FeaturedService(self.session).set_featured(BlogPost, post_id, bool(data["featured"]))
            return post

        clear_if_ineligible(post)
        self.session.commit()
        self.session.refresh(post)
        return post

    def set_featured(self, post_id: int, featured: bool) -> Dict[str, Any]:
        post, displaced = FeaturedService(self.session).set_featured(BlogPost, post_id, featured)
        return {"post": post, "unfeatured": [p.id for p in displaced]}

    def delete(self, post_id: int) -> None:
        post = self.get(post_id)
        self.session.execute(delete(BlogComment).where(BlogComment.post_id == post_id))
        self.session.execute(delete(BlogReaction).where(BlogReaction.post_id == post_id))
        self.session.delete(post)
        self.session.commit()
        logger.info("Deleted blog post %s", post_id)

    # Comments

    def list_approved_comments(self, post_id: int) -> List[BlogComment]:
        return self.session.exec(
            select(BlogComment)
            .where(BlogComment.post_id == post_id, BlogComment.is_approved == True)  # noqa: E712
            .order_by(BlogComment.created_at.desc(), BlogComment.id.desc())
        ).all()

    def add_comment(self, post_id: int, name: Optional[str], email: Optional[str], comment: Optional[str]) -> BlogComment:
        name = (name or "").strip()
        comment = (comment or "").strip()
        if not name or not comment:
            raise ValidationError("Name and comment are required")
        self.get_published(post_id)

        record = BlogComment(
            post_id=post_id,
            name=name,
            email=(email or "").strip() or None,
            comment=comment,
            is_approved=False,
        )
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        logger.info("Comment %s on post %s awaiting approval", record.id, post_id)
        return record

    def list_comments_with_titles(self, approved: Optional[bool] = None) -> List[Dict[str, Any]]:
        query = select(BlogComment, BlogPost.title).join(BlogPost, BlogPost.id == BlogComment.post_id, isouter=True)
        if approved is not None:
            query = query.where(BlogComment.is_approved == approved)
        rows = self.session.exec(query.order_by(BlogComment.created_at.desc(), BlogComment.id.desc())).all()
        return [self._comment_with_title(comment, title) for comment, title in rows]

    def get_comment(self, comment_id: int) -> BlogComment:
        comment = self.session.get(BlogComment, comment_id)
        if not comment:
            raise NotFoundError("Comment", comment_id)
        return comment

    def get_comment_with_title(self, comment_id: int) -> Dict[str, Any]:
        comment = self.get_comment(comment_id)
        post = self.session.get(BlogPost, comment.post_id)
        return self._comment_with_title(comment, post.title if post else None)

    def set_comment_approval(self, comment_id: int, is_approved: bool) -> BlogComment:
        comment = self.get_comment(comment_id)
        comment.is_approved = is_approved
        comment.updated_at = utcnow()
        self.session.add(comment)
        self.session.commit()
        self.session.refresh(comment)
        return comment

    def delete_comment(self, comment_id: int) -> None:
        comment = self.get_comment(comment_id)
        self.session.delete(comment)
        self.session.commit()

    @staticmethod
    def _comment_with_title(comment: BlogComment, title: Optional[str]) -> Dict[str, Any]:
        data = comment.model_dump()
        data["blog_posts"] = {"title": title} if title is not None else None
        return data

    # Reactions

    def like_count(self, post_id: int) -> int:
        return self.session.exec(
            select(func.count(BlogReaction.id)).where(BlogReaction.post_id == post_id)
        ).one()

    def reaction_status(self, post_id: int, anonymous_id: str) -> Dict[str, Any]:
        return {
            "likeCount": self.like_count(post_id),
            "hasLiked": self._find_reaction(post_id, anonymous_id) is not None,
        }

    def toggle_reaction(self, post_id: int, anonymous_id: str) -> Dict[str, Any]:
        """Like if not yet liked by this visitor, otherwise remove the like."""
        self.get_published(post_id)
        existing = self._find_reaction(post_id, anonymous_id)

        if existing:
            self.session.delete(existing)
            self.session.commit()
            action, message = "unliked", "Reaction removed"
        else:
            self.session.add(BlogReaction(post_id=post_id, anonymous_id=anonymous_id, reaction_type="like"))
            try:
                self.session.commit()
            except IntegrityError:
                # A concurrent identical request inserted first
                self.session.rollback()
            action, message = "liked", "Reaction added"

        return {
            "success": True,
            "action": action,
            "message": message,
            "likeCount": self.like_count(post_id),
            "hasLiked": action == "liked",
        }

    def _find_reaction(self, post_id: int, anonymous_id: str) -> Optional[BlogReaction]:
        return self.session.exec(
            select(BlogReaction).where(BlogReaction.post_id == post_id, BlogReaction.anonymous_id == anonymous_id)
        ).first()
