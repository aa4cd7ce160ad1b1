import logging
from typing import Any, Dict, Iterable, List, Optional, Type

from sqlalchemy import delete, update
from sqlmodel import Session, SQLModel, select

from nyonjo.core.clock import utcnow
from nyonjo.core.exceptions import NotFoundError, ValidationError
from nyonjo.models.sisterhood import SisterhoodComment, SisterhoodPost
from nyonjo.services.featured import FeaturedService, clear_if_ineligible

logger = logging.getLogger(__name__)

LIKE_ACTIONS = ("like", "unlike")
MAX_REPLY_DEPTH = 2


def build_comment_tree(comments: Iterable[SisterhoodComment], max_depth: int = MAX_REPLY_DEPTH) -> List[Dict[str, Any]]:
    """
    Nest comments under their parents, oldest first.

    Depth 1 is a top-level comment. A reply that would sit deeper than
    ``max_depth`` is attached to its nearest ancestor at ``max_depth``.
    Replies to a comment that is not in ``comments`` become top-level.
    """
    ordered = sorted(comments, key=lambda c: (c.created_at, c.id))
    by_id = {c.id: c for c in ordered}
    nodes = {c.id: {**c.model_dump(), "replies": []} for c in ordered}

    def anchor(comment: SisterhoodComment) -> Optional[int]:
        chain = []
        parent_id = comment.parent_id
        seen = {comment.id}
        while parent_id is not None and parent_id in by_id and parent_id not in seen:
            chain.append(parent_id)
            seen.add(parent_id)
            parent_id = by_id[parent_id].parent_id
        if not chain:
            return None
        # chain runs parent -> root; a depth-limited anchor sits max_depth - 1 levels below the root
        ancestors_from_root = list(reversed(chain))
        return ancestors_from_root[min(len(ancestors_from_root), max_depth - 1) - 1] if max_depth > 1 else None

    roots = []
    for comment in ordered:
        parent = anchor(comment)
        if parent is None:
            roots.append(nodes[comment.id])
        else:
            nodes[parent]["replies"].append(nodes[comment.id])
    return roots


class SisterhoodService:
    def __init__(self, session: Session):
        self.session = session

    # Posts

    def list_feed(self) -> List[SisterhoodPost]:
        return self.session.exec(
            select(SisterhoodPost)
            .where(SisterhoodPost.is_approved == True)  # noqa: E712
            .order_by(SisterhoodPost.created_at.desc(), SisterhoodPost.id.desc())
        ).all()

    def list_all(self) -> List[SisterhoodPost]:
        return self.session.exec(
            select(SisterhoodPost).order_by(SisterhoodPost.created_at.desc(), SisterhoodPost.id.desc())
        ).all()

    def get_featured(self) -> Optional[SisterhoodPost]:
        posts = FeaturedService(self.session).featured_items(SisterhoodPost)
        return posts[0] if posts else None

    def get(self, post_id: int) -> SisterhoodPost:
        post = self.session.get(SisterhoodPost, post_id)
        if not post:
            raise NotFoundError("Post", post_id)
        return post

    def get_visible(self, post_id: int) -> SisterhoodPost:
        post = self.get(post_id)
        if not post.is_approved:
            raise NotFoundError("Post", post_id)
        return post

    def create_post(self, username: Optional[str], content: Optional[str], media_url: Optional[str] = None,
                    category: Optional[str] = None) -> SisterhoodPost:
        username = (username or "").strip()
        content = (content or "").strip()
        if not username or not content:
            raise ValidationError("Username and content are required")

        post = SisterhoodPost(
            username=username,
            content=content,
            media_url=media_url or None,
            category=category or None,
            is_approved=True,
        )
        self.session.add(post)
        self.session.commit()
        self.session.refresh(post)
        logger.info("Sisterhood post %s created by %s", post.id, username)
        return post

    def delete_own_post(self, post_id: int, username: Optional[str]) -> None:
        """Delete a post when the caller presents the username it was posted under."""
        post = self.get(post_id)
        if not username or username.strip().lower() != post.username.lower():
            raise ValidationError("You can only delete your own posts", field="username")
        self._delete_post(post)

    def update_post(self, post_id: int, data: Dict[str, Any]) -> SisterhoodPost:
        post = self.get(post_id)
        if data.get("is_approved") is not None:
            post.is_approved = bool(data["is_approved"])
        if "category" in data:
            post.category = data["category"]
        post.updated_at = utcnow()
        self.session.add(post)

        if data.get("featured") is not None:
            post, _ = FeaturedService(self.session).set_featured(SisterhoodPost, post_id, bool(data["featured"]))
            return post

        clear_if_ineligible(post)
        self.session.commit()
        self.session.refresh(post)
        return post

    def set_featured(self, post_id: int, featured: bool) -> Dict[str, Any]:
        post, displaced = FeaturedService(self.session).set_featured(SisterhoodPost, post_id, featured)
        return {"post": post, "unfeatured": [p.id for p in displaced]}

    def delete_post(self, post_id: int) -> None:
        self._delete_post(self.get(post_id))

    def _delete_post(self, post: SisterhoodPost) -> None:
        post_id = post.id
        # Replies reference other comments, so clear parent links before the bulk delete
        self.session.execute(
            update(SisterhoodComment)
            .where(SisterhoodComment.post_id == post_id)
            .values(parent_id=None)
            .execution_options(synchronize_session=False)
        )
        self.session.execute(delete(SisterhoodComment).where(SisterhoodComment.post_id == post_id))
        self.session.delete(post)
        self.session.commit()
        logger.info("Deleted sisterhood post %s", post_id)

    def like_post(self, post_id: int, action: str = "like") -> SisterhoodPost:
        self.get_visible(post_id)
        return self._apply_like(SisterhoodPost, post_id, action)

    # Comments

    def list_comments(self, post_id: int, include_hidden: bool = False) -> List[SisterhoodComment]:
        query = select(SisterhoodComment).where(SisterhoodComment.post_id == post_id)
        if not include_hidden:
            query = query.where(SisterhoodComment.is_approved == True)  # noqa: E712
        return self.session.exec(query.order_by(SisterhoodComment.created_at, SisterhoodComment.id)).all()

    def comment_tree(self, post_id: int) -> List[Dict[str, Any]]:
        return build_comment_tree(self.list_comments(post_id))

    def get_comment(self, comment_id: int) -> SisterhoodComment:
        comment = self.session.get(SisterhoodComment, comment_id)
        if not comment:
            raise NotFoundError("Comment", comment_id)
        return comment

    def add_comment(self, post_id: int, username: Optional[str], content: Optional[str],
                    parent_id: Optional[int] = None) -> SisterhoodComment:
        username = (username or "").strip()
        content = (content or "").strip()
        if not username or not content:
            raise ValidationError("Username and content are required")
        self.get_visible(post_id)

        if parent_id:
            parent = self.session.get(SisterhoodComment, parent_id)
            if not parent or parent.post_id != post_id:
                raise ValidationError("Reply must target a comment on the same post", field="parent_id")

        comment = SisterhoodComment(post_id=post_id, username=username, content=content, parent_id=parent_id or None)
        self.session.add(comment)
        self.session.commit()
        self.session.refresh(comment)
        return comment

    def set_comment_approval(self, comment_id: int, is_approved: bool) -> SisterhoodComment:
        comment = self.get_comment(comment_id)
        comment.is_approved = is_approved
        comment.updated_at = utcnow()
        self.session.add(comment)
        self.session.commit()
        self.session.refresh(comment)
        return comment

    def delete_comment(self, comment_id: int) -> None:
        """Delete a comment; its direct replies move up to the deleted comment's parent."""
        comment = self.get_comment(comment_id)
        self.session.execute(
            update(SisterhoodComment)
            .where(SisterhoodComment.parent_id == comment_id)
            .values(parent_id=comment.parent_id)
            .execution_options(synchronize_session=False)
        )
        self.session.delete(comment)
        self.session.commit()

    def like_comment(self, comment_id: int, action: str = "like") -> SisterhoodComment:
        self.get_comment(comment_id)
        return self._apply_like(SisterhoodComment, comment_id, action)

    def _apply_like(self, model: Type[SQLModel], item_id: int, action: str):
        """Move the likes counter by one in a single UPDATE, never below zero."""
        if action not in LIKE_ACTIONS:
            raise ValidationError("Action must be 'like' or 'unlike'", field="action")

        stmt = update(model).where(model.id == item_id)
        if action == "like":
            stmt = stmt.values(likes=model.likes + 1)
        else:
            stmt = stmt.where(model.likes > 0).values(likes=model.likes - 1)
        self.session.execute(stmt.execution_options(synchronize_session=False))
        self.session.commit()

        item = self.session.get(model, item_id)
        self.session.refresh(item)
        return item
