"""Post persistence. Authorization is decided by the caller via app.services.ownership."""

from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.models import Post, User

# Columns a post update may touch; author_id never changes.
UPDATABLE_FIELDS = ("title", "content", "excerpt", "status", "featured_image", "tags")


class PostStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def _query(self):
        return self._session.query(Post).options(joinedload(Post.author))

    def get_by_id(self, post_id: int, include_unpublished: bool = False) -> Post | None:
        q = self._query().filter(Post.id == post_id)
        if not include_unpublished:
            q = q.filter(Post.status == "published")
        return q.first()

    def list_published(self, author_username: str | None = None) -> list[Post]:
        q = self._query().filter(Post.status == "published")
        if author_username:
            q = q.join(User, Post.author_id == User.id).filter(User.username == author_username)
        return q.order_by(Post.created_at.desc(), Post.id.desc()).all()

    def list_by_author(self, author_id: int) -> list[Post]:
        return (
            self._query()
            .filter(Post.author_id == author_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )

    def list_all(self) -> list[Post]:
        return self._query().order_by(Post.created_at.desc(), Post.id.desc()).all()

    def create(
        self,
        author_id: int,
        title: str,
        content: str,
        status: str,
        excerpt: str | None = None,
        featured_image: str | None = None,
        tags: list[str] | None = None,
    ) -> Post:
        post = Post(
            author_id=author_id,
            title=title,
            content=content,
            excerpt=excerpt,
            status=status,
            featured_image=featured_image,
            tags=tags,
        )
        self._session.add(post)
        self._session.commit()
        self._session.refresh(post)
        return post

    def update(self, post: Post, changes: dict[str, Any]) -> Post:
        """Apply changes that name an updatable column. None clears a nullable column."""
        for field, value in changes.items():
            if field in UPDATABLE_FIELDS:
                setattr(post, field, value)
        self._session.commit()
        self._session.refresh(post)
        return post

    def update_status(self, post_id: int, status: str) -> bool:
        updated = (
            self._session.query(Post)
            .filter(Post.id == post_id)
            .update({Post.status: status}, synchronize_session=False)
        )
        self._session.commit()
        return updated > 0

    def delete(self, post: Post) -> None:
        self._session.delete(post)
        self._session.commit()

    def count_by_status(self) -> dict[str, int]:
        rows = self._session.query(Post.status, func.count(Post.id)).group_by(Post.status).all()
        return {status: count for status, count in rows}
