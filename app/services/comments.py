"""Comment persistence. Authorization is decided by the caller via app.services.ownership."""

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.models import Comment


class CommentStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def _query(self):
        return self._session.query(Comment).options(
            joinedload(Comment.author), joinedload(Comment.post)
        )

    def get_by_id(self, comment_id: int) -> Comment | None:
        return self._query().filter(Comment.id == comment_id).first()

    def list_for_post(self, post_id: int) -> list[Comment]:
        return (
            self._query()
            .filter(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )

    def list_by_author(self, author_id: int) -> list[Comment]:
        return (
            self._query()
            .filter(Comment.author_id == author_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .all()
        )

    def list_all(self) -> list[Comment]:
        return self._query().order_by(Comment.created_at.desc(), Comment.id.desc()).all()

    def create(self, author_id: int, post_id: int, content: str) -> Comment:
        comment = Comment(author_id=author_id, post_id=post_id, content=content)
        self._session.add(comment)
        self._session.commit()
        self._session.refresh(comment)
        return comment

    def update(self, comment: Comment, content: str) -> Comment:
        comment.content = content
        self._session.commit()
        self._session.refresh(comment)
        return comment

    def delete(self, comment: Comment) -> None:
        self._session.delete(comment)
        self._session.commit()

    def count(self) -> int:
        return self._session.query(func.count(Comment.id)).scalar() or 0
