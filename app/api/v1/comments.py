"""Comment endpoints. Adding a comment notifies the post author by email, best-effort."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, status

from app.api.deps import (
    CurrentUser,
    VerifiedUser,
    get_comment_store,
    get_credential_store,
    get_email_dispatcher,
    get_post_store,
)
from app.core.errors import NotFound
from app.schemas.content import CommentCreate, CommentRead, CommentUpdate
from app.schemas.envelope import ApiResponse
from app.services import ownership
from app.services.comments import CommentStore
from app.services.credential_store import CredentialStore
from app.services.email import EmailDispatcher, notify_comment
from app.services.posts import PostStore

logger = logging.getLogger(__name__)

router = APIRouter()

Comments = Annotated[CommentStore, Depends(get_comment_store)]
Posts = Annotated[PostStore, Depends(get_post_store)]
PositiveId = Annotated[int, Path(ge=1)]


def _load_comment(comments: CommentStore, comment_id: int):
    comment = comments.get_by_id(comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    return comment


@router.get("/post/{post_id}", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def list_comments(post_id: PositiveId, posts: Posts, comments: Comments) -> ApiResponse[dict[str, Any]]:
    if posts.get_by_id(post_id) is None:
        raise NotFound("Post not found")
    items = [CommentRead.model_validate(c) for c in comments.list_for_post(post_id)]
    return ApiResponse(data={"comments": items})


@router.post(
    "/post/{post_id}",
    response_model=ApiResponse[dict[str, Any]],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    post_id: PositiveId,
    body: CommentCreate,
    current_user: VerifiedUser,
    posts: Posts,
    comments: Comments,
    accounts: Annotated[CredentialStore, Depends(get_credential_store)],
    mailer: Annotated[EmailDispatcher, Depends(get_email_dispatcher)],
) -> ApiResponse[dict[str, Any]]:
    """Comment on a published post. A failed notification email does not undo the comment."""
    post = posts.get_by_id(post_id)
    if post is None:
        raise NotFound("Post not found")
    comment = comments.create(author_id=current_user.id, post_id=post_id, content=body.content)

    if post.author_id != current_user.id:
        author = accounts.find_by_id(post.author_id)
        if author is not None:
            notify_comment(
                mailer,
                author.email,
                author.username,
                post.title,
                current_user.username,
                body.content,
            )
        else:
            logger.warning("Post author not found for notification", extra={"post_id": post_id})

    return ApiResponse(
        message="Comment added successfully",
        data={"comment": CommentRead.model_validate(comment)},
    )


@router.get("/my/comments", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def my_comments(current_user: CurrentUser, comments: Comments) -> ApiResponse[dict[str, Any]]:
    items = [CommentRead.model_validate(c) for c in comments.list_by_author(current_user.id)]
    return ApiResponse(data={"comments": items})


@router.put("/{comment_id}", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def update_comment(
    comment_id: PositiveId,
    body: CommentUpdate,
    current_user: VerifiedUser,
    comments: Comments,
) -> ApiResponse[dict[str, Any]]:
    comment = _load_comment(comments, comment_id)
    ownership.ensure_can_modify(current_user, comment)
    comment = comments.update(comment, body.content)
    return ApiResponse(
        message="Comment updated successfully",
        data={"comment": CommentRead.model_validate(comment)},
    )


@router.delete("/{comment_id}", response_model=ApiResponse[None], response_model_exclude_none=True)
def delete_comment(comment_id: PositiveId, current_user: VerifiedUser, comments: Comments) -> ApiResponse[None]:
    comment = _load_comment(comments, comment_id)
    ownership.ensure_can_modify(current_user, comment)
    comments.delete(comment)
    return ApiResponse(message="Comment deleted successfully")
