"""Admin-only endpoints: account management, moderation and dashboard stats."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path

from app.api.deps import AdminUser, get_comment_store, get_credential_store, get_post_store
from app.core.errors import BadRequest, NotFound
from app.schemas.admin import DashboardStats
from app.schemas.auth import Account, RoleUpdateRequest
from app.schemas.content import CommentRead, PostRead, PostStatusUpdate
from app.schemas.envelope import ApiResponse
from app.services.comments import CommentStore
from app.services.credential_store import CredentialStore
from app.services.posts import PostStore

logger = logging.getLogger(__name__)

router = APIRouter()

Accounts = Annotated[CredentialStore, Depends(get_credential_store)]
Posts = Annotated[PostStore, Depends(get_post_store)]
Comments = Annotated[CommentStore, Depends(get_comment_store)]
PositiveId = Annotated[int, Path(ge=1)]


@router.get("/users", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def list_users(_admin: AdminUser, accounts: Accounts) -> ApiResponse[dict[str, Any]]:
    users = [Account.model_validate(u) for u in accounts.list_accounts()]
    return ApiResponse(data={"users": users})


@router.put("/users/{user_id}/role", response_model=ApiResponse[None], response_model_exclude_none=True)
def update_user_role(
    user_id: PositiveId,
    body: RoleUpdateRequest,
    admin: AdminUser,
    accounts: Accounts,
) -> ApiResponse[None]:
    """Change another account's role. Admins cannot change their own role."""
    if user_id == admin.id:
        raise BadRequest("Cannot change your own role")
    if not accounts.update_role(user_id, body.role):
        raise NotFound("User not found")
    logger.info(
        "Role updated",
        extra={"account_id": user_id, "role": body.role, "admin_id": admin.id},
    )
    return ApiResponse(message="User role updated successfully")


@router.delete("/users/{user_id}", response_model=ApiResponse[None], response_model_exclude_none=True)
def delete_user(user_id: PositiveId, admin: AdminUser, accounts: Accounts) -> ApiResponse[None]:
    """Delete an account with its posts and comments. Outstanding tokens for it stop working."""
    if user_id == admin.id:
        raise BadRequest("Cannot delete your own account")
    if not accounts.delete_account(user_id):
        raise NotFound("User not found")
    logger.info("Account deleted", extra={"account_id": user_id, "admin_id": admin.id})
    return ApiResponse(message="User deleted successfully")


@router.get("/posts", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def list_all_posts(_admin: AdminUser, posts: Posts) -> ApiResponse[dict[str, Any]]:
    return ApiResponse(data={"posts": [PostRead.model_validate(p) for p in posts.list_all()]})


@router.put("/posts/{post_id}/status", response_model=ApiResponse[None], response_model_exclude_none=True)
def update_post_status(
    post_id: PositiveId,
    body: PostStatusUpdate,
    _admin: AdminUser,
    posts: Posts,
) -> ApiResponse[None]:
    if not posts.update_status(post_id, body.status):
        raise NotFound("Post not found")
    return ApiResponse(message="Post status updated successfully")


@router.get("/comments", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def list_all_comments(_admin: AdminUser, comments: Comments) -> ApiResponse[dict[str, Any]]:
    items = [CommentRead.model_validate(c) for c in comments.list_all()]
    return ApiResponse(data={"comments": items})


@router.get("/stats", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def dashboard_stats(
    _admin: AdminUser,
    accounts: Accounts,
    posts: Posts,
    comments: Comments,
) -> ApiResponse[dict[str, Any]]:
    users = accounts.list_accounts()
    post_counts = posts.count_by_status()
    stats = DashboardStats(
        total_users=len(users),
        verified_users=sum(1 for u in users if u.is_verified),
        admin_users=sum(1 for u in users if u.role == "admin"),
        total_posts=sum(post_counts.values()),
        published_posts=post_counts.get("published", 0),
        draft_posts=post_counts.get("draft", 0),
        archived_posts=post_counts.get("archived", 0),
        total_comments=comments.count(),
    )
    return ApiResponse(data={"stats": stats})
