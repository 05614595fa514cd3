"""
Resource ownership policy for posts and comments.

One predicate decides every update/delete: the principal is the resource author or
an admin. Publish-state capability: only admins may choose a post status; everyone
else creates drafts and cannot change status on update. No transition graph is
enforced beyond that.
"""

from typing import Protocol

from app.core.errors import PermissionDenied
from app.schemas.auth import Account

ADMIN_ROLE = "admin"
DEFAULT_POST_STATUS = "draft"


class Authored(Protocol):
    author_id: int


def is_admin(principal: Account) -> bool:
    return principal.role == ADMIN_ROLE


def can_modify(principal: Account, author_id: int) -> bool:
    return principal.id == author_id or is_admin(principal)


def ensure_can_modify(principal: Account, resource: Authored) -> None:
    """Raise PermissionDenied unless the principal may update or delete the resource."""
    if not can_modify(principal, resource.author_id):
        raise PermissionDenied("Permission denied")


def resolve_post_status(principal: Account, requested: str | None) -> str:
    """Status a new post is created with."""
    if is_admin(principal):
        return requested or DEFAULT_POST_STATUS
    return DEFAULT_POST_STATUS


def resolve_status_update(principal: Account, requested: str | None) -> str | None:
    """Status to apply on update, or None to leave it unchanged."""
    if is_admin(principal) and requested:
        return requested
    return None
