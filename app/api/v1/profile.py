"""Profile endpoints for the authenticated account."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError

from app.api.deps import CurrentUser, get_credential_store
from app.core.errors import DuplicateIdentity, NotFound
from app.schemas.auth import Account, ProfileUpdateRequest
from app.schemas.envelope import ApiResponse
from app.services.credential_store import CredentialStore

router = APIRouter()

Accounts = Annotated[CredentialStore, Depends(get_credential_store)]


@router.get("", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def get_profile(current_user: CurrentUser) -> ApiResponse[dict[str, Any]]:
    return ApiResponse(data={"user": current_user})


@router.put("", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def update_profile(
    body: ProfileUpdateRequest,
    current_user: CurrentUser,
    accounts: Accounts,
) -> ApiResponse[dict[str, Any]]:
    """Change username and/or email; each must not belong to another account."""
    if body.username and body.username != current_user.username:
        other = accounts.find_by_username(body.username)
        if other is not None and other.id != current_user.id:
            raise DuplicateIdentity("Username already exists")
    if body.email and body.email != current_user.email:
        other = accounts.find_by_email(body.email)
        if other is not None and other.id != current_user.id:
            raise DuplicateIdentity("Email already exists")

    try:
        user = accounts.update_profile(current_user.id, username=body.username, email=body.email)
    except IntegrityError as e:
        raise DuplicateIdentity("Username or email already exists") from e
    if user is None:
        raise NotFound("User not found")
    return ApiResponse(
        message="Profile updated successfully",
        data={"user": Account.model_validate(user)},
    )
