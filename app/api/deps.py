"""
Request-scoped dependencies: service construction and the access guard chain.

Guard order: authenticate (bearer token -> principal) first; require_admin and
require_verified only run on a resolved principal. Routes declare the combination
they need via Depends().
"""

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.errors import Forbidden, InvalidToken, Unauthenticated
from app.core.security import TokenCodec, TokenError
from app.schemas.auth import Account
from app.services.comments import CommentStore
from app.services.credential_store import CredentialStore
from app.services.email import EmailDispatcher, build_email_dispatcher
from app.services.identity import IdentityService
from app.services.posts import PostStore

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_token_codec(settings: Annotated[Settings, Depends(get_settings)]) -> TokenCodec:
    return TokenCodec.from_settings(settings)


def get_email_dispatcher(settings: Annotated[Settings, Depends(get_settings)]) -> EmailDispatcher:
    return build_email_dispatcher(settings)


def get_credential_store(db: Annotated[Session, Depends(get_db)]) -> CredentialStore:
    return CredentialStore(db)


def get_post_store(db: Annotated[Session, Depends(get_db)]) -> PostStore:
    return PostStore(db)


def get_comment_store(db: Annotated[Session, Depends(get_db)]) -> CommentStore:
    return CommentStore(db)


def get_identity_service(
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    mailer: Annotated[EmailDispatcher, Depends(get_email_dispatcher)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> IdentityService:
    return IdentityService.from_settings(store, codec, mailer, settings)


def _resolve_principal(token: str, codec: TokenCodec, store: CredentialStore) -> Account:
    try:
        claims = codec.verify(token)
    except TokenError as e:
        logger.info("Bearer token rejected", extra={"reason": e.message})
        raise InvalidToken("Invalid or expired token") from e
    user = store.find_by_id(claims.account_id)
    if user is None:
        # The token outlived its account.
        raise InvalidToken("Invalid token - user not found", status_code=401)
    return Account.model_validate(user)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> Account:
    """Dependency: require a valid Bearer token and return the account it names."""
    if credentials is None:
        raise Unauthenticated("Access token required")
    return _resolve_principal(credentials.credentials, codec, store)


def get_current_user_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> Account | None:
    """Dependency: principal if a usable token was sent, otherwise None (never raises)."""
    if credentials is None:
        return None
    try:
        return _resolve_principal(credentials.credentials, codec, store)
    except InvalidToken:
        return None


def require_admin(
    current_user: Annotated[Account, Depends(get_current_user)],
) -> Account:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if current_user.role != "admin":
        raise Forbidden("Admin access required")
    return current_user


def require_verified(
    current_user: Annotated[Account, Depends(get_current_user)],
) -> Account:
    """Dependency: require an authenticated user whose email is verified."""
    if not current_user.is_verified:
        raise Forbidden(
            "Email verification required. Please check your email and verify your account."
        )
    return current_user


CurrentUser = Annotated[Account, Depends(get_current_user)]
OptionalUser = Annotated[Account | None, Depends(get_current_user_optional)]
AdminUser = Annotated[Account, Depends(require_admin)]
VerifiedUser = Annotated[Account, Depends(require_verified)]
