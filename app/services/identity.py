"""
Identity service: registration, login, email verification, password reset and change.

Pure business logic. Holds references to its collaborators (credential store, token
codec, email dispatcher) and no mutable state of its own; build one per request.
Failures are raised as app.core.errors exceptions and mapped to HTTP at the edge.
"""

import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from app.core.errors import (
    DuplicateIdentity,
    InvalidCredentials,
    InvalidOrExpiredToken,
    NotFound,
)
from app.core.security import BCRYPT_ROUNDS, TokenCodec, hash_password, verify_password
from app.schemas.auth import Account
from app.services.credential_store import CredentialStore
from app.services.email import EmailDispatcher

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# One-time tokens carry 32 random bytes, hex-encoded (64 chars).
ONE_TIME_TOKEN_BYTES = 32

REGISTERED_MESSAGE = "User registered successfully. Please check your email for verification."
LOGIN_MESSAGE = "Login successful"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
VERIFIED_MESSAGE = "Email verified successfully"
FORGOT_PASSWORD_MESSAGE = "If email exists, reset link has been sent"
PASSWORD_RESET_MESSAGE = "Password reset successfully"
PASSWORD_CHANGED_MESSAGE = "Password changed successfully"
LOGOUT_MESSAGE = "Logged out successfully"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def new_one_time_token() -> str:
    return secrets.token_hex(ONE_TIME_TOKEN_BYTES)


class IdentityService:
    def __init__(
        self,
        store: CredentialStore,
        codec: TokenCodec,
        mailer: EmailDispatcher,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
        reset_token_ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.codec = codec
        self.mailer = mailer
        self.bcrypt_rounds = bcrypt_rounds
        self.reset_token_ttl = reset_token_ttl
        self.clock = clock

    @classmethod
    def from_settings(
        cls,
        store: CredentialStore,
        codec: TokenCodec,
        mailer: EmailDispatcher,
        settings: "Settings",
    ) -> "IdentityService":
        return cls(
            store,
            codec,
            mailer,
            bcrypt_rounds=settings.BCRYPT_ROUNDS,
            reset_token_ttl=timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
        )

    def register(self, username: str, email: str, password: str) -> tuple[Account, str]:
        """
        Create an unverified account and email its verification link.

        Raises DuplicateIdentity if the username or email is taken. A failure to send
        the verification email propagates to the caller (EmailDeliveryError).
        """
        if self.store.exists_by_email_or_username(email, username):
            raise DuplicateIdentity("User already exists with this email or username")

        password_hash = hash_password(password, rounds=self.bcrypt_rounds)
        verification_token = new_one_time_token()
        try:
            user = self.store.create_account(
                username=username,
                email=email,
                password_hash=password_hash,
                verification_token=verification_token,
            )
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same identity.
            raise DuplicateIdentity("User already exists with this email or username") from e

        logger.info("Account registered", extra={"account_id": user.id})
        self.mailer.send_verification_email(email, username, verification_token)
        return Account.model_validate(user), REGISTERED_MESSAGE

    def login(self, email: str, password: str) -> tuple[Account, str]:
        """
        Check credentials and issue a bearer token.
        Unknown email and wrong password raise the same InvalidCredentials.
        """
        user = self.store.find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login failed")
            raise InvalidCredentials(INVALID_CREDENTIALS_MESSAGE)
        token = self.codec.issue(user.id, user.role)
        return Account.model_validate(user), token

    def verify_email(self, token: str) -> str:
        if not token or not self.store.set_verification_result(token):
            raise InvalidOrExpiredToken("Invalid or expired verification token")
        return VERIFIED_MESSAGE

    def forgot_password(self, email: str) -> str:
        """
        Open a reset window for the account and email its link.

        Returns the same message whether or not the email is registered; only a
        registered email stores a token and triggers a send.
        """
        user = self.store.find_by_email(email)
        if user is not None:
            reset_token = new_one_time_token()
            expires = self.clock() + self.reset_token_ttl
            self.store.set_reset_token(email, reset_token, expires)
            logger.info("Password reset requested", extra={"account_id": user.id})
            self.mailer.send_password_reset_email(email, user.username, reset_token)
        return FORGOT_PASSWORD_MESSAGE

    def reset_password(self, token: str, new_password: str) -> str:
        new_hash = hash_password(new_password, rounds=self.bcrypt_rounds)
        if not token or not self.store.consume_reset_token(token, new_hash, self.clock()):
            raise InvalidOrExpiredToken("Invalid or expired reset token")
        return PASSWORD_RESET_MESSAGE

    def change_password(self, account_id: int, current_password: str, new_password: str) -> str:
        user = self.store.find_by_id(account_id)
        if user is None:
            raise NotFound("User not found")
        if not verify_password(current_password, user.password_hash):
            raise InvalidCredentials("Current password is incorrect")
        self.store.update_password(account_id, hash_password(new_password, rounds=self.bcrypt_rounds))
        logger.info("Password changed", extra={"account_id": account_id})
        return PASSWORD_CHANGED_MESSAGE

    def refresh(self, account: Account) -> str:
        """Issue a new token for an already authenticated account (role as currently stored)."""
        return self.codec.issue(account.id, account.role)
