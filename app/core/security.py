"""Password hashing and bearer token (JWT) issuing/verification."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Username and password rules shared by request schemas and the create_user script.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

ROLES = ("user", "admin")


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


class TokenError(Exception):
    """Base class for bearer token verification failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TokenInvalid(TokenError):
    """Signature does not check out, claims are malformed, or the input is not a JWT."""


class TokenExpired(TokenError):
    """Token signature is valid but its exp claim is in the past."""


@dataclass(frozen=True)
class TokenClaims:
    account_id: int
    role: str


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenCodec:
    """
    Issues and verifies signed, self-contained bearer tokens.

    Holds no mutable state: output depends only on the payload, the secret and
    the clock. There is no server-side session record, so changing the secret
    is the only way to invalidate every outstanding token at once.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._lifetime = lifetime
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            lifetime=timedelta(days=settings.JWT_EXPIRE_DAYS),
        )

    def issue(self, account_id: int, role: str) -> str:
        """Create a token carrying sub (account id), role, iat and exp."""
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": str(account_id),
            "role": role,
            "iat": int(now.timestamp()),
            "exp": int((now + self._lifetime).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a token; return its claims.
        Raises TokenExpired when past exp and TokenInvalid for anything else wrong.
        """
        try:
            # exp is checked below against the injected clock, not PyJWT's wall clock.
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "role", "iat", "exp"],
                },
            )
        except jwt.PyJWTError as e:
            raise TokenInvalid(f"Invalid token: {e}") from e

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            raise TokenInvalid("Invalid token: malformed exp claim")
        if self._clock().timestamp() > exp:
            raise TokenExpired("Token has expired")

        try:
            account_id = int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise TokenInvalid("Invalid token: malformed sub claim") from e
        role = payload.get("role")
        if role not in ROLES:
            raise TokenInvalid("Invalid token: unknown role")
        return TokenClaims(account_id=account_id, role=role)
