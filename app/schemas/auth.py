"""Request/response schemas for auth, profile and account endpoints."""

import re
from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, TypeAdapter

from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    USERNAME_PATTERN,
)

PASSWORD_STRENGTH_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")

Role = Literal["user", "admin"]


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


def _lower(value: str) -> str:
    return value.lower()


def check_password_strength(value: str) -> str:
    if not PASSWORD_STRENGTH_RE.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )
    return value


# Addresses are stored lower-cased; uniqueness and lookups compare that form.
Email = Annotated[EmailStr, BeforeValidator(_strip), AfterValidator(_lower)]
NewPassword = Annotated[
    str,
    Field(min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN),
    AfterValidator(check_password_strength),
]
Username = Annotated[
    str,
    Field(min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, pattern=USERNAME_PATTERN),
]
OneTimeToken = Annotated[str, Field(min_length=32, max_length=64)]


class RegisterRequest(BaseModel):
    """New account details."""

    username: Username = Field(..., description="3-50 letters, numbers or underscores")
    email: Email = Field(..., description="Email address; a verification link is sent here")
    password: NewPassword


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: Email
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)


class VerifyEmailRequest(BaseModel):
    token: OneTimeToken


class ForgotPasswordRequest(BaseModel):
    email: Email


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: OneTimeToken
    new_password: NewPassword = Field(..., alias="newPassword")


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(
        ..., alias="currentPassword", min_length=1, max_length=PASSWORD_MAX_LEN
    )
    new_password: NewPassword = Field(..., alias="newPassword")


class ProfileUpdateRequest(BaseModel):
    username: Username | None = None
    email: Email | None = None


class RoleUpdateRequest(BaseModel):
    role: Role


class Account(BaseModel):
    """Account as exposed outside the credential store (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: Role
    is_verified: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


_email_adapter = TypeAdapter(Email)


def normalize_email(value: str) -> str:
    """Validate and normalize an address outside a request model (e.g. CLI input)."""
    return _email_adapter.validate_python(value)
