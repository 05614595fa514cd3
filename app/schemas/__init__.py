"""Pydantic request/response schemas."""

from app.schemas.admin import DashboardStats
from app.schemas.auth import (
    Account,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    ResetPasswordRequest,
    RoleUpdateRequest,
    VerifyEmailRequest,
)
from app.schemas.content import (
    CommentCreate,
    CommentRead,
    CommentUpdate,
    PostCreate,
    PostRead,
    PostStatusUpdate,
    PostUpdate,
)
from app.schemas.envelope import ApiResponse, ErrorResponse
from app.schemas.health import HealthResponse

__all__ = [
    "Account",
    "ApiResponse",
    "ChangePasswordRequest",
    "CommentCreate",
    "CommentRead",
    "CommentUpdate",
    "DashboardStats",
    "ErrorResponse",
    "ForgotPasswordRequest",
    "HealthResponse",
    "LoginRequest",
    "PostCreate",
    "PostRead",
    "PostStatusUpdate",
    "PostUpdate",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "ResetPasswordRequest",
    "RoleUpdateRequest",
    "VerifyEmailRequest",
]
