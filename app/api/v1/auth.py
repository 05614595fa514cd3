"""Auth endpoints: register, login, email verification, password reset/change, refresh, me."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from app.api.deps import CurrentUser, get_identity_service
from app.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    VerifyEmailRequest,
)
from app.schemas.envelope import ApiResponse
from app.services.identity import LOGIN_MESSAGE, LOGOUT_MESSAGE, IdentityService

router = APIRouter()

Identity = Annotated[IdentityService, Depends(get_identity_service)]


@router.post(
    "/register",
    response_model=ApiResponse[dict[str, Any]],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def register(body: RegisterRequest, identity: Identity) -> ApiResponse[dict[str, Any]]:
    """Create an unverified account and send its verification email."""
    account, message = identity.register(body.username, body.email, body.password)
    return ApiResponse(message=message, data={"user": account})


@router.post("/login", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def login(body: LoginRequest, identity: Identity) -> ApiResponse[dict[str, Any]]:
    """
    Authenticate with email and password; returns the account and a bearer token.
    Include the token in the Authorization header as: Bearer <token>
    """
    account, token = identity.login(body.email, body.password)
    return ApiResponse(message=LOGIN_MESSAGE, data={"user": account, "token": token})


@router.post("/verify-email", response_model=ApiResponse[None], response_model_exclude_none=True)
def verify_email(body: VerifyEmailRequest, identity: Identity) -> ApiResponse[None]:
    return ApiResponse(message=identity.verify_email(body.token))


@router.post("/forgot-password", response_model=ApiResponse[None], response_model_exclude_none=True)
def forgot_password(body: ForgotPasswordRequest, identity: Identity) -> ApiResponse[None]:
    """Always answers with the same message so callers cannot probe which emails exist."""
    return ApiResponse(message=identity.forgot_password(body.email))


@router.post("/reset-password", response_model=ApiResponse[None], response_model_exclude_none=True)
def reset_password(body: ResetPasswordRequest, identity: Identity) -> ApiResponse[None]:
    return ApiResponse(message=identity.reset_password(body.token, body.new_password))


@router.post("/change-password", response_model=ApiResponse[None], response_model_exclude_none=True)
def change_password(
    body: ChangePasswordRequest,
    current_user: CurrentUser,
    identity: Identity,
) -> ApiResponse[None]:
    message = identity.change_password(current_user.id, body.current_password, body.new_password)
    return ApiResponse(message=message)


@router.post("/logout", response_model=ApiResponse[None], response_model_exclude_none=True)
def logout(_user: CurrentUser) -> ApiResponse[None]:
    """Tokens are stateless; the client discards its token. Nothing is revoked server-side."""
    return ApiResponse(message=LOGOUT_MESSAGE)


@router.post("/refresh", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def refresh(current_user: CurrentUser, identity: Identity) -> ApiResponse[dict[str, Any]]:
    """Issue a fresh 7-day token carrying the account's current role."""
    return ApiResponse(
        message="Token refreshed successfully",
        data={"token": identity.refresh(current_user)},
    )


@router.get("/me", response_model=ApiResponse[dict[str, Any]], response_model_exclude_none=True)
def me(current_user: CurrentUser) -> ApiResponse[dict[str, Any]]:
    return ApiResponse(data={"user": current_user})
