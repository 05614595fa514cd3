"""Application errors raised by services and translated to HTTP responses in app.main."""


class AppError(Exception):
    """Base class for failures surfaced to the API client with a status code."""

    status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class DuplicateIdentity(AppError):
    """Username or email is already registered."""

    status_code = 409


class InvalidCredentials(AppError):
    """Email/password pair did not match. Same message for unknown email and wrong password."""

    status_code = 401


class InvalidOrExpiredToken(AppError):
    """Verification or reset token does not match an open record."""

    status_code = 400


class Unauthenticated(AppError):
    """No bearer token was presented on a route that requires one."""

    status_code = 401


class InvalidToken(AppError):
    """Bearer token failed verification (403) or references a deleted account (401)."""

    status_code = 403


class Forbidden(AppError):
    """Principal lacks the required role or has not verified their email."""

    status_code = 403


class PermissionDenied(AppError):
    """Principal is neither the resource author nor an admin."""

    status_code = 403


class NotFound(AppError):
    status_code = 404


class BadRequest(AppError):
    status_code = 400


class EmailDeliveryError(AppError):
    """Outgoing email could not be handed to the mail server."""

    status_code = 502
