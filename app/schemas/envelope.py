"""Uniform response envelope: {success, message?, data?, error?}."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Body of every API response. Routes serialize it with response_model_exclude_none."""

    success: bool = True
    message: str | None = None
    data: T | None = None
    error: str | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: list[dict[str, Any]] | None = None
