"""Request/response schemas for posts and comments."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, StringConstraints, field_validator

PostStatus = Literal["draft", "published", "archived"]

Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class PostCreate(BaseModel):
    title: str = Field(..., min_length=10, max_length=255)
    content: str = Field(..., min_length=1)
    excerpt: str | None = Field(default=None, max_length=500)
    status: PostStatus | None = None
    featured_image: HttpUrl | None = None
    tags: list[Tag] | None = None


class PostUpdate(BaseModel):
    """Partial update; fields left out are unchanged, null clears excerpt, featured_image or tags."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1)
    excerpt: str | None = Field(default=None, max_length=500)
    status: PostStatus | None = None
    featured_image: HttpUrl | None = None
    tags: list[Tag] | None = None

    @field_validator("title", "content")
    @classmethod
    def reject_null(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("must not be null")
        return v


class PostStatusUpdate(BaseModel):
    status: PostStatus


class PostRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    excerpt: str | None = None
    author_id: int
    author_name: str | None = None
    status: PostStatus
    featured_image: str | None = None
    tags: list[str] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: str
    author_id: int
    author_name: str | None = None
    post_id: int
    post_title: str | None = None
    created_at: datetime | None = None
