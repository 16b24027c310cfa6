"""Post and comment schemas for request/response serialization."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from .base import BaseSchema

DELETED_COMMENT_PLACEHOLDER = "This comment has been deleted."


class PostCreate(BaseSchema):
    """Schema for creating a new post."""

    title: str = Field(..., min_length=2, max_length=500)
    content: str = Field(..., min_length=2)
    author: str | None = Field(None, max_length=255)

    @field_validator("title", "content")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Title and content need at least two non-blank characters."""
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Must be at least 2 characters")
        return v


class PostResponse(BaseSchema):
    """Schema for post response."""

    id: str
    room_id: str
    title: str
    content: str
    author: str | None = None
    created_at: datetime
    views: int = 0
    likes: int = 0
    comment_count: int = 0


class PostListResponse(BaseSchema):
    """Schema for post list response."""

    posts: list[PostResponse]


class CommentCreate(BaseSchema):
    """Schema for creating a comment or a reply."""

    content: str = Field(..., min_length=1, max_length=5000)
    author: str | None = Field(None, max_length=255)
    parent_id: str | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Validate and clean the comment content."""
        v = v.strip()
        if not v:
            raise ValueError("Comment content cannot be empty or only whitespace")
        return v


class CommentUpdate(BaseSchema):
    """Schema for editing a comment."""

    content: str = Field(..., min_length=1, max_length=5000)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Validate and clean the comment content."""
        v = v.strip()
        if not v:
            raise ValueError("Comment content cannot be empty or only whitespace")
        return v


class CommentResponse(BaseSchema):
    """Schema for comment response."""

    id: str
    post_id: str
    room_id: str
    parent_id: str | None = None
    content: str
    author: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    likes: int = 0
    is_deleted: bool = False

    @classmethod
    def from_record(cls, comment) -> CommentResponse:
        """Build the response, masking the content of deleted comments."""
        response = cls.model_validate(comment)
        if response.is_deleted:
            response.content = DELETED_COMMENT_PLACEHOLDER
        return response


class CommentListResponse(BaseSchema):
    """Schema for comment list response."""

    comments: list[CommentResponse]
    total: int


class LikeResponse(BaseSchema):
    id: str
    likes: int
