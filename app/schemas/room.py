"""Room, message and category schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field, field_validator

from .base import BaseSchema


class Visibility(str, Enum):
    """Room visibility."""

    PUBLIC = "public"
    PRIVATE = "private"
    INVITE = "invite"


class MessageKind(str, Enum):
    """Chat message kind."""

    USER = "user"
    AI = "ai"
    SUMMARY = "summary"
    SYSTEM = "system"


class RoomCreate(BaseSchema):
    """Schema for creating a new room."""

    name: str = Field(..., min_length=2, max_length=255)
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    rules: str | None = None
    visibility: Visibility = Visibility.PUBLIC
    starred: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate and clean the room name."""
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Room name must be at least 2 characters")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        """Drop blank tags."""
        return [tag.strip() for tag in v if tag and tag.strip()]


class RoomResponse(BaseSchema):
    """Schema for room response."""

    id: str
    name: str
    description: str | None = None
    tags: list[str] = []
    rules: str | None = None
    visibility: Visibility
    starred: bool = False
    created_at: datetime

    # Computed fields
    member_count: int = 0


class RoomDetailResponse(RoomResponse):
    """Room with recent activity and category presets."""

    recent_users: list[str] = []
    categories: list[str] = []


class RoomListResponse(BaseSchema):
    """Schema for room list response."""

    rooms: list[RoomResponse]


class MessageCreate(BaseSchema):
    """Schema for posting a chat message."""

    text: str = Field(..., min_length=1, max_length=4000)
    author: str | None = Field(None, max_length=255)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Message text cannot be blank."""
        v = v.strip()
        if not v:
            raise ValueError("Message text cannot be empty or only whitespace")
        return v


class MessageResponse(BaseSchema):
    """Schema for message response."""

    id: str
    room_id: str
    seq: int
    kind: MessageKind
    author: str | None = None
    text: str | None = None
    created_at: datetime


class MessageListResponse(BaseSchema):
    """A page of messages plus the cursor to continue from."""

    messages: list[MessageResponse]
    next_cursor: int | None = None


class CategoryRequest(BaseSchema):
    """Schema for adding a category preset."""

    category: str = Field(..., max_length=100)


class CategoryListResponse(BaseSchema):
    categories: list[str]
