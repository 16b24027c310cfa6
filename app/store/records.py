"""Record types shared by every RecordStore implementation.

Both stores hand these pydantic models back to the services, so nothing above
the store layer ever touches an ORM row or a raw dictionary.
"""

from datetime import datetime

from pydantic import Field, field_validator

from app.schemas.base import BaseSchema
from app.schemas.room import MessageKind, Visibility
from app.shared.clock import ensure_utc

MAX_TAGS = 8


class Record(BaseSchema):
    """Base record; normalises every datetime to aware UTC."""

    @field_validator("*", mode="after")
    @classmethod
    def _utc_datetimes(cls, v):
        if isinstance(v, datetime):
            return ensure_utc(v)
        return v


class UserRecord(Record):
    id: str
    email: str
    name: str
    password_hash: str
    created_at: datetime


class SessionRecord(Record):
    token: str
    user_id: str
    created_at: datetime


class RoomRecord(Record):
    id: str
    name: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    rules: str | None = None
    visibility: Visibility = Visibility.PUBLIC
    starred: bool = False
    created_at: datetime


class RoomActivity(BaseSchema):
    """Member metadata derived from the room's chat history."""

    member_count: int = 0
    recent_authors: list[str] = Field(default_factory=list)


class MessageRecord(Record):
    id: str
    room_id: str
    seq: int
    kind: MessageKind = MessageKind.USER
    author: str | None = None
    text: str | None = None
    created_at: datetime


class PostRecord(Record):
    id: str
    room_id: str
    title: str
    content: str
    author: str | None = None
    created_at: datetime
    views: int = 0
    likes: int = 0
    comment_count: int = 0


class CommentRecord(Record):
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
