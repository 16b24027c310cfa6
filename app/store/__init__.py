"""Record store package.

``RecordStore`` is the only storage interface the services see; the backend is
chosen once at startup from ``settings.store_backend``.
"""

from app.store.base import RecordStore
from app.store.memory import InMemoryStore
from app.store.records import (
    CommentRecord,
    MessageKind,
    MessageRecord,
    PostRecord,
    RoomActivity,
    RoomRecord,
    SessionRecord,
    UserRecord,
    Visibility,
)

__all__ = [
    "RecordStore",
    "InMemoryStore",
    "CommentRecord",
    "MessageKind",
    "MessageRecord",
    "PostRecord",
    "RoomActivity",
    "RoomRecord",
    "SessionRecord",
    "UserRecord",
    "Visibility",
]
