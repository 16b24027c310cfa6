"""Record store interface.

The store owns every piece of keyed mutable state in the application: the
per-room message sequence, the post counters and the per-(room, user) AI sync
cursor. Services only call these operations; they never mutate shared maps or
rows themselves.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

from app.shared.clock import utcnow
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


class RecordStore(ABC):
    """Operations shared by the in-memory and the SQL record stores."""

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or utcnow

    def now(self) -> datetime:
        """Current time according to the store clock."""
        return self._clock()

    async def ping(self) -> bool:
        """Return True when the backing storage is reachable."""
        return True

    # Users and sessions

    @abstractmethod
    async def create_user(self, email: str, name: str, password_hash: str) -> UserRecord: ...

    @abstractmethod
    async def get_user(self, user_id: str) -> UserRecord | None: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> UserRecord | None: ...

    @abstractmethod
    async def create_session(self, user_id: str, token: str) -> SessionRecord: ...

    @abstractmethod
    async def get_session(self, token: str) -> SessionRecord | None: ...

    @abstractmethod
    async def delete_session(self, token: str) -> None: ...

    # Rooms

    @abstractmethod
    async def create_room(
        self,
        name: str,
        description: str | None = None,
        tags: list[str] | None = None,
        rules: str | None = None,
        visibility: Visibility = Visibility.PUBLIC,
        starred: bool = False,
    ) -> RoomRecord: ...

    @abstractmethod
    async def get_room(self, room_id: str) -> RoomRecord | None: ...

    @abstractmethod
    async def list_rooms(self, limit: int = 200) -> list[RoomRecord]: ...

    @abstractmethod
    async def get_room_activity(self, room_id: str, since: datetime) -> RoomActivity:
        """Distinct user authors overall and those who wrote after ``since``."""

    # Messages

    @abstractmethod
    async def add_message(
        self,
        room_id: str,
        text: str | None,
        author: str | None = None,
        kind: MessageKind = MessageKind.USER,
    ) -> MessageRecord:
        """Append a message; assigns the next per-room sequence number atomically."""

    @abstractmethod
    async def list_messages(
        self, room_id: str, cursor: int | None = None, limit: int = 50
    ) -> list[MessageRecord]: ...

    @abstractmethod
    async def list_user_messages_since(
        self, room_id: str, author: str, since: datetime | None
    ) -> list[MessageRecord]:
        """Every message by the author strictly newer than ``since``, oldest first."""

    @abstractmethod
    async def list_recent_messages(self, room_id: str, limit: int) -> list[MessageRecord]: ...

    # Category presets

    @abstractmethod
    async def list_categories(self, room_id: str) -> list[str]: ...

    @abstractmethod
    async def add_category(self, room_id: str, name: str) -> list[str]: ...

    @abstractmethod
    async def remove_category(self, room_id: str, name: str) -> list[str]: ...

    # Posts

    @abstractmethod
    async def create_post(
        self, room_id: str, title: str, content: str, author: str | None = None
    ) -> PostRecord: ...

    @abstractmethod
    async def get_post(self, room_id: str, post_id: str) -> PostRecord | None: ...

    @abstractmethod
    async def list_posts(self, room_id: str, limit: int = 20) -> list[PostRecord]: ...

    @abstractmethod
    async def increment_post_views(self, room_id: str, post_id: str) -> PostRecord | None: ...

    @abstractmethod
    async def like_post(self, room_id: str, post_id: str) -> PostRecord | None: ...

    # Comments

    @abstractmethod
    async def create_comment(
        self,
        room_id: str,
        post_id: str,
        content: str,
        author: str | None = None,
        parent_id: str | None = None,
    ) -> CommentRecord:
        """Create a comment and bump the post's comment count."""

    @abstractmethod
    async def get_comment(self, post_id: str, comment_id: str) -> CommentRecord | None: ...

    @abstractmethod
    async def list_comments(self, post_id: str) -> list[CommentRecord]:
        """Every comment on the post, soft-deleted ones included, oldest first."""

    @abstractmethod
    async def update_comment(
        self, post_id: str, comment_id: str, content: str
    ) -> CommentRecord | None: ...

    @abstractmethod
    async def soft_delete_comment(self, post_id: str, comment_id: str) -> CommentRecord | None:
        """Flag the comment deleted and decrement the post count (floored at 0).

        Deleting an already deleted comment leaves the count alone.
        """

    @abstractmethod
    async def like_comment(self, post_id: str, comment_id: str) -> CommentRecord | None: ...

    # AI sync cursor

    @abstractmethod
    async def get_sync_cursor(self, room_id: str, user_id: str) -> datetime | None: ...

    @abstractmethod
    async def set_sync_cursor(self, room_id: str, user_id: str, at: datetime) -> datetime:
        """Move the cursor to ``at`` unless it is already later; return the stored value."""

    @abstractmethod
    async def has_any_sync(self, room_id: str) -> bool: ...

    async def record_sync(self, room_id: str, user_id: str) -> datetime:
        """Advance the (room, user) cursor to the store's current time."""
        return await self.set_sync_cursor(room_id, user_id, self.now())
