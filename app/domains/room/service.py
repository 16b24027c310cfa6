"""Room, message and category business logic."""

import logging
from datetime import timedelta

from app.exceptions.base import PreconditionFailedError
from app.exceptions.community import RoomNotFoundError
from app.schemas.room import MessageCreate, RoomCreate, RoomDetailResponse, RoomResponse
from app.shared.identifiers import resolve_author
from app.shared.pagination import MAX_PAGE_LIMIT, clamp_limit
from app.store.base import RecordStore
from app.store.records import MessageKind, MessageRecord, RoomRecord

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_WINDOW = timedelta(minutes=30)
ANONYMOUS_AUTHOR = "anon"


class RoomService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def get_room(self, room_id: str) -> RoomRecord:
        """Get a room or raise ``RoomNotFoundError``."""
        room = await self.store.get_room(room_id)
        if not room:
            raise RoomNotFoundError()
        return room

    async def create_room(self, room_data: RoomCreate) -> RoomRecord:
        room = await self.store.create_room(
            name=room_data.name,
            description=room_data.description,
            tags=room_data.tags,
            rules=room_data.rules,
            visibility=room_data.visibility,
            starred=room_data.starred,
        )
        logger.info(f"Room created: {room.id}")
        return room

    async def list_rooms(self, limit: int | None = None) -> list[RoomResponse]:
        """Newest rooms first, each with its distinct-author member count."""
        rooms = await self.store.list_rooms(limit=clamp_limit(limit, MAX_PAGE_LIMIT))
        since = self.store.now() - RECENT_ACTIVITY_WINDOW
        result = []
        for room in rooms:
            activity = await self.store.get_room_activity(room.id, since)
            result.append(
                RoomResponse.model_validate(room).model_copy(
                    update={"member_count": activity.member_count}
                )
            )
        return result

    async def get_room_detail(self, room_id: str) -> RoomDetailResponse:
        """Room with member count, recently active authors and category presets."""
        room = await self.get_room(room_id)
        activity = await self.store.get_room_activity(
            room_id, self.store.now() - RECENT_ACTIVITY_WINDOW
        )
        categories = await self.store.list_categories(room_id)
        return RoomDetailResponse.model_validate(room).model_copy(
            update={
                "member_count": activity.member_count,
                "recent_users": activity.recent_authors,
                "categories": categories,
            }
        )

    # Messages

    async def list_messages(
        self, room_id: str, cursor: int | None = None, limit: int | None = None
    ) -> list[MessageRecord]:
        await self.get_room(room_id)
        return await self.store.list_messages(room_id, cursor, clamp_limit(limit, 50))

    async def post_message(
        self, room_id: str, message_data: MessageCreate, user_id: str | None = None
    ) -> MessageRecord:
        """Append a user message. Author: the signed-in user, else the body name, else anon."""
        await self.get_room(room_id)
        author = resolve_author(message_data.author, user_id) or ANONYMOUS_AUTHOR
        return await self.store.add_message(
            room_id, message_data.text, author=author, kind=MessageKind.USER
        )

    # Category presets

    async def list_categories(self, room_id: str) -> list[str]:
        await self.get_room(room_id)
        return await self.store.list_categories(room_id)

    async def add_category(self, room_id: str, category: str | None) -> list[str]:
        await self.get_room(room_id)
        name = (category or "").strip()
        if not name:
            raise PreconditionFailedError("Category is required", error_code="CATEGORY_REQUIRED")
        return await self.store.add_category(room_id, name)

    async def remove_category(self, room_id: str, category: str | None) -> list[str]:
        await self.get_room(room_id)
        name = (category or "").strip()
        if not name:
            raise PreconditionFailedError("Category is required", error_code="CATEGORY_REQUIRED")
        return await self.store.remove_category(room_id, name)
