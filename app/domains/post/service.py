"""Post business logic."""

import logging

from app.exceptions.community import PostNotFoundError, RoomNotFoundError
from app.schemas.post import PostCreate
from app.shared.identifiers import resolve_author
from app.shared.pagination import clamp_limit
from app.store.base import RecordStore
from app.store.records import PostRecord

logger = logging.getLogger(__name__)

DEFAULT_POST_LIMIT = 20


class PostService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def _ensure_room(self, room_id: str) -> None:
        if not await self.store.get_room(room_id):
            raise RoomNotFoundError()

    async def list_posts(self, room_id: str, limit: int | None = None) -> list[PostRecord]:
        await self._ensure_room(room_id)
        return await self.store.list_posts(room_id, clamp_limit(limit, DEFAULT_POST_LIMIT))

    async def create_post(
        self, room_id: str, post_data: PostCreate, user_id: str | None = None
    ) -> PostRecord:
        await self._ensure_room(room_id)
        author = resolve_author(post_data.author, user_id)
        return await self.store.create_post(
            room_id, post_data.title, post_data.content, author=author
        )

    async def get_post(self, room_id: str, post_id: str) -> PostRecord:
        """Get a post or raise ``PostNotFoundError``."""
        post = await self.store.get_post(room_id, post_id)
        if not post:
            raise PostNotFoundError()
        return post

    async def increment_views(self, room_id: str, post_id: str) -> PostRecord:
        post = await self.store.increment_post_views(room_id, post_id)
        if not post:
            raise PostNotFoundError()
        return post

    async def like_post(self, room_id: str, post_id: str) -> PostRecord:
        post = await self.store.like_post(room_id, post_id)
        if not post:
            raise PostNotFoundError()
        return post
