"""Comment business logic.

Comments are never removed: deleting sets ``is_deleted`` so replies keep a
parent to point at.
"""

import logging

from app.exceptions.community import (
    CommentNotFoundError,
    InvalidCommentOperationError,
    PostNotFoundError,
)
from app.schemas.post import CommentCreate, CommentUpdate
from app.shared.identifiers import resolve_author
from app.store.base import RecordStore
from app.store.records import CommentRecord, PostRecord

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def _get_post(self, room_id: str, post_id: str) -> PostRecord:
        post = await self.store.get_post(room_id, post_id)
        if not post:
            raise PostNotFoundError()
        return post

    async def list_comments(self, room_id: str, post_id: str) -> list[CommentRecord]:
        """Every comment on the post, deleted ones included."""
        await self._get_post(room_id, post_id)
        return await self.store.list_comments(post_id)

    async def create_comment(
        self,
        room_id: str,
        post_id: str,
        comment_data: CommentCreate,
        user_id: str | None = None,
    ) -> CommentRecord:
        await self._get_post(room_id, post_id)
        if comment_data.parent_id:
            parent = await self.store.get_comment(post_id, comment_data.parent_id)
            if not parent:
                raise CommentNotFoundError("Parent comment not found")

        author = resolve_author(comment_data.author, user_id)
        comment = await self.store.create_comment(
            room_id,
            post_id,
            comment_data.content,
            author=author,
            parent_id=comment_data.parent_id,
        )
        logger.info(f"Comment {comment.id} added to post {post_id}")
        return comment

    async def get_comment(self, room_id: str, post_id: str, comment_id: str) -> CommentRecord:
        await self._get_post(room_id, post_id)
        comment = await self.store.get_comment(post_id, comment_id)
        if not comment:
            raise CommentNotFoundError()
        return comment

    async def update_comment(
        self, room_id: str, post_id: str, comment_id: str, comment_data: CommentUpdate
    ) -> CommentRecord:
        comment = await self.get_comment(room_id, post_id, comment_id)
        if comment.is_deleted:
            raise InvalidCommentOperationError("Cannot edit a deleted comment")
        return await self.store.update_comment(post_id, comment_id, comment_data.content)

    async def delete_comment(self, room_id: str, post_id: str, comment_id: str) -> CommentRecord:
        """Soft delete; deleting twice is a no-op."""
        await self.get_comment(room_id, post_id, comment_id)
        return await self.store.soft_delete_comment(post_id, comment_id)

    async def like_comment(self, room_id: str, post_id: str, comment_id: str) -> CommentRecord:
        comment = await self.get_comment(room_id, post_id, comment_id)
        if comment.is_deleted:
            raise InvalidCommentOperationError("Cannot like a deleted comment")
        return await self.store.like_comment(post_id, comment_id)
