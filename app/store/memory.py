"""Ephemeral record store backed by process-wide dictionaries."""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from app.exceptions.user import UserAlreadyExistsError
from app.shared.identifiers import new_id, new_room_id
from app.store.base import RecordStore
from app.store.records import (
    MAX_TAGS,
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

logger = logging.getLogger(__name__)


class InMemoryStore(RecordStore):
    """Development store; everything is lost when the process exits."""

    def __init__(self, clock: Callable[[], datetime] | None = None):
        super().__init__(clock)
        self._users: dict[str, UserRecord] = {}
        self._users_by_email: dict[str, UserRecord] = {}
        self._sessions: dict[str, SessionRecord] = {}

        self._rooms: dict[str, RoomRecord] = {}
        self._room_order: list[str] = []
        self._categories: dict[str, list[str]] = {}

        self._messages: dict[str, list[MessageRecord]] = {}
        self._last_seq: dict[str, int] = {}
        self._message_lock = asyncio.Lock()

        self._posts: dict[str, list[PostRecord]] = {}
        self._comments: dict[str, list[CommentRecord]] = {}

        self._sync_cursors: dict[tuple[str, str], datetime] = {}

    # Users and sessions

    async def create_user(self, email: str, name: str, password_hash: str) -> UserRecord:
        email = email.lower()
        if email in self._users_by_email:
            raise UserAlreadyExistsError()
        user = UserRecord(
            id=new_id("user", 32),
            email=email,
            name=name,
            password_hash=password_hash,
            created_at=self.now(),
        )
        self._users[user.id] = user
        self._users_by_email[email] = user
        return user

    async def get_user(self, user_id: str) -> UserRecord | None:
        return self._users.get(user_id)

    async def get_user_by_email(self, email: str) -> UserRecord | None:
        return self._users_by_email.get(email.lower())

    async def create_session(self, user_id: str, token: str) -> SessionRecord:
        session = SessionRecord(token=token, user_id=user_id, created_at=self.now())
        self._sessions[token] = session
        return session

    async def get_session(self, token: str) -> SessionRecord | None:
        return self._sessions.get(token)

    async def delete_session(self, token: str) -> None:
        self._sessions.pop(token, None)

    # Rooms

    async def create_room(
        self,
        name: str,
        description: str | None = None,
        tags: list[str] | None = None,
        rules: str | None = None,
        visibility: Visibility = Visibility.PUBLIC,
        starred: bool = False,
    ) -> RoomRecord:
        name = name.strip()
        room = RoomRecord(
            id=new_room_id(name),
            name=name,
            description=description,
            tags=list(tags or [])[:MAX_TAGS],
            rules=rules,
            visibility=visibility,
            starred=starred,
            created_at=self.now(),
        )
        self._rooms[room.id] = room
        self._room_order.insert(0, room.id)
        self._categories.setdefault(room.id, [])
        return room

    async def get_room(self, room_id: str) -> RoomRecord | None:
        return self._rooms.get(room_id)

    async def list_rooms(self, limit: int = 200) -> list[RoomRecord]:
        return [self._rooms[room_id] for room_id in self._room_order[:limit]]

    async def get_room_activity(self, room_id: str, since: datetime) -> RoomActivity:
        members: set[str] = set()
        recent: list[str] = []
        for message in self._messages.get(room_id, []):
            if message.kind != MessageKind.USER or not message.author:
                continue
            members.add(message.author)
        for message in reversed(self._messages.get(room_id, [])):
            if message.created_at < since:
                break
            if message.kind == MessageKind.USER and message.author and message.author not in recent:
                recent.append(message.author)
        return RoomActivity(member_count=len(members), recent_authors=recent[:10])

    # Messages

    async def add_message(
        self,
        room_id: str,
        text: str | None,
        author: str | None = None,
        kind: MessageKind = MessageKind.USER,
    ) -> MessageRecord:
        async with self._message_lock:
            seq = self._last_seq.get(room_id, 0) + 1
            message = MessageRecord(
                id=new_id("msg"),
                room_id=room_id,
                seq=seq,
                kind=kind,
                author=author,
                text=text,
                created_at=self.now(),
            )
            self._messages.setdefault(room_id, []).append(message)
            self._last_seq[room_id] = seq
        return message

    async def list_messages(
        self, room_id: str, cursor: int | None = None, limit: int = 50
    ) -> list[MessageRecord]:
        messages = self._messages.get(room_id, [])
        if cursor is None:
            return messages[-limit:]
        return [m for m in messages if m.seq > cursor][:limit]

    async def list_user_messages_since(
        self, room_id: str, author: str, since: datetime | None
    ) -> list[MessageRecord]:
        return [
            m
            for m in self._messages.get(room_id, [])
            if m.author == author and (since is None or m.created_at > since)
        ]

    async def list_recent_messages(self, room_id: str, limit: int) -> list[MessageRecord]:
        return self._messages.get(room_id, [])[-limit:]

    # Category presets

    async def list_categories(self, room_id: str) -> list[str]:
        return list(self._categories.get(room_id, []))

    async def add_category(self, room_id: str, name: str) -> list[str]:
        name = name.strip()
        categories = self._categories.setdefault(room_id, [])
        if name and name not in categories:
            categories.append(name)
        return list(categories)

    async def remove_category(self, room_id: str, name: str) -> list[str]:
        categories = self._categories.get(room_id, [])
        if name in categories:
            categories.remove(name)
        return list(categories)

    # Posts

    async def create_post(
        self, room_id: str, title: str, content: str, author: str | None = None
    ) -> PostRecord:
        post = PostRecord(
            id=new_id("post"),
            room_id=room_id,
            title=title.strip(),
            content=content.strip(),
            author=author or "anon",
            created_at=self.now(),
        )
        self._posts.setdefault(room_id, []).insert(0, post)
        logger.info(f"Created post {post.id} in room {room_id}")
        return post

    async def get_post(self, room_id: str, post_id: str) -> PostRecord | None:
        for post in self._posts.get(room_id, []):
            if post.id == post_id:
                return post
        return None

    async def list_posts(self, room_id: str, limit: int = 20) -> list[PostRecord]:
        return self._posts.get(room_id, [])[:limit]

    async def increment_post_views(self, room_id: str, post_id: str) -> PostRecord | None:
        post = await self.get_post(room_id, post_id)
        if post:
            post.views += 1
        return post

    async def like_post(self, room_id: str, post_id: str) -> PostRecord | None:
        post = await self.get_post(room_id, post_id)
        if post:
            post.likes += 1
        return post

    # Comments

    async def create_comment(
        self,
        room_id: str,
        post_id: str,
        content: str,
        author: str | None = None,
        parent_id: str | None = None,
    ) -> CommentRecord:
        comment = CommentRecord(
            id=new_id("comment"),
            post_id=post_id,
            room_id=room_id,
            parent_id=parent_id,
            content=content.strip(),
            author=author or "anon",
            created_at=self.now(),
        )
        self._comments.setdefault(post_id, []).append(comment)

        post = await self.get_post(room_id, post_id)
        if post:
            post.comment_count += 1
        return comment

    async def get_comment(self, post_id: str, comment_id: str) -> CommentRecord | None:
        for comment in self._comments.get(post_id, []):
            if comment.id == comment_id:
                return comment
        return None

    async def list_comments(self, post_id: str) -> list[CommentRecord]:
        return list(self._comments.get(post_id, []))

    async def update_comment(
        self, post_id: str, comment_id: str, content: str
    ) -> CommentRecord | None:
        comment = await self.get_comment(post_id, comment_id)
        if not comment:
            return None
        comment.content = content.strip()
        comment.updated_at = self.now()
        return comment

    async def soft_delete_comment(self, post_id: str, comment_id: str) -> CommentRecord | None:
        comment = await self.get_comment(post_id, comment_id)
        if not comment:
            return None
        if comment.is_deleted:
            return comment

        comment.is_deleted = True
        comment.updated_at = self.now()
        post = await self.get_post(comment.room_id, post_id)
        if post:
            post.comment_count = max(0, post.comment_count - 1)
        return comment

    async def like_comment(self, post_id: str, comment_id: str) -> CommentRecord | None:
        comment = await self.get_comment(post_id, comment_id)
        if comment:
            comment.likes += 1
        return comment

    # AI sync cursor

    async def get_sync_cursor(self, room_id: str, user_id: str) -> datetime | None:
        return self._sync_cursors.get((room_id, user_id))

    async def set_sync_cursor(self, room_id: str, user_id: str, at: datetime) -> datetime:
        key = (room_id, user_id)
        current = self._sync_cursors.get(key)
        if current is None or at > current:
            self._sync_cursors[key] = at
        logger.info(f"AI sync cursor for room {room_id} / {user_id}: {self._sync_cursors[key]}")
        return self._sync_cursors[key]

    async def has_any_sync(self, room_id: str) -> bool:
        return any(key[0] == room_id for key in self._sync_cursors)
