"""Persistent record store on top of an SQLAlchemy async session."""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import case, delete, exists, func, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions.user import UserAlreadyExistsError
from app.shared.clock import ensure_utc
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
from models import (
    AISyncCursor,
    Comment,
    Message,
    Post,
    Room,
    RoomCategory,
    User,
    UserSession,
)

logger = logging.getLogger(__name__)


class SQLStore(RecordStore):
    """Record store backed by the ORM models in ``models``.

    One instance wraps one session; every mutating operation commits before
    returning and rolls back on database errors.
    """

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] | None = None):
        super().__init__(clock)
        self.db = db

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error during {action}: {str(e)}")
            raise

    async def ping(self) -> bool:
        try:
            await self.db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database ping failed: {str(e)}")
            return False

    # Users and sessions

    async def create_user(self, email: str, name: str, password_hash: str) -> UserRecord:
        user = User(
            id=new_id("user", 32),
            email=email.lower(),
            name=name,
            password_hash=password_hash,
            created_at=self.now(),
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise UserAlreadyExistsError() from None
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error creating user: {str(e)}")
            raise
        return UserRecord.model_validate(user)

    async def get_user(self, user_id: str) -> UserRecord | None:
        user = await self.db.get(User, user_id)
        return UserRecord.model_validate(user) if user else None

    async def get_user_by_email(self, email: str) -> UserRecord | None:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()
        return UserRecord.model_validate(user) if user else None

    async def create_session(self, user_id: str, token: str) -> SessionRecord:
        session = UserSession(token=token, user_id=user_id, created_at=self.now())
        self.db.add(session)
        await self._commit("session creation")
        return SessionRecord.model_validate(session)

    async def get_session(self, token: str) -> SessionRecord | None:
        session = await self.db.get(UserSession, token)
        return SessionRecord.model_validate(session) if session else None

    async def delete_session(self, token: str) -> None:
        await self.db.execute(delete(UserSession).where(UserSession.token == token))
        await self._commit("session deletion")

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
        room = Room(
            id=new_room_id(name),
            name=name,
            description=description,
            tags=list(tags or [])[:MAX_TAGS],
            rules=rules,
            visibility=Visibility(visibility).value,
            starred=starred,
            last_seq=0,
            created_at=self.now(),
        )
        self.db.add(room)
        await self._commit("room creation")
        logger.info(f"Created room {room.id}")
        return RoomRecord.model_validate(room)

    async def get_room(self, room_id: str) -> RoomRecord | None:
        room = await self.db.get(Room, room_id)
        return RoomRecord.model_validate(room) if room else None

    async def list_rooms(self, limit: int = 200) -> list[RoomRecord]:
        result = await self.db.execute(
            select(Room).order_by(Room.created_at.desc(), Room.id).limit(limit)
        )
        return [RoomRecord.model_validate(room) for room in result.scalars().all()]

    async def get_room_activity(self, room_id: str, since: datetime) -> RoomActivity:
        user_messages = (
            Message.room_id == room_id,
            Message.kind == MessageKind.USER.value,
            Message.author.is_not(None),
        )
        member_count = await self.db.scalar(
            select(func.count(func.distinct(Message.author))).where(*user_messages)
        )
        last_seen = func.max(Message.seq)
        recent = await self.db.execute(
            select(Message.author)
            .where(*user_messages, Message.created_at >= since)
            .group_by(Message.author)
            .order_by(last_seen.desc())
            .limit(10)
        )
        return RoomActivity(
            member_count=member_count or 0,
            recent_authors=[author for author in recent.scalars().all()],
        )

    # Messages

    async def add_message(
        self,
        room_id: str,
        text: str | None,
        author: str | None = None,
        kind: MessageKind = MessageKind.USER,
    ) -> MessageRecord:
        try:
            # Row-level increment; concurrent writers serialise on the room row.
            seq = await self.db.scalar(
                update(Room)
                .where(Room.id == room_id)
                .values(last_seq=Room.last_seq + 1)
                .returning(Room.last_seq)
            )
            message = Message(
                id=new_id("msg"),
                room_id=room_id,
                seq=seq,
                kind=MessageKind(kind).value,
                author=author,
                text=text,
                created_at=self.now(),
            )
            self.db.add(message)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error appending message to room {room_id}: {str(e)}")
            raise
        return MessageRecord.model_validate(message)

    async def list_messages(
        self, room_id: str, cursor: int | None = None, limit: int = 50
    ) -> list[MessageRecord]:
        query = select(Message).where(Message.room_id == room_id)
        if cursor is None:
            result = await self.db.execute(query.order_by(Message.seq.desc()).limit(limit))
            rows = list(reversed(result.scalars().all()))
        else:
            result = await self.db.execute(
                query.where(Message.seq > cursor).order_by(Message.seq).limit(limit)
            )
            rows = result.scalars().all()
        return [MessageRecord.model_validate(row) for row in rows]

    async def list_user_messages_since(
        self, room_id: str, author: str, since: datetime | None
    ) -> list[MessageRecord]:
        query = select(Message).where(Message.room_id == room_id, Message.author == author)
        if since is not None:
            query = query.where(Message.created_at > since)
        result = await self.db.execute(query.order_by(Message.seq))
        return [MessageRecord.model_validate(row) for row in result.scalars().all()]

    async def list_recent_messages(self, room_id: str, limit: int) -> list[MessageRecord]:
        return await self.list_messages(room_id, None, limit)

    # Category presets

    async def list_categories(self, room_id: str) -> list[str]:
        result = await self.db.execute(
            select(RoomCategory.name)
            .where(RoomCategory.room_id == room_id)
            .order_by(RoomCategory.position, RoomCategory.name)
        )
        return list(result.scalars().all())

    async def add_category(self, room_id: str, name: str) -> list[str]:
        name = name.strip()
        categories = await self.list_categories(room_id)
        if name and name not in categories:
            self.db.add(RoomCategory(room_id=room_id, name=name, position=len(categories)))
            await self._commit("category creation")
            categories.append(name)
        return categories

    async def remove_category(self, room_id: str, name: str) -> list[str]:
        await self.db.execute(
            delete(RoomCategory).where(RoomCategory.room_id == room_id, RoomCategory.name == name)
        )
        await self._commit("category removal")
        return await self.list_categories(room_id)

    # Posts

    async def _get_post_row(self, room_id: str, post_id: str) -> Post | None:
        result = await self.db.execute(
            select(Post).where(Post.id == post_id, Post.room_id == room_id)
        )
        return result.scalar_one_or_none()

    async def _bump_post(self, room_id: str, post_id: str, **values) -> PostRecord | None:
        result = await self.db.execute(
            update(Post)
            .where(Post.id == post_id, Post.room_id == room_id)
            .values(**values)
            .returning(Post.id)
        )
        if result.scalar_one_or_none() is None:
            await self.db.rollback()
            return None
        await self._commit("post counter update")
        return await self.get_post(room_id, post_id)

    async def create_post(
        self, room_id: str, title: str, content: str, author: str | None = None
    ) -> PostRecord:
        post = Post(
            id=new_id("post"),
            room_id=room_id,
            title=title.strip(),
            content=content.strip(),
            author=author or "anon",
            views=0,
            likes=0,
            comment_count=0,
            created_at=self.now(),
        )
        self.db.add(post)
        await self._commit("post creation")
        logger.info(f"Created post {post.id} in room {room_id}")
        return PostRecord.model_validate(post)

    async def get_post(self, room_id: str, post_id: str) -> PostRecord | None:
        post = await self._get_post_row(room_id, post_id)
        if not post:
            return None
        await self.db.refresh(post)
        return PostRecord.model_validate(post)

    async def list_posts(self, room_id: str, limit: int = 20) -> list[PostRecord]:
        result = await self.db.execute(
            select(Post)
            .where(Post.room_id == room_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(limit)
        )
        return [PostRecord.model_validate(post) for post in result.scalars().all()]

    async def increment_post_views(self, room_id: str, post_id: str) -> PostRecord | None:
        return await self._bump_post(room_id, post_id, views=Post.views + 1)

    async def like_post(self, room_id: str, post_id: str) -> PostRecord | None:
        return await self._bump_post(room_id, post_id, likes=Post.likes + 1)

    # Comments

    async def _get_comment_row(self, post_id: str, comment_id: str) -> Comment | None:
        result = await self.db.execute(
            select(Comment).where(Comment.id == comment_id, Comment.post_id == post_id)
        )
        return result.scalar_one_or_none()

    async def create_comment(
        self,
        room_id: str,
        post_id: str,
        content: str,
        author: str | None = None,
        parent_id: str | None = None,
    ) -> CommentRecord:
        comment = Comment(
            id=new_id("comment"),
            post_id=post_id,
            room_id=room_id,
            parent_id=parent_id,
            content=content.strip(),
            author=author or "anon",
            likes=0,
            is_deleted=False,
            created_at=self.now(),
        )
        try:
            self.db.add(comment)
            await self.db.execute(
                update(Post)
                .where(Post.id == post_id)
                .values(comment_count=Post.comment_count + 1)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error creating comment on post {post_id}: {str(e)}")
            raise
        return CommentRecord.model_validate(comment)

    async def get_comment(self, post_id: str, comment_id: str) -> CommentRecord | None:
        comment = await self._get_comment_row(post_id, comment_id)
        return CommentRecord.model_validate(comment) if comment else None

    async def list_comments(self, post_id: str) -> list[CommentRecord]:
        result = await self.db.execute(
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at, Comment.id)
        )
        return [CommentRecord.model_validate(c) for c in result.scalars().all()]

    async def update_comment(
        self, post_id: str, comment_id: str, content: str
    ) -> CommentRecord | None:
        comment = await self._get_comment_row(post_id, comment_id)
        if not comment:
            return None
        comment.content = content.strip()
        comment.updated_at = self.now()
        await self._commit("comment update")
        return CommentRecord.model_validate(comment)

    async def soft_delete_comment(self, post_id: str, comment_id: str) -> CommentRecord | None:
        try:
            result = await self.db.execute(
                update(Comment)
                .where(
                    Comment.id == comment_id,
                    Comment.post_id == post_id,
                    Comment.is_deleted.is_(False),
                )
                .values(is_deleted=True, updated_at=self.now())
                .returning(Comment.id)
            )
            # Only the delete that flips the flag decrements the count
            if result.scalar_one_or_none() is not None:
                await self.db.execute(
                    update(Post)
                    .where(Post.id == post_id)
                    .values(
                        comment_count=case(
                            (Post.comment_count > 0, Post.comment_count - 1),
                            else_=0,
                        )
                    )
                )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error deleting comment {comment_id}: {str(e)}")
            raise

        comment = await self._get_comment_row(post_id, comment_id)
        if not comment:
            return None
        await self.db.refresh(comment)
        return CommentRecord.model_validate(comment)

    async def like_comment(self, post_id: str, comment_id: str) -> CommentRecord | None:
        result = await self.db.execute(
            update(Comment)
            .where(Comment.id == comment_id, Comment.post_id == post_id)
            .values(likes=Comment.likes + 1)
            .returning(Comment.id)
        )
        if result.scalar_one_or_none() is None:
            await self.db.rollback()
            return None
        await self._commit("comment like")
        comment = await self._get_comment_row(post_id, comment_id)
        await self.db.refresh(comment)
        return CommentRecord.model_validate(comment)

    # AI sync cursor

    async def get_sync_cursor(self, room_id: str, user_id: str) -> datetime | None:
        cursor = await self.db.get(AISyncCursor, (room_id, user_id))
        return ensure_utc(cursor.synced_at) if cursor else None

    async def set_sync_cursor(self, room_id: str, user_id: str, at: datetime) -> datetime:
        at = ensure_utc(at)
        cursor = await self.db.get(AISyncCursor, (room_id, user_id))
        if cursor is None:
            cursor = AISyncCursor(room_id=room_id, user_id=user_id, synced_at=at)
            self.db.add(cursor)
        elif ensure_utc(cursor.synced_at) < at:
            cursor.synced_at = at
        await self._commit("sync cursor update")
        stored = ensure_utc(cursor.synced_at)
        logger.info(f"AI sync cursor for room {room_id} / {user_id}: {stored}")
        return stored

    async def has_any_sync(self, room_id: str) -> bool:
        return bool(
            await self.db.scalar(select(exists().where(AISyncCursor.room_id == room_id)))
        )
