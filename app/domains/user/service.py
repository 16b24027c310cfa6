# app/domains/user/service.py
import logging
from typing import Optional

from app.core.security import generate_session_token, hash_password, verify_password
from app.exceptions.user import InvalidCredentialsError, UserAlreadyExistsError
from app.store.base import RecordStore
from app.store.records import SessionRecord, UserRecord

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def signup(
        self, email: str, password: str, name: Optional[str] = None
    ) -> tuple[UserRecord, SessionRecord]:
        """Register a user and open a session for them."""
        email = email.strip().lower()
        if await self.store.get_user_by_email(email):
            raise UserAlreadyExistsError()

        user = await self.store.create_user(
            email=email,
            name=name or email.split("@", 1)[0],
            password_hash=hash_password(password),
        )
        session = await self.store.create_session(user.id, generate_session_token())
        logger.info(f"User signed up: {user.id}")
        return user, session

    async def signin(self, email: str, password: str) -> tuple[UserRecord, SessionRecord]:
        """Check credentials and open a new session."""
        user = await self.store.get_user_by_email(email.strip().lower())
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        session = await self.store.create_session(user.id, generate_session_token())
        return user, session

    async def signout(self, token: Optional[str]) -> None:
        """Delete the session if there is one."""
        if token:
            await self.store.delete_session(token)

    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Get a user by ID."""
        return await self.store.get_user(user_id)
