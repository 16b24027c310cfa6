# app/core/dependencies.py
import logging
from collections.abc import AsyncGenerator

from fastapi import Depends, Request

from app.core.config import settings
from app.database import get_db
from app.domains.ai.client import GeminiTextClient, TextGenerationClient
from app.exceptions.user import AuthenticationRequiredError
from app.store.base import RecordStore
from app.store.memory import InMemoryStore
from app.store.records import UserRecord
from app.store.sql import SQLStore

logger = logging.getLogger(__name__)

_memory_store: InMemoryStore | None = None
_text_client: TextGenerationClient | None = None


def get_memory_store() -> InMemoryStore:
    """Process-wide in-memory store, created on first use."""
    global _memory_store
    if _memory_store is None:
        _memory_store = InMemoryStore()
        logger.info("Using in-memory record store; data is not persisted")
    return _memory_store


async def get_store() -> AsyncGenerator[RecordStore, None]:
    """Yield the record store configured by ``settings.store_backend``.

    The SQL backend gets a fresh session per request.
    """
    if settings.uses_sql_store:
        async for session in get_db():
            yield SQLStore(session)
    else:
        yield get_memory_store()


def get_text_client() -> TextGenerationClient:
    """Shared Gemini client. Configuration errors surface on first call."""
    global _text_client
    if _text_client is None:
        _text_client = GeminiTextClient()
    return _text_client


async def get_optional_user(
    request: Request,
    store: RecordStore = Depends(get_store),
) -> UserRecord | None:
    """Get current user from the session cookie, otherwise return None.

    A missing, unknown or stale token means "anonymous"; it is never an error.

    Returns:
        Optional[UserRecord]: Current user if signed in, None otherwise
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None

    try:
        session = await store.get_session(token)
        if not session:
            return None
        user = await store.get_user(session.user_id)
    except Exception as e:
        logger.warning(f"Optional user lookup failed: {str(e)}")
        return None

    if user:
        request.state.user_id = user.id
    return user


async def get_current_user(
    user: UserRecord | None = Depends(get_optional_user),
) -> UserRecord:
    """Get the signed-in user.

    Raises:
        AuthenticationRequiredError: If the request carries no valid session
    """
    if user is None:
        raise AuthenticationRequiredError()
    return user
