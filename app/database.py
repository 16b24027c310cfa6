# python
"""Database engine and session utilities.

This module sets up the asynchronous database engine and session factory used
by the SQL record store. The engine is created on first use so that the
in-memory backend can run without any database configured.
"""
import os
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_database_url() -> str:
    """Resolve the database URL, preferring TEST_DATABASE_URL under test."""
    if os.getenv("TESTING") == "true" or settings.is_testing:
        db_url = os.getenv("TEST_DATABASE_URL") or settings.test_database_url or settings.database_url
    else:
        db_url = settings.database_url

    db_url = (db_url or "").strip()
    if not db_url:
        raise RuntimeError(
            "DATABASE_URL is not configured. Set it in the environment or .env file (e.g., DATABASE_URL=postgresql+asyncpg://<user>:<pass>@<host>/<db>)."
        )
    return db_url


def get_engine() -> AsyncEngine:
    global _engine, _session_factory
    if _engine is None:
        _engine = create_async_engine(get_database_url(), echo=settings.debug)
        _session_factory = async_sessionmaker(bind=_engine, expire_on_commit=False)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    get_engine()
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections; the next call to get_engine() starts fresh."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def create_tables() -> None:
    """Create every table from the ORM metadata (development only)."""
    from models import Base

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, Any]:
    async with get_session_factory()() as session:
        yield session
