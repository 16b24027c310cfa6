# tests/conftest.py
import os

# Set up test environment variables BEFORE any other imports
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ["STORE_BACKEND"] = "memory"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("GEMINI_API_KEY", "")

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.dependencies import get_store, get_text_client
from app.domains.ai.client import ChatCompletionRequest, TextGenerationClient
from app.domains.upload.controller import get_upload_service
from app.domains.upload.service import UploadService
from app.exceptions.ai import AIServiceError
from app.main import app
from app.store.memory import InMemoryStore
from app.store.sql import SQLStore
from models import Base

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeClock:
    """Deterministic clock; call it to read, ``advance`` to move forward."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float = 1) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current


class ScriptedTextClient(TextGenerationClient):
    """Returns queued responses in order; queued exceptions are raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[ChatCompletionRequest] = []

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    async def complete(self, request: ChatCompletionRequest) -> str:
        self.requests.append(request)
        if not self.responses:
            raise AIServiceError("No scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def fake_clock():
    """Clock starting at 2024-05-01 12:00 UTC."""
    return FakeClock()


@pytest.fixture
def store(fake_clock):
    """Fresh in-memory record store on the fake clock."""
    return InMemoryStore(clock=fake_clock)


@pytest.fixture
def text_client():
    """Scripted text-generation client with an empty queue."""
    return ScriptedTextClient()


@pytest.fixture
def upload_service(tmp_path):
    """Upload service writing under a temporary directory, 1 KiB limit."""
    return UploadService(upload_dir=str(tmp_path / "uploads"), max_size=1024)


@pytest_asyncio.fixture
async def test_db():
    """Create an in-memory SQLite session with every table."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with TestSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

    await engine.dispose()


@pytest_asyncio.fixture
async def sql_store(test_db, fake_clock):
    """SQL record store on the in-memory database and the fake clock."""
    return SQLStore(test_db, clock=fake_clock)


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    """Run the test once against each record store backend."""
    if request.param == "memory":
        return request.getfixturevalue("store")
    return request.getfixturevalue("sql_store")


@pytest_asyncio.fixture
async def client(store, text_client, upload_service):
    """Create a test client with store, AI client and upload overrides."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_text_client] = lambda: text_client
    app.dependency_overrides[get_upload_service] = lambda: upload_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_user(client):
    """Sign up alice through the API; the client keeps her session cookie."""
    response = await client.post(
        "/api/auth/signup",
        json={"email": "alice@example.com", "password": "secret123", "name": "alice"},
    )
    assert response.status_code == 201
    return response.json()["user"]


@pytest_asyncio.fixture
async def authenticated_client(client, test_user):
    """Client carrying the session cookie of ``test_user``."""
    return client


# Record fixtures
@pytest_asyncio.fixture
async def test_room(store):
    """Create a test room."""
    return await store.create_room(
        name="Model Talk", description="Chat about models", tags=["ai", "llm"]
    )


@pytest_asyncio.fixture
async def test_post(store, test_room):
    """Create a test post."""
    return await store.create_post(
        test_room.id, "First impressions", "The new model feels faster.", author="bob"
    )


@pytest_asyncio.fixture
async def test_comment(store, test_room, test_post):
    """Create a test comment."""
    return await store.create_comment(test_room.id, test_post.id, "Agreed", author="carol")


# Mock fixtures for external services
@pytest.fixture
def mock_text_client():
    """Mock text-generation client for testing."""
    mock = MagicMock(spec=TextGenerationClient)
    mock.complete = AsyncMock()
    return mock


# Canned model responses
@pytest.fixture
def judgment_has_content():
    return json.dumps(
        {"hasContent": True, "reason": "Shares a benchmark result", "contentType": "information"}
    )


@pytest.fixture
def judgment_no_content():
    return json.dumps(
        {"hasContent": False, "reason": "Only greetings", "contentType": "chatter"}
    )


@pytest.fixture
def generated_post_response():
    return (
        "Here is the post:\n```json\n"
        + json.dumps(
            {
                "title": "The new model is 20% faster",
                "content": "<p>Has anyone tried the new model? It's 20% faster.</p>",
            }
        )
        + "\n```"
    )


@pytest.fixture
def post_analysis_response():
    return json.dumps(
        {
            "hasDebatableContent": True,
            "contentValidity": "Medium",
            "analysis": {
                "controversy": "The 20% figure has no source",
                "validity": "Anecdotal",
                "suggestions": "Link the benchmark",
            },
            "summary": "Interesting claim that needs a source.",
        }
    )


@pytest.fixture
def room_quality_response():
    return json.dumps(
        {
            "scores": {
                "contentDepth": 70,
                "logicalThinking": 65,
                "discussionQuality": 80,
                "creativity": 55,
                "practicality": 90,
            },
            "overallScore": 72,
            "strengths": ["Practical tips"],
            "weaknesses": ["Few sources"],
            "recommendations": ["Cite benchmarks"],
            "summary": "A practical community.",
        }
    )
