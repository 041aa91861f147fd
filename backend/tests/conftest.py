"""Shared test fixtures with in-memory SQLite."""
import uuid
from datetime import datetime, timezone

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.ext.compiler import compiles

from app.config import Settings
from app.dependencies import get_comment_scorer, get_llm_client, get_network_registry, get_session_factory
from app.integrations.ai.comment_scorer import CommentScorer
from app.integrations.networks.registry import build_network_registry
from app.integrations.resilience import CircuitBreaker
from app.main import create_app
from app.models.base import Base
from app.models.comment import Comment
from app.models.platform import Platform

# --- SQLite compatibility: compile PostgreSQL types for SQLite ---

@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"


@compiles(UUID, "sqlite")
def _compile_uuid_sqlite(type_, compiler, **kw):
    return "VARCHAR(36)"


# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def _set_sqlite_pragma(dbapi_connection, _connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL=TEST_DATABASE_URL,
        OPENAI_API_KEY="",
        ANTHROPIC_API_KEY="",
        SENTRY_DSN="",
        LINKEDIN_API_BASE_URL="https://api.linkedin.com/rest",
    )


@pytest.fixture
async def setup_db():
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    event.listen(engine.sync_engine, "connect", _set_sqlite_pragma)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(setup_db) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(setup_db, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# --- Fake collaborators ---

class FakeLLM:
    """Completion delegate answering every prompt with ``reply`` (or raising ``error``)."""

    model_name = "fake:test-model"

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def complete(self, prompt: str, **kwargs) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


class LinkedInStub:
    """Canned LinkedIn REST responses keyed by path below ``/rest``."""

    def __init__(self):
        self.routes: dict[str, tuple[int, dict]] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/rest")
        status, body = self.routes.get(path, (404, {"message": "Not found"}))
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def linkedin() -> LinkedInStub:
    return LinkedInStub()


@pytest.fixture
def app(test_settings, session_factory, llm, linkedin):
    application = create_app(test_settings)
    scorer = CommentScorer(llm, CircuitBreaker("llm", failure_threshold=5, open_timeout=60))
    registry = build_network_registry(test_settings, transport=linkedin.transport)

    application.dependency_overrides[get_session_factory] = lambda: session_factory
    application.dependency_overrides[get_llm_client] = lambda: llm
    application.dependency_overrides[get_comment_scorer] = lambda: scorer
    application.dependency_overrides[get_network_registry] = lambda: registry
    return application


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# --- Data helpers ---

def comment_payload(**overrides) -> dict:
    """Ingestion payload of one LinkedIn comment; ``overrides`` replace fields."""
    payload = {
        "workspace_id": "ws-1",
        "channel_id": "ch-1",
        "platform": "linkedin",
        "platform_comment_id": f"c-{uuid.uuid4().hex[:8]}",
        "content": "How do I enable two-factor authentication?",
        "author_name": "Alice",
        "likes_count": 0,
        "replies_count": 0,
        "commented_at": "2026-10-01T10:00:00+00:00",
        "post_id": "urn:li:share:100",
        "post_content": "We just shipped account security improvements.",
    }
    payload.update(overrides)
    return payload


async def create_comment(db: AsyncSession, **overrides) -> Comment:
    values = {
        "workspace_id": "ws-1",
        "channel_id": "ch-1",
        "platform": Platform.LINKEDIN,
        "platform_comment_id": f"c-{uuid.uuid4().hex[:8]}",
        "content": "How do I enable two-factor authentication?",
        "author_name": "Alice",
        "likes_count": 0,
        "commented_at": datetime(2026, 10, 1, 10, 0, tzinfo=timezone.utc),
        "post_id": "urn:li:share:100",
    }
    values.update(overrides)
    comment = Comment(**values)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    return comment
