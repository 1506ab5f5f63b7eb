"""Pytest configuration and fixtures."""

import os

# Settings are read once per process; set them before anything imports edtech
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = ""
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["ENVIRONMENT"] = "development"

from collections.abc import AsyncGenerator, AsyncIterator
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from edtech.api.deps import get_controller, get_repository
from edtech.db.base import Base
from edtech.main import app
from edtech.schemas.user import UserProfile
from edtech.services.conversation import ConversationController
from edtech.services.local_store import LocalStore
from edtech.services.repository import LocalRepository, RemoteRepository
from edtech.services.sessions import create_access_token


class FakeCompletion:
    """
    Stand-in for CompletionStream.

    Yields `chunks` in order, then raises `error` if one is set. Every
    call is recorded so tests can inspect what was sent.
    """

    def __init__(self, chunks: list[str] | None = None, error: Exception | None = None):
        self.chunks = chunks if chunks is not None else ["Hello", " world"]
        self.error = error
        self.calls: list[dict] = []

    async def stream(
        self,
        api_key: str | None,
        user_text: str,
        system_instruction: str,
        history: list[dict],
        *,
        thinking: bool = False,
    ) -> AsyncIterator[str]:
        self.calls.append(
            {
                "api_key": api_key,
                "user_text": user_text,
                "system": system_instruction,
                "history": list(history),
                "thinking": thinking,
            }
        )
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


@pytest.fixture
def local_store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "local_store.json")


@pytest.fixture
def local_repository(local_store) -> LocalRepository:
    return LocalRepository(local_store)


@pytest.fixture
async def sessionmaker(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """SQLite-backed stand-in for the remote store, with every table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'remote.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def remote_repository(sessionmaker) -> RemoteRepository:
    return RemoteRepository(sessionmaker)


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(id=uuid4(), name="Ms. Rivera", email="rivera@school.test")


@pytest.fixture
def make_completion() -> type[FakeCompletion]:
    return FakeCompletion


@pytest.fixture
def fake_completion() -> FakeCompletion:
    return FakeCompletion()


@pytest.fixture
def controller(local_repository, fake_completion) -> ConversationController:
    return ConversationController(local_repository, fake_completion, api_key="test-key")


@pytest.fixture
def auth_headers(profile) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(profile.id)}"}


@pytest.fixture
async def client(local_repository, controller) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints against the local store."""
    app.dependency_overrides[get_repository] = lambda: local_repository
    app.dependency_overrides[get_controller] = lambda: controller
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
