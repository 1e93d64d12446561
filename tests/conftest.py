"""Shared pytest fixtures for all test suites."""

from collections.abc import AsyncGenerator, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from docqa.app.api.deps import get_app_settings, get_embedder, get_model_provider
from docqa.app.config import Settings
from docqa.app.db.engine import get_session
from docqa.app.db.models import Base
from docqa.app.docs.embedder import Embedder
from docqa.app.llm.client import DeterministicStubProvider
from docqa.app.main import app


@pytest.fixture
def test_engine(tmp_path: Path) -> Iterator[AsyncEngine]:
    """Async engine over a fresh SQLite file with all tables created.

    A file (not :memory:) so every NullPool connection sees the same data.
    """
    db_path = tmp_path / "docqa.db"

    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    yield engine
    engine.sync_engine.dispose()


@pytest_asyncio.fixture
async def session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Async session bound to the per-test database."""
    async with AsyncSession(test_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def settings() -> Settings:
    """Default settings with no provider key."""
    return Settings(openai_api_key=None)


@pytest.fixture
def provider(settings: Settings) -> DeterministicStubProvider:
    """Deterministic offline model provider."""
    return DeterministicStubProvider(dimensions=settings.embedding_dimensions)


@pytest.fixture
def embedder(provider: DeterministicStubProvider, settings: Settings) -> Embedder:
    """Embedder over the stub provider."""
    return Embedder(provider, dimensions=settings.embedding_dimensions)


@pytest.fixture
def client(
    test_engine: AsyncEngine,
    provider: DeterministicStubProvider,
    embedder: Embedder,
    settings: Settings,
) -> Iterator[TestClient]:
    """TestClient with storage and model dependencies pointed at test doubles."""

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with AsyncSession(test_engine, expire_on_commit=False) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_embedder] = lambda: embedder
    app.dependency_overrides[get_model_provider] = lambda: provider
    app.dependency_overrides[get_app_settings] = lambda: settings

    yield TestClient(app)

    app.dependency_overrides.clear()
