from __future__ import annotations

from typing import AsyncGenerator, Callable

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from asset_inventory.core.database.utils import create_all, create_sessionmaker

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

READ_KEY = "reader-key"
WRITE_KEY = "writer-key"
TEST_API_KEYS = {READ_KEY: ["read"], WRITE_KEY: ["read", "write"]}


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    async with create_sessionmaker(test_engine)() as session:
        yield session


def _build_client(session: AsyncSession, settings_override: Callable | None = None) -> AsyncClient:
    from asset_inventory.core.database import get_session
    from asset_inventory.server.core.config import get_settings
    from asset_inventory.server.main import app

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    if settings_override is not None:
        app.dependency_overrides[get_settings] = settings_override
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost")


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with access control disabled."""
    from asset_inventory.server.main import app

    async with _build_client(session) as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(name="secured_client")
async def secured_client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with API keys configured."""
    from asset_inventory.server.core.config import settings
    from asset_inventory.server.main import app

    secured_settings = settings.model_copy(update={"api_keys": TEST_API_KEYS})

    async with _build_client(session, lambda: secured_settings) as client:
        yield client
    app.dependency_overrides.clear()
