"""Unit tests for the health endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from asset_inventory.core.database import get_session
from asset_inventory.server.core import constant
from asset_inventory.server.main import app

pytestmark = pytest.mark.asyncio


async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_database_health(client: AsyncClient):
    response = await client.get("/health/db")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "reachable"}


async def test_database_health_unreachable():
    broken_session = AsyncMock()
    broken_session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))

    async def get_broken_session():
        yield broken_session

    app.dependency_overrides[get_session] = get_broken_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            response = await client.get("/health/db")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
    assert response.json() == {"status": "error", "database": "unreachable"}


async def test_version(client: AsyncClient):
    response = await client.get("/version")

    assert response.status_code == 200
    assert response.json() == {"version": constant.API_VERSION, "schema_version": constant.SCHEMA_VERSION}


async def test_process_time_header(client: AsyncClient):
    response = await client.get("/health")

    assert float(response.headers["x-process-time"]) >= 0
