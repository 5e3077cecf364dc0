"""
Armory API — Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the test suite.
How:   Every test that touches storage gets its own SQLite file (aiosqlite)
       with the schema already created, so tests never share rows.

Fixture Hierarchy (all function-scoped):
    ├── test_settings:      Settings pointing at a per-test SQLite file
    ├── engine:             Async engine with the schema created
    ├── session_factory:    Session factory bound to that engine
    ├── sword_gateway / potion_gateway: real gateways on that factory
    ├── client:             HTTPX AsyncClient against the full app
    └── fake_swords:        AsyncMock gateway for call-count instrumentation
"""

import os
import tempfile

# Configure the environment BEFORE any armory import: armory.main builds an
# engine from the settings singleton at import time.
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="armory_test_"), "import.db")
)
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from armory.config import Settings
from armory.database import build_engine, build_session_factory, create_schema
from armory.main import create_app
from armory.resources import POTIONS, SWORDS
from armory.services.gateway import ResourceGateway


@pytest.fixture
def test_settings(tmp_path):
    """Settings bound to a fresh SQLite database file for this test."""
    return Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'armory.db'}",
        db_operation_timeout=5.0,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def engine(test_settings):
    engine = build_engine(test_settings)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def sword_gateway(session_factory):
    return ResourceGateway(SWORDS, session_factory, timeout=5.0)


@pytest.fixture
def potion_gateway(session_factory):
    return ResourceGateway(POTIONS, session_factory, timeout=5.0)


@pytest_asyncio.fixture
async def client(test_settings, engine):
    """
    HTTPX AsyncClient talking to a full app backed by the per-test database.

    Usage:
        async def test_list(client):
            response = await client.get("/api/swords")
            assert response.status_code == 200
    """
    app = create_app(app_settings=test_settings, engine=engine)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


@pytest.fixture
def fake_swords():
    """
    A stand-in sword gateway whose methods are AsyncMocks.

    Lets route tests assert exactly which gateway calls were made.
    """
    gateway = MagicMock(spec=ResourceGateway)
    gateway.resource = SWORDS
    gateway.list_all = AsyncMock(return_value=[])
    gateway.get_by_id = AsyncMock(return_value=None)
    gateway.create = AsyncMock()
    gateway.update = AsyncMock(return_value=None)
    gateway.delete_by_id = AsyncMock(return_value=False)
    return gateway


@pytest_asyncio.fixture
async def fake_client(test_settings, fake_swords):
    """App whose /api/swords routes are served by `fake_swords`."""
    engine = build_engine(test_settings)
    app = create_app(app_settings=test_settings, engine=engine, gateways={"swords": fake_swords})
    # Unhandled exceptions are rendered by the catch-all handler, not re-raised
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    await engine.dispose()


@pytest.fixture
def katana():
    return {"type": "katana", "is_magical": True, "attack": 50, "sp_attack": 10}
