"""
Hoots Backend — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Points the application at a throwaway SQLite file (aiosqlite) before
       any hoots module is imported, then recreates the schema for every
       test that asks for the database.

Fixture Hierarchy (all function-scoped):
    ├── database: fresh schema (create_all / drop_all)
    │   ├── db_session: AsyncSession bound to that schema
    │   │   └── users: two committed callers, alice (u1) and bob (u2)
    │   └── test_client: HTTPX AsyncClient talking to a fresh app
    └── mock_db_session: AsyncMock session for failure-path tests
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

# Must run before any hoots import: settings and the engine are built at import
_TEST_DB_DIR = tempfile.mkdtemp(prefix="hoots_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR}/hoots_test.db"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from hoots.database import Base, async_session_factory, engine
from hoots.models.post import Comment, Post  # noqa: F401  (registers tables)
from hoots.models.user import User


@pytest_asyncio.fixture
async def database():
    """Empty schema for one test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()

@pytest_asyncio.fixture
async def db_session(database):
    """A real AsyncSession; tests commit explicitly when they need to re-read."""
    async with async_session_factory() as session:
        yield session

@pytest_asyncio.fixture
async def users(db_session):
    """Two committed callers: alice (post author in most tests) and bob."""
    alice = User(id="u1", username="alice")
    bob = User(id="u2", username="bob")
    db_session.add_all([alice, bob])
    await db_session.commit()
    return alice, bob

@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient routed straight into a freshly built app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from hoots.main import create_app
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session
