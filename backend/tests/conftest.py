"""
EventHub Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite file (sqlite+aiosqlite) under pytest's
       tmp_path, with tables created from model metadata. Foreign keys are
       enforced, so RESTRICT / SET NULL behave like PostgreSQL.

Fixture Hierarchy:
    settings ── database ─┬── db_session: AsyncSession for service tests
                          └── test_client: HTTPX AsyncClient for API tests
"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./eventhub_test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from eventhub.config import Settings  # noqa: E402
from eventhub.database import Database  # noqa: E402


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a per-test SQLite database file."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'eventhub.db'}",
        log_level="WARNING",
        db_create_all=True,
    )


@pytest_asyncio.fixture
async def database(settings) -> AsyncGenerator[Database, None]:
    """A connected Database with all tables created; disposed after the test."""
    db = Database(settings)
    await db.connect()
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    """
    One session shared by a whole service test.

    Writes are flushed, never committed; the file is thrown away afterwards.
    """
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(settings, database) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client bound to an app that uses the test database.

    ASGITransport does not run the lifespan handler, so the `database`
    fixture has already connected and created the tables.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from eventhub.main import create_app

    app = create_app(settings=settings, database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
