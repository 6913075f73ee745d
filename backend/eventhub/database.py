"""
EventHub Backend — Database Engine and Session Management
==========================================================

What:  The declarative `Base`, an explicitly constructed `Database` handle
       (async engine + session factory), and the per-request session dependency.
How:   `create_app()` builds one `Database` from settings and stores it on
       `app.state.database`. The lifespan handler opens it at startup and
       disposes it at shutdown. Route handlers receive sessions through
       `get_db_session`, which commits on success and rolls back on error.
Who:   Used by the app factory, route dependencies, health check, and tests.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20, max_overflow=10, pool_pre_ping, pool_recycle=3600.
    SQLite URLs skip pool options and enable foreign key enforcement on
    every connection.
"""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from eventhub.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers every model with a single metadata object, which Alembic reads
    for migrations and `Database.create_all()` uses for dev/test schemas.
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite leaves FK constraints off unless asked per connection
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


class Database:
    """
    Persistence handle with an explicit open/close lifecycle.

    Lifecycle:
        db = Database(settings)
        await db.connect()      # startup: create engine + session factory
        async with db.session() as session: ...
        await db.dispose()      # shutdown: close pooled connections

    Nothing is created at import time; tests build their own instance
    against a temporary SQLite file.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> None:
        """Create the async engine and session factory. Safe to call twice."""
        if self._engine is not None:
            return

        options = {"echo": self.settings.log_level == "DEBUG"}
        if not self.settings.is_sqlite:
            options.update(
                pool_size=self.settings.db_pool_size,
                max_overflow=self.settings.db_max_overflow,
                pool_pre_ping=self.settings.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self._engine = create_async_engine(self.settings.database_url, **options)
        if self.settings.is_sqlite:
            event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        # expire_on_commit=False: attributes stay readable after commit,
        # outside of the session context
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database engine created (%s)", self._engine.url.render_as_string(hide_password=True))

    def session(self) -> AsyncSession:
        """Return a new session; use as `async with db.session() as s:`."""
        if self._session_factory is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._session_factory()

    async def create_all(self) -> None:
        """Create all tables known to `Base.metadata` (dev and tests only)."""
        # Register the models with Base.metadata before creating tables
        import eventhub.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        import eventhub.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def ping(self) -> bool:
        """Execute `SELECT 1`; returns False instead of raising on failure."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Close all pooled connections. Safe to call when not connected."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine disposed")


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the app's `Database` handle."""
    return request.app.state.database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's Database
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
