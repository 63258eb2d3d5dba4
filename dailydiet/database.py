"""
Daily Diet Backend — Database Client
======================================

What:  The `Database` storage client: async SQLAlchemy engine, session factory,
       lifecycle hooks and the per-request session dependency.
Why:   Centralizes all connection logic in one explicitly constructed object
       instead of module-level engine globals, so tests and the app factory
       can each hand their own instance to the routes.
How:   `init()` creates the engine and the tables, `teardown()` disposes the
       pool. The app factory stores the instance on `app.state.database`;
       `get_db_session` pulls it from there for every request.
When:  `init()` runs in the application lifespan at startup, `teardown()`
       at shutdown. Sessions are created per request.

Connection Pooling Strategy:
    pool_size / max_overflow / pool_pre_ping come from settings and apply to
    server databases (PostgreSQL). SQLite URLs skip them: aiosqlite uses its
    own pool class, which rejects these arguments.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from dailydiet.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers with this shared metadata; `Database.init()`
    creates the tables from it.
    """
    pass


class Database:
    """
    Explicitly constructed storage client.

    Lifecycle:
        db = Database(url)      # no I/O, no driver import
        await db.init()         # engine + tables
        async with db.session() as session: ...
        await db.teardown()     # close pooled connections
    """

    def __init__(self, url: Optional[str] = None, config: Optional[Settings] = None):
        self._config = config or default_settings
        self.url = url or self._config.database_url
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database.init() has not been called")
        return self._engine

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def _engine_options(self) -> dict:
        options = {"echo": self._config.log_level == "DEBUG"}
        if not self.url.startswith("sqlite"):
            options.update(
                pool_size=self._config.db_pool_size,
                max_overflow=self._config.db_max_overflow,
                pool_pre_ping=self._config.db_pool_pre_ping,
                pool_recycle=3600,
            )
        return options

    async def init(self) -> None:
        """
        What:  Creates the engine, the session factory and the tables.
        When:  Application startup (lifespan) or test setup.
        How:   Tables come from model metadata via create_all, which skips
               tables that already exist. Calling init() twice is a no-op.
        """
        if self.is_initialized:
            return

        # Import models so their tables are registered on Base.metadata
        from dailydiet.models import meal  # noqa: F401

        self._engine = create_async_engine(self.url, **self._engine_options())
        # expire_on_commit=False: attributes stay readable after the
        # request-scoped commit in get_db_session
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized (%s)", self._engine.url.render_as_string(hide_password=True))

    async def teardown(self) -> None:
        """Gracefully closes all connections in the pool."""
        if not self.is_initialized:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database connections closed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Unit-of-work scope: commit on success, roll back on any error.

        The session is always closed, returning its connection to the pool.
        """
        if self._session_factory is None:
            raise RuntimeError("Database.init() has not been called")
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Uses the `Database` stored on `app.state.database` by the app factory.
    The transaction is committed after the handler returns and rolled back
    if it raises; the exception then reaches the global error handlers.

    Example usage in a route:
        @router.get("/meals")
        async def list_meals(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
