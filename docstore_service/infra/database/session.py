"""Database session management with the aiosqlite async driver.

The engine and session factory are created per application (see the
lifespan) or per CLI invocation and passed explicitly, so tests can run
against an in-memory database.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from docstore_service.core.database.base import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from docstore_service.core.settings.database import DatabaseSettings

logger = logging.getLogger(__name__)


def create_engine(db_settings: DatabaseSettings) -> AsyncEngine:
    """Create the async engine described by ``db_settings``.

    In-memory SQLite URLs share a single connection so every session sees
    the same database.
    """
    kwargs: dict[str, object] = {"echo": db_settings.echo}
    if db_settings.is_sqlite and ":memory:" in db_settings.url:
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_async_engine(db_settings.url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_database(engine: AsyncEngine, *, create_tables: bool = True) -> None:
    """Verify connectivity and optionally create missing tables.

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the database cannot be reached.
    """
    # Models must be imported so their tables are registered on Base.metadata
    import docstore_service.features.tenants.models  # noqa: F401
    import docstore_service.features.users.models  # noqa: F401

    logger.info("Initializing database connection", extra={"url": str(engine.url)})
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if create_tables:
                await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        logger.error(
            "Failed to connect to database",
            extra={"url": str(engine.url), "error": str(e)},
        )
        raise
    logger.info("Database connection established successfully")


async def close_database(engine: AsyncEngine) -> None:
    """Dispose the engine and its connection pool."""
    logger.info("Closing database connection")
    try:
        await engine.dispose()
        logger.info("Database connection closed successfully")
    except Exception as e:
        logger.exception("Error closing database connection", extra={"error": str(e)})
