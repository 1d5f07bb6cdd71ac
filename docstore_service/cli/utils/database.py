"""Database access for one-shot CLI commands."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docstore_service.core.settings import get_db_settings
from docstore_service.infra.database import (
    close_database,
    create_engine,
    create_session_factory,
    init_database,
)


@asynccontextmanager
async def cli_session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Open an engine for the duration of a command and dispose it afterwards."""
    db_settings = get_db_settings()
    engine = create_engine(db_settings)
    try:
        await init_database(engine, create_tables=db_settings.create_tables)
        yield create_session_factory(engine)
    finally:
        await close_database(engine)
