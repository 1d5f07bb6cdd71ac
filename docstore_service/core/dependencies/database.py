"""Database dependencies for FastAPI route handlers.

The session factory lives on ``app.state`` (created by the lifespan), so
tests can point the application at an in-memory database.

Usage:
    @router.get("/items")
    async def list_items(session: DbSessionDep):
        result = await session.execute(select(Item))
        return result.scalars().all()
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from docstore_service.core.exceptions import ServiceUnavailableException


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency for database session.

    Yields:
        Database session that is automatically closed after request.
    """
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        raise ServiceUnavailableException(
            detail="Database is not initialized",
            code="DATABASE_UNAVAILABLE",
        )
    async with session_factory() as session:
        yield session


DbSessionDep = Annotated[AsyncSession, Depends(get_db_session)]
