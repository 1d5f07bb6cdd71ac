"""Minimal generic repository for SQLAlchemy models.

Provides basic operations with explicit session passing.
For complex queries, use the session directly.

Example:
    class TenantRepository(BaseRepository[Tenant]):
        async def list_active(self, session: AsyncSession) -> Sequence[Tenant]:
            stmt = select(Tenant).where(Tenant.is_active.is_(True))
            result = await session.execute(stmt)
            return result.scalars().all()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Minimal generic repository.

    Provides:
        - get(session, id) -> T | None
        - create(session, instance) -> T

    Session is always explicit; committing is the caller's responsibility.
    """

    __slots__ = ("model", "_logger")

    def __init__(self, model: type[T]) -> None:
        self.model = model
        self._logger = logging.getLogger(f"repository.{model.__name__}")

    async def get(self, session: AsyncSession, id: Any) -> T | None:  # noqa: A002
        """Get entity by primary key."""
        instance = await session.get(self.model, id)
        self._logger.debug(
            "db.get",
            extra={"model": self.model.__name__, "found": instance is not None},
        )
        return instance

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Add an entity and flush so generated columns are populated."""
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        self._logger.debug("db.create", extra={"model": self.model.__name__})
        return instance
