"""Repository for the tenants feature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from docstore_service.core.database.repository import BaseRepository
from docstore_service.features.tenants.models import Tenant

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


class TenantRepository(BaseRepository[Tenant]):
    """Repository for Tenant model."""

    def __init__(self) -> None:
        super().__init__(Tenant)

    async def list_ordered(self, session: AsyncSession) -> Sequence[Tenant]:
        """List all tenants ordered by id."""
        result = await session.execute(select(Tenant).order_by(Tenant.id.asc()))
        return result.scalars().all()


_tenant_repository = TenantRepository()


def get_tenant_repository() -> TenantRepository:
    """Get the shared (stateless) tenant repository."""
    return _tenant_repository
