"""Tenant directory service.

Answers the one question the event feed asks of tenants: does tenant X
exist and is it active.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docstore_service.core.exceptions import ConflictException
from docstore_service.features.tenants.models import Tenant
from docstore_service.features.tenants.repository import (
    TenantRepository,
    get_tenant_repository,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class TenantDirectory:
    """Lookup and registration of tenants."""

    def __init__(
        self,
        session: AsyncSession,
        repo: TenantRepository | None = None,
    ) -> None:
        self._session = session
        self._repo = repo or get_tenant_repository()

    async def get_tenant(self, tenant_id: str) -> Tenant | None:
        """Get a tenant by id, active or not."""
        return await self._repo.get(self._session, tenant_id)

    async def is_valid_tenant(self, tenant_id: str) -> bool:
        """Return True when the tenant exists and is active."""
        if not tenant_id:
            return False
        tenant = await self.get_tenant(tenant_id)
        return tenant is not None and tenant.is_active

    async def list_tenants(self) -> Sequence[Tenant]:
        return await self._repo.list_ordered(self._session)

    async def add_tenant(self, tenant_id: str, name: str, *, is_active: bool = True) -> Tenant:
        """Register a new tenant.

        Raises:
            ConflictException: If a tenant with this id already exists.
        """
        if await self.get_tenant(tenant_id) is not None:
            raise ConflictException(
                detail=f"Tenant '{tenant_id}' already exists",
                code="TENANT_EXISTS",
                extra={"tenant_id": tenant_id},
            )
        tenant = await self._repo.create(
            self._session, Tenant(id=tenant_id, name=name, is_active=is_active)
        )
        await self._session.commit()
        logger.info(
            "Tenant registered",
            extra={"tenant_id": tenant_id, "is_active": is_active},
        )
        return tenant

    async def set_active(self, tenant_id: str, *, is_active: bool) -> Tenant | None:
        """Activate or deactivate a tenant. Returns None if it does not exist."""
        tenant = await self.get_tenant(tenant_id)
        if tenant is None:
            return None
        tenant.is_active = is_active
        await self._session.commit()
        logger.info(
            "Tenant status changed",
            extra={"tenant_id": tenant_id, "is_active": is_active},
        )
        return tenant
