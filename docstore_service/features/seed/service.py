"""Idempotent seeding of demo tenants and users."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

from docstore_service.features.seed.data import DEMO_TENANTS, DEMO_USERS
from docstore_service.features.tenants.service import TenantDirectory
from docstore_service.features.users.service import AuthenticationService

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from docstore_service.features.seed.data import SeedTenant, SeedUser

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    """What a seeding run created; existing rows are left untouched."""

    tenants_created: list[str] = field(default_factory=list)
    users_created: list[tuple[str, str]] = field(default_factory=list)

    @property
    def created_anything(self) -> bool:
        return bool(self.tenants_created or self.users_created)


class DataSeedService:
    """Creates the demo tenants and accounts if they do not exist yet.

    Running it again is a no-op: tenants are matched by id and users by
    ``(tenant_id, username)``. Tokens of existing users are never rotated.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        tenants: Iterable[SeedTenant] = DEMO_TENANTS,
        users: Iterable[SeedUser] = DEMO_USERS,
    ) -> None:
        self._session_factory = session_factory
        self._tenants = tuple(tenants)
        self._users = tuple(users)

    async def seed(self) -> SeedReport:
        report = SeedReport()
        async with self._session_factory() as session:
            directory = TenantDirectory(session)
            for tenant in self._tenants:
                if await directory.get_tenant(tenant.id) is None:
                    await directory.add_tenant(tenant.id, tenant.name, is_active=tenant.is_active)
                    report.tenants_created.append(tenant.id)

            auth = AuthenticationService(session)
            for user in self._users:
                if await auth.get_user_by_username(user.tenant_id, user.username) is not None:
                    logger.debug(
                        "Seed user already exists, skipping",
                        extra={"tenant_id": user.tenant_id, "username": user.username},
                    )
                    continue
                await auth.create_user(user.tenant_id, user.username, user.role, token=user.token)
                report.users_created.append((user.tenant_id, user.username))

        logger.info(
            "Demo data seeding completed",
            extra={
                "tenants_created": len(report.tenants_created),
                "users_created": len(report.users_created),
            },
        )
        return report

    async def is_seed_data_present(self) -> bool:
        """Return True when every configured tenant and user exists."""
        async with self._session_factory() as session:
            directory = TenantDirectory(session)
            for tenant in self._tenants:
                if await directory.get_tenant(tenant.id) is None:
                    return False
            auth = AuthenticationService(session)
            for user in self._users:
                if await auth.get_user_by_username(user.tenant_id, user.username) is None:
                    return False
        return True
