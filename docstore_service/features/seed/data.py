"""Fixed demo tenants and accounts used for local development and tests."""

from __future__ import annotations

from dataclasses import dataclass

from docstore_service.features.users.models import UserRole


@dataclass(frozen=True, slots=True)
class SeedTenant:
    id: str
    name: str
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class SeedUser:
    tenant_id: str
    username: str
    role: UserRole
    token: str


DEMO_TENANTS: tuple[SeedTenant, ...] = (
    SeedTenant(id="company_a", name="Company A"),
    SeedTenant(id="company_b", name="Company B"),
    SeedTenant(id="company_c", name="Company C", is_active=False),
)

DEMO_USERS: tuple[SeedUser, ...] = (
    SeedUser(tenant_id="company_a", username="admin", role="admin", token="company-a-admin-token"),
    SeedUser(tenant_id="company_a", username="alice", role="user", token="company-a-user-token"),
    SeedUser(tenant_id="company_b", username="admin", role="admin", token="company-b-admin-token"),
    SeedUser(tenant_id="company_b", username="bob", role="user", token="company-b-user-token"),
    SeedUser(tenant_id="company_c", username="admin", role="admin", token="company-c-admin-token"),
)
