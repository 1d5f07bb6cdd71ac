"""Demo data seeding."""

from .data import DEMO_TENANTS, DEMO_USERS, SeedTenant, SeedUser
from .service import DataSeedService, SeedReport

__all__ = [
    "DEMO_TENANTS",
    "DEMO_USERS",
    "DataSeedService",
    "SeedReport",
    "SeedTenant",
    "SeedUser",
]
