"""Tenant directory: which tenants exist and which are active."""

from .models import Tenant
from .service import TenantDirectory

__all__ = ["Tenant", "TenantDirectory"]
