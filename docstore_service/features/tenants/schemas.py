"""Pydantic schemas for the tenants feature."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TenantRead(BaseModel):
    """Tenant as exposed to CLI and API consumers."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    is_active: bool
    created_at: datetime
