"""Health check response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

HealthStatus = Literal["healthy", "degraded", "unhealthy"]


class EventStoreHealth(BaseModel):
    tenants: int = Field(..., ge=0, description="Tenants with an allocated buffer")
    buffered_events: int = Field(..., ge=0, description="Events held across all tenants")
    buffer_size: int = Field(..., ge=1, description="Per-tenant capacity")


class GatewayHealth(BaseModel):
    connections: int = Field(..., ge=0, description="Joined WebSocket connections")
    rooms: int = Field(..., ge=0, description="Tenants with at least one connection")


class HealthResponse(BaseModel):
    """Liveness status with in-memory component statistics."""

    status: HealthStatus
    service: str
    version: str
    timestamp: datetime
    checks: dict[str, bool] = Field(default_factory=dict, description="Per-dependency result")
    events: EventStoreHealth | None = None
    realtime: GatewayHealth | None = None
