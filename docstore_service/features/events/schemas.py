"""Pydantic schemas for the events feature."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Event(BaseModel):
    """An immutable entry in a tenant's event feed.

    Serialize with ``exclude_none=True`` so ``author_id`` is omitted for
    system-originated events.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "01927d3c-5f3a-7b2e-9c41-8d2f6a1b3c4d",
                "tenant_id": "company_a",
                "message": "Quarterly report uploaded",
                "timestamp": "2025-01-01T12:00:00.123456Z",
                "author_id": "01927d3b-0000-7000-8000-000000000001",
            }
        },
    )

    id: str = Field(description="Unique, creation-ordered identifier; usable as a replay cursor")
    tenant_id: str = Field(description="Owning tenant")
    message: str = Field(min_length=1, description="Trimmed, non-empty message")
    timestamp: datetime = Field(description="Server-assigned UTC creation instant")
    author_id: str | None = Field(default=None, description="Producing user, absent for system events")

    def to_wire(self) -> dict[str, object]:
        """JSON-compatible representation used on every transport."""
        return self.model_dump(mode="json", exclude_none=True)


class EventCreate(BaseModel):
    """Documented request body for creating an event over HTTP.

    The handler reads the raw body itself; the ingest validator decides
    between MESSAGE_REQUIRED, MESSAGE_EMPTY and MESSAGE_TOO_LARGE.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"message": "Contract signed"}})

    message: Any = Field(default=None, description="Event message (max 2048 characters)")

