"""Pydantic schemas for the users feature."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserRead(BaseModel):
    """A user without credentials."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    tenant_id: str
    username: str
    role: str


class UserWithToken(UserRead):
    """A user together with its current access token."""

    token: str | None = Field(default=None, description="Opaque access token")
