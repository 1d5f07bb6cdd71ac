"""Event feed configuration settings."""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EventSettings(BaseSettings):
    """Per-tenant event buffer and replay settings.

    Environment variables use EVENTS_ prefix.
    Example: EVENTS_BUFFER_SIZE=500
    """

    buffer_size: int = Field(
        default=500,
        ge=1,
        le=100_000,
        description="Ring buffer capacity per tenant (oldest events are evicted)",
    )

    message_max_length: int = Field(
        default=2048,
        ge=1,
        le=1_048_576,
        description="Maximum event message length in characters, after trimming",
    )

    replay_default_limit: int = Field(
        default=100,
        ge=1,
        description="Page size used by replay/list requests that omit a limit",
    )

    replay_max_limit: int = Field(
        default=500,
        ge=1,
        description="Hard cap on the page size of replay/list requests",
    )

    snapshot_size: int = Field(
        default=10,
        ge=0,
        description="Number of recent events pushed to a connection right after it joins",
    )

    @model_validator(mode="after")
    def validate_limits(self) -> EventSettings:
        """Ensure the default page size never exceeds the cap."""
        if self.replay_default_limit > self.replay_max_limit:
            msg = "replay_default_limit cannot exceed replay_max_limit"
            raise ValueError(msg)
        return self

    model_config = SettingsConfigDict(
        env_prefix="EVENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
