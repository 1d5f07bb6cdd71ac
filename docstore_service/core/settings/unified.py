"""Unified settings composition for convenient access.

Usage:
    from docstore_service.core.settings import get_settings

    settings = get_settings()
    print(settings.app.port)
    print(settings.events.buffer_size)

Each nested settings class still respects its own env prefix.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field

from .app import AppSettings
from .database import DatabaseSettings
from .events import EventSettings
from .logs import LoggingSettings
from .websocket import WebSocketSettings


class Settings(BaseModel):
    """Aggregate of every settings domain used by the service."""

    model_config = ConfigDict(frozen=True)

    app: AppSettings = Field(default_factory=AppSettings)
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    events: EventSettings = Field(default_factory=EventSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    websocket: WebSocketSettings = Field(default_factory=WebSocketSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached unified settings."""
    return Settings()
