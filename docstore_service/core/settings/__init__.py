"""Modular Pydantic Settings v2 configuration.

Import settings via cached loaders:
    from docstore_service.core.settings import get_event_settings

Or use unified settings for convenient access to all domains:
    from docstore_service.core.settings import get_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from .app import AppSettings
from .database import DatabaseSettings
from .events import EventSettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_db_settings,
    get_event_settings,
    get_logging_settings,
    get_websocket_settings,
)
from .logs import LoggingSettings
from .unified import Settings, get_settings
from .websocket import WebSocketSettings

__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "EventSettings",
    "LoggingSettings",
    "Settings",
    "WebSocketSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_db_settings",
    "get_event_settings",
    "get_logging_settings",
    "get_settings",
    "get_websocket_settings",
]
