"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docstore_service.core.settings import get_app_settings, get_websocket_settings
from docstore_service.features.events.router import router as events_router
from docstore_service.features.health.router import router as health_router
from docstore_service.features.metrics.router import router as metrics_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from docstore_service.core.settings import AppSettings, WebSocketSettings

logger = logging.getLogger(__name__)


def setup_routers(
    app: FastAPI,
    app_settings: AppSettings | None = None,
    websocket_settings: WebSocketSettings | None = None,
) -> None:
    """Register all feature routers with the application.

    Args:
        app: FastAPI application instance.
        app_settings: Optional override for the API prefix.
        websocket_settings: Optional override controlling the realtime endpoints.
    """
    app_settings = app_settings or get_app_settings()
    websocket_settings = websocket_settings or get_websocket_settings()

    api_prefix = app_settings.api_prefix

    # Observability endpoints live at the root
    app.include_router(metrics_router)
    app.include_router(health_router)

    app.include_router(events_router, prefix=api_prefix)

    if websocket_settings.enabled:
        from docstore_service.features.realtime.router import events_websocket, stats_router

        app.add_api_websocket_route(websocket_settings.path, events_websocket, name="events_websocket")
        app.include_router(stats_router, prefix=api_prefix)
        logger.info(
            "WebSocket realtime router included",
            extra={"path": websocket_settings.path, "stats": f"{api_prefix}/ws/stats"},
        )

    logger.info(
        "Router setup complete",
        extra={"api_prefix": api_prefix, "websocket_enabled": websocket_settings.enabled},
    )
