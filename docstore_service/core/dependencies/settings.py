"""Settings dependency bound to the application serving the request."""

from __future__ import annotations

from fastapi import Request

from docstore_service.core.settings import AppSettings, get_app_settings


def get_request_app_settings(request: Request) -> AppSettings:
    """Application settings of the app handling ``request``.

    ``create_app(settings)`` stores its settings on ``app.state``; the cached
    environment settings are only used when an app was built without them.
    """
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        return get_app_settings()
    return settings.app

