"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from docstore_service.app.exception_handlers import configure_exception_handlers
from docstore_service.app.lifespan import lifespan
from docstore_service.app.middleware import configure_middleware
from docstore_service.app.router import setup_routers
from docstore_service.core.settings import get_settings

if TYPE_CHECKING:
    from docstore_service.core.settings import Settings


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        settings: Explicit settings, mainly for tests. Defaults to the
            cached unified settings.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    app_settings = settings.app

    app = FastAPI(
        title=app_settings.title,
        description=app_settings.description,
        version=app_settings.version,
        docs_url=app_settings.get_docs_url(),
        redoc_url=None,
        openapi_url=app_settings.get_openapi_url(),
        debug=app_settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Exception handlers before middleware
    configure_exception_handlers(app)
    configure_middleware(app, settings)
    setup_routers(app, app_settings, settings.websocket)

    return app


# Application instance for uvicorn
app = create_app()
