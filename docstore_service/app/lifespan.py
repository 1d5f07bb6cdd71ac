"""Application lifespan management.

Startup order:
1. Logging
2. Database (engine, session factory, tables, optional demo data)
3. Event store
4. Connection manager (the event sink) and its heartbeat
5. Event service and connection authenticator

Everything is stored on ``app.state``; request handlers reach it through
the dependencies in ``core.dependencies``. Shutdown runs in reverse.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from docstore_service.core.settings import get_settings
from docstore_service.features.events.service import EventService
from docstore_service.features.events.sink import NullEventSink
from docstore_service.features.events.store import EventStore
from docstore_service.features.realtime.authenticator import ConnectionAuthenticator
from docstore_service.features.seed.service import DataSeedService
from docstore_service.infra.database import (
    close_database,
    create_engine,
    create_session_factory,
    init_database,
)
from docstore_service.infra.logging.config import setup_logging
from docstore_service.infra.realtime import ConnectionManager

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

    from docstore_service.core.settings import Settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the service graph on startup and tear it down on shutdown.

    Settings come from ``app.state.settings`` when ``create_app`` was given
    an explicit instance, otherwise from the cached loaders.
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings

    setup_logging(settings.logging)
    logger.info(
        "Application starting",
        extra={
            "service": settings.app.service_name,
            "version": settings.app.version,
            "environment": settings.app.environment,
        },
    )

    engine = create_engine(settings.db)
    session_factory = create_session_factory(engine)
    await init_database(engine, create_tables=settings.db.create_tables)
    app.state.engine = engine
    app.state.session_factory = session_factory

    if settings.app.seed_demo_data:
        await DataSeedService(session_factory).seed()

    store = EventStore(buffer_size=settings.events.buffer_size)
    manager = ConnectionManager(settings.websocket)
    await manager.start()

    app.state.event_store = store
    app.state.connection_manager = manager
    sink = manager if settings.websocket.enabled else NullEventSink()
    app.state.event_service = EventService(store, sink, settings.events)
    app.state.authenticator = ConnectionAuthenticator(session_factory)

    logger.info(
        "Application startup complete",
        extra={
            "buffer_size": store.buffer_size,
            "websocket_enabled": settings.websocket.enabled,
        },
    )

    try:
        yield
    finally:
        logger.info("Application shutting down")

        await manager.stop()
        for name in ("authenticator", "event_service", "connection_manager", "event_store"):
            setattr(app.state, name, None)

        await close_database(engine)
        app.state.session_factory = None
        app.state.engine = None

        logger.info("Application shutdown complete")
