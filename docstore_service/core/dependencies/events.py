"""Dependencies exposing the event feed components held on ``app.state``.

The store, connection manager and event service are created by the
lifespan and owned by the application instance; there are no module-level
singletons.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Request

from docstore_service.core.exceptions import ServiceUnavailableException
from docstore_service.features.events.service import EventService
from docstore_service.features.events.store import EventStore
from docstore_service.infra.realtime.manager import ConnectionManager


def _require_state(request: Request, name: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise ServiceUnavailableException(
            detail="Event feed is not initialized",
            code="EVENTS_UNAVAILABLE",
        )
    return value


def get_event_service(request: Request) -> EventService:
    return _require_state(request, "event_service")


def get_event_store(request: Request) -> EventStore:
    return _require_state(request, "event_store")


def get_connection_manager(request: Request) -> ConnectionManager:
    return _require_state(request, "connection_manager")


EventServiceDep = Annotated[EventService, Depends(get_event_service)]
EventStoreDep = Annotated[EventStore, Depends(get_event_store)]
ConnectionManagerDep = Annotated[ConnectionManager, Depends(get_connection_manager)]
