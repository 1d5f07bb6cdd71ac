"""Health check endpoint.

Endpoints:
    GET /health - liveness with event store and gateway statistics
"""

from __future__ import annotations

from datetime import UTC, datetime
import logging

from fastapi import APIRouter, Request, Response, status
from sqlalchemy import text

from docstore_service.core.dependencies.settings import get_request_app_settings
from docstore_service.features.health.schemas import (
    EventStoreHealth,
    GatewayHealth,
    HealthResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


async def _check_database(request: Request) -> bool:
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        return False
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return False
    return True


@router.get(
    "",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    summary="Liveness and component statistics",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """Report whether the service is alive.

    The event store and gateway are in-process, so their presence on
    ``app.state`` is the check; the database is probed with ``SELECT 1``.
    Returns 503 when any component is missing.
    """
    app_settings = get_request_app_settings(request)
    state = request.app.state
    store = getattr(state, "event_store", None)
    manager = getattr(state, "connection_manager", None)

    checks = {
        "database": await _check_database(request),
        "event_store": store is not None,
        "realtime": manager is not None,
    }

    if all(checks.values()):
        health_status = "healthy"
    elif checks["event_store"]:
        health_status = "degraded"
    else:
        health_status = "unhealthy"

    if health_status != "healthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=health_status,
        service=app_settings.service_name,
        version=app_settings.version,
        timestamp=datetime.now(UTC),
        checks=checks,
        events=EventStoreHealth(**store.stats()) if store is not None else None,
        realtime=GatewayHealth(**manager.stats()) if manager is not None else None,
    )
