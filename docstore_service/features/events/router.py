"""HTTP surface of the event feed.

Endpoints:
- POST /events: append an event for the caller's tenant and broadcast it
- GET /events: read the tenant's buffer, optionally after a cursor
"""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Query, Request, status

from docstore_service.core.dependencies import CurrentUserDep, EventServiceDep, TenantIdDep
from docstore_service.core.schemas import ProblemDetails
from docstore_service.features.events.schemas import Event, EventCreate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/events", tags=["events"])

_AUTH_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"model": ProblemDetails, "description": "Missing tenant header or invalid query"},
    401: {"model": ProblemDetails, "description": "Missing or invalid user token"},
    404: {"model": ProblemDetails, "description": "Unknown or inactive tenant"},
}


@router.post(
    "",
    response_model=Event,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create an event",
    description="Append an event to the caller's tenant feed and push it to every connected client.",
    responses={
        **_AUTH_RESPONSES,
        413: {"model": ProblemDetails, "description": "MESSAGE_TOO_LARGE"},
        422: {"model": ProblemDetails, "description": "MESSAGE_REQUIRED or MESSAGE_EMPTY"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": EventCreate.model_json_schema()}},
        }
    },
)
async def create_event(
    request: Request,
    tenant_id: TenantIdDep,
    user: CurrentUserDep,
    service: EventServiceDep,
) -> Event:
    # Any body without a message, including non-objects and broken JSON, is MESSAGE_REQUIRED
    body = await _read_json_body(request)
    raw_message = body.get("message") if isinstance(body, dict) else None
    return service.publish(tenant_id, raw_message, author_id=user.id, source="http")


@router.get(
    "",
    response_model=list[Event],
    response_model_exclude_none=True,
    summary="List events",
    description=(
        "Return buffered events for the caller's tenant, oldest first. With `sinceId`, "
        "only events strictly after that event are returned; an unknown or evicted "
        "cursor yields an empty list."
    ),
    responses=_AUTH_RESPONSES,
)
async def list_events(
    tenant_id: TenantIdDep,
    user: CurrentUserDep,
    service: EventServiceDep,
    since_id: Annotated[
        str | None,
        Query(alias="sinceId", description="Return events after this event id (exclusive)"),
    ] = None,
    limit: Annotated[
        str | None,
        Query(description="Maximum number of events (default 100, max 500)"),
    ] = None,
) -> list[Event]:
    return service.replay(tenant_id, since_id=since_id, limit=limit)


async def _read_json_body(request: Request) -> Any:
    """Parse the request body as JSON; ``None`` when empty or unparseable."""
    body_bytes = await request.body()
    if not body_bytes:
        return None
    try:
        return json.loads(body_bytes)
    except ValueError as e:
        logger.debug("Failed to parse request body", extra={"error": str(e)})
        return None
