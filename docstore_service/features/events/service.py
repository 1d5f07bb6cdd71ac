"""Service layer for the events feature.

Both ingestion paths (HTTP and WebSocket ``post_event``) go through
``EventService.publish``: validate, append, broadcast.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from docstore_service.core.exceptions import BadRequestException
from docstore_service.features.events.validation import IngestRejected, IngestValidator
from docstore_service.infra.metrics.prometheus import (
    events_appended_total,
    events_rejected_total,
    websocket_broadcast_recipients,
)

if TYPE_CHECKING:
    from docstore_service.core.settings.events import EventSettings
    from docstore_service.features.events.schemas import Event
    from docstore_service.features.events.sink import EventSink
    from docstore_service.features.events.store import EventStore

logger = logging.getLogger(__name__)

INVALID_LIMIT = "INVALID_LIMIT"
INVALID_CURSOR = "INVALID_CURSOR"


class EventService:
    """Orchestrates validation, storage and live delivery of events.

    Args:
        store: Per-tenant ring buffer, the source of truth for reads.
        sink: Receives every appended event for fan-out.
        settings: Replay limits, snapshot size and message bounds.
        validator: Ingest validator; built from ``settings`` when omitted.
    """

    def __init__(
        self,
        store: EventStore,
        sink: EventSink,
        settings: EventSettings,
        validator: IngestValidator | None = None,
    ) -> None:
        self._store = store
        self._sink = sink
        self._settings = settings
        self._validator = validator or IngestValidator(settings.message_max_length)

    @property
    def store(self) -> EventStore:
        return self._store

    def publish(
        self,
        tenant_id: str,
        raw_message: Any,
        *,
        author_id: str | None = None,
        source: str = "http",
    ) -> Event:
        """Validate ``raw_message``, append it and hand it to the sink.

        Delivery failures never undo the append.

        Raises:
            IngestRejected: If the message fails validation.
        """
        try:
            message = self._validator.validate(raw_message)
        except IngestRejected as e:
            events_rejected_total.labels(code=e.code).inc()
            logger.info(
                "Event rejected",
                extra={"tenant_id": tenant_id, "code": e.code, "source": source},
            )
            raise

        event = self._store.append(tenant_id, message, author_id)
        events_appended_total.labels(source=source).inc()

        try:
            recipients = self._sink.broadcast(event)
        except Exception:
            recipients = 0
            logger.exception(
                "Event broadcast failed",
                extra={"tenant_id": tenant_id, "event_id": event.id, "operation": "broadcast"},
            )
        websocket_broadcast_recipients.observe(recipients)

        logger.info(
            "Event appended",
            extra={
                "tenant_id": tenant_id,
                "event_id": event.id,
                "author_id": author_id,
                "source": source,
                "recipients": recipients,
            },
        )
        return event

    def resolve_limit(self, limit: Any) -> int:
        """Turn a client-supplied page size into the effective one.

        ``None`` means the default page size; anything else must be a
        positive integer (or its decimal string form) and is capped at the
        configured maximum.

        Raises:
            BadRequestException: ``INVALID_LIMIT`` for non-integer or non-positive values.
        """
        if limit is None:
            return self._settings.replay_default_limit

        if isinstance(limit, str):
            try:
                value = int(limit.strip())
            except ValueError:
                value = None
        elif isinstance(limit, int) and not isinstance(limit, bool):
            value = limit
        else:
            value = None

        if value is None or value < 1:
            raise BadRequestException(
                detail="limit must be a positive integer",
                code=INVALID_LIMIT,
                type="invalid-limit",
                extra={"max_limit": self._settings.replay_max_limit},
            )
        return min(value, self._settings.replay_max_limit)

    def resolve_cursor(self, since_id: Any) -> str | None:
        """Validate a replay cursor; empty strings mean no cursor.

        Raises:
            BadRequestException: ``INVALID_CURSOR`` if the cursor is not a string.
        """
        if since_id is None:
            return None
        if not isinstance(since_id, str):
            raise BadRequestException(
                detail="sinceId must be a string event id",
                code=INVALID_CURSOR,
                type="invalid-cursor",
            )
        return since_id or None

    def replay(self, tenant_id: str, since_id: Any = None, limit: Any = None) -> list[Event]:
        """Events after ``since_id`` for ``tenant_id``, capped by the replay limits."""
        cursor = self.resolve_cursor(since_id)
        actual_limit = self.resolve_limit(limit)
        events = self._store.get_since(tenant_id, cursor, actual_limit)
        logger.debug(
            "Replay served",
            extra={
                "tenant_id": tenant_id,
                "since_id": cursor,
                "limit": actual_limit,
                "returned": len(events),
            },
        )
        return events

    def snapshot(self, tenant_id: str) -> list[Event]:
        """Most recent events pushed to a connection right after it joins."""
        return self._store.get_last(tenant_id, self._settings.snapshot_size)
