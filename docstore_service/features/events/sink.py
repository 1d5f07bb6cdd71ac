"""Delivery capability the ingestion path hands new events to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from docstore_service.features.events.schemas import Event


@runtime_checkable
class EventSink(Protocol):
    """Receives every appended event for live delivery.

    ``broadcast`` must not block on network I/O and must not raise for
    per-recipient failures. It returns the number of recipients the event
    was queued for.
    """

    def broadcast(self, event: Event) -> int: ...


class NullEventSink:
    """Sink that delivers nowhere; used when real-time delivery is disabled."""

    def broadcast(self, event: Event) -> int:
        return 0
