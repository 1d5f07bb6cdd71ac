"""In-memory, per-tenant ring buffer of events.

The store is the single ordering authority for a tenant's feed: append
order is read order is broadcast order. Buffers are created lazily and
bounded; once a buffer is full the oldest event is evicted on every append.

Example:
    store = EventStore(buffer_size=3)
    for text in ("E1", "E2", "E3", "E4", "E5"):
        store.append("company_a", text)
    [e.message for e in store.get_last("company_a", 10)]  # ["E3", "E4", "E5"]
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import UTC, datetime
from itertools import islice

from docstore_service.core.database.utils import generate_uuid7
from docstore_service.features.events.schemas import Event
from docstore_service.infra.metrics.prometheus import event_buffers_active

logger = logging.getLogger(__name__)


class TenantEventBuffer:
    """Bounded FIFO of one tenant's events with an id index for cursors.

    Every event gets a monotonically increasing sequence number; the index
    maps event ids to sequence numbers so cursor lookups are O(1) and the
    position inside the deque is ``seq - first_seq``.
    """

    __slots__ = ("tenant_id", "capacity", "_events", "_positions", "_next_seq", "_last_timestamp", "_lock")

    def __init__(self, tenant_id: str, capacity: int) -> None:
        self.tenant_id = tenant_id
        self.capacity = capacity
        self._events: deque[Event] = deque(maxlen=capacity)
        self._positions: dict[str, int] = {}
        self._next_seq = 0
        self._last_timestamp: datetime | None = None
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._events)

    @property
    def _first_seq(self) -> int:
        return self._next_seq - len(self._events)

    def append(self, message: str, author_id: str | None = None) -> Event:
        with self._lock:
            timestamp = datetime.now(UTC)
            # Wall clock stepping backwards must not reorder timestamps
            if self._last_timestamp is not None and timestamp < self._last_timestamp:
                timestamp = self._last_timestamp
            self._last_timestamp = timestamp

            event = Event(
                id=str(generate_uuid7()),
                tenant_id=self.tenant_id,
                message=message.strip(),
                timestamp=timestamp,
                author_id=author_id,
            )

            if len(self._events) == self.capacity:
                evicted = self._events[0]
                del self._positions[evicted.id]
            self._events.append(event)
            self._positions[event.id] = self._next_seq
            self._next_seq += 1
            return event

    def get_since(self, since_id: str | None, limit: int | None) -> list[Event]:
        with self._lock:
            size = len(self._events)
            if not since_id:
                count = min(limit or self.capacity, self.capacity)
                return list(islice(self._events, max(size - count, 0), None))

            seq = self._positions.get(since_id)
            if seq is None:
                return []
            start = seq - self._first_seq + 1
            remaining = size - start
            count = max(min(limit or remaining, self.capacity), 0)
            return list(islice(self._events, start, start + count))

    def get_last(self, count: int) -> list[Event]:
        if count <= 0:
            return []
        with self._lock:
            size = len(self._events)
            count = min(count, self.capacity, size)
            return list(islice(self._events, size - count, None))

    def contains(self, event_id: str) -> bool:
        with self._lock:
            return event_id in self._positions


class EventStore:
    """Registry of per-tenant event buffers.

    Unknown tenants read as empty. A registry lock guards lazy buffer
    creation; each buffer serializes its own appends and reads, so the store
    is safe to call from worker threads as well as from the event loop.

    Args:
        buffer_size: Capacity of every tenant buffer; fixed for the store's lifetime.
    """

    def __init__(self, buffer_size: int = 500) -> None:
        if buffer_size < 1:
            msg = "buffer_size must be at least 1"
            raise ValueError(msg)
        self._buffer_size = buffer_size
        self._buffers: dict[str, TenantEventBuffer] = {}
        self._lock = threading.Lock()

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    def _get(self, tenant_id: str) -> TenantEventBuffer | None:
        with self._lock:
            return self._buffers.get(tenant_id)

    def touch(self, tenant_id: str) -> TenantEventBuffer:
        """Return the tenant's buffer, creating it if needed."""
        with self._lock:
            buffer = self._buffers.get(tenant_id)
            if buffer is None:
                buffer = TenantEventBuffer(tenant_id, self._buffer_size)
                self._buffers[tenant_id] = buffer
                event_buffers_active.set(len(self._buffers))
                logger.debug(
                    "Event buffer created",
                    extra={"tenant_id": tenant_id, "capacity": self._buffer_size},
                )
            return buffer

    def append(self, tenant_id: str, message: str, author_id: str | None = None) -> Event:
        """Append an event, evicting the oldest one when the buffer is full."""
        return self.touch(tenant_id).append(message, author_id)

    def get_since(
        self,
        tenant_id: str,
        since_id: str | None = None,
        limit: int | None = None,
    ) -> list[Event]:
        """Events strictly after ``since_id``, oldest first.

        Without a cursor the last ``min(limit or buffer_size, buffer_size)``
        events are returned. A cursor that is not in the buffer, because it
        was evicted or never existed, yields an empty list.
        """
        buffer = self._get(tenant_id)
        if buffer is None:
            return []
        return buffer.get_since(since_id, limit)

    def get_last(self, tenant_id: str, count: int) -> list[Event]:
        """The last ``min(count, buffer_size, size)`` events, oldest first."""
        buffer = self._get(tenant_id)
        if buffer is None:
            return []
        return buffer.get_last(count)

    def count(self, tenant_id: str) -> int:
        buffer = self._get(tenant_id)
        return len(buffer) if buffer is not None else 0

    def clear(self, tenant_id: str) -> None:
        """Drop the tenant's buffer entirely."""
        with self._lock:
            if self._buffers.pop(tenant_id, None) is not None:
                event_buffers_active.set(len(self._buffers))
        logger.info("Event buffer cleared", extra={"tenant_id": tenant_id})

    def clear_all(self) -> None:
        with self._lock:
            self._buffers.clear()
            event_buffers_active.set(0)

    def tenant_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._buffers)

    def stats(self) -> dict[str, int]:
        """Aggregate counts for health and monitoring endpoints."""
        with self._lock:
            buffers = list(self._buffers.values())
        return {
            "tenants": len(buffers),
            "buffered_events": sum(len(b) for b in buffers),
            "buffer_size": self._buffer_size,
        }
