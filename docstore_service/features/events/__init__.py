"""Tenant-scoped event feed: ring-buffer store, ingest validation and fan-out."""

from .schemas import Event
from .service import EventService
from .sink import EventSink, NullEventSink
from .store import EventStore
from .validation import IngestRejected, IngestValidator

__all__ = [
    "Event",
    "EventService",
    "EventSink",
    "EventStore",
    "IngestRejected",
    "IngestValidator",
    "NullEventSink",
]
