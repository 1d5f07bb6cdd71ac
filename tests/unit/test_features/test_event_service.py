"""Tests for EventService: publish, replay and snapshot."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from docstore_service.core.exceptions import BadRequestException
from docstore_service.core.settings import EventSettings
from docstore_service.features.events.service import EventService
from docstore_service.features.events.store import EventStore
from docstore_service.features.events.validation import IngestRejected
from docstore_service.infra.metrics import REGISTRY

if TYPE_CHECKING:
    from tests.conftest import RecordingSink


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class ExplodingSink:
    def broadcast(self, event) -> int:
        raise RuntimeError("socket layer down")


class TestPublish:
    def test_appends_and_broadcasts_once(
        self, event_service: EventService, event_store: EventStore, sink: RecordingSink
    ) -> None:
        event = event_service.publish("company_a", " hello ", author_id="u-1")

        assert event.message == "hello"
        assert event.author_id == "u-1"
        assert sink.events == [event]
        assert event_store.get_last("company_a", 10) == [event]

    def test_rejected_message_is_neither_stored_nor_broadcast(
        self, event_service: EventService, event_store: EventStore, sink: RecordingSink
    ) -> None:
        before = _sample("events_rejected_total", {"code": "MESSAGE_EMPTY"})

        with pytest.raises(IngestRejected):
            event_service.publish("company_a", "   ")

        assert event_store.count("company_a") == 0
        assert sink.events == []
        assert _sample("events_rejected_total", {"code": "MESSAGE_EMPTY"}) == before + 1

    def test_broadcast_failure_keeps_event(
        self, event_store: EventStore, event_settings: EventSettings
    ) -> None:
        service = EventService(event_store, ExplodingSink(), event_settings)

        event = service.publish("company_a", "still stored")

        assert event_store.get_last("company_a", 1) == [event]

    def test_counts_appends_by_source(self, event_service: EventService) -> None:
        before = _sample("events_appended_total", {"source": "websocket"})

        event_service.publish("company_a", "hi", source="websocket")

        assert _sample("events_appended_total", {"source": "websocket"}) == before + 1


class TestResolveLimit:
    @pytest.mark.parametrize(
        ("limit", "expected"),
        [(None, 100), (1, 1), (50, 50), ("25", 25), (" 7 ", 7), (500, 500), (10_000, 500)],
    )
    def test_valid_limits(self, event_service: EventService, limit: object, expected: int) -> None:
        assert event_service.resolve_limit(limit) == expected

    @pytest.mark.parametrize("limit", [0, -5, "0", "abc", "1.5", 2.5, True, [], ""])
    def test_invalid_limits(self, event_service: EventService, limit: object) -> None:
        with pytest.raises(BadRequestException) as exc_info:
            event_service.resolve_limit(limit)

        assert exc_info.value.code == "INVALID_LIMIT"
        assert exc_info.value.status_code == 400


class TestReplay:
    def test_replay_after_cursor(self, event_service: EventService) -> None:
        first = event_service.publish("company_a", "E1")
        event_service.publish("company_a", "E2")
        event_service.publish("company_a", "E3")

        events = event_service.replay("company_a", since_id=first.id, limit=1)

        assert [e.message for e in events] == ["E2"]

    def test_empty_cursor_means_no_cursor(self, event_service: EventService) -> None:
        event_service.publish("company_a", "E1")

        assert [e.message for e in event_service.replay("company_a", since_id="")] == ["E1"]

    def test_non_string_cursor_rejected(self, event_service: EventService) -> None:
        with pytest.raises(BadRequestException) as exc_info:
            event_service.replay("company_a", since_id=123)

        assert exc_info.value.code == "INVALID_CURSOR"

    def test_default_and_max_limits(self) -> None:
        settings = EventSettings(
            buffer_size=20, replay_default_limit=5, replay_max_limit=8, snapshot_size=3
        )
        service = EventService(EventStore(20), ExplodingSink(), settings)
        for i in range(20):
            service.publish("company_a", f"E{i}")

        assert [e.message for e in service.replay("company_a")] == [f"E{i}" for i in range(15, 20)]
        assert len(service.replay("company_a", limit=100)) == 8


class TestSnapshot:
    def test_snapshot_is_last_n_oldest_first(self) -> None:
        settings = EventSettings(buffer_size=50, snapshot_size=3)
        service = EventService(EventStore(50), ExplodingSink(), settings)
        for i in range(5):
            service.publish("company_a", f"E{i}")

        assert [e.message for e in service.snapshot("company_a")] == ["E2", "E3", "E4"]

    def test_snapshot_of_empty_tenant(self, event_service: EventService) -> None:
        assert event_service.snapshot("company_a") == []
