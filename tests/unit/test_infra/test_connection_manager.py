"""Tests for the per-tenant WebSocket connection manager."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from docstore_service.core.settings import WebSocketSettings
from docstore_service.features.events.schemas import Event
from docstore_service.features.events.sink import EventSink
from docstore_service.infra.realtime import ConnectionManager
from docstore_service.infra.realtime.manager import WS_1013_TRY_AGAIN_LATER


class FakeWebSocket:
    """Records frames sent and close calls."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.closed_with: int | None = None

    async def send_json(self, data: dict[str, Any]) -> None:
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.closed_with = code


class StalledWebSocket(FakeWebSocket):
    """A client that never reads: every send blocks forever."""

    async def send_json(self, data: dict[str, Any]) -> None:
        await asyncio.Event().wait()


class BrokenWebSocket(FakeWebSocket):
    async def send_json(self, data: dict[str, Any]) -> None:
        raise ConnectionResetError("peer gone")


def make_event(tenant_id: str, message: str) -> Event:
    return Event(
        id=f"{tenant_id}-{message}",
        tenant_id=tenant_id,
        message=message,
        timestamp=datetime.now(UTC),
    )


async def settle(rounds: int = 20) -> None:
    """Let writer tasks drain their queues."""
    for _ in range(rounds):
        await asyncio.sleep(0)


async def wait_for(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_poll(), timeout)


def event_frames(ws: FakeWebSocket) -> list[str]:
    return [f["event"]["message"] for f in ws.sent if f["type"] == "event_created"]


@pytest.fixture
async def manager() -> AsyncGenerator[ConnectionManager]:
    settings = WebSocketSettings(
        heartbeat_interval=0, connection_timeout=0, send_queue_size=2, max_connections=5
    )
    mgr = ConnectionManager(settings)
    await mgr.start()
    yield mgr
    await mgr.stop()


def join(manager: ConnectionManager, ws: FakeWebSocket, tenant_id: str, **kwargs: Any):
    return manager.join(ws, tenant_id=tenant_id, user_id=f"{tenant_id}-user", username="u", **kwargs)


@pytest.mark.asyncio
async def test_manager_is_an_event_sink(manager: ConnectionManager) -> None:
    assert isinstance(manager, EventSink)


@pytest.mark.asyncio
async def test_broadcast_reaches_only_the_event_tenant(manager: ConnectionManager) -> None:
    """Two company_a connections receive the event once each; company_b receives nothing."""
    a1, a2, b1 = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
    join(manager, a1, "company_a")
    join(manager, a2, "company_a")
    join(manager, b1, "company_b")

    recipients = manager.broadcast(make_event("company_a", "hello"))
    await wait_for(lambda: len(a1.sent) == 1 and len(a2.sent) == 1)
    await settle()

    assert recipients == 2
    assert event_frames(a1) == ["hello"]
    assert event_frames(a2) == ["hello"]
    assert b1.sent == []


@pytest.mark.asyncio
async def test_initial_frames_precede_live_events(manager: ConnectionManager) -> None:
    ws = FakeWebSocket()
    conn = join(
        manager,
        ws,
        "company_a",
        initial_frames=lambda c: [{"type": "connected", "connection_id": c.connection_id}],
    )
    manager.broadcast(make_event("company_a", "E1"))

    await wait_for(lambda: len(ws.sent) == 2)

    assert ws.sent[0] == {"type": "connected", "connection_id": conn.connection_id}
    assert event_frames(ws) == ["E1"]


@pytest.mark.asyncio
async def test_events_arrive_in_broadcast_order(manager: ConnectionManager) -> None:
    ws = FakeWebSocket()
    join(manager, ws, "company_a")

    for i in range(10):
        manager.broadcast(make_event("company_a", f"E{i}"))
        await settle(3)

    await wait_for(lambda: len(ws.sent) == 10)
    assert event_frames(ws) == [f"E{i}" for i in range(10)]


@pytest.mark.asyncio
async def test_slow_consumer_is_dropped_without_affecting_others(
    manager: ConnectionManager,
) -> None:
    healthy, stalled = FakeWebSocket(), StalledWebSocket()
    join(manager, healthy, "company_a")
    slow_conn = join(manager, stalled, "company_a")

    # Writer of the stalled socket takes E0 and blocks; E1 and E2 fill its queue
    for i in range(4):
        manager.broadcast(make_event("company_a", f"E{i}"))
        await settle()

    await wait_for(lambda: stalled.closed_with is not None)

    assert stalled.closed_with == WS_1013_TRY_AGAIN_LATER
    assert manager.get_connection(slow_conn.connection_id) is None
    assert manager.room_size("company_a") == 1
    assert event_frames(healthy) == ["E0", "E1", "E2", "E3"]


@pytest.mark.asyncio
async def test_send_failure_disconnects_connection(manager: ConnectionManager) -> None:
    ws = BrokenWebSocket()
    conn = join(manager, ws, "company_a")

    manager.broadcast(make_event("company_a", "E1"))
    await wait_for(lambda: manager.get_connection(conn.connection_id) is None)

    assert manager.room_size("company_a") == 0
    assert ws.closed_with == 1011


@pytest.mark.asyncio
async def test_disconnect_is_idempotent(manager: ConnectionManager) -> None:
    ws = FakeWebSocket()
    conn = join(manager, ws, "company_a")

    await manager.disconnect(conn.connection_id)
    await manager.disconnect(conn.connection_id)

    assert manager.connection_count == 0
    assert manager.room_count == 0
    assert manager.broadcast(make_event("company_a", "E1")) == 0


@pytest.mark.asyncio
async def test_max_connections_refused(manager: ConnectionManager) -> None:
    for _ in range(5):
        join(manager, FakeWebSocket(), "company_a")

    with pytest.raises(ConnectionRefusedError):
        join(manager, FakeWebSocket(), "company_a")


@pytest.mark.asyncio
async def test_broadcast_from_worker_thread(manager: ConnectionManager) -> None:
    ws = FakeWebSocket()
    join(manager, ws, "company_a")

    recipients = await asyncio.to_thread(manager.broadcast, make_event("company_a", "threaded"))
    await wait_for(lambda: len(ws.sent) == 1)

    assert recipients == 1
    assert event_frames(ws) == ["threaded"]


@pytest.mark.asyncio
async def test_stop_closes_connections_with_going_away(manager: ConnectionManager) -> None:
    ws = FakeWebSocket()
    join(manager, ws, "company_b")

    await manager.stop()

    assert ws.closed_with == 1001
    assert manager.stats() == {"connections": 0, "rooms": 0}


@pytest.mark.asyncio
async def test_heartbeat_times_out_silent_connections() -> None:
    settings = WebSocketSettings(heartbeat_interval=0.01, connection_timeout=0.05)
    mgr = ConnectionManager(settings)
    await mgr.start()
    try:
        ws = FakeWebSocket()
        conn = join(mgr, ws, "company_a")

        await wait_for(lambda: any(f["type"] == "ping" for f in ws.sent))
        await wait_for(lambda: mgr.get_connection(conn.connection_id) is None)

        assert ws.closed_with == 1001
    finally:
        await mgr.stop()


@pytest.mark.asyncio
async def test_heartbeat_keeps_connections_that_answer_pings() -> None:
    settings = WebSocketSettings(heartbeat_interval=0.01, connection_timeout=0.05)
    mgr = ConnectionManager(settings)
    await mgr.start()
    try:
        responsive, silent = FakeWebSocket(), FakeWebSocket()
        answering = join(mgr, responsive, "company_a")
        quiet = join(mgr, silent, "company_a")

        async def answer_pings() -> None:
            # Stands in for the endpoint touching the connection on each pong
            while True:
                mgr.touch(answering.connection_id)
                await asyncio.sleep(0.005)

        responder = asyncio.create_task(answer_pings())
        try:
            await wait_for(lambda: mgr.get_connection(quiet.connection_id) is None)
        finally:
            responder.cancel()

        assert mgr.get_connection(answering.connection_id) is not None
        assert responsive.closed_with is None
        assert silent.closed_with == 1001
    finally:
        await mgr.stop()


@pytest.mark.asyncio
async def test_broadcast_from_worker_thread_counts_event_room_only(
    manager: ConnectionManager,
) -> None:
    first, second, other = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
    join(manager, first, "company_a")
    join(manager, second, "company_a")
    join(manager, other, "company_b")

    recipients = await asyncio.to_thread(manager.broadcast, make_event("company_a", "approx"))
    await wait_for(lambda: len(first.sent) == 1 and len(second.sent) == 1)

    assert recipients == 2
    assert other.sent == []
