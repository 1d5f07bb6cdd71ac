"""WebSocket connection manager with per-tenant rooms.

This module provides a connection manager that:
- Tracks joined WebSocket connections per tenant room
- Delivers frames through a bounded per-connection queue drained by a
  single writer task, so a broadcast never waits on a slow socket
- Drops only the offending connection when its queue overflows or a send fails
- Supports heartbeat/ping-pong for connection health. The server pushes
  ``{"type": "ping"}`` every ``WS_HEARTBEAT_INTERVAL`` seconds and only
  client frames count as activity, so a listen-only client must answer each
  ping with ``{"type": "pong"}`` or it is closed (1001) once
  ``WS_CONNECTION_TIMEOUT`` elapses without a frame from it.
- Provides metrics for observability

The manager implements the ``EventSink`` capability: ``broadcast(event)``
enqueues one ``event_created`` frame for every connection of the event's
tenant and returns immediately.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass, field
import logging
import threading
import time
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from docstore_service.features.realtime.schemas import (
    EventCreatedMessage,
    ServerPingMessage,
)
from docstore_service.infra.metrics.prometheus import (
    websocket_connection_duration_seconds,
    websocket_connections_total,
    websocket_messages_sent_total,
    websocket_slow_consumers_dropped_total,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from fastapi import WebSocket

    from docstore_service.core.settings.websocket import WebSocketSettings
    from docstore_service.features.events.schemas import Event

logger = logging.getLogger(__name__)

# Close code used when a connection cannot keep up with its tenant's feed
WS_1013_TRY_AGAIN_LATER = 1013
WS_1001_GOING_AWAY = 1001


@dataclass
class ConnectionInfo:
    """A joined connection; tenant and identity never change after admission."""

    connection_id: str
    websocket: WebSocket
    tenant_id: str
    user_id: str
    username: str
    queue: asyncio.Queue[dict[str, Any]]
    writer_task: asyncio.Task[None] | None = None
    connected_at: float = field(default_factory=time.time)
    last_seen: float = field(default_factory=time.time)

    def enqueue(self, frame: dict[str, Any]) -> bool:
        """Queue a frame for the writer task. Returns False if the queue is full."""
        try:
            self.queue.put_nowait(frame)
        except asyncio.QueueFull:
            return False
        return True


class ConnectionManager:
    """Tracks joined connections by tenant room and fans events out to them.

    Example:
        manager = ConnectionManager(ws_settings)
        await manager.start()

        # In the WebSocket endpoint, after authentication
        conn = manager.join(websocket, tenant_id="company_a", user_id=..., username=...,
                            initial_frames=lambda conn: [snapshot_frame])
        try:
            async for message in websocket.iter_text():
                ...
        finally:
            await manager.disconnect(conn.connection_id)

        # From the ingestion path
        manager.broadcast(event)
    """

    def __init__(self, settings: WebSocketSettings) -> None:
        self._settings = settings

        # connection_id -> ConnectionInfo
        self._connections: dict[str, ConnectionInfo] = {}
        # tenant_id -> set of connection_ids
        self._rooms: dict[str, set[str]] = {}

        self._loop: asyncio.AbstractEventLoop | None = None
        self._loop_thread: int | None = None
        self._running = False
        self._heartbeat_task: asyncio.Task[None] | None = None
        self._background_tasks: set[asyncio.Task[None]] = set()

    async def start(self) -> None:
        """Start the heartbeat task and bind the manager to the running loop."""
        if self._running:
            return

        self._running = True
        self._bind_loop()

        if self._settings.heartbeat_interval > 0:
            self._heartbeat_task = asyncio.create_task(self._heartbeat_loop())
            logger.debug(
                "Heartbeat task started",
                extra={"interval": self._settings.heartbeat_interval},
            )
        logger.info("Connection manager started")

    async def stop(self) -> None:
        """Stop the manager and close all connections."""
        self._running = False

        if self._heartbeat_task:
            self._heartbeat_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._heartbeat_task
            self._heartbeat_task = None

        closed = len(self._connections)
        for connection_id in list(self._connections):
            await self.disconnect(
                connection_id, code=WS_1001_GOING_AWAY, reason="Server shutdown"
            )

        logger.info("Connection manager stopped", extra={"connections_closed": closed})

    def join(
        self,
        websocket: WebSocket,
        *,
        tenant_id: str,
        user_id: str,
        username: str,
        initial_frames: Callable[[ConnectionInfo], Iterable[dict[str, Any]]] | None = None,
    ) -> ConnectionInfo:
        """Admit an authenticated connection into its tenant room.

        Registration and queuing of ``initial_frames`` happen without any
        suspension point in between, so every event appended afterwards is
        delivered after those frames and nothing falls between the snapshot
        and the live stream.

        Raises:
            ConnectionRefusedError: If the connection limit is reached.
        """
        if len(self._connections) >= self._settings.max_connections:
            logger.warning(
                "Connection refused: max connections reached",
                extra={"max": self._settings.max_connections, "tenant_id": tenant_id},
            )
            raise ConnectionRefusedError("Maximum connections reached")

        self._bind_loop()
        conn = ConnectionInfo(
            connection_id=str(uuid4()),
            websocket=websocket,
            tenant_id=tenant_id,
            user_id=user_id,
            username=username,
            queue=asyncio.Queue(maxsize=self._settings.send_queue_size),
        )
        self._connections[conn.connection_id] = conn
        self._rooms.setdefault(tenant_id, set()).add(conn.connection_id)

        if initial_frames is not None:
            for frame in initial_frames(conn):
                conn.enqueue(frame)

        conn.writer_task = asyncio.create_task(self._writer(conn))
        self._update_connection_metrics()

        logger.info(
            "WebSocket joined tenant room",
            extra={
                "connection_id": conn.connection_id,
                "tenant_id": tenant_id,
                "user_id": user_id,
                "room_size": len(self._rooms[tenant_id]),
                "total_connections": len(self._connections),
            },
        )
        return conn

    async def disconnect(
        self,
        connection_id: str,
        *,
        code: int = 1000,
        reason: str | None = None,
    ) -> None:
        """Remove a connection from its room and close it. Idempotent."""
        conn = self._remove(connection_id)
        if conn is None:
            return

        await self._stop_writer(conn)
        with contextlib.suppress(Exception):
            await conn.websocket.close(code=code, reason=reason)

        duration = time.time() - conn.connected_at
        websocket_connection_duration_seconds.observe(duration)
        logger.info(
            "WebSocket disconnected",
            extra={
                "connection_id": connection_id,
                "tenant_id": conn.tenant_id,
                "user_id": conn.user_id,
                "duration_seconds": duration,
                "total_connections": len(self._connections),
            },
        )

    def send(self, connection_id: str, frame: dict[str, Any]) -> bool:
        """Queue a frame for one connection; a full queue drops that connection."""
        conn = self._connections.get(connection_id)
        if conn is None:
            return False
        if conn.enqueue(frame):
            return True
        self._drop_slow_consumer(conn)
        return False

    def broadcast(self, event: Event) -> int:
        """Queue an ``event_created`` frame for every connection in the event's room.

        Safe to call from other threads; delivery is then scheduled on the
        manager's loop. Returns the number of connections the frame was
        queued for. From another thread the count is the room size read at
        call time and is approximate: connections may join, leave or be
        dropped before the scheduled fan-out runs. Use it for metrics only.
        """
        if (
            self._loop is not None
            and self._loop_thread is not None
            and threading.get_ident() != self._loop_thread
        ):
            recipients = self.room_size(event.tenant_id)
            self._loop.call_soon_threadsafe(self._fan_out, event)
            return recipients
        return self._fan_out(event)

    def touch(self, connection_id: str) -> None:
        """Record client activity for the heartbeat timeout."""
        conn = self._connections.get(connection_id)
        if conn is not None:
            conn.last_seen = time.time()

    def get_connection(self, connection_id: str) -> ConnectionInfo | None:
        return self._connections.get(connection_id)

    def room_size(self, tenant_id: str) -> int:
        return len(self._rooms.get(tenant_id, ()))

    def get_room_connections(self, tenant_id: str) -> list[ConnectionInfo]:
        connection_ids = self._rooms.get(tenant_id, set())
        return [self._connections[cid] for cid in connection_ids if cid in self._connections]

    @property
    def connection_count(self) -> int:
        """Total number of joined connections."""
        return len(self._connections)

    @property
    def room_count(self) -> int:
        """Number of tenants with at least one joined connection."""
        return len(self._rooms)

    def stats(self) -> dict[str, int]:
        return {"connections": self.connection_count, "rooms": self.room_count}

    # Private methods

    def _bind_loop(self) -> None:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
            self._loop_thread = threading.get_ident()

    def _fan_out(self, event: Event) -> int:
        connection_ids = self._rooms.get(event.tenant_id)
        if not connection_ids:
            return 0

        frame = EventCreatedMessage(event=event).to_frame()
        count = 0
        for connection_id in list(connection_ids):
            conn = self._connections.get(connection_id)
            if conn is None:
                continue
            if conn.enqueue(frame):
                count += 1
            else:
                self._drop_slow_consumer(conn)
        return count

    def _remove(self, connection_id: str) -> ConnectionInfo | None:
        conn = self._connections.pop(connection_id, None)
        if conn is None:
            return None
        room = self._rooms.get(conn.tenant_id)
        if room is not None:
            room.discard(connection_id)
            if not room:
                del self._rooms[conn.tenant_id]
        self._update_connection_metrics()
        return conn

    def _drop_slow_consumer(self, conn: ConnectionInfo) -> None:
        if self._remove(conn.connection_id) is None:
            return
        websocket_slow_consumers_dropped_total.inc()
        logger.warning(
            "Dropping slow WebSocket consumer",
            extra={
                "connection_id": conn.connection_id,
                "tenant_id": conn.tenant_id,
                "queue_size": conn.queue.maxsize,
            },
        )
        loop = self._loop or asyncio.get_running_loop()
        task = loop.create_task(self._close_dropped(conn))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _close_dropped(self, conn: ConnectionInfo) -> None:
        await self._stop_writer(conn)
        with contextlib.suppress(Exception):
            await conn.websocket.close(code=WS_1013_TRY_AGAIN_LATER, reason="Send queue overflow")

    async def _stop_writer(self, conn: ConnectionInfo) -> None:
        task = conn.writer_task
        if task is None or task is asyncio.current_task() or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _writer(self, conn: ConnectionInfo) -> None:
        """Drain the connection's queue onto the socket, in order."""
        try:
            while True:
                frame = await conn.queue.get()
                await conn.websocket.send_json(frame)
                websocket_messages_sent_total.labels(message_type=frame.get("type", "unknown")).inc()
        except Exception as e:
            logger.warning(
                "Failed to send message to connection",
                extra={"connection_id": conn.connection_id, "tenant_id": conn.tenant_id, "error": str(e)},
            )
            # Connection is likely dead; the writer is the current task so it is not cancelled
            await self.disconnect(conn.connection_id, code=1011)

    async def _heartbeat_loop(self) -> None:
        """Send periodic pings and close connections that stopped answering."""
        ping = ServerPingMessage().to_frame()
        try:
            while self._running:
                await asyncio.sleep(self._settings.heartbeat_interval)

                now = time.time()
                timeout = self._settings.connection_timeout

                for conn_id in list(self._connections):
                    conn = self._connections.get(conn_id)
                    if conn is None:
                        continue

                    if timeout > 0 and (now - conn.last_seen) > timeout:
                        logger.warning(
                            "Connection timed out",
                            extra={"connection_id": conn_id, "tenant_id": conn.tenant_id},
                        )
                        await self.disconnect(conn_id, code=WS_1001_GOING_AWAY, reason="Heartbeat timeout")
                        continue

                    self.send(conn_id, ping)

        except asyncio.CancelledError:
            pass

    def _update_connection_metrics(self) -> None:
        websocket_connections_total.set(len(self._connections))
