"""WebSocket router for the real-time event feed.

Endpoints:
- WS {WS_PATH} (default /ws/events): authenticated, tenant-scoped event stream
- GET {API_PREFIX}/ws/stats: connection statistics for the caller's tenant

Protocol:
    Client → Server:
    - {"type": "auth", "tenantId": "...", "token": "..."}   (first frame, required)
    - {"type": "replay", "request_id": "...", "sinceId": "...", "limit": 50}
    - {"type": "post_event", "request_id": "...", "message": "..."}
    - {"type": "ping"} | {"type": "pong"}

    Server → Client:
    - {"type": "connected", "connection_id", "tenant_id", "user_id", "username"}
    - {"type": "snapshot", "events": [...]}
    - {"type": "event_created", "event": {...}}
    - {"type": "replay_result", "request_id", "events": [...]}
    - {"type": "post_event_result", "request_id", "event": {...}}
    - {"type": "error", "request_id"?, "code", "message"}
    - {"type": "ping"} | {"type": "pong"}

Liveness:
    The server sends {"type": "ping"} every WS_HEARTBEAT_INTERVAL seconds.
    Only frames from the client count as activity, so clients must answer
    each ping with {"type": "pong"}. A connection that stays silent longer
    than WS_CONNECTION_TIMEOUT is closed with 1001.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from docstore_service.core.dependencies import (
    ConnectionManagerDep,
    CurrentUserDep,
    EventStoreDep,
    TenantIdDep,
)
from docstore_service.core.exceptions import AppException
from docstore_service.core.settings import get_websocket_settings
from docstore_service.features.realtime.authenticator import (
    AuthenticatedIdentity,
    ConnectionAuthenticator,
    ConnectionRejected,
)
from docstore_service.features.realtime.schemas import (
    AuthMessage,
    ClientMessageType,
    ConnectedMessage,
    ConnectionStats,
    ErrorCode,
    ErrorMessage,
    PostEventResultMessage,
    ReplayResultMessage,
    ServerPongMessage,
    SnapshotMessage,
)
from docstore_service.infra.logging import set_log_context
from docstore_service.infra.metrics.prometheus import websocket_messages_received_total

if TYPE_CHECKING:
    from docstore_service.core.settings import WebSocketSettings
    from docstore_service.features.events.service import EventService
    from docstore_service.infra.realtime.manager import ConnectionInfo, ConnectionManager

logger = logging.getLogger(__name__)
stats_router = APIRouter(prefix="/ws", tags=["realtime"])

_KNOWN_TYPES = {t.value for t in ClientMessageType}


class FrameTooLarge(Exception):
    """An incoming frame exceeded the configured maximum size."""


async def events_websocket(websocket: WebSocket) -> None:
    """Real-time event stream for one tenant.

    Registered per application at ``WS_PATH`` by ``setup_routers``.

    The connection is accepted, then must send an ``auth`` frame within
    ``WS_AUTH_TIMEOUT`` seconds. Rejected connections get an ``error`` frame
    and are closed; they never join a room. Admitted connections receive
    ``connected`` and ``snapshot`` and then every ``event_created`` of their
    tenant in append order.
    """
    state = websocket.app.state
    service: EventService | None = getattr(state, "event_service", None)
    manager: ConnectionManager | None = getattr(state, "connection_manager", None)
    authenticator: ConnectionAuthenticator | None = getattr(state, "authenticator", None)

    settings = getattr(state, "settings", None)
    ws = settings.websocket if settings is not None else get_websocket_settings()

    if not ws.enabled or service is None or manager is None or authenticator is None:
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER, reason="Server not ready")
        return

    await websocket.accept()

    identity = await _authenticate(websocket, authenticator, ws)
    if identity is None:
        return

    try:
        conn = manager.join(
            websocket,
            tenant_id=identity.tenant_id,
            user_id=identity.user_id,
            username=identity.username,
            initial_frames=lambda c: [
                ConnectedMessage(
                    connection_id=c.connection_id,
                    tenant_id=c.tenant_id,
                    user_id=c.user_id,
                    username=c.username,
                ).to_frame(),
                SnapshotMessage(events=service.snapshot(c.tenant_id)).to_frame(),
            ],
        )
    except ConnectionRefusedError as e:
        logger.warning("WebSocket connection refused", extra={"reason": str(e)})
        await _close_with_error(
            websocket,
            ErrorCode.SERVER_BUSY,
            "Maximum connections reached",
            close_code=status.WS_1013_TRY_AGAIN_LATER,
        )
        return

    set_log_context(
        connection_id=conn.connection_id,
        tenant_id=conn.tenant_id,
        user_id=conn.user_id,
    )

    try:
        await _handle_messages(websocket, conn, manager, service, ws.max_message_size)
    except WebSocketDisconnect:
        logger.debug("WebSocket client disconnected normally")
    except Exception as e:
        logger.exception(
            "WebSocket error",
            extra={"tenant_id": conn.tenant_id, "operation": "receive", "error": str(e)},
        )
    finally:
        await manager.disconnect(conn.connection_id)


async def _receive_frame(websocket: WebSocket, max_size: int) -> str:
    """Receive one text frame, decoding binary frames as UTF-8.

    Raises:
        WebSocketDisconnect: When the client goes away.
        FrameTooLarge: When the frame exceeds ``WS_MAX_MESSAGE_SIZE`` bytes.
    """
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(code=message.get("code", 1000), reason=message.get("reason"))

    text = message.get("text")
    if text is None:
        data = message.get("bytes") or b""
        if len(data) > max_size:
            raise FrameTooLarge
        return data.decode("utf-8", errors="replace")

    if len(text.encode("utf-8")) > max_size:
        raise FrameTooLarge
    return text


async def _authenticate(
    websocket: WebSocket,
    authenticator: ConnectionAuthenticator,
    ws: WebSocketSettings,
) -> AuthenticatedIdentity | None:
    """Run the auth handshake; on failure report the reason and close."""
    try:
        raw = await asyncio.wait_for(
            _receive_frame(websocket, ws.max_message_size), timeout=ws.auth_timeout
        )
    except TimeoutError:
        await _close_with_error(websocket, ErrorCode.AUTH_TIMEOUT, "Authentication timed out")
        return None
    except WebSocketDisconnect:
        return None
    except FrameTooLarge:
        await _close_with_error(
            websocket,
            ErrorCode.PAYLOAD_TOO_LARGE,
            "Frame exceeds maximum size",
            close_code=status.WS_1009_MESSAGE_TOO_BIG,
        )
        return None

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        await _close_with_error(websocket, ErrorCode.INVALID_JSON, "Invalid JSON message")
        return None

    if not isinstance(data, dict) or data.get("type") != ClientMessageType.AUTH.value:
        await _close_with_error(
            websocket, ErrorCode.AUTH_REQUIRED, "First message must be an auth message"
        )
        return None

    auth = AuthMessage.model_validate(data)
    try:
        return await authenticator.authenticate(auth.tenant_id, auth.token)
    except ConnectionRejected as e:
        close_code = (
            status.WS_1011_INTERNAL_ERROR
            if e.code is ErrorCode.INTERNAL_ERROR
            else status.WS_1008_POLICY_VIOLATION
        )
        await _close_with_error(websocket, e.code, e.message, close_code=close_code)
        return None


async def _close_with_error(
    websocket: WebSocket,
    code: ErrorCode,
    message: str,
    *,
    close_code: int = status.WS_1008_POLICY_VIOLATION,
) -> None:
    frame = ErrorMessage(code=code.value, message=message).to_frame()
    with contextlib.suppress(Exception):
        await websocket.send_json(frame)
    with contextlib.suppress(Exception):
        await websocket.close(code=close_code, reason=code.value)


def _error(code: str, message: str, request_id: str | None = None) -> dict[str, Any]:
    return ErrorMessage(code=code, message=message, request_id=request_id).to_frame()


async def _handle_messages(
    websocket: WebSocket,
    conn: ConnectionInfo,
    manager: ConnectionManager,
    service: EventService,
    max_size: int,
) -> None:
    """Handle incoming WebSocket messages until the client disconnects.

    Responses go through the connection's queue so they are serialized with
    broadcast pushes. The tenant always comes from the bound connection.
    """
    connection_id = conn.connection_id

    while True:
        try:
            raw = await _receive_frame(websocket, max_size)
        except FrameTooLarge:
            manager.touch(connection_id)
            manager.send(
                connection_id,
                _error(ErrorCode.PAYLOAD_TOO_LARGE.value, "Frame exceeds maximum size"),
            )
            continue

        manager.touch(connection_id)

        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            manager.send(connection_id, _error(ErrorCode.INVALID_JSON.value, "Invalid JSON message"))
            continue

        if not isinstance(message, dict):
            manager.send(
                connection_id,
                _error(ErrorCode.INVALID_JSON.value, "Message must be a JSON object"),
            )
            continue

        msg_type = message.get("type")
        request_id = message.get("request_id")
        if not isinstance(request_id, str):
            request_id = None
        websocket_messages_received_total.labels(
            message_type=msg_type if msg_type in _KNOWN_TYPES else "unknown"
        ).inc()

        try:
            if msg_type == ClientMessageType.PING:
                manager.send(connection_id, ServerPongMessage().to_frame())

            elif msg_type == ClientMessageType.PONG:
                pass

            elif msg_type == ClientMessageType.REPLAY:
                events = service.replay(
                    conn.tenant_id,
                    since_id=message.get("sinceId"),
                    limit=message.get("limit"),
                )
                manager.send(
                    connection_id,
                    ReplayResultMessage(request_id=request_id, events=events).to_frame(),
                )

            elif msg_type == ClientMessageType.POST_EVENT:
                event = service.publish(
                    conn.tenant_id,
                    message.get("message"),
                    author_id=conn.user_id,
                    source="websocket",
                )
                manager.send(
                    connection_id,
                    PostEventResultMessage(request_id=request_id, event=event).to_frame(),
                )

            else:
                manager.send(
                    connection_id,
                    _error(
                        ErrorCode.UNKNOWN_TYPE.value,
                        f"Unknown message type: {msg_type}",
                        request_id,
                    ),
                )

        except AppException as e:
            manager.send(connection_id, _error(e.code, e.detail, request_id))

        except Exception:
            logger.exception(
                "Error handling WebSocket message",
                extra={"tenant_id": conn.tenant_id, "operation": msg_type},
            )
            manager.send(
                connection_id,
                _error(ErrorCode.INTERNAL_ERROR.value, "Internal error processing message", request_id),
            )


@stats_router.get(
    "/stats",
    response_model=ConnectionStats,
    summary="Get real-time statistics for the caller's tenant",
)
async def get_stats(
    tenant_id: TenantIdDep,
    user: CurrentUserDep,
    manager: ConnectionManagerDep,
    store: EventStoreDep,
) -> ConnectionStats:
    return ConnectionStats(
        tenant_id=tenant_id,
        tenant_connections=manager.room_size(tenant_id),
        buffered_events=store.count(tenant_id),
    )
