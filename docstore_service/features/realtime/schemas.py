"""Pydantic schemas for the real-time event protocol.

Message Types:
- Client → Server: auth, replay, post_event, ping, pong
- Server → Client: connected, snapshot, event_created, replay_result,
  post_event_result, error, ping, pong

Every frame is a JSON text message with a ``type`` discriminator. Frames
are serialized with ``to_frame()`` so optional members are omitted.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from docstore_service.features.events.schemas import Event


class ClientMessageType(str, Enum):
    """Message types sent from client to server."""

    AUTH = "auth"
    REPLAY = "replay"
    POST_EVENT = "post_event"
    PING = "ping"
    PONG = "pong"


class ServerMessageType(str, Enum):
    """Message types sent from server to client."""

    CONNECTED = "connected"
    SNAPSHOT = "snapshot"
    EVENT_CREATED = "event_created"
    REPLAY_RESULT = "replay_result"
    POST_EVENT_RESULT = "post_event_result"
    ERROR = "error"
    PING = "ping"
    PONG = "pong"


class ErrorCode(str, Enum):
    """Machine-readable error codes carried by ``error`` frames."""

    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_TIMEOUT = "AUTH_TIMEOUT"
    INVALID_TENANT = "INVALID_TENANT"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_JSON = "INVALID_JSON"
    UNKNOWN_TYPE = "UNKNOWN_TYPE"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INVALID_LIMIT = "INVALID_LIMIT"
    INVALID_CURSOR = "INVALID_CURSOR"
    MESSAGE_REQUIRED = "MESSAGE_REQUIRED"
    MESSAGE_EMPTY = "MESSAGE_EMPTY"
    MESSAGE_TOO_LARGE = "MESSAGE_TOO_LARGE"
    SERVER_BUSY = "SERVER_BUSY"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# ──────────────────────────────────────────────────────────────
# Client → Server Messages
# ──────────────────────────────────────────────────────────────


class AuthMessage(BaseModel):
    """First frame of every connection; binds it to one tenant and user.

    Fields are loose so presence checks happen in the authenticator and
    map to ``AUTH_REQUIRED`` rather than a schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: Literal[ClientMessageType.AUTH] = ClientMessageType.AUTH
    tenant_id: Any = Field(default=None, alias="tenantId")
    token: Any = None


# ──────────────────────────────────────────────────────────────
# Server → Client Messages
# ──────────────────────────────────────────────────────────────


class ServerMessage(BaseModel):
    """Base model for messages from server to client."""

    type: ServerMessageType

    def to_frame(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class ConnectedMessage(ServerMessage):
    """Sent once authentication succeeds, before the snapshot."""

    type: Literal[ServerMessageType.CONNECTED] = ServerMessageType.CONNECTED
    connection_id: str = Field(..., description="Unique connection identifier")
    tenant_id: str
    user_id: str
    username: str


class SnapshotMessage(ServerMessage):
    """Most recent events of the tenant, oldest first, sent once after joining."""

    type: Literal[ServerMessageType.SNAPSHOT] = ServerMessageType.SNAPSHOT
    events: list[Event]


class EventCreatedMessage(ServerMessage):
    """Live push of a newly appended event."""

    type: Literal[ServerMessageType.EVENT_CREATED] = ServerMessageType.EVENT_CREATED
    event: Event


class ReplayResultMessage(ServerMessage):
    type: Literal[ServerMessageType.REPLAY_RESULT] = ServerMessageType.REPLAY_RESULT
    request_id: str | None = None
    events: list[Event]


class PostEventResultMessage(ServerMessage):
    type: Literal[ServerMessageType.POST_EVENT_RESULT] = ServerMessageType.POST_EVENT_RESULT
    request_id: str | None = None
    event: Event


class ErrorMessage(ServerMessage):
    """Error message from server."""

    type: Literal[ServerMessageType.ERROR] = ServerMessageType.ERROR
    request_id: str | None = None
    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")


class ServerPingMessage(ServerMessage):
    """Ping message from server (heartbeat)."""

    type: Literal[ServerMessageType.PING] = ServerMessageType.PING


class ServerPongMessage(ServerMessage):
    """Pong response to client ping."""

    type: Literal[ServerMessageType.PONG] = ServerMessageType.PONG


# ──────────────────────────────────────────────────────────────
# REST API Schemas
# ──────────────────────────────────────────────────────────────


class ConnectionStats(BaseModel):
    """Real-time statistics for the caller's tenant."""

    tenant_id: str
    tenant_connections: int = Field(..., ge=0, description="Connections joined to the tenant room")
    buffered_events: int = Field(..., ge=0, description="Events currently held for the tenant")
