"""End-to-end tests for the real-time event protocol over WebSocket."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from starlette.websockets import WebSocketDisconnect

from docstore_service.core.settings import EventSettings, WebSocketSettings
from tests.conftest import ALICE_TOKEN, BOB_TOKEN, COMPANY_A_ADMIN_TOKEN, tenant_headers

if TYPE_CHECKING:
    from fastapi.testclient import TestClient
    from starlette.testclient import WebSocketTestSession

pytestmark = pytest.mark.integration

WS_PATH = "/ws/events"
A_HEADERS = tenant_headers("company_a", ALICE_TOKEN)


def authenticate(ws: WebSocketTestSession, tenant_id: Any, token: Any) -> dict[str, Any]:
    ws.send_json({"type": "auth", "tenantId": tenant_id, "token": token})
    return ws.receive_json()


def connect(ws: WebSocketTestSession, tenant_id: str, token: str) -> list[dict[str, Any]]:
    """Authenticate and return the snapshot events."""
    connected = authenticate(ws, tenant_id, token)
    assert connected["type"] == "connected"
    snapshot = ws.receive_json()
    assert snapshot["type"] == "snapshot"
    return snapshot["events"]


def post(test_client: TestClient, message: str, headers: dict[str, str] = A_HEADERS) -> dict:
    response = test_client.post("/api/events", json={"message": message}, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestHandshake:
    def test_connected_then_snapshot(self, test_client: TestClient) -> None:
        post(test_client, "before connect")

        with test_client.websocket_connect(WS_PATH) as ws:
            connected = authenticate(ws, "company_a", ALICE_TOKEN)
            snapshot = ws.receive_json()

        assert connected["tenant_id"] == "company_a"
        assert connected["username"] == "alice"
        assert connected["connection_id"]
        assert [e["message"] for e in snapshot["events"]] == ["before connect"]

    def test_invalid_token_is_rejected_without_snapshot(self, test_client: TestClient) -> None:
        post(test_client, "secret of company_a")

        with test_client.websocket_connect(WS_PATH) as ws:
            error = authenticate(ws, "company_a", "bogus")
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()

        assert error == {"type": "error", "code": "INVALID_TOKEN", "message": error["message"]}
        assert exc_info.value.code == 1008

    @pytest.mark.parametrize(
        ("tenant_id", "token", "code"),
        [
            ("company_z", ALICE_TOKEN, "INVALID_TENANT"),
            ("company_c", "company-c-admin-token", "INVALID_TENANT"),
            ("company_a", BOB_TOKEN, "INVALID_TOKEN"),
            ("company_a", None, "AUTH_REQUIRED"),
            (None, ALICE_TOKEN, "AUTH_REQUIRED"),
        ],
    )
    def test_rejection_codes(
        self, test_client: TestClient, tenant_id: Any, token: Any, code: str
    ) -> None:
        with test_client.websocket_connect(WS_PATH) as ws:
            error = authenticate(ws, tenant_id, token)

        assert error["type"] == "error"
        assert error["code"] == code

    def test_first_frame_must_be_auth(self, test_client: TestClient) -> None:
        with test_client.websocket_connect(WS_PATH) as ws:
            ws.send_json({"type": "replay"})
            error = ws.receive_json()

        assert error["code"] == "AUTH_REQUIRED"

    def test_invalid_json_before_auth(self, test_client: TestClient) -> None:
        with test_client.websocket_connect(WS_PATH) as ws:
            ws.send_text("{not json")
            error = ws.receive_json()

        assert error["code"] == "INVALID_JSON"


class TestLiveDelivery:
    def test_http_post_is_pushed_to_tenant_connections(self, test_client: TestClient) -> None:
        with (
            test_client.websocket_connect(WS_PATH) as a1,
            test_client.websocket_connect(WS_PATH) as a2,
            test_client.websocket_connect(WS_PATH) as b1,
        ):
            connect(a1, "company_a", ALICE_TOKEN)
            connect(a2, "company_a", COMPANY_A_ADMIN_TOKEN)
            connect(b1, "company_b", BOB_TOKEN)

            created = post(test_client, "hello A")
            post(test_client, "hello B", headers=tenant_headers("company_b", BOB_TOKEN))

            pushed_1 = a1.receive_json()
            pushed_2 = a2.receive_json()
            pushed_b = b1.receive_json()

        assert pushed_1 == {"type": "event_created", "event": created}
        assert pushed_2 == {"type": "event_created", "event": created}
        assert pushed_b["event"]["message"] == "hello B"

    def test_post_event_over_socket(self, test_client: TestClient) -> None:
        with test_client.websocket_connect(WS_PATH) as ws:
            connect(ws, "company_a", ALICE_TOKEN)

            ws.send_json({"type": "post_event", "request_id": "r1", "message": " hi "})
            frames = [ws.receive_json(), ws.receive_json()]

        by_type = {f["type"]: f for f in frames}
        result = by_type["post_event_result"]
        assert result["request_id"] == "r1"
        assert result["event"]["message"] == "hi"
        assert result["event"]["tenant_id"] == "company_a"
        assert by_type["event_created"]["event"] == result["event"]

        listed = test_client.get("/api/events", headers=A_HEADERS).json()
        assert listed == [result["event"]]

    def test_post_event_validation_error(self, test_client: TestClient) -> None:
        with test_client.websocket_connect(WS_PATH) as ws:
            connect(ws, "company_a", ALICE_TOKEN)

            ws.send_json({"type": "post_event", "request_id": "r2", "message": "   "})
            error = ws.receive_json()

        assert error == {
            "type": "error",
            "request_id": "r2",
            "code": "MESSAGE_EMPTY",
            "message": error["message"],
        }


class TestReplay:
    def test_replay_after_cursor(self, test_client: TestClient) -> None:
        first = post(test_client, "E1")
        post(test_client, "E2")
        post(test_client, "E3")

        with test_client.websocket_connect(WS_PATH) as ws:
            connect(ws, "company_a", ALICE_TOKEN)
            ws.send_json({"type": "replay", "request_id": "r1", "sinceId": first["id"], "limit": 1})
            result = ws.receive_json()

        assert result["type"] == "replay_result"
        assert result["request_id"] == "r1"
        assert [e["message"] for e in result["events"]] == ["E2"]

    def test_replay_invalid_limit(self, test_client: TestClient) -> None:
        with test_client.websocket_connect(WS_PATH) as ws:
            connect(ws, "company_a", ALICE_TOKEN)
            ws.send_json({"type": "replay", "limit": 0})
            error = ws.receive_json()

        assert error["code"] == "INVALID_LIMIT"

    def test_replay_is_tenant_bound(self, test_client: TestClient) -> None:
        post(test_client, "only A")

        with test_client.websocket_connect(WS_PATH) as ws:
            connect(ws, "company_b", BOB_TOKEN)
            ws.send_json({"type": "replay", "tenantId": "company_a"})
            result = ws.receive_json()

        assert result["events"] == []


class TestProtocolErrors:
    def test_ping_pong(self, test_client: TestClient) -> None:
        with test_client.websocket_connect(WS_PATH) as ws:
            connect(ws, "company_a", ALICE_TOKEN)
            ws.send_json({"type": "ping"})

            assert ws.receive_json() == {"type": "pong"}

    def test_unknown_type_keeps_connection_open(self, test_client: TestClient) -> None:
        with test_client.websocket_connect(WS_PATH) as ws:
            connect(ws, "company_a", ALICE_TOKEN)
            ws.send_json({"type": "subscribe", "request_id": "x"})
            error = ws.receive_json()
            ws.send_text("[1, 2]")
            not_object = ws.receive_json()
            ws.send_json({"type": "ping"})
            pong = ws.receive_json()

        assert error["code"] == "UNKNOWN_TYPE"
        assert error["request_id"] == "x"
        assert not_object["code"] == "INVALID_JSON"
        assert pong == {"type": "pong"}


class TestBufferScenario:
    @pytest.fixture
    def event_settings(self) -> EventSettings:
        return EventSettings(buffer_size=3, snapshot_size=10)

    def test_snapshot_after_eviction(self, test_client: TestClient) -> None:
        """With a buffer of 3, a client connecting after E1..E5 sees E3..E5."""
        posted = [post(test_client, f"E{i}") for i in range(1, 6)]

        with test_client.websocket_connect(WS_PATH) as ws:
            snapshot = connect(ws, "company_a", ALICE_TOKEN)
            ws.send_json({"type": "replay", "sinceId": posted[0]["id"]})
            evicted = ws.receive_json()

        assert [e["message"] for e in snapshot] == ["E3", "E4", "E5"]
        assert evicted["events"] == []


class TestConfiguredPath:
    @pytest.fixture
    def websocket_settings(self) -> WebSocketSettings:
        return WebSocketSettings(
            path="/custom/ws", heartbeat_interval=0, connection_timeout=0, send_queue_size=100
        )

    def test_endpoint_is_served_at_configured_path(self, test_client: TestClient) -> None:
        post(test_client, "on custom path")

        with test_client.websocket_connect("/custom/ws") as ws:
            snapshot = connect(ws, "company_a", ALICE_TOKEN)

        assert [e["message"] for e in snapshot] == ["on custom path"]

    def test_default_path_is_not_mounted(self, test_client: TestClient) -> None:
        with pytest.raises(WebSocketDisconnect), test_client.websocket_connect(WS_PATH) as ws:
            ws.receive_json()
