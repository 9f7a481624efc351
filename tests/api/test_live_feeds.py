"""WebSocket live feeds (sync TestClient: it runs the lifespan and the socket on one portal)."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from apa.core.config import get_settings
from apa.infrastructure.firebase.collections import COLLECTION_USERS
from tests.conftest import ADMIN_UID, USER_UID, bearer


@pytest.fixture
def live_client() -> Iterator[TestClient]:
    get_settings.cache_clear()
    from apa.main import create_app

    app = create_app()
    with TestClient(app) as tc:
        users = app.state.store.repo(COLLECTION_USERS)
        tc.portal.call(users.set, ADMIN_UID, {"uid": ADMIN_UID, "role": "admin", "email": "admin@example.org"})
        tc.portal.call(
            users.set,
            USER_UID,
            {"uid": USER_UID, "role": "user", "email": "ana@example.org", "displayName": "Ana", "phone": "11987654321"},
        )
        yield tc


def _token(uid: str) -> str:
    return bearer(uid)["Authorization"].removeprefix("Bearer ")


def _next_snapshot(ws, predicate) -> dict:
    while True:
        message = ws.receive_json()
        if message["type"] == "snapshot" and predicate(message):
            return message


def test_public_feed_follows_writes(live_client: TestClient) -> None:
    with live_client.websocket_connect("/api/v1/live/partners") as ws:
        first = ws.receive_json()
        assert first["type"] == "snapshot"
        assert first["state"] == "empty"
        assert first["records"] == []

        response = live_client.post(
            "/api/v1/partners",
            json={"name": "Clínica A", "logo": "https://img.example.org/a.png"},
            headers=bearer(ADMIN_UID),
        )
        assert response.status_code == 201

        update = _next_snapshot(ws, lambda m: m["state"] == "ready")
        assert [r["name"] for r in update["records"]] == ["Clínica A"]


@pytest.mark.parametrize(
    "path",
    ["/api/v1/live/unknown", "/api/v1/live/admin/rescues", "/api/v1/live/me/leads/volunteer"],
)
def test_feed_rejections_close_with_policy_violation(live_client: TestClient, path: str) -> None:
    with live_client.websocket_connect(path) as ws:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_json()
    assert exc_info.value.code == 1008


def test_admin_feed_rejects_regular_user(live_client: TestClient) -> None:
    with live_client.websocket_connect(f"/api/v1/live/admin/rescues?token={_token(USER_UID)}") as ws:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_json()
    assert exc_info.value.code == 1008


def test_submit_on_current_lead_feed(live_client: TestClient) -> None:
    with live_client.websocket_connect(f"/api/v1/live/me/leads/volunteer?token={_token(USER_UID)}") as ws:
        first = ws.receive_json()
        assert first["state"] == "empty"

        ws.send_json({"type": "submit", "payload": {"area": "eventos"}})
        confirmed = _next_snapshot(ws, lambda m: not m["optimistic"] and m["records"])
        lead = confirmed["records"][0]
        assert lead["status"] == "pending"
        assert lead["userId"] == USER_UID

        ws.send_json({"type": "submit", "payload": {"area": "eventos"}})
        error = ws.receive_json()
        assert error["type"] == "error"
        assert error["error"] == "DUPLICATE_ACTIVE_LEAD"


def test_disabled_feature_closes_feed(live_client: TestClient) -> None:
    live_client.put("/api/v1/flags", json={"partners": False}, headers=bearer(ADMIN_UID))
    with live_client.websocket_connect("/api/v1/live/partners") as ws:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_json()
    assert exc_info.value.code == 1000


def test_current_lead_feed_closes_when_section_disabled(live_client: TestClient) -> None:
    live_client.put("/api/v1/flags", json={"volunteers": False}, headers=bearer(ADMIN_UID))
    with live_client.websocket_connect(f"/api/v1/live/me/leads/foster?token={_token(USER_UID)}") as ws:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_json()
    assert exc_info.value.code == 1000


def test_submit_refused_after_section_disabled(live_client: TestClient) -> None:
    with live_client.websocket_connect(f"/api/v1/live/me/leads/volunteer?token={_token(USER_UID)}") as ws:
        assert ws.receive_json()["state"] == "empty"
        live_client.put("/api/v1/flags", json={"volunteers": False}, headers=bearer(ADMIN_UID))

        ws.send_json({"type": "submit", "payload": {"area": "eventos"}})
        message = ws.receive_json()
        while message["type"] == "snapshot":
            message = ws.receive_json()
        assert message["type"] == "error"
        assert message["error"] == "FEATURE_DISABLED"

    queue = live_client.get("/api/v1/leads/volunteer", headers=bearer(ADMIN_UID))
    assert queue.json() == []
