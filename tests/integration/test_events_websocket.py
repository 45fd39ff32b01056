"""Integration tests for the project event WebSocket."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from dochub.api.main import app


@pytest.fixture
def test_client(sync_db_tables):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def project_id(test_client) -> str:
    response = test_client.post("/api/projects", json={"name": "Handbook", "id": "proj-ws"})
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.integration
class TestProjectEventsWebSocket:
    """Tests for /ws/projects/{id}."""

    def test_receives_lock_events(self, test_client, project_id):
        with test_client.websocket_connect(f"/ws/projects/{project_id}") as ws:
            assert ws.receive_json() == {"type": "subscribed", "projectId": project_id}

            test_client.post(f"/api/projects/{project_id}/lock", json={"lockedBy": "alice"})
            acquired = ws.receive_json()

            test_client.delete(f"/api/projects/{project_id}/lock")
            released = ws.receive_json()

        assert acquired["type"] == "lock:acquired"
        assert acquired["lockedBy"] == "alice"
        assert released == {"type": "lock:released", "projectId": project_id}

    def test_receives_document_events(self, test_client, project_id):
        with test_client.websocket_connect(f"/ws/projects/{project_id}") as ws:
            ws.receive_json()

            test_client.put(f"/api/projects/{project_id}/docs/intro.md", json={"content": "hi"})
            event = ws.receive_json()

        assert event["type"] == "doc:updated"
        assert event["fileName"] == "intro.md"

    def test_unknown_project_closed(self, test_client):
        with test_client.websocket_connect("/ws/projects/missing") as ws:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()

        assert exc_info.value.code == 4404

    def test_api_key_required_when_configured(self, test_client, project_id):
        with patch("dochub.api.middleware.auth.settings", MagicMock(api_key="s3cret")):
            with test_client.websocket_connect(f"/ws/projects/{project_id}") as ws:
                with pytest.raises(WebSocketDisconnect) as exc_info:
                    ws.receive_json()
            assert exc_info.value.code == 4401

            with test_client.websocket_connect(f"/ws/projects/{project_id}?apiKey=s3cret") as ws:
                assert ws.receive_json()["type"] == "subscribed"
