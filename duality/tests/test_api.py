"""
Tests for the HTTP API.

Validates that:
- Endpoints answer with their documented schemas
- Tool calls go through the service and auto-provision sessions
- Errors carry structured error codes
- The OpenAPI document generates
"""

import pytest
from fastapi.testclient import TestClient
from fastapi.openapi.utils import get_openapi

from ..api.app import create_app
from ..api.service import ToolService
from ..api.schemas import ErrorCode, ToolCallResponse
from ..session import SessionManager


@pytest.fixture
def client():
    app = create_app(ToolService(session_manager=SessionManager()))
    return TestClient(app)


class TestSystemEndpoints:
    """Tests for health and tool listing."""

    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "duality-engine"
        assert data["active_sessions"] == 0

    def test_list_tools(self, client):
        data = client.get("/api/v1/tools").json()
        names = {tool["name"] for tool in data["tools"]}

        assert data["count"] == 16
        assert "roll_action" in names
        assert all(tool["parameters"] for tool in data["tools"])

    def test_openapi_generates(self, client):
        app = client.app
        schema = get_openapi(title=app.title, version=app.version, routes=app.routes)
        assert "/api/v1/sessions/{session_id}/tools/{tool_name}" in schema["paths"]


class TestSessionEndpoints:
    """Tests for session lifecycle."""

    def test_create_and_list(self, client):
        response = client.post("/api/v1/sessions", json={"session_id": "abc", "seed": 3})
        assert response.status_code == 200
        assert response.json()["session_id"] == "abc"
        assert response.json()["seed"] == 3

        data = client.get("/api/v1/sessions").json()
        assert data == {"sessions": ["abc"], "count": 1}

    def test_create_without_body(self, client):
        response = client.post("/api/v1/sessions")
        assert response.status_code == 200
        assert response.json()["session_id"]

    def test_end_session(self, client):
        client.post("/api/v1/sessions", json={"session_id": "abc"})

        assert client.delete("/api/v1/sessions/abc").json()["success"] is True
        assert client.delete("/api/v1/sessions/abc").json()["success"] is False

    def test_state_of_unknown_session_is_default(self, client):
        data = client.get("/api/v1/sessions/new/state").json()

        assert data["session_id"] == "new"
        assert data["state"]["player"]["hp"] == {"current": 10, "max": 10}

    def test_summary(self, client):
        data = client.get("/api/v1/sessions/new/summary").json()
        assert data["summary"].startswith("## PLAYER")


class TestToolEndpoint:
    """Tests for tool invocation over HTTP."""

    def test_call_tool(self, client):
        response = client.post(
            "/api/v1/sessions/s1/tools/update_player",
            json={"hp": 6, "addCondition": "Vulnerable"},
        )
        assert response.status_code == 200
        data = response.json()

        assert data["name"] == "update_player"
        assert data["stateChanged"] is True
        assert data["gameState"]["player"]["hp"]["current"] == 6
        assert data["gameState"]["player"]["conditions"] == ["Vulnerable"]

    def test_call_without_body(self, client):
        response = client.post("/api/v1/sessions/s1/tools/get_state")
        assert response.status_code == 200
        assert response.json()["stateChanged"] is False

    def test_unknown_tool(self, client):
        response = client.post("/api/v1/sessions/s1/tools/cast_fireball", json={})
        assert response.status_code == 404
        assert response.json()["error_code"] == ErrorCode.UNKNOWN_TOOL.value

    def test_invalid_arguments(self, client):
        response = client.post(
            "/api/v1/sessions/s1/tools/spend_fear", json={"amount": -1, "purpose": "spotlight"},
        )
        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["details"]["tool"] == "spend_fear"

    def test_engine_rejection(self, client):
        response = client.post(
            "/api/v1/sessions/s1/tools/roll_damage", json={"weaponDice": "sword"},
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_failed_call_leaves_state(self, client):
        client.post("/api/v1/sessions/s1/tools/update_player", json={"hp": 6})
        before = client.get("/api/v1/sessions/s1/state").json()
        client.post("/api/v1/sessions/s1/tools/rest", json={"restType": "nap"})
        assert client.get("/api/v1/sessions/s1/state").json() == before


class TestSchemas:
    """Tests for response models."""

    def test_tool_call_response_aliases(self):
        response = ToolCallResponse(name="rest", stateChanged=True, gameState={"a": 1})
        data = response.model_dump(by_alias=True)

        assert data["stateChanged"] is True
        assert data["gameState"] == {"a": 1}
        assert response.state_changed is True
