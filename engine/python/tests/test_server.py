"""In-process tests for the HTTP and WebSocket API."""

import pytest
from fastapi.testclient import TestClient

from api.protocol import ErrorCode, PROTOCOL_VERSION
from api.server import GameSession, SessionError, app


@pytest.fixture
def client():
    return TestClient(app)


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["service"] == "friendtris-api"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_shapes(client):
    shapes = client.get("/shapes").json()

    assert set(shapes) == {"I", "O", "T", "S", "Z", "J", "L"}
    assert all(len(rotations) == 4 for rotations in shapes.values())

    t_spawn = shapes["T"][0]
    assert t_spawn["kind"] == 2
    assert t_spawn["rows"] == [".#.", "###", "..."]
    assert t_spawn["anchor"] == [1, 1]


def test_ws_hello(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "hello"})
        data = ws.receive_json()
        assert data["type"] == "hello"
        assert data["version"] == PROTOCOL_VERSION
        assert data["server"] == "friendtris-core-py"


def test_ws_step_before_reset(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "step", "action": "LEFT"})
        data = ws.receive_json()
        assert data["type"] == "error"
        assert data["code"] == ErrorCode.GAME_NOT_INITIALIZED


def test_ws_reset_and_step(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "reset", "seed": 42})
        data = ws.receive_json()
        assert data["type"] == "obs"
        assert data["info"] == {"event": "reset", "seed": 42}
        assert data["data"]["episode"]["seed"] == 42
        assert data["data"]["current"]["rot"] == 0

        ws.send_json({"type": "step", "action": "CW"})
        data = ws.receive_json()
        assert data["type"] == "obs"
        assert "rotate" in data["info"]["events"]
        assert data["data"]["current"]["rot"] == 1
        assert not data["done"]


def test_ws_invalid_action(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "reset", "seed": 1})
        ws.receive_json()

        ws.send_json({"type": "step", "action": "HOLD"})
        data = ws.receive_json()
        assert data["type"] == "error"
        assert data["code"] == ErrorCode.INVALID_ACTION


def test_ws_invalid_messages(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_text("not json")
        assert ws.receive_json()["code"] == ErrorCode.INVALID_MESSAGE

        ws.send_json({"type": "teleport"})
        assert ws.receive_json()["code"] == ErrorCode.INVALID_MESSAGE

        ws.send_json({"type": "step"})  # missing action
        assert ws.receive_json()["code"] == ErrorCode.INVALID_MESSAGE

        # Connection survives bad input
        ws.send_json({"type": "hello"})
        assert ws.receive_json()["type"] == "hello"


def test_ws_sabotage_requires_multiplayer(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "reset", "seed": 1})
        ws.receive_json()

        ws.send_json({"type": "sabotage", "action": "UP"})
        data = ws.receive_json()
        assert data["code"] == ErrorCode.SABOTAGE_DISABLED


def test_ws_sabotage(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "reset", "seed": 1, "multiplayer": True})
        assert ws.receive_json()["data"]["sabotage"]["enabled"]

        ws.send_json({"type": "sabotage", "action": "UP"})
        data = ws.receive_json()
        assert data["data"]["sabotage"]["piece_mode"] == 0
        assert data["data"]["next"] == {"kind": 0, "type": "I"}

        ws.send_json({"type": "sabotage", "action": "WIGGLE"})
        assert ws.receive_json()["code"] == ErrorCode.INVALID_ACTION


@pytest.mark.parametrize(
    "message",
    [
        {"type": "step", "action": ["CW"]},
        {"type": "sabotage", "action": 3},
        {"type": "reset", "seed": [1]},
        {"type": "reset", "seed": True},
        {"type": "reset", "multiplayer": "yes"},
    ],
)
def test_ws_bad_field_types_keep_session_alive(client, message):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "reset", "seed": 1, "multiplayer": True})
        ws.receive_json()

        ws.send_json(message)
        data = ws.receive_json()
        assert data["type"] == "error"
        assert data["code"] == ErrorCode.INVALID_MESSAGE

        ws.send_json({"type": "hello"})
        assert ws.receive_json()["type"] == "hello", "Session should survive bad input"


def test_session_reports_game_over():
    session = GameSession()
    session.reset(seed=1, multiplayer=True)
    session.env.done = True

    with pytest.raises(SessionError) as exc_info:
        session.step("NOOP")
    assert exc_info.value.code == ErrorCode.GAME_OVER

    with pytest.raises(SessionError) as exc_info:
        session.sabotage("UP")
    assert exc_info.value.code == ErrorCode.GAME_OVER

    session.reset(seed=2)
    assert session.step("NOOP").type == "obs"


def test_session_rejects_unhashable_action():
    session = GameSession()
    session.reset(seed=1)

    with pytest.raises(ValueError):
        session.step(["CW"])
