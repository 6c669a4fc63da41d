"""
Tests for API layer.

Tests:
- API service methods
- Room and race lifecycle via API
- Error handling
- HTTP endpoints
"""

import pytest
from fastapi.testclient import TestClient

from ..api import app as app_module
from ..api.app import create_app, resolve_default_map
from ..api.schemas import (
    CreateRoomRequest,
    ErrorCode,
    ErrorResponse,
    GameStateResponse,
    JoinRoomRequest,
    PlayerRequest,
    RoomStatus,
    StartGameRequest,
    SubmitActionRequest,
)
from ..api.service import APIService
from ..engine_core import GameMap, identity_shuffle
from ..session import RoomManager


def plan_request(player_id, gear=1, card_indices=(6,)):
    return SubmitActionRequest.model_validate({
        "player_id": player_id,
        "action": {"type": "plan", "gear": gear, "card_indices": list(card_indices)},
    })


@pytest.fixture
def service():
    """Create a fresh API service with deterministic decks."""
    return APIService(room_manager=RoomManager(shuffle=identity_shuffle))


@pytest.fixture
def started(service):
    """A Test-map race between Alice (host) and Bob."""
    room = service.create_room(CreateRoomRequest(name="Friday"))
    alice = service.join_room(room.room_id, JoinRoomRequest(nickname="Alice")).player_id
    bob = service.join_room(room.room_id, JoinRoomRequest(nickname="Bob")).player_id
    service.start_game(room.room_id, StartGameRequest(player_id=alice, map="Test"))
    return room.room_id, alice, bob


class TestAPIService:
    """Tests for APIService."""

    def test_create_room(self, service):
        response = service.create_room(CreateRoomRequest(name="Friday"))

        assert response.room_id
        assert response.name == "Friday"
        assert response.status == RoomStatus.WAITING
        assert response.players == []

    def test_join_room(self, service):
        room = service.create_room(CreateRoomRequest())
        response = service.join_room(room.room_id, JoinRoomRequest(nickname="Alice"))

        assert response.room.host_id == response.player_id
        assert response.room.players[0].nickname == "Alice"

    def test_unknown_room(self, service):
        response = service.join_room("missing", JoinRoomRequest(nickname="Alice"))

        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.ROOM_NOT_FOUND.value

    def test_list_rooms(self, service, started):
        service.create_room(CreateRoomRequest(name="Empty"))
        response = service.list_rooms()

        assert response.count == 1
        assert response.rooms[0].host_nickname == "Alice"
        assert response.rooms[0].status == RoomStatus.PLAYING

    def test_start_game_view(self, service):
        room = service.create_room(CreateRoomRequest())
        alice = service.join_room(room.room_id, JoinRoomRequest(nickname="Alice")).player_id
        bob = service.join_room(room.room_id, JoinRoomRequest(nickname="Bob")).player_id

        response = service.start_game(room.room_id, StartGameRequest(player_id=alice, map="Test"))

        assert isinstance(response, GameStateResponse)
        assert response.map == "Test"
        assert response.current_state == "plan"
        assert response.players[alice].hand[6].value == 4
        assert all(card.value is None for card in response.players[bob].hand)

    def test_start_uses_default_map(self, service):
        room = service.create_room(CreateRoomRequest())
        alice = service.join_room(room.room_id, JoinRoomRequest(nickname="Alice")).player_id
        service.join_room(room.room_id, JoinRoomRequest(nickname="Bob"))

        response = service.start_game(room.room_id, StartGameRequest(player_id=alice))

        assert response.map == GameMap.USA.value
        assert response.track.length == 69

    def test_start_unknown_map(self, service):
        room = service.create_room(CreateRoomRequest())
        alice = service.join_room(room.room_id, JoinRoomRequest(nickname="Alice")).player_id

        response = service.start_game(room.room_id, StartGameRequest(player_id=alice, map="Mars"))

        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.VALIDATION_ERROR.value

    def test_start_twice(self, service, started):
        room_id, _, bob = started
        response = service.start_game(room_id, StartGameRequest(player_id=bob))
        assert response.error_code == "GAME_ALREADY_STARTED"

    def test_submit_action(self, service, started):
        room_id, alice, bob = started
        response = service.submit_action(room_id, plan_request(alice))

        assert response.success
        assert response.state.pending_players == {alice: False, bob: True}
        assert response.changes == ["Alice played plan"]

    def test_rejected_action(self, service, started):
        room_id, alice, _ = started
        response = service.submit_action(room_id, plan_request(alice, gear=2))

        assert isinstance(response, ErrorResponse)
        assert response.error_code == "WRONG_CARD_COUNT"

        state = service.get_game_state(room_id, alice)
        assert state.pending_players[alice] is True

    def test_state_before_start(self, service):
        room = service.create_room(CreateRoomRequest())
        alice = service.join_room(room.room_id, JoinRoomRequest(nickname="Alice")).player_id

        response = service.get_game_state(room.room_id, alice)
        assert response.error_code == "GAME_NOT_STARTED"

    def test_quit_game(self, service, started):
        room_id, _, _ = started
        response = service.quit_game(room_id)
        assert response.status == RoomStatus.WAITING

    def test_leaving_empties_room(self, service):
        room = service.create_room(CreateRoomRequest())
        alice = service.join_room(room.room_id, JoinRoomRequest(nickname="Alice")).player_id

        response = service.leave_room(room.room_id, PlayerRequest(player_id=alice))

        assert response.players == []
        missing = service.get_room(room.room_id)
        assert missing.error_code == ErrorCode.ROOM_NOT_FOUND.value

    def test_leaving_keeps_other_empty_rooms(self, service):
        """A fresh room survives another room emptying out."""
        fresh = service.create_room(CreateRoomRequest(name="Fresh"))
        other = service.create_room(CreateRoomRequest(name="Other"))
        bob = service.join_room(other.room_id, JoinRoomRequest(nickname="Bob")).player_id
        service.leave_room(other.room_id, PlayerRequest(player_id=bob))

        response = service.join_room(fresh.room_id, JoinRoomRequest(nickname="Alice"))

        assert not isinstance(response, ErrorResponse)
        assert response.room.name == "Fresh"
        assert service.get_room(other.room_id).error_code == ErrorCode.ROOM_NOT_FOUND.value

    def test_leaving_running_race_keeps_room(self, service, started):
        room_id, alice, bob = started
        service.leave_room(room_id, PlayerRequest(player_id=alice))
        response = service.leave_room(room_id, PlayerRequest(player_id=bob))

        assert response.status == RoomStatus.PLAYING
        assert service.get_room(room_id).room_id == room_id


class TestHTTPEndpoints:
    """Tests for the FastAPI app."""

    @pytest.fixture
    def client(self, service):
        return TestClient(create_app(service))

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_room_not_found(self, client):
        response = client.get("/api/v1/rooms/missing")
        assert response.status_code == 404
        assert response.json()["error_code"] == "ROOM_NOT_FOUND"

    def test_race_flow(self, client):
        room_id = client.post("/api/v1/rooms", json={"name": "Friday"}).json()["room_id"]
        alice = client.post(f"/api/v1/rooms/{room_id}/join", json={"nickname": "Alice"}).json()["player_id"]
        client.post(f"/api/v1/rooms/{room_id}/join", json={"nickname": "Bob"})

        started = client.post(
            f"/api/v1/rooms/{room_id}/start",
            json={"player_id": alice, "map": "Test", "laps": 2},
        )
        assert started.status_code == 200
        assert started.json()["laps"] == 2

        listing = client.get("/api/v1/rooms").json()
        assert listing["count"] == 1

        acted = client.post(
            f"/api/v1/rooms/{room_id}/actions",
            json={"player_id": alice, "action": {"type": "plan", "gear": 1, "card_indices": [6]}},
        )
        assert acted.status_code == 200
        assert acted.json()["success"] is True

        state = client.get(f"/api/v1/rooms/{room_id}/state", params={"player_id": alice})
        assert state.status_code == 200
        assert state.json()["pending_players"][alice] is False

    def test_rejected_action_is_400(self, client):
        room_id = client.post("/api/v1/rooms", json={}).json()["room_id"]
        alice = client.post(f"/api/v1/rooms/{room_id}/join", json={"nickname": "Alice"}).json()["player_id"]

        response = client.post(
            f"/api/v1/rooms/{room_id}/actions",
            json={"player_id": alice, "action": {"type": "move"}},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "GAME_NOT_STARTED"

    def test_malformed_action_is_422(self, client):
        room_id = client.post("/api/v1/rooms", json={}).json()["room_id"]
        response = client.post(
            f"/api/v1/rooms/{room_id}/actions",
            json={"player_id": "x", "action": {"type": "teleport"}},
        )
        assert response.status_code == 422

    def test_empty_nickname_is_422(self, client):
        room_id = client.post("/api/v1/rooms", json={}).json()["room_id"]
        response = client.post(f"/api/v1/rooms/{room_id}/join", json={"nickname": ""})
        assert response.status_code == 422


class TestDefaultMapConfig:
    """Tests for the OVERDRIVE_DEFAULT_MAP setting."""

    def test_known_map(self):
        assert resolve_default_map("Test") == GameMap.TEST

    def test_unknown_map_falls_back(self, caplog):
        assert resolve_default_map("Atlantis") == GameMap.USA
        assert "Atlantis" in caplog.text

    def test_create_app_with_bad_setting(self, monkeypatch):
        monkeypatch.setattr(app_module, "OVERDRIVE_DEFAULT_MAP", "Atlantis")
        client = TestClient(create_app())
        assert client.get("/health").status_code == 200
