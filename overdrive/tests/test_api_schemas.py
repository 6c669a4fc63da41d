"""
Tests for API Pydantic schemas.

Validates that:
- Action requests are discriminated on `type`
- Request validation rejects malformed input
- Engine snapshots convert to response models
- Error codes are properly structured
- OpenAPI schema generates
"""

import pytest
from pydantic import ValidationError


class TestActionRequests:
    """Tests for the action union."""

    def test_plan_request(self):
        """A plan payload becomes a PlanRequest and then a PlanAction."""
        from overdrive.api.schemas import PlanRequest, SubmitActionRequest
        from overdrive.engine_core import Action

        request = SubmitActionRequest.model_validate({
            "player_id": "p1",
            "action": {"type": "plan", "gear": 2, "card_indices": [6, 5]},
        })

        assert isinstance(request.action, PlanRequest)
        assert request.action.to_action() == Action.plan(2, [6, 5])

    def test_react_request_choice(self):
        from overdrive.api.schemas import SubmitActionRequest
        from overdrive.engine_core import Action, ReactChoice

        request = SubmitActionRequest.model_validate({
            "player_id": "p1",
            "action": {"type": "react", "choice": "boost"},
        })

        assert request.action.to_action() == Action.react(ReactChoice.BOOST)

    def test_defaults(self):
        """Optional flags default to declining."""
        from overdrive.api.schemas import SubmitActionRequest
        from overdrive.engine_core import Action

        adrenaline = SubmitActionRequest.model_validate({
            "player_id": "p1", "action": {"type": "adrenaline"},
        })
        discard = SubmitActionRequest.model_validate({
            "player_id": "p1", "action": {"type": "discard"},
        })

        assert adrenaline.action.to_action() == Action.adrenaline(False, False)
        assert discard.action.to_action() == Action.discard([])

    @pytest.mark.parametrize("action", [
        {"type": "teleport"},
        {"type": "react", "choice": "nitro"},
        {"type": "slipstream"},
        {"gear": 1},
    ])
    def test_invalid_actions(self, action):
        from overdrive.api.schemas import SubmitActionRequest

        with pytest.raises(ValidationError):
            SubmitActionRequest.model_validate({"player_id": "p1", "action": action})

    def test_laps_bounds(self):
        from overdrive.api.schemas import StartGameRequest

        with pytest.raises(ValidationError):
            StartGameRequest(player_id="p1", laps=0)


class TestStateResponses:
    """Tests for converting engine snapshots."""

    def test_game_state_response(self, two_player_game):
        """GameStateResponse mirrors the engine snapshot."""
        from overdrive.api.service import game_state_to_response

        response = game_state_to_response(two_player_game.get_state_for_player("p1"))

        assert response.map == "Test"
        assert response.phase == "planning"
        assert response.track.corners[1].speed_limit == 3
        assert response.players["p1"].hand[6].type == "speed"
        assert response.players["p1"].hand[6].value == 4
        assert response.players["p2"].hand[6].value is None
        assert response.players["p2"].has_adrenaline
        assert response.current_player_id is None
        assert response.api_version == "v1"

    def test_room_state_response(self, room):
        from overdrive.api.service import room_to_response
        from overdrive.api.schemas import RoomStatus

        alice = room.join("Alice")
        response = room_to_response(room)

        assert response.status == RoomStatus.WAITING
        assert response.host_id == alice
        assert response.players[0].is_host


class TestErrorCodes:
    """Tests for error code coverage."""

    def test_error_response_schema(self):
        """ErrorResponse has structured error codes."""
        from overdrive.api.schemas import ErrorResponse, ErrorCode

        error = ErrorResponse(
            error="Room abc not found",
            error_code=ErrorCode.ROOM_NOT_FOUND.value,
        )

        data = error.model_dump()
        assert data["error"] == "Room abc not found"
        assert data["error_code"] == "ROOM_NOT_FOUND"
        assert data["api_version"] == "v1"

    def test_error_code_values_are_strings(self):
        """Error codes are string enums for JSON serialization."""
        from overdrive.api.schemas import ErrorCode

        for code in ErrorCode:
            assert isinstance(code.value, str)
            assert code.value == code.value.upper()

    def test_engine_error_codes_are_upper_snake(self):
        from overdrive.engine_core import errors

        codes = [
            cls.error_code for cls in vars(errors).values()
            if isinstance(cls, type) and issubclass(cls, errors.EngineError)
        ]
        assert len(codes) == len(set(codes))
        for code in codes:
            assert code == code.upper()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    def test_openapi_schema_generates(self):
        """OpenAPI schema generates without errors."""
        from overdrive.api.app import app
        from fastapi.openapi.utils import get_openapi

        schema = get_openapi(
            title=app.title,
            version=app.version,
            routes=app.routes,
        )

        assert "paths" in schema
        assert "components" in schema
        assert "schemas" in schema["components"]

    def test_response_models_in_schema(self):
        """Response models appear in OpenAPI schema."""
        from overdrive.api.app import app
        from fastapi.openapi.utils import get_openapi

        schema = get_openapi(
            title=app.title,
            version=app.version,
            routes=app.routes,
        )

        schemas = schema["components"]["schemas"]

        for name in ["GameStateResponse", "ActionResponse", "RoomStateResponse", "ErrorResponse"]:
            assert name in schemas, f"Missing schema: {name}"

    def test_room_endpoints_present(self):
        from overdrive.api.app import app
        from fastapi.openapi.utils import get_openapi

        paths = get_openapi(title=app.title, version=app.version, routes=app.routes)["paths"]

        assert "post" in paths["/api/v1/rooms"]
        assert "get" in paths["/api/v1/rooms"]
        assert "post" in paths["/api/v1/rooms/{room_id}/actions"]
        assert "200" in paths["/api/v1/rooms/{room_id}/state"]["get"]["responses"]
