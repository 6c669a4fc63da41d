"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to room and engine calls
2. Holds each room's lock around every call
3. Maps engine and room failures to ErrorResponse for the caller only
4. Formats responses

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .schemas import (
    # Requests
    CreateRoomRequest,
    JoinRoomRequest,
    PlayerRequest,
    StartGameRequest,
    SubmitActionRequest,
    # Responses
    ActionResponse,
    ErrorResponse,
    GameStateResponse,
    JoinRoomResponse,
    RoomInfoResponse,
    RoomListResponse,
    RoomStateResponse,
    # Enums
    ErrorCode,
)
from ..engine_core.state import GameState
from ..engine_core.track import GameMap
from ..session import GameRoom, RoomError, RoomManager


def game_state_to_response(state: GameState) -> GameStateResponse:
    """Convert an engine snapshot to its wire form."""
    return GameStateResponse.model_validate(state.to_dict())


def room_to_response(room: GameRoom) -> RoomStateResponse:
    return RoomStateResponse.model_validate(room.to_dict())


def _room_not_found(room_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Room {room_id} not found",
        error_code=ErrorCode.ROOM_NOT_FOUND.value,
    )


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        room = service.create_room(CreateRoomRequest(name="Friday"))
        joined = service.join_room(room.room_id, JoinRoomRequest(nickname="Alice"))
        result = service.submit_action(room.room_id, request)
    """
    room_manager: RoomManager = field(default_factory=RoomManager)
    default_map: GameMap = GameMap.USA

    def create_room(self, request: CreateRoomRequest) -> RoomStateResponse:
        room = self.room_manager.create_room(request.name)
        return room_to_response(room)

    def list_rooms(self) -> RoomListResponse:
        rooms = [
            RoomInfoResponse.model_validate(info.to_dict())
            for info in self.room_manager.list_rooms()
        ]
        return RoomListResponse(rooms=rooms, count=len(rooms))

    def get_room(self, room_id: str) -> RoomStateResponse | ErrorResponse:
        with self.room_manager.lock_for(room_id) as room:
            if room is None:
                return _room_not_found(room_id)
            return room_to_response(room)

    def join_room(self, room_id: str, request: JoinRoomRequest) -> JoinRoomResponse | ErrorResponse:
        with self.room_manager.lock_for(room_id) as room:
            if room is None:
                return _room_not_found(room_id)
            try:
                player_id = room.join(request.nickname)
            except RoomError as e:
                return ErrorResponse(error=str(e), error_code=e.error_code)
            return JoinRoomResponse(player_id=player_id, room=room_to_response(room))

    def leave_room(self, room_id: str, request: PlayerRequest) -> RoomStateResponse | ErrorResponse:
        with self.room_manager.lock_for(room_id) as room:
            if room is None:
                return _room_not_found(room_id)
            room.leave(request.player_id)
            response = room_to_response(room)
        self.room_manager.remove_if_empty(room_id)
        return response

    def start_game(self, room_id: str, request: StartGameRequest) -> GameStateResponse | ErrorResponse:
        try:
            game_map = GameMap(request.map) if request.map else self.default_map
        except ValueError:
            return ErrorResponse(
                error=f"Unknown map: {request.map}",
                error_code=ErrorCode.VALIDATION_ERROR.value,
            )

        with self.room_manager.lock_for(room_id) as room:
            if room is None:
                return _room_not_found(room_id)
            try:
                state = room.start_game(request.player_id, game_map, laps=request.laps)
            except RoomError as e:
                return ErrorResponse(error=str(e), error_code=e.error_code)
            return game_state_to_response(state)

    def quit_game(self, room_id: str) -> RoomStateResponse | ErrorResponse:
        with self.room_manager.lock_for(room_id) as room:
            if room is None:
                return _room_not_found(room_id)
            room.quit_game()
            return room_to_response(room)

    def submit_action(self, room_id: str, request: SubmitActionRequest) -> ActionResponse | ErrorResponse:
        """
        Apply a player's action.

        Failures go back to the caller only; other players' views are
        untouched.
        """
        with self.room_manager.lock_for(room_id) as room:
            if room is None:
                return _room_not_found(room_id)
            result = room.handle_action(request.player_id, request.action.to_action())

        if not result.success:
            return ErrorResponse(
                error=result.error or "Action rejected",
                error_code=result.error_code or ErrorCode.INTERNAL_ERROR.value,
            )

        return ActionResponse(
            success=True,
            state=game_state_to_response(result.new_state),
            changes=result.state_changes,
        )

    def get_game_state(self, room_id: str, player_id: str) -> GameStateResponse | ErrorResponse:
        with self.room_manager.lock_for(room_id) as room:
            if room is None:
                return _room_not_found(room_id)
            state = room.state_for_player(player_id)
        if state is None:
            return ErrorResponse(error="Game not started", error_code="GAME_NOT_STARTED")
        return game_state_to_response(state)
