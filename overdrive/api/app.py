"""
FastAPI Application - REST API around rooms and the race engine.

Endpoints:
    GET    /health                          Health check
    POST   /api/v1/rooms                    Create a room
    GET    /api/v1/rooms                    List rooms (lobby)
    GET    /api/v1/rooms/{id}               Get room membership
    POST   /api/v1/rooms/{id}/join          Join (or rejoin by nickname)
    POST   /api/v1/rooms/{id}/leave         Leave
    POST   /api/v1/rooms/{id}/start         Host starts the race
    POST   /api/v1/rooms/{id}/quit          End the race, back to waiting
    POST   /api/v1/rooms/{id}/actions       Submit a player action
    GET    /api/v1/rooms/{id}/state         Race state for one player

Rejected requests return an ErrorResponse to the caller only
(404 for unknown rooms, 400 otherwise).

Endpoints are plain functions so FastAPI runs them in its threadpool;
the service serializes calls per room with the room's lock.
"""

from typing import Union
import logging
import os

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..engine_core.track import GameMap
from ..session import RoomManager
from .service import APIService
from .schemas import (
    # Request models
    CreateRoomRequest,
    JoinRoomRequest,
    PlayerRequest,
    StartGameRequest,
    SubmitActionRequest,
    # Response models
    ActionResponse,
    ErrorResponse,
    GameStateResponse,
    HealthResponse,
    JoinRoomResponse,
    RoomListResponse,
    RoomStateResponse,
    # Enums
    ErrorCode,
)

logger = logging.getLogger(__name__)

# Environment configuration
OVERDRIVE_ENV = os.getenv("OVERDRIVE_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
OVERDRIVE_DEFAULT_MAP = os.getenv("OVERDRIVE_DEFAULT_MAP", GameMap.USA.value)


def resolve_default_map(name: str) -> GameMap:
    """Map for races started without one; unknown names fall back to USA."""
    try:
        return GameMap(name)
    except ValueError:
        logger.warning("Unknown OVERDRIVE_DEFAULT_MAP %r, using %s", name, GameMap.USA.value)
        return GameMap.USA


def create_app(service: APIService | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Overdrive Engine API",
        description="""
Turn-based racing card game - rooms and race actions.

## Turn Flow

1. Every player submits `plan` (gear + cards).
2. In race order, each player sends `move`, then `adrenaline` (if
   offered), `react` until done, `slipstream` (if offered), and `discard`.
3. Read `/state` after each action; `current_state` says what is expected.
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(
        room_manager=RoomManager(),
        default_map=resolve_default_map(OVERDRIVE_DEFAULT_MAP),
    )
    logger.info("API created (env=%s, default map=%s)", OVERDRIVE_ENV, api_service.default_map.value)

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        status_code = 404 if error.error_code == ErrorCode.ROOM_NOT_FOUND.value else 400
        return JSONResponse(status_code=status_code, content=error.model_dump())

    # =========================================================================
    # Health
    # =========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["Meta"])
    def health() -> HealthResponse:
        return HealthResponse(status="ok", service="overdrive", version=__version__)

    # =========================================================================
    # Room Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/rooms",
        response_model=RoomStateResponse,
        tags=["Rooms"],
        summary="Create a room",
    )
    def create_room(body: CreateRoomRequest) -> RoomStateResponse:
        return api_service.create_room(body)

    @app.get(
        "/api/v1/rooms",
        response_model=RoomListResponse,
        tags=["Rooms"],
        summary="List rooms for the lobby",
    )
    def list_rooms() -> RoomListResponse:
        return api_service.list_rooms()

    @app.get(
        "/api/v1/rooms/{room_id}",
        response_model=RoomStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
    )
    def get_room(room_id: str) -> Union[RoomStateResponse, JSONResponse]:
        response = api_service.get_room(room_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/join",
        response_model=JoinRoomResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Join a room, or rejoin a running race by nickname",
    )
    def join_room(room_id: str, body: JoinRoomRequest) -> Union[JoinRoomResponse, JSONResponse]:
        response = api_service.join_room(room_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/leave",
        response_model=RoomStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
    )
    def leave_room(room_id: str, body: PlayerRequest) -> Union[RoomStateResponse, JSONResponse]:
        response = api_service.leave_room(room_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/start",
        response_model=GameStateResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Start the race (host only, 2+ players)",
    )
    def start_game(room_id: str, body: StartGameRequest) -> Union[GameStateResponse, JSONResponse]:
        response = api_service.start_game(room_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/quit",
        response_model=RoomStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
    )
    def quit_game(room_id: str) -> Union[RoomStateResponse, JSONResponse]:
        response = api_service.quit_game(room_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # Race Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/rooms/{room_id}/actions",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Race"],
        summary="Submit a player action",
    )
    def submit_action(room_id: str, body: SubmitActionRequest) -> Union[ActionResponse, JSONResponse]:
        """
        Submit one action for a player.

        **Request Body:**
        ```json
        {"player_id": "...", "action": {"type": "plan", "gear": 2, "card_indices": [6, 5]}}
        ```
        """
        response = api_service.submit_action(room_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/rooms/{room_id}/state",
        response_model=GameStateResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Race"],
        summary="Race state as seen by one player",
    )
    def get_game_state(
        room_id: str,
        player_id: str = Query(..., description="Viewing player"),
    ) -> Union[GameStateResponse, JSONResponse]:
        response = api_service.get_game_state(room_id, player_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    return app


# For running directly: uvicorn overdrive.api.app:app
app = create_app()
