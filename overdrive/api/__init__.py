"""
API Module - HTTP interface for rooms and races.

Exposes rooms and the race engine via a REST API.
A client:
1. Creates or lists rooms
2. Joins a room and receives a player ID
3. Waits for the host to start the race
4. Submits actions and polls its view of the race state

All state is room-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    ActionRequest,
    PlanRequest,
    MoveRequest,
    AdrenalineRequest,
    ReactRequest,
    SlipstreamRequest,
    DiscardRequest,
    SubmitActionRequest,
    CreateRoomRequest,
    JoinRoomRequest,
    PlayerRequest,
    StartGameRequest,
    # Responses
    ActionResponse,
    ErrorResponse,
    GameStateResponse,
    HealthResponse,
    JoinRoomResponse,
    RoomInfoResponse,
    RoomListResponse,
    RoomStateResponse,
    # Shared
    CardInfo,
    CornerInfo,
    TrackInfo,
    PlayerStateInfo,
    RoomPlayerInfo,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "PlanRequest",
    "MoveRequest",
    "AdrenalineRequest",
    "ReactRequest",
    "SlipstreamRequest",
    "DiscardRequest",
    "SubmitActionRequest",
    "CreateRoomRequest",
    "JoinRoomRequest",
    "PlayerRequest",
    "StartGameRequest",
    # Responses
    "ActionResponse",
    "ErrorResponse",
    "GameStateResponse",
    "HealthResponse",
    "JoinRoomResponse",
    "RoomInfoResponse",
    "RoomListResponse",
    "RoomStateResponse",
    # Shared
    "CardInfo",
    "CornerInfo",
    "TrackInfo",
    "PlayerStateInfo",
    "RoomPlayerInfo",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
