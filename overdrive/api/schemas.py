"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between clients and the server.
Actions are a discriminated union on `type`, mirroring the engine's
turn sub-states.

Error Codes:
- ROOM_NOT_FOUND: Room does not exist or was removed
- VALIDATION_ERROR: Request could not be interpreted (e.g. unknown map)
- Room codes: ROOM_FULL, NOT_HOST, NOT_ENOUGH_PLAYERS, GAME_ALREADY_STARTED,
  GAME_NOT_STARTED, NOT_IN_ROOM
- Engine codes: passed through from the engine (e.g. NOT_YOUR_TURN,
  WRONG_CARD_COUNT, NO_HEAT_TO_BOOST)
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field

from ..engine_core.action import Action, ReactChoice


# =============================================================================
# Enums
# =============================================================================

class RoomStatus(str, Enum):
    """Room status values."""
    WAITING = "waiting"
    PLAYING = "playing"


class ErrorCode(str, Enum):
    """API-level error codes (engine and room codes pass through as strings)."""
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Action Requests
# =============================================================================

class PlanRequest(BaseModel):
    """Pick a gear and the hand indices of the cards to play."""
    type: Literal["plan"] = "plan"
    gear: int
    card_indices: list[int] = Field(default_factory=list)

    def to_action(self) -> Action:
        return Action.plan(self.gear, self.card_indices)


class MoveRequest(BaseModel):
    type: Literal["move"] = "move"

    def to_action(self) -> Action:
        return Action.move()


class AdrenalineRequest(BaseModel):
    type: Literal["adrenaline"] = "adrenaline"
    accept_move: bool = False
    accept_cooldown: bool = False

    def to_action(self) -> Action:
        return Action.adrenaline(self.accept_move, self.accept_cooldown)


class ReactRequest(BaseModel):
    type: Literal["react"] = "react"
    choice: ReactChoice

    def to_action(self) -> Action:
        return Action.react(self.choice)


class SlipstreamRequest(BaseModel):
    type: Literal["slipstream"] = "slipstream"
    use: bool

    def to_action(self) -> Action:
        return Action.slipstream(self.use)


class DiscardRequest(BaseModel):
    type: Literal["discard"] = "discard"
    card_indices: list[int] = Field(default_factory=list)

    def to_action(self) -> Action:
        return Action.discard(self.card_indices)


ActionRequest = Annotated[
    Union[
        PlanRequest,
        MoveRequest,
        AdrenalineRequest,
        ReactRequest,
        SlipstreamRequest,
        DiscardRequest,
    ],
    Field(discriminator="type"),
]


class SubmitActionRequest(BaseModel):
    """An action submitted by a player in a room."""
    player_id: str = Field(..., description="Acting player")
    action: ActionRequest


# =============================================================================
# Room Requests
# =============================================================================

class CreateRoomRequest(BaseModel):
    name: str = Field("Game Room", description="Room name shown in the lobby")


class JoinRoomRequest(BaseModel):
    nickname: str = Field(..., min_length=1, description="Display name")


class PlayerRequest(BaseModel):
    """Identifies the player making a room request."""
    player_id: str


class StartGameRequest(BaseModel):
    player_id: str = Field(..., description="Must be the room host")
    map: Optional[str] = Field(None, description="USA or Test; server default if omitted")
    laps: int = Field(1, ge=1, le=10)


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """A card. `value` is absent for heat, stress and hidden cards."""
    type: str
    value: Optional[int] = None


class CornerInfo(BaseModel):
    position: int
    speed_limit: int


class TrackInfo(BaseModel):
    length: int
    corners: list[CornerInfo] = Field(default_factory=list)


class TurnActionsInfo(BaseModel):
    adrenaline_move: Optional[bool] = None
    adrenaline_cooldown: Optional[bool] = None
    reactions: list[str] = Field(default_factory=list)
    boost_speed: Optional[int] = None
    slipstream_used: Optional[bool] = None
    discard_count: Optional[int] = None


class PlayerStateInfo(BaseModel):
    """One racer as seen by the requesting player."""
    player_id: str
    username: str
    gear: int
    position: int
    on_raceline: bool
    hand: list[CardInfo] = Field(default_factory=list)
    deck_size: int
    played: list[CardInfo] = Field(default_factory=list)
    speed: int
    engine_size: int
    discard_size: int
    discard_top: Optional[CardInfo] = None
    has_adrenaline: bool
    available_cooldowns: int
    available_reactions: list[str] = Field(default_factory=list)
    lap: int
    finished: bool
    turn_actions: TurnActionsInfo = Field(default_factory=TurnActionsInfo)


class RoomPlayerInfo(BaseModel):
    player_id: str
    nickname: str
    is_host: bool


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: str = Field(..., description="Machine-readable error code")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Complete race state for one viewer."""
    map: str
    track: TrackInfo
    players: dict[str, PlayerStateInfo] = Field(default_factory=dict)
    turn: int
    phase: str = Field(description="planning, resolution or finished")
    current_state: str = Field(description="plan, move, adrenaline, react, slipstream or discard")
    pending_players: dict[str, bool] = Field(default_factory=dict)
    turn_order: list[str] = Field(default_factory=list)
    current_player_index: int = 0
    current_player_id: Optional[str] = None
    laps: int = 1
    finish_order: list[str] = Field(default_factory=list)
    player_order: list[str] = Field(default_factory=list)
    race_finishing: bool = False
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """Response after a successful action."""
    success: bool
    state: Optional[GameStateResponse] = None
    changes: list[str] = Field(default_factory=list)
    api_version: str = "v1"


class RoomStateResponse(BaseModel):
    room_id: str
    name: str
    status: RoomStatus
    host_id: str = ""
    players: list[RoomPlayerInfo] = Field(default_factory=list)
    api_version: str = "v1"


class JoinRoomResponse(BaseModel):
    player_id: str
    room: RoomStateResponse


class RoomInfoResponse(BaseModel):
    """Lobby listing entry."""
    room_id: str
    name: str
    host_nickname: str
    player_count: int
    max_players: int
    status: RoomStatus


class RoomListResponse(BaseModel):
    rooms: list[RoomInfoResponse]
    count: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
