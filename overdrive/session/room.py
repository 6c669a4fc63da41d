"""
Game Room - Gathers players and forwards their actions to one Game.

A room:
1. Collects players while waiting (first to join is host)
2. Starts a race when the host asks and enough players are present
3. Forwards each action to the engine and reports the outcome
4. Lets a player rejoin a running race by nickname
5. Returns to waiting when the game is quit

The room never looks inside the engine: it only calls dispatch() and
get_state_for_player().
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any
import logging
import uuid

from ..engine_core.action import Action, ActionResult
from ..engine_core.cards import ShuffleFn
from ..engine_core.errors import EngineError
from ..engine_core.game import Game, PlayerInput
from ..engine_core.state import GameState
from ..engine_core.track import GameMap

logger = logging.getLogger(__name__)

MAX_PLAYERS = 6
MIN_PLAYERS = 2


class RoomStatus(Enum):
    WAITING = "waiting"
    PLAYING = "playing"


class RoomError(Exception):
    """A room-level rejection (not an engine rule violation)."""

    def __init__(self, message: str, error_code: str = "ROOM_ERROR"):
        super().__init__(message)
        self.error_code = error_code


@dataclass
class RoomPlayer:
    player_id: str
    nickname: str
    is_host: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "nickname": self.nickname,
            "is_host": self.is_host,
        }


@dataclass(frozen=True)
class RoomInfo:
    """Summary shown in the lobby's room list."""
    room_id: str
    name: str
    host_nickname: str
    player_count: int
    max_players: int
    status: RoomStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "room_id": self.room_id,
            "name": self.name,
            "host_nickname": self.host_nickname,
            "player_count": self.player_count,
            "max_players": self.max_players,
            "status": self.status.value,
        }


class GameRoom:
    """
    One room and, while playing, its game.

    Usage:
        room = GameRoom("room-1", "Friday race")
        alice = room.join("Alice")
        bob = room.join("Bob")
        room.start_game(alice, GameMap.USA)
        result = room.handle_action(alice, Action.plan(1, [6]))
    """

    def __init__(self, room_id: str, name: str, shuffle: ShuffleFn | None = None):
        self.room_id = room_id
        self.name = name
        self.status = RoomStatus.WAITING
        self.host_id: str | None = None
        self.game: Game | None = None
        self._players: dict[str, RoomPlayer] = {}
        self._shuffle = shuffle

    @property
    def players(self) -> list[RoomPlayer]:
        return list(self._players.values())

    @property
    def player_count(self) -> int:
        return len(self._players)

    def has_player(self, player_id: str) -> bool:
        return player_id in self._players

    @property
    def info(self) -> RoomInfo:
        host = self._players.get(self.host_id) if self.host_id else None
        return RoomInfo(
            room_id=self.room_id,
            name=self.name,
            host_nickname=host.nickname if host else "Unknown",
            player_count=self.player_count,
            max_players=MAX_PLAYERS,
            status=self.status,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "room_id": self.room_id,
            "name": self.name,
            "status": self.status.value,
            "host_id": self.host_id or "",
            "players": [p.to_dict() for p in self._players.values()],
        }

    # =========================================================================
    # Membership
    # =========================================================================

    def join(self, nickname: str) -> str:
        """
        Add a player and return their player id.

        While a race is running only an existing nickname may rejoin,
        and it gets its old player id back.
        """
        if self.status == RoomStatus.PLAYING:
            for player in self._players.values():
                if player.nickname == nickname:
                    logger.info("Player %s rejoined room %s", player.player_id, self.room_id)
                    return player.player_id
            raise RoomError("Game already started", "GAME_ALREADY_STARTED")

        if self.player_count >= MAX_PLAYERS:
            raise RoomError("Room is full", "ROOM_FULL")

        player_id = str(uuid.uuid4())
        is_first = not self._players
        if is_first:
            self.host_id = player_id
        self._players[player_id] = RoomPlayer(player_id, nickname, is_host=is_first)
        logger.info("Player %s (%s) joined room %s", player_id, nickname, self.room_id)
        return player_id

    def leave(self, player_id: str) -> None:
        """Remove a player; the host role passes to the next player."""
        player = self._players.pop(player_id, None)
        if player is None:
            return

        if player.is_host and self._players:
            new_host = next(iter(self._players.values()))
            new_host.is_host = True
            self.host_id = new_host.player_id
        if not self._players:
            self.host_id = None
        logger.info("Player %s left room %s", player_id, self.room_id)

    # =========================================================================
    # Game lifecycle
    # =========================================================================

    def start_game(
        self,
        player_id: str,
        game_map: GameMap = GameMap.USA,
        laps: int = 1,
    ) -> GameState:
        """Start the race. Only the host can start, with at least 2 players."""
        if self.status == RoomStatus.PLAYING:
            raise RoomError("Game already started", "GAME_ALREADY_STARTED")
        if player_id != self.host_id:
            raise RoomError("Only host can start the game", "NOT_HOST")
        if self.player_count < MIN_PLAYERS:
            raise RoomError(
                f"Need at least {MIN_PLAYERS} players to start", "NOT_ENOUGH_PLAYERS"
            )

        self.game = Game(
            [PlayerInput(p.player_id, p.nickname) for p in self._players.values()],
            game_map,
            laps=laps,
            shuffle=self._shuffle,
        )
        self.status = RoomStatus.PLAYING
        logger.info("Room %s started a race on %s", self.room_id, game_map.value)
        return self.game.get_state_for_player(player_id)

    def quit_game(self) -> None:
        """End the current race and go back to waiting."""
        self.game = None
        self.status = RoomStatus.WAITING
        logger.info("Room %s quit its game", self.room_id)

    def handle_action(self, player_id: str, action: Action) -> ActionResult:
        """
        Forward an action to the engine.

        Engine rule violations come back as a failure result for the
        acting player; the game itself is unaffected.
        """
        if self.game is None:
            return ActionResult.failure("Game not started", "GAME_NOT_STARTED")
        if not self.has_player(player_id):
            return ActionResult.failure("Not in this room", "NOT_IN_ROOM")

        try:
            self.game.dispatch(player_id, action)
        except EngineError as e:
            logger.warning(
                "Rejected %s from %s in room %s: %s",
                action.action_type.value, player_id, self.room_id, e,
            )
            return ActionResult.failure(str(e), error_code=e.error_code)

        return ActionResult.success_with_state(
            self.game.get_state_for_player(player_id),
            changes=[f"{self._players[player_id].nickname} played {action.action_type.value}"],
        )

    def state_for_player(self, player_id: str) -> GameState | None:
        """The player's view of the race, or None while waiting."""
        if self.game is None:
            return None
        return self.game.get_state_for_player(player_id)
