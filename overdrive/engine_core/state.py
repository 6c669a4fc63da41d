"""
Game State - Phase enums and read-only state snapshots.

Design principles:
- The live game is owned by `Game`; nothing outside it mutates players
- Snapshots are frozen copies: reading state never exposes live zones
- Serializable: `to_dict()` produces plain JSON-ready data
- Per-viewer snapshots hide other players' hand values
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .cards import Card
from .track import GameMap, Track


class GamePhase(Enum):
    """High-level game phases."""
    PLANNING = "planning"
    RESOLUTION = "resolution"
    FINISHED = "finished"


class TurnState(Enum):
    """
    Sub-state of the turn. Also the tag of the action it expects.

    `plan` belongs to the planning phase; the rest run once per player,
    in race order, during resolution.
    """
    PLAN = "plan"
    MOVE = "move"
    ADRENALINE = "adrenaline"
    REACT = "react"
    SLIPSTREAM = "slipstream"
    DISCARD = "discard"


@dataclass
class TurnActions:
    """
    What a player chose during their resolution this turn.

    Kept for turn summaries; cleared when the next planning phase begins.
    """
    adrenaline_move: bool | None = None
    adrenaline_cooldown: bool | None = None
    reactions: list[str] = field(default_factory=list)
    boost_speed: int | None = None
    slipstream_used: bool | None = None
    discard_count: int | None = None

    def copy(self) -> TurnActions:
        return replace(self, reactions=list(self.reactions))

    def to_dict(self) -> dict[str, Any]:
        return {
            "adrenaline_move": self.adrenaline_move,
            "adrenaline_cooldown": self.adrenaline_cooldown,
            "reactions": list(self.reactions),
            "boost_speed": self.boost_speed,
            "slipstream_used": self.slipstream_used,
            "discard_count": self.discard_count,
        }


@dataclass(frozen=True)
class PlayerView:
    """Read-only view of one player."""
    player_id: str
    username: str
    gear: int
    position: int
    on_raceline: bool
    hand: tuple[Card, ...]
    deck_size: int
    played: tuple[Card, ...]
    speed: int
    engine_size: int
    discard_size: int
    discard_top: Card | None
    has_adrenaline: bool
    available_cooldowns: int
    available_reactions: tuple[str, ...]
    lap: int
    finished: bool
    turn_actions: TurnActions

    def redacted(self) -> PlayerView:
        """Hide hand values, keeping only card kinds."""
        return replace(self, hand=tuple(card.redacted() for card in self.hand))

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "username": self.username,
            "gear": self.gear,
            "position": self.position,
            "on_raceline": self.on_raceline,
            "hand": [c.to_dict() for c in self.hand],
            "deck_size": self.deck_size,
            "played": [c.to_dict() for c in self.played],
            "speed": self.speed,
            "engine_size": self.engine_size,
            "discard_size": self.discard_size,
            "discard_top": self.discard_top.to_dict() if self.discard_top else None,
            "has_adrenaline": self.has_adrenaline,
            "available_cooldowns": self.available_cooldowns,
            "available_reactions": list(self.available_reactions),
            "lap": self.lap,
            "finished": self.finished,
            "turn_actions": self.turn_actions.to_dict(),
        }


@dataclass(frozen=True)
class GameState:
    """
    Complete snapshot of a game at a point in time.

    Returned by `Game.get_state()` and `Game.get_state_for_player()`.
    Callers re-read it after every dispatch.
    """
    game_map: GameMap
    track: Track
    players: dict[str, PlayerView]
    turn: int
    phase: GamePhase
    current_state: TurnState
    pending_players: dict[str, bool]
    turn_order: tuple[str, ...]
    current_player_index: int
    laps: int
    finish_order: tuple[str, ...]
    player_order: tuple[str, ...]
    race_finishing: bool = False

    @property
    def current_player_id(self) -> str | None:
        """Player whose resolution is in progress, if any."""
        if self.phase != GamePhase.RESOLUTION:
            return None
        if self.current_player_index >= len(self.turn_order):
            return None
        return self.turn_order[self.current_player_index]

    def get_player(self, player_id: str) -> PlayerView | None:
        return self.players.get(player_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "map": self.game_map.value,
            "track": self.track.to_dict(),
            "players": {pid: p.to_dict() for pid, p in self.players.items()},
            "turn": self.turn,
            "phase": self.phase.value,
            "current_state": self.current_state.value,
            "pending_players": dict(self.pending_players),
            "turn_order": list(self.turn_order),
            "current_player_index": self.current_player_index,
            "current_player_id": self.current_player_id,
            "laps": self.laps,
            "finish_order": list(self.finish_order),
            "player_order": list(self.player_order),
            "race_finishing": self.race_finishing,
        }
