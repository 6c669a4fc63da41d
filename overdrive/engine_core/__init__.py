"""
Engine Core - Deterministic race simulation.

The engine is the runtime that:
1. Builds players with their starting decks for a map
2. Runs the planning phase (everyone at once)
3. Resolves each player's move in race order
4. Applies corners, collisions, adrenaline and slipstream
5. Tracks laps and the finish order

Outer layers talk to it through two calls only:
`Game.dispatch()` and `Game.get_state_for_player()`.
"""

from .cards import Card, CardType, ShuffleFn, identity_shuffle, random_shuffle
from .track import GameMap, Corner, Track, get_map_track
from .state import GamePhase, TurnState, GameState, PlayerView, TurnActions
from .action import (
    Action,
    ActionResult,
    ReactChoice,
    PlanAction,
    MoveAction,
    AdrenalineAction,
    ReactAction,
    SlipstreamAction,
    DiscardAction,
    parse_action,
    parse_actions,
)
from .errors import EngineError
from .player import Player
from .game import Game, PlayerInput, create_game

__all__ = [
    "Card",
    "CardType",
    "ShuffleFn",
    "identity_shuffle",
    "random_shuffle",
    "GameMap",
    "Corner",
    "Track",
    "get_map_track",
    "GamePhase",
    "TurnState",
    "GameState",
    "PlayerView",
    "TurnActions",
    "Action",
    "ActionResult",
    "ReactChoice",
    "PlanAction",
    "MoveAction",
    "AdrenalineAction",
    "ReactAction",
    "SlipstreamAction",
    "DiscardAction",
    "parse_action",
    "parse_actions",
    "EngineError",
    "Player",
    "Game",
    "PlayerInput",
    "create_game",
]
