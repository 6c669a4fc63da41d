"""
Game - The turn/phase state machine and single point of mutation.

The game owns every player and walks them through each turn:

    plan (everyone, simultaneously)
    then, one player at a time in race order:
        move -> [adrenaline] -> react* -> [slipstream] -> discard

Design principles:
- All state changes go through dispatch()
- Validates before applying: a rejected action changes nothing
- Delegates card and movement rules to Player, corners to Track
- Cascades through automatic steps (finish-movement, skipped sub-states)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Iterable
import logging

from .action import (
    Action,
    PlanAction,
    MoveAction,
    AdrenalineAction,
    ReactAction,
    SlipstreamAction,
    DiscardAction,
)
from .cards import ShuffleFn, random_shuffle
from .errors import (
    AlreadyActed,
    DuplicatePlayerId,
    GameFinished,
    InvalidActionForState,
    NotYourTurn,
    PlayerNotFound,
    SlipstreamUnavailable,
)
from .player import Player
from .state import GamePhase, GameState, TurnState
from .track import GameMap, get_map_track

logger = logging.getLogger(__name__)

SLIPSTREAM_DISTANCE = 2

# Player count at which the two trailing players both get adrenaline
LARGE_FIELD_SIZE = 5


@dataclass(frozen=True)
class PlayerInput:
    """A participant as handed over by the session layer."""
    player_id: str
    username: str = ""


class Game:
    """
    One race, from the first plan to the final finish order.

    Usage:
        game = create_game([PlayerInput("p1", "Alice")], GameMap.TEST)
        game.dispatch("p1", Action.plan(gear=1, card_indices=[6]))
        state = game.get_state_for_player("p1")
    """

    def __init__(
        self,
        players: Iterable[PlayerInput],
        game_map: GameMap,
        laps: int = 1,
        shuffle: ShuffleFn | None = None,
    ):
        entries = list(players)
        ids = [p.player_id for p in entries]
        if len(set(ids)) != len(ids):
            raise DuplicatePlayerId()
        if laps < 1:
            raise ValueError("A race needs at least one lap")

        self.game_map = game_map
        self.track = get_map_track(game_map)
        self.laps = laps

        # Starting grid: two cars per row, left column on the raceline
        self.players: dict[str, Player] = {
            entry.player_id: Player.for_map(
                entry.player_id,
                game_map,
                username=entry.username,
                position=-(i // 2),
                on_raceline=i % 2 == 0,
                shuffle=shuffle or random_shuffle(),
            )
            for i, entry in enumerate(entries)
        }
        for player in self.players.values():
            player.draw()

        self.player_order: list[str] = ids
        self.turn = 1
        self.phase = GamePhase.PLANNING
        self.current_state = TurnState.PLAN
        self.pending_players: dict[str, bool] = {pid: True for pid in ids}
        self.turn_order: list[str] = []
        self.current_player_index = 0
        self.adrenaline_slots = 2 if len(ids) >= LARGE_FIELD_SIZE else 1
        self.finish_order: list[str] = []
        self.race_finishing = False

        # Successfully applied actions, in order (for replay)
        self.action_log: list[tuple[str, Action]] = []

        self._assign_adrenaline()
        logger.info(
            "Created game on %s: %d players, %d lap(s)",
            game_map.value, len(ids), laps,
        )

    # =========================================================================
    # Reading state
    # =========================================================================

    def get_state(self) -> GameState:
        """Full snapshot, including every player's hand."""
        return self._snapshot(viewer_id=None)

    def get_state_for_player(self, viewer_id: str) -> GameState:
        """Snapshot with other players' hands reduced to card kinds."""
        return self._snapshot(viewer_id=viewer_id, redact=True)

    def _snapshot(self, viewer_id: str | None, redact: bool = False) -> GameState:
        views = {}
        for pid, player in self.players.items():
            view = player.to_view()
            if redact and pid != viewer_id:
                view = view.redacted()
            views[pid] = view
        return GameState(
            game_map=self.game_map,
            track=self.track,
            players=views,
            turn=self.turn,
            phase=self.phase,
            current_state=self.current_state,
            pending_players=dict(self.pending_players),
            turn_order=tuple(self.turn_order),
            current_player_index=self.current_player_index,
            laps=self.laps,
            finish_order=tuple(self.finish_order),
            player_order=tuple(self.player_order),
            race_finishing=self.race_finishing,
        )

    @property
    def current_player_id(self) -> str | None:
        if self.phase != GamePhase.RESOLUTION:
            return None
        return self.turn_order[self.current_player_index]

    # =========================================================================
    # Dispatch
    # =========================================================================

    def dispatch(self, player_id: str, action: Action) -> None:
        """
        Apply one player action.

        Raises an EngineError subclass, without changing anything, if the
        action is not legal right now.
        """
        if self.phase == GamePhase.FINISHED:
            raise GameFinished()

        if action.action_type != self.current_state:
            raise InvalidActionForState(
                f"Invalid action for state {self.current_state.value}"
            )

        player = self.players.get(player_id)
        if player is None:
            raise PlayerNotFound()

        if self.phase == GamePhase.PLANNING:
            if not self.pending_players[player_id]:
                raise AlreadyActed()
        elif player_id != self.current_player_id:
            raise NotYourTurn()

        handler = self._get_handler(action.action_type)
        handler(player, action)
        self.action_log.append((player_id, action))

    def _get_handler(self, action_type: TurnState) -> Callable[[Player, Action], None]:
        """Get the handler for a sub-state. Every TurnState has one."""
        handlers = {
            TurnState.PLAN: self._handle_plan,
            TurnState.MOVE: self._handle_move,
            TurnState.ADRENALINE: self._handle_adrenaline,
            TurnState.REACT: self._handle_react,
            TurnState.SLIPSTREAM: self._handle_slipstream,
            TurnState.DISCARD: self._handle_discard,
        }
        return handlers[action_type]

    def _handle_plan(self, player: Player, action: PlanAction) -> None:
        player.plan(action.gear, action.card_indices)
        self.pending_players[player.player_id] = False

        if any(self.pending_players.values()):
            return

        self.phase = GamePhase.RESOLUTION
        self.turn_order = [p.player_id for p in self._players_in_race_order()]
        self.current_player_index = 0
        logger.info("Turn %d resolution order: %s", self.turn, self.turn_order)
        self._reveal_and_move()

    def _handle_move(self, player: Player, action: MoveAction) -> None:
        player.confirm_move()
        if player.has_adrenaline:
            self._set_state(TurnState.ADRENALINE)
        else:
            self._enter_react_or_skip(player)

    def _handle_adrenaline(self, player: Player, action: AdrenalineAction) -> None:
        player.apply_adrenaline(action.accept_move, action.accept_cooldown)
        self._enter_react_or_skip(player)

    def _handle_react(self, player: Player, action: ReactAction) -> None:
        if player.react(action.choice):
            return
        if self._can_slipstream(player):
            self._set_state(TurnState.SLIPSTREAM)
        else:
            self._finish_movement(player)

    def _handle_slipstream(self, player: Player, action: SlipstreamAction) -> None:
        if action.use:
            if not self._can_slipstream(player):
                raise SlipstreamUnavailable()
            player.slipstream(SLIPSTREAM_DISTANCE)
        player.turn_actions.slipstream_used = action.use
        self._finish_movement(player)

    def _handle_discard(self, player: Player, action: DiscardAction) -> None:
        player.end_turn(action.card_indices)
        self.current_player_index += 1

        if self.current_player_index < len(self.turn_order):
            self._reveal_and_move()
        elif self.race_finishing:
            self._finalize_race()
        else:
            self._start_next_turn()

    # =========================================================================
    # Automatic steps
    # =========================================================================

    def _set_state(self, state: TurnState) -> None:
        logger.debug("State %s -> %s", self.current_state.value, state.value)
        self.current_state = state

    def _reveal_and_move(self) -> None:
        """Reveal the current player's cards, then wait for the move acknowledgment."""
        player = self.players[self.current_player_id]
        player.begin_resolution()
        self._set_state(TurnState.MOVE)

    def _enter_react_or_skip(self, player: Player) -> None:
        if player.has_viable_reactions():
            self._set_state(TurnState.REACT)
        elif self._can_slipstream(player):
            self._set_state(TurnState.SLIPSTREAM)
        else:
            self._finish_movement(player)

    def _can_slipstream(self, player: Player) -> bool:
        return player.can_slipstream(self.players.values())

    def _finish_movement(self, player: Player) -> None:
        """Settle collisions, then corners, then lap and finish tracking."""
        player.resolve_collision(self.players.values())
        if player.check_corners(self.track.corners):
            # Spinning out can drop the car into an occupied cell
            player.resolve_collision(self.players.values())

        if player.update_race_progress(self.track, self.laps):
            self.finish_order.append(player.player_id)
            self.race_finishing = True
            logger.info("Player %s crossed the finish line", player.player_id)

        self._set_state(TurnState.DISCARD)

    def _start_next_turn(self) -> None:
        self._assign_adrenaline()
        for p in self.players.values():
            p.clear_turn_actions()
        self.phase = GamePhase.PLANNING
        self.turn += 1
        self.turn_order = []
        self.current_player_index = 0
        self.pending_players = {pid: True for pid in self.players}
        self._set_state(TurnState.PLAN)
        logger.info("Turn %d planning", self.turn)

    def _finalize_race(self) -> None:
        self.finish_order.sort(
            key=lambda pid: self.players[pid].position, reverse=True
        )
        self.phase = GamePhase.FINISHED
        logger.info("Race finished: %s", self.finish_order)

    def _assign_adrenaline(self) -> None:
        """Clear adrenaline, then give it to the trailing player(s)."""
        for p in self.players.values():
            p.set_adrenaline(False)
        race_order = self._players_in_race_order()
        for p in race_order[-self.adrenaline_slots:]:
            p.set_adrenaline(True)

    def _players_in_race_order(self) -> list[Player]:
        """Leader first; on a shared cell the raceline car goes first."""
        return sorted(
            self.players.values(),
            key=lambda p: (-p.position, not p.on_raceline),
        )


def create_game(
    players: Iterable[PlayerInput],
    game_map: GameMap,
    laps: int = 1,
    *,
    shuffle: ShuffleFn | None = None,
    seed: int | None = None,
) -> Game:
    """
    Convenience function to create a game.

    Args:
        players: Participants in grid order
        game_map: Map to race on
        laps: Laps to complete
        shuffle: Shuffle strategy (identity_shuffle for deterministic tests)
        seed: Seed for the default random shuffle; ignored if shuffle is given

    Returns:
        Game in the planning phase of turn 1
    """
    if shuffle is None and seed is not None:
        shuffle = random_shuffle(seed)
    return Game(players, game_map, laps=laps, shuffle=shuffle)
