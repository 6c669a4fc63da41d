"""
Pytest fixtures for Overdrive tests.

Every game here uses the identity shuffle, so a fresh player's hand is
always (by index):

    0 stress, 1 stress, 2 stress, 3 heat, 4 upgrade 5, 5 upgrade 0, 6 speed 4

and the deck, drawn from the end, is
speed 1,1,1,2,2,2,3,3,3,4,4 (the next draw is a speed 4).
"""

import pytest

from ..engine_core import (
    Action,
    GameMap,
    GamePhase,
    Player,
    PlayerInput,
    ReactChoice,
    TurnState,
    create_game,
    identity_shuffle,
)
from ..session import GameRoom, RoomManager

SPEED_4 = 6
UPGRADE_0 = 5
UPGRADE_5 = 4
HEAT = 3


@pytest.fixture
def player() -> Player:
    """A lone USA-map player holding a fresh hand."""
    p = Player.for_map("p1", GameMap.USA, username="Alice", shuffle=identity_shuffle)
    p.draw()
    return p


@pytest.fixture
def solo_game():
    """Single player on the Test map."""
    return create_game([PlayerInput("p1", "Alice")], GameMap.TEST, shuffle=identity_shuffle)


@pytest.fixture
def two_player_game():
    return create_game(
        [PlayerInput("p1", "Alice"), PlayerInput("p2", "Bob")],
        GameMap.TEST,
        shuffle=identity_shuffle,
    )


@pytest.fixture
def three_player_game():
    return create_game(
        [PlayerInput("p1", "Alice"), PlayerInput("p2", "Bob"), PlayerInput("p3", "Carol")],
        GameMap.TEST,
        shuffle=identity_shuffle,
    )


@pytest.fixture
def room() -> GameRoom:
    return GameRoom("room-1", "Friday race", shuffle=identity_shuffle)


@pytest.fixture
def room_manager() -> RoomManager:
    return RoomManager(shuffle=identity_shuffle)


def best_card_index(hand) -> int:
    """Index of the highest-valued card, or 0 if nothing in hand moves."""
    valued = [(card.value, i) for i, card in enumerate(hand) if card.value is not None]
    if not valued:
        return 0
    return max(valued)[1]


def play_passive_turn(game) -> None:
    """
    Play one full turn where everyone plans gear 1 with their best card
    and then declines every option.
    """
    for pid in game.player_order:
        hand = game.players[pid].hand
        game.dispatch(pid, Action.plan(1, [best_card_index(hand)]))

    while game.phase == GamePhase.RESOLUTION:
        pid = game.current_player_id
        state = game.current_state
        if state == TurnState.MOVE:
            game.dispatch(pid, Action.move())
        elif state == TurnState.ADRENALINE:
            game.dispatch(pid, Action.adrenaline(False, False))
        elif state == TurnState.REACT:
            game.dispatch(pid, Action.react(ReactChoice.SKIP))
        elif state == TurnState.SLIPSTREAM:
            game.dispatch(pid, Action.slipstream(False))
        elif state == TurnState.DISCARD:
            game.dispatch(pid, Action.discard([]))
