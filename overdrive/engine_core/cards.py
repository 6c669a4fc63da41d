"""
Cards - Card kinds, starting decks per map, and the shuffle strategy.

Cards are plain values: two speed-3 cards are interchangeable.
Only the multiplicity of cards in each zone matters.

The shuffle function is injected into every player at creation so that
tests can replace it with `identity_shuffle` and get fully deterministic
games. No module-global random state is used.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable
import random

from .track import GameMap


class CardType(Enum):
    """The four kinds of card."""
    SPEED = "speed"
    UPGRADE = "upgrade"
    HEAT = "heat"
    STRESS = "stress"


@dataclass(frozen=True)
class Card:
    """
    A single card.

    Speed and upgrade cards carry a movement value.
    Heat and stress cards carry none.
    """
    kind: CardType
    value: int | None = None

    @property
    def is_movement(self) -> bool:
        return self.kind in (CardType.SPEED, CardType.UPGRADE)

    @property
    def is_penalty(self) -> bool:
        return self.kind in (CardType.HEAT, CardType.STRESS)

    def redacted(self) -> Card:
        """Return the card with its value hidden (kind only)."""
        return Card(kind=self.kind)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.kind.value}
        if self.value is not None:
            data["value"] = self.value
        return data

    @classmethod
    def speed(cls, value: int) -> Card:
        return cls(CardType.SPEED, value)

    @classmethod
    def upgrade(cls, value: int) -> Card:
        return cls(CardType.UPGRADE, value)

    @classmethod
    def heat(cls) -> Card:
        return cls(CardType.HEAT)

    @classmethod
    def stress(cls) -> Card:
        return cls(CardType.STRESS)


ShuffleFn = Callable[[list[Card]], list[Card]]


def identity_shuffle(cards: list[Card]) -> list[Card]:
    """Keep the order as-is. Used for deterministic games and tests."""
    return cards


def random_shuffle(seed: int | None = None) -> ShuffleFn:
    """
    Create a Fisher-Yates shuffle bound to its own RNG.

    Each call gets a private `random.Random`, so two games never share
    random state even when created with the same seed.
    """
    rng = random.Random(seed)

    def shuffle(cards: list[Card]) -> list[Card]:
        shuffled = list(cards)
        rng.shuffle(shuffled)
        return shuffled

    return shuffle


STARTING_SPEED_CARDS: tuple[Card, ...] = tuple(
    Card.speed(value) for value in (1, 1, 1, 2, 2, 2, 3, 3, 3, 4, 4, 4)
)

STARTING_UPGRADE_CARDS: tuple[Card, ...] = (
    Card.upgrade(0),
    Card.upgrade(5),
    Card.heat(),
)


@dataclass(frozen=True)
class MapCardConfig:
    """How many stress cards go in the deck and heat cards in the engine."""
    stress_cards: int
    heat_cards: int


MAP_CARD_CONFIG: dict[GameMap, MapCardConfig] = {
    GameMap.USA: MapCardConfig(stress_cards=3, heat_cards=6),
    GameMap.TEST: MapCardConfig(stress_cards=3, heat_cards=6),
}


def create_starting_deck(game_map: GameMap) -> list[Card]:
    """Build the unshuffled starting deck for a map."""
    config = MAP_CARD_CONFIG[game_map]
    return [
        *STARTING_SPEED_CARDS,
        *STARTING_UPGRADE_CARDS,
        *(Card.stress() for _ in range(config.stress_cards)),
    ]


def create_starting_engine(game_map: GameMap) -> list[Card]:
    """Build the starting engine (heat reservoir) for a map."""
    config = MAP_CARD_CONFIG[game_map]
    return [Card.heat() for _ in range(config.heat_cards)]


def starting_card_total(game_map: GameMap) -> int:
    """Cards a player owns at game start (deck plus engine)."""
    return len(create_starting_deck(game_map)) + len(create_starting_engine(game_map))
