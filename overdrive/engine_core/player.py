"""
Player - One racer's cards, gear and track position.

The player owns five card zones:
- deck: draw pile (drawn from the end)
- hand: up to 7 cards
- played: cards committed this turn
- discard: spent cards, reshuffled into the deck when it runs out
- engine: heat reservoir paid from for shifts, boosts and corners

Every operation that can fail checks all of its preconditions before
touching any zone, so a raised error leaves the player unchanged.
"""

from __future__ import annotations
from typing import Iterable
import logging

from .cards import Card, CardType, ShuffleFn, random_shuffle, create_starting_deck, create_starting_engine
from .track import Corner, GameMap, Track
from .action import ReactChoice
from .state import PlayerView, TurnActions
from .errors import (
    IllegalShift,
    NoHeatForShift,
    WrongCardCount,
    InvalidIndex,
    CannotDiscardHeat,
    CannotDiscardStress,
    OutOfCards,
    ReactionUnavailable,
    NoHeatToBoost,
)

logger = logging.getLogger(__name__)

HAND_SIZE = 7
MIN_GEAR = 1
MAX_GEAR = 4
MAX_SHIFT = 2
MAX_PLAYERS_PER_CELL = 2

# Low gears give more chances to cool the engine
COOLDOWNS_BY_GEAR = {1: 3, 2: 1}


class Player:
    """
    A participant's full card and movement state.

    Created once by the game and mutated only through its methods.
    """

    def __init__(
        self,
        player_id: str,
        username: str = "",
        *,
        gear: int = MIN_GEAR,
        position: int = 0,
        on_raceline: bool = True,
        deck: Iterable[Card] = (),
        hand: Iterable[Card] = (),
        played: Iterable[Card] = (),
        engine: Iterable[Card] = (),
        discard: Iterable[Card] = (),
        shuffle: ShuffleFn | None = None,
    ):
        if not player_id:
            raise ValueError("Player id is required")

        self._shuffle = shuffle or random_shuffle()

        self.player_id = player_id
        self.username = username
        self.gear = gear
        self.position = position
        self.on_raceline = on_raceline

        self.deck: list[Card] = self._shuffle(list(deck))
        self.hand: list[Card] = list(hand)
        self.played: list[Card] = list(played)
        self.engine: list[Card] = list(engine)
        self.discard: list[Card] = list(discard)

        self.has_adrenaline = False
        self.lap = 1
        self.finished = False

        # Per-turn scratch state
        self.start_position = 0
        self.card_speed = 0
        self.available_cooldowns = 0
        self.boost_available = False
        self.turn_actions = TurnActions()

        # Stress cards handed out by spinouts (from outside the player's cards)
        self.penalty_cards = 0

    @classmethod
    def for_map(
        cls,
        player_id: str,
        game_map: GameMap,
        username: str = "",
        position: int = 0,
        on_raceline: bool = True,
        shuffle: ShuffleFn | None = None,
    ) -> Player:
        """Create a player with the map's starting deck and engine."""
        return cls(
            player_id,
            username,
            position=position,
            on_raceline=on_raceline,
            deck=create_starting_deck(game_map),
            engine=create_starting_engine(game_map),
            shuffle=shuffle,
        )

    @property
    def card_total(self) -> int:
        """Cards across all five zones."""
        return (
            len(self.deck) + len(self.hand) + len(self.played)
            + len(self.discard) + len(self.engine)
        )

    # =========================================================================
    # Drawing
    # =========================================================================

    def draw(self) -> None:
        """Refill the hand to 7, reshuffling the discard pile if needed."""
        missing = HAND_SIZE - len(self.hand)
        if missing > len(self.deck) + len(self.discard):
            raise OutOfCards()
        while len(self.hand) < HAND_SIZE:
            if not self.deck:
                self._reshuffle()
            self.hand.append(self.deck.pop())

    def _reshuffle(self) -> None:
        self.deck = self._shuffle(self.discard)
        self.discard = []

    def _draw_one(self) -> Card | None:
        """Draw a single card, or None if deck and discard are both empty."""
        if not self.deck:
            if not self.discard:
                return None
            self._reshuffle()
        return self.deck.pop()

    # =========================================================================
    # Planning
    # =========================================================================

    def shift_gears(self, next_gear: int) -> None:
        """Shifting by 2 gears costs 1 heat (engine to discard)."""
        self._check_shift(next_gear)
        if abs(next_gear - self.gear) == MAX_SHIFT:
            self.discard.append(self.engine.pop())
        self.gear = next_gear

    def play_cards(self, card_indices: Iterable[int]) -> None:
        """Move exactly `gear` cards from hand to played."""
        indices = list(card_indices)
        self._check_hand_indices(indices, expected_count=self.gear)
        self._move_to_played(indices)

    def plan(self, gear: int, card_indices: Iterable[int]) -> None:
        """Shift and play as one step; the card count is checked against the new gear."""
        indices = list(card_indices)
        self._check_shift(gear)
        self._check_hand_indices(indices, expected_count=gear)
        self.shift_gears(gear)
        self._move_to_played(indices)

    def _check_shift(self, next_gear: int) -> None:
        if not MIN_GEAR <= next_gear <= MAX_GEAR:
            raise IllegalShift(f"Gear must be between {MIN_GEAR} and {MAX_GEAR}")
        diff = abs(next_gear - self.gear)
        if diff > MAX_SHIFT:
            raise IllegalShift()
        if diff == MAX_SHIFT and not self._has_engine_heat():
            raise NoHeatForShift()

    def _check_hand_indices(self, indices: list[int], expected_count: int | None = None) -> None:
        if expected_count is not None and len(indices) != expected_count:
            raise WrongCardCount(f"Must play exactly {expected_count} cards")
        seen = set()
        for index in indices:
            if index < 0 or index >= len(self.hand) or index in seen:
                raise InvalidIndex(f"Invalid card index: {index}")
            seen.add(index)

    def _move_to_played(self, indices: list[int]) -> None:
        # Highest first: removing a lower index would shift the higher ones
        for index in sorted(indices, reverse=True):
            self.played.append(self.hand.pop(index))

    # =========================================================================
    # Heat
    # =========================================================================

    def _has_engine_heat(self) -> bool:
        return any(card.kind == CardType.HEAT for card in self.engine)

    def _has_hand_heat(self) -> bool:
        return any(card.kind == CardType.HEAT for card in self.hand)

    def pay_heat(self, amount: int) -> int:
        """
        Pay heat by moving cards from engine to discard.

        Returns the heat actually paid, which is less than `amount`
        when the engine runs dry.
        """
        paid = 0
        while paid < amount and self.engine:
            self.discard.append(self.engine.pop())
            paid += 1
        return paid

    def cooldown(self, amount: int) -> None:
        """Move up to `amount` heat cards from hand back to the engine."""
        for _ in range(amount):
            index = next(
                (i for i, card in enumerate(self.hand) if card.kind == CardType.HEAT),
                None,
            )
            if index is None:
                break
            self.engine.append(self.hand.pop(index))

    # =========================================================================
    # Resolution
    # =========================================================================

    def begin_resolution(self) -> None:
        """Reveal played cards: resolve stress, offer reactions, compute speed."""
        self.start_position = self.position
        self.boost_available = True
        self.available_cooldowns += COOLDOWNS_BY_GEAR.get(self.gear, 0)
        self._resolve_stress_cards()
        self.card_speed = sum(
            card.value or 0 for card in self.played if card.is_movement
        )

    def _resolve_stress_cards(self) -> None:
        """Each played stress card is replaced by a draw; penalty draws are discarded."""
        stress_count = sum(1 for card in self.played if card.kind == CardType.STRESS)
        for _ in range(stress_count):
            drawn = self._draw_one()
            if drawn is None:
                continue
            if drawn.is_penalty:
                self.discard.append(drawn)
            else:
                self.played.append(drawn)

    def confirm_move(self) -> None:
        """Apply the staged movement."""
        self.position = self.start_position + self.card_speed

    def set_adrenaline(self, value: bool) -> None:
        self.has_adrenaline = value

    def apply_adrenaline(self, accept_move: bool, accept_cooldown: bool) -> None:
        """Adrenaline grants +1 move and +1 cooldown, each optional."""
        if not self.has_adrenaline:
            return
        self.turn_actions.adrenaline_move = accept_move
        self.turn_actions.adrenaline_cooldown = accept_cooldown
        if accept_move:
            self.position += 1
            self.card_speed += 1
        if accept_cooldown:
            self.available_cooldowns += 1

    @property
    def available_reactions(self) -> frozenset[ReactChoice]:
        """Reactions currently offered, whether or not they can be afforded."""
        reactions = set()
        if self.available_cooldowns > 0:
            reactions.add(ReactChoice.COOLDOWN)
        if self.boost_available:
            reactions.add(ReactChoice.BOOST)
        return frozenset(reactions)

    def has_viable_reactions(self) -> bool:
        """True if an offered reaction has the heat it needs."""
        offered = self.available_reactions
        if ReactChoice.COOLDOWN in offered and self._has_hand_heat():
            return True
        if ReactChoice.BOOST in offered and self._has_engine_heat():
            return True
        return False

    def react(self, choice: ReactChoice) -> bool:
        """
        Apply one reaction.

        Returns True while another viable reaction remains.
        """
        if choice != ReactChoice.SKIP and choice not in self.available_reactions:
            raise ReactionUnavailable(f"Reaction {choice.value} not available")
        if choice == ReactChoice.BOOST and not self._has_engine_heat():
            raise NoHeatToBoost()

        self.turn_actions.reactions.append(choice.value)

        if choice == ReactChoice.SKIP:
            self.available_cooldowns = 0
            self.boost_available = False
        elif choice == ReactChoice.COOLDOWN:
            self.cooldown(1)
            self.available_cooldowns -= 1
        elif choice == ReactChoice.BOOST:
            self.pay_heat(1)
            self._boost()
            self.boost_available = False
        else:
            raise ReactionUnavailable(f"Unknown reaction: {choice}")

        return self.has_viable_reactions()

    def _boost(self) -> None:
        """Flip cards until a speed card shows up and add its value."""
        # Flipped cards land in discard and could be reshuffled back, so
        # cap the search at what was available when it started
        remaining = len(self.deck) + len(self.discard)
        while remaining > 0:
            drawn = self._draw_one()
            if drawn is None:
                break
            remaining -= 1
            self.discard.append(drawn)
            if drawn.kind == CardType.SPEED:
                bonus = drawn.value or 0
                self.position += bonus
                self.card_speed += bonus
                self.turn_actions.boost_speed = bonus
                return
        logger.debug("Boost for %s found no speed card", self.player_id)

    def can_slipstream(self, others: Iterable[Player]) -> bool:
        """Slipstream needs a car in the same cell or the cell just ahead."""
        return any(
            other.position in (self.position, self.position + 1)
            for other in others
            if other.player_id != self.player_id
        )

    def slipstream(self, distance: int) -> None:
        self.position += distance

    def check_corners(self, corners: Iterable[Corner]) -> bool:
        """
        Pay heat for every corner crossed above its limit; spin out if short.

        Returns True if the player spun out.
        """
        # Corner cells are lap-one positions and are not wrapped, so corners
        # only cost heat on the first lap.
        crossed = [
            c for c in corners
            if self.start_position < c.position <= self.position
        ]
        for corner in crossed:
            penalty = self.card_speed - corner.speed_limit
            if penalty <= 0:
                continue
            paid = self.pay_heat(penalty)
            if paid < penalty:
                self.spin_out(corner.position)
                return True
        return False

    def spin_out(self, corner_position: int) -> None:
        """Take stress cards, drop to first gear and stop before the corner."""
        stress_count = 1 if self.gear <= 2 else 2
        for _ in range(stress_count):
            self.hand.append(Card.stress())
        self.penalty_cards += stress_count
        logger.info(
            "Player %s spun out at corner %s (gear %s, +%s stress)",
            self.player_id, corner_position, self.gear, stress_count,
        )
        self.gear = MIN_GEAR
        self.position = corner_position - 1

    def resolve_collision(self, others: Iterable[Player]) -> None:
        """
        Settle into the highest cell at or behind `position` with room.

        An empty cell gives the raceline; a cell with one car gives the
        other lane.
        """
        others = [o for o in others if o.player_id != self.player_id]
        target = self.position
        while True:
            occupants = [o for o in others if o.position == target]
            if len(occupants) < MAX_PLAYERS_PER_CELL:
                self.position = target
                self.on_raceline = not occupants or not occupants[0].on_raceline
                return
            target -= 1

    def update_race_progress(self, track: Track, total_laps: int) -> bool:
        """Update the lap counter; True only when the finish is first crossed."""
        self.lap = self.position // track.length + 1
        if not self.finished and self.position >= track.finish_position(total_laps):
            self.finished = True
            return True
        return False

    # =========================================================================
    # End of turn
    # =========================================================================

    def discard_cards(self, discard_indices: Iterable[int]) -> None:
        """Discard chosen hand cards plus everything played this turn."""
        indices = list(discard_indices)
        self._check_discard(indices)
        for index in sorted(indices, reverse=True):
            self.discard.append(self.hand.pop(index))
        self.discard.extend(self.played)
        self.played = []

    def _check_discard(self, indices: list[int]) -> None:
        self._check_hand_indices(indices)
        for index in indices:
            card = self.hand[index]
            if card.kind == CardType.HEAT:
                raise CannotDiscardHeat()
            if card.kind == CardType.STRESS:
                raise CannotDiscardStress()

    def end_turn(self, discard_indices: Iterable[int]) -> None:
        """Discard, redraw to 7 and clear reaction scratch state."""
        indices = list(discard_indices)
        self._check_discard(indices)
        hand_after = len(self.hand) - len(indices)
        pool_after = len(self.deck) + len(self.discard) + len(indices) + len(self.played)
        if HAND_SIZE - hand_after > pool_after:
            raise OutOfCards()

        self.discard_cards(indices)
        self.turn_actions.discard_count = len(indices)
        self.draw()
        self.reset_reactions()

    def reset_reactions(self) -> None:
        """Clear any remaining cooldowns and boost at end of turn."""
        self.available_cooldowns = 0
        self.boost_available = False

    def clear_turn_actions(self) -> None:
        self.turn_actions = TurnActions()

    # =========================================================================
    # Views
    # =========================================================================

    def to_view(self) -> PlayerView:
        """Frozen snapshot of this player with the full hand."""
        return PlayerView(
            player_id=self.player_id,
            username=self.username,
            gear=self.gear,
            position=self.position,
            on_raceline=self.on_raceline,
            hand=tuple(self.hand),
            deck_size=len(self.deck),
            played=tuple(self.played),
            speed=self.card_speed,
            engine_size=len(self.engine),
            discard_size=len(self.discard),
            discard_top=self.discard[-1] if self.discard else None,
            has_adrenaline=self.has_adrenaline,
            available_cooldowns=self.available_cooldowns,
            available_reactions=tuple(sorted(r.value for r in self.available_reactions)),
            lap=self.lap,
            finished=self.finished,
            turn_actions=self.turn_actions.copy(),
        )

    def __repr__(self) -> str:
        return (
            f"Player({self.player_id!r}, gear={self.gear}, position={self.position}, "
            f"raceline={self.on_raceline})"
        )
