"""
Action System - Typed player actions and action results.

Each action is its own frozen dataclass tagged with the `TurnState` it
answers. The game only accepts an action whose tag matches its current
sub-state.

All state changes flow through `Game.dispatch()`.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from .state import TurnState


class ReactChoice(Enum):
    """Choices available in the react sub-state."""
    COOLDOWN = "cooldown"
    BOOST = "boost"
    SKIP = "skip"


@dataclass(frozen=True)
class Action:
    """
    Base class for player actions.

    Use the factories for brevity:
        Action.plan(gear=2, card_indices=[6, 5])
        Action.react(ReactChoice.SKIP)
    """
    action_type: ClassVar[TurnState]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.action_type.value}

    @classmethod
    def plan(cls, gear: int, card_indices: list[int]) -> PlanAction:
        return PlanAction(gear=gear, card_indices=tuple(card_indices))

    @classmethod
    def move(cls) -> MoveAction:
        return MoveAction()

    @classmethod
    def adrenaline(cls, accept_move: bool, accept_cooldown: bool) -> AdrenalineAction:
        return AdrenalineAction(accept_move=accept_move, accept_cooldown=accept_cooldown)

    @classmethod
    def react(cls, choice: ReactChoice | str) -> ReactAction:
        return ReactAction(choice=ReactChoice(choice))

    @classmethod
    def slipstream(cls, use: bool) -> SlipstreamAction:
        return SlipstreamAction(use=use)

    @classmethod
    def discard(cls, card_indices: list[int] | None = None) -> DiscardAction:
        return DiscardAction(card_indices=tuple(card_indices or ()))


@dataclass(frozen=True)
class PlanAction(Action):
    """Choose a gear and play exactly `gear` cards from hand."""
    action_type: ClassVar[TurnState] = TurnState.PLAN
    gear: int
    card_indices: tuple[int, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.action_type.value,
            "gear": self.gear,
            "card_indices": list(self.card_indices),
        }


@dataclass(frozen=True)
class MoveAction(Action):
    """Acknowledge the revealed move."""
    action_type: ClassVar[TurnState] = TurnState.MOVE


@dataclass(frozen=True)
class AdrenalineAction(Action):
    action_type: ClassVar[TurnState] = TurnState.ADRENALINE
    accept_move: bool
    accept_cooldown: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.action_type.value,
            "accept_move": self.accept_move,
            "accept_cooldown": self.accept_cooldown,
        }


@dataclass(frozen=True)
class ReactAction(Action):
    action_type: ClassVar[TurnState] = TurnState.REACT
    choice: ReactChoice

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.action_type.value, "choice": self.choice.value}


@dataclass(frozen=True)
class SlipstreamAction(Action):
    action_type: ClassVar[TurnState] = TurnState.SLIPSTREAM
    use: bool

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.action_type.value, "use": self.use}


@dataclass(frozen=True)
class DiscardAction(Action):
    """Discard chosen hand cards (never heat or stress), then redraw."""
    action_type: ClassVar[TurnState] = TurnState.DISCARD
    card_indices: tuple[int, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.action_type.value,
            "card_indices": list(self.card_indices),
        }


def parse_action(data: dict[str, Any]) -> Action:
    """
    Parse an action from a dictionary.

    Args:
        data: Dictionary with "type" key and action-specific fields

    Returns:
        Typed Action object

    Raises:
        ValueError: If type is unknown or required fields are missing
    """
    action_type = data.get("type")
    if not action_type:
        raise ValueError("Action missing 'type' field")

    try:
        atype = TurnState(action_type)
    except ValueError:
        raise ValueError(f"Unknown action type: {action_type}")

    try:
        if atype == TurnState.PLAN:
            return Action.plan(int(data["gear"]), [int(i) for i in data["card_indices"]])
        elif atype == TurnState.MOVE:
            return Action.move()
        elif atype == TurnState.ADRENALINE:
            return Action.adrenaline(
                bool(data.get("accept_move", False)),
                bool(data.get("accept_cooldown", False)),
            )
        elif atype == TurnState.REACT:
            return Action.react(data["choice"])
        elif atype == TurnState.SLIPSTREAM:
            return Action.slipstream(bool(data["use"]))
        elif atype == TurnState.DISCARD:
            return Action.discard([int(i) for i in data.get("card_indices", [])])
    except KeyError as e:
        raise ValueError(f"Action '{action_type}' missing field {e}")

    raise ValueError(f"Unhandled action type: {atype}")


def parse_actions(data: list[dict[str, Any]]) -> list[Action]:
    """Parse a list of actions from dictionaries."""
    return [parse_action(d) for d in data]


@dataclass
class ActionResult:
    """
    Result of applying an action through the session layer.

    Contains:
    - Whether the action succeeded
    - The acting player's view of the new state (if succeeded)
    - Error message and code (if failed)
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None

    # Human-readable summary for the UI
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
        )
