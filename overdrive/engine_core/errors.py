"""
Engine Errors - Typed failures raised by the engine.

Every error carries a stable `error_code` so outer layers can map it to
a response without parsing messages. All of them are raised before the
action that caused them mutates anything, so the caller can simply
report the error and carry on with the same game.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for all engine failures."""
    error_code = "ENGINE_ERROR"
    default_message = "Engine error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


# Setup errors

class DuplicatePlayerId(EngineError):
    error_code = "DUPLICATE_PLAYER_ID"
    default_message = "Player IDs must be unique"


# Turn / phase violations

class InvalidActionForState(EngineError):
    error_code = "INVALID_ACTION_FOR_STATE"
    default_message = "Invalid action for current state"


class AlreadyActed(EngineError):
    error_code = "ALREADY_ACTED"
    default_message = "Player has already acted this state"


class NotYourTurn(EngineError):
    error_code = "NOT_YOUR_TURN"
    default_message = "Not your turn"


class GameFinished(EngineError):
    error_code = "GAME_FINISHED"
    default_message = "Race is finished - no actions allowed"


# Identity errors

class PlayerNotFound(EngineError):
    error_code = "PLAYER_NOT_FOUND"
    default_message = "Player not found"


# Resource errors

class NoHeatForShift(EngineError):
    error_code = "NO_HEAT_FOR_SHIFT"
    default_message = "Heat card required to shift by 2 gears"


class NoHeatToBoost(EngineError):
    error_code = "NO_HEAT_TO_BOOST"
    default_message = "No heat available to boost"


class OutOfCards(EngineError):
    error_code = "OUT_OF_CARDS"
    default_message = "No cards left to draw (deck and discard empty)"


# Validation errors

class IllegalShift(EngineError):
    error_code = "ILLEGAL_SHIFT"
    default_message = "Can only shift up or down by max 2 gears"


class WrongCardCount(EngineError):
    error_code = "WRONG_CARD_COUNT"
    default_message = "Wrong number of cards played for current gear"


class InvalidIndex(EngineError):
    error_code = "INVALID_INDEX"
    default_message = "Invalid card index"


class CannotDiscardHeat(EngineError):
    error_code = "CANNOT_DISCARD_HEAT"
    default_message = "Cannot discard heat cards"


class CannotDiscardStress(EngineError):
    error_code = "CANNOT_DISCARD_STRESS"
    default_message = "Cannot discard stress cards"


class ReactionUnavailable(EngineError):
    error_code = "REACTION_UNAVAILABLE"
    default_message = "Reaction not available"


class SlipstreamUnavailable(EngineError):
    error_code = "SLIPSTREAM_UNAVAILABLE"
    default_message = "Slipstream not available"
