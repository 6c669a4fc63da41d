"""
Track - Static per-map track data.

A track is a loop of `length` cells with corners at fixed cells.
Multiple laps are handled by the caller: the finish line sits at
`length * laps` in absolute cells.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class GameMap(Enum):
    """Available maps."""
    USA = "USA"
    TEST = "Test"


@dataclass(frozen=True)
class Corner:
    """A corner: crossing it faster than `speed_limit` costs heat."""
    position: int
    speed_limit: int

    def to_dict(self) -> dict[str, Any]:
        return {"position": self.position, "speed_limit": self.speed_limit}


@dataclass(frozen=True)
class Track:
    """Immutable track layout. Corners are kept in track order."""
    length: int
    corners: tuple[Corner, ...] = field(default_factory=tuple)

    def finish_position(self, laps: int) -> int:
        return self.length * laps

    def to_dict(self) -> dict[str, Any]:
        return {
            "length": self.length,
            "corners": [c.to_dict() for c in self.corners],
        }


MAP_TRACKS: dict[GameMap, Track] = {
    GameMap.TEST: Track(
        length=24,
        corners=(
            Corner(position=6, speed_limit=4),
            Corner(position=15, speed_limit=3),
        ),
    ),
    # Corner layout not surveyed yet
    GameMap.USA: Track(length=69),
}


def get_map_track(game_map: GameMap) -> Track:
    """Get the track for a map."""
    return MAP_TRACKS[game_map]
