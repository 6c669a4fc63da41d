"""
Session Module - Rooms around the race engine.

A room represents one group of players:
- Created from the lobby with a name
- Collects players, elects a host
- Owns at most one Game at a time
- Serializes actions so the engine sees one caller

Rooms are EPHEMERAL:
- No persistence to database
- Dropped when empty
"""

from .room import GameRoom, RoomError, RoomInfo, RoomPlayer, RoomStatus, MAX_PLAYERS, MIN_PLAYERS
from .manager import RoomManager

__all__ = [
    "GameRoom",
    "RoomError",
    "RoomInfo",
    "RoomPlayer",
    "RoomStatus",
    "RoomManager",
    "MAX_PLAYERS",
    "MIN_PLAYERS",
]
