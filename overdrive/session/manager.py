"""
Room Manager - Creates, lists and removes rooms.

LIFECYCLE:
1. A room is created with a name (in-memory only)
2. Players join; the first is host
3. The host starts a race; actions flow through the room
4. Quitting returns the room to waiting
5. An empty waiting room drops out of the listing

CONCURRENCY:
- Each room has its own lock
- Callers hold it around every room operation, so actions for one room
  reach its Game one at a time while other rooms proceed independently
- Rooms never share mutable state
"""

from __future__ import annotations
from typing import Iterator
from contextlib import contextmanager
import logging
import threading
import uuid

from ..engine_core.cards import ShuffleFn
from .room import GameRoom, RoomInfo, RoomStatus

logger = logging.getLogger(__name__)


class RoomManager:
    """
    Manages game rooms.

    Responsibilities:
    - Create rooms and hand out room IDs
    - Track live rooms for the lobby listing
    - Serialize access to each room

    No persistence - rooms are in-memory only.
    """

    def __init__(self, shuffle: ShuffleFn | None = None):
        self._rooms: dict[str, GameRoom] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._shuffle = shuffle

    def create_room(self, name: str) -> GameRoom:
        """Create an empty room waiting for players."""
        room_id = str(uuid.uuid4())
        room = GameRoom(room_id, name or "Game Room", shuffle=self._shuffle)
        with self._registry_lock:
            self._rooms[room_id] = room
            self._locks[room_id] = threading.Lock()
        logger.info("Created room %s (%s)", room_id, room.name)
        return room

    def get_room(self, room_id: str) -> GameRoom | None:
        """Get a room by ID."""
        return self._rooms.get(room_id)

    def remove_room(self, room_id: str) -> bool:
        """Drop a room and its game. Returns False if it did not exist."""
        with self._registry_lock:
            room = self._rooms.pop(room_id, None)
            self._locks.pop(room_id, None)
        if room is None:
            return False
        room.quit_game()
        logger.info("Removed room %s", room_id)
        return True

    def remove_if_empty(self, room_id: str) -> bool:
        """
        Drop one room if it is waiting with nobody in it.

        The check runs under the room's lock, so a join queued on the
        same lock either lands first or finds the room gone.
        """
        with self.lock_for(room_id) as room:
            if room is None or not _is_idle(room):
                return False
            return self.remove_room(room_id)

    def list_rooms(self) -> list[RoomInfo]:
        """Rooms worth showing in the lobby: anything not empty and waiting."""
        with self._registry_lock:
            rooms = list(self._rooms.values())
        return [room.info for room in rooms if not _is_idle(room)]

    def cleanup_empty_rooms(self) -> int:
        """
        Remove waiting rooms nobody is in.

        Returns the number of rooms removed.
        """
        with self._registry_lock:
            room_ids = list(self._rooms)
        return sum(1 for room_id in room_ids if self.remove_if_empty(room_id))

    @contextmanager
    def lock_for(self, room_id: str) -> Iterator[GameRoom | None]:
        """
        Hold a room's lock for the duration of the block.

        Yields the room, or None if it does not exist.
        """
        lock = self._locks.get(room_id)
        if lock is None:
            yield None
            return
        with lock:
            yield self._rooms.get(room_id)


def _is_idle(room: GameRoom) -> bool:
    return room.player_count == 0 and room.status == RoomStatus.WAITING
