# In-memory room registry
# Rooms live for the lifetime of the process and die with their last member

import logging
from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator, List, Optional
import uuid

from .file_tree import VirtualFileTree
from .models import Node, Room, User

logger = logging.getLogger(__name__)

STARTER_FILES = {
    "/main.js": '// Welcome to the collaborative code editor!\nconsole.log("Hello, World!");',
    "/example.py": '# Python example\nprint("Hello from Python!")',
}


def seeded_tree() -> VirtualFileTree:
    """Fresh workspace tree holding the starter files"""
    tree = VirtualFileTree()
    for path, content in STARTER_FILES.items():
        tree.upsert(path, Node.file(path.rsplit("/", 1)[-1], content))
    return tree


class RoomRegistry:
    """
    Thread-safe registry of live rooms

    ``self.lock`` only guards the id -> room map. Everything that touches a
    room's roster or tree runs under that room's own ``room.lock``, so rooms
    never contend with each other.
    """

    ROOM_ID_LENGTH = 8

    def __init__(self):
        self.rooms: Dict[str, Room] = {}
        self.lock = Lock()

    def __len__(self) -> int:
        with self.lock:
            return len(self.rooms)

    def room_ids(self) -> List[str]:
        with self.lock:
            return list(self.rooms)

    def create(self) -> Room:
        """Create a room with a seeded workspace and return it"""
        tree = seeded_tree()
        with self.lock:
            room_id = self._new_room_id()
            room = Room(id=room_id, tree=tree)
            self.rooms[room_id] = room
        logger.info("Room %s created", room_id)
        return room

    def get(self, room_id: str) -> Optional[Room]:
        """Get a live room by ID"""
        with self.lock:
            return self.rooms.get(room_id)

    @contextmanager
    def locked(self, room_id: str) -> Iterator[Optional[Room]]:
        """
        Hold a room's serialization scope

        Yields the room, or None if it does not exist or was destroyed while
        waiting for the lock.
        """
        room = self.get(room_id)
        if room is None:
            yield None
            return
        with room.lock:
            yield None if room.closed else room

    def join(self, room_id: str, user: User) -> Optional[Room]:
        """
        Add a user to a room's roster

        A user already on the roster with the same connection ID is replaced
        rather than duplicated.

        Returns:
            The room, or None if it does not exist
        """
        with self.locked(room_id) as room:
            if room is None:
                return None
            room.users = [u for u in room.users if u.id != user.id]
            room.users.append(user)
            logger.info("%s joined room %s", user.name, room_id)
            return room

    def leave(self, room_id: str, user_id: str) -> Optional[List[User]]:
        """
        Remove a user from a room's roster

        When the roster becomes empty the room and its tree are destroyed
        immediately.

        Returns:
            The remaining roster, or None if the room does not exist
        """
        with self.locked(room_id) as room:
            if room is None:
                return None
            room.users = [u for u in room.users if u.id != user_id]
            remaining = list(room.users)
            logger.info("%s left room %s", user_id, room_id)
            if not remaining:
                room.closed = True
                with self.lock:
                    self.rooms.pop(room_id, None)
                logger.info("Room %s deleted (empty)", room_id)
            return remaining

    def _new_room_id(self) -> str:
        while True:
            room_id = uuid.uuid4().hex[:self.ROOM_ID_LENGTH]
            if room_id not in self.rooms:
                return room_id
