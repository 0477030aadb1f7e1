# Real-time service - handles client events against the room registry

import logging
from threading import Lock
from typing import Any, Dict, Optional

from . import events
from .gateway import BroadcastGateway
from ..serializers import node_to_dict, roster_to_list, tree_to_dict, user_to_dict
from ..workspace.file_tree import join_path, split_path
from ..workspace.models import Node, NodeKind, User
from ..workspace.registry import RoomRegistry

logger = logging.getLogger(__name__)


class RealtimeService:
    """
    Applies client events to rooms and broadcasts their effects

    Every mutation runs under the target room's lock and broadcasts before
    releasing it, so a room's members observe mutations in receipt order.
    Each method returns whether the event took effect; failures are
    reported to the originating connection as ``errorNotice``.
    """

    def __init__(self, registry: RoomRegistry, gateway: BroadcastGateway):
        self.registry = registry
        self.gateway = gateway
        # Connection ID -> room ID the connection has joined
        self.connections: Dict[str, str] = {}
        self.lock = Lock()

    def room_of(self, connection_id: str) -> Optional[str]:
        with self.lock:
            return self.connections.get(connection_id)

    def join(self, connection_id: str, room_id: str, user_name: str) -> bool:
        """
        Join a room

        A connection belongs to one room at a time; joining a different room
        leaves the previous one first. The joiner receives the file snapshot
        and the roster, everyone else a ``memberJoined`` notice.
        """
        previous = self.room_of(connection_id)
        if previous is not None and previous != room_id:
            self.disconnect(connection_id)

        with self.registry.locked(room_id) as room:
            if room is None:
                self._notice(connection_id, "Room not found")
                return False
            user = User(id=connection_id, name=user_name)
            self.registry.join(room_id, user)
            with self.lock:
                self.connections[connection_id] = room_id
            roster = roster_to_list(room.users)
            self.gateway.to_user(room_id, connection_id, events.FILES_SNAPSHOT, tree_to_dict(room.tree))
            self.gateway.to_room_except(room_id, connection_id, events.MEMBER_JOINED, {
                "member": user_to_dict(user),
                "roster": roster,
            })
            self.gateway.to_user(room_id, connection_id, events.ROSTER_CHANGED, roster)
            return True

    def edit_content(self, connection_id: str, room_id: str, file_path: str, content: str) -> bool:
        """Replace a file's content (last write wins) and relay it to the others"""
        with self.registry.locked(room_id) as room:
            if not self._is_member(room, connection_id):
                return False
            if not room.tree.update_content(file_path, content):
                logger.debug("Ignoring edit of %s in room %s: not a file", file_path, room_id)
                return False
            self.gateway.to_room_except(room_id, connection_id, events.CONTENT_UPDATED, {
                "filePath": _canonical(file_path),
                "content": content,
            })
            return True

    def cursor_move(self, connection_id: str, room_id: str, position: Any) -> bool:
        with self.registry.locked(room_id) as room:
            if not self._is_member(room, connection_id):
                return False
            user = room.member(connection_id)
            self.gateway.to_room_except(room_id, connection_id, events.CURSOR_MOVED, {
                "userId": user.id,
                "userName": user.name,
                "position": position,
            })
            return True

    def create_entry(
        self,
        connection_id: str,
        room_id: str,
        file_path: str,
        content: Optional[str] = None,
        kind: str = NodeKind.FILE.value,
    ) -> bool:
        """Create (or replace) a file or directory, auto-creating parent directories"""
        try:
            node_kind = NodeKind(kind)
        except ValueError:
            self._notice(connection_id, f"Invalid entry kind: {kind}")
            return False

        segments = split_path(file_path)
        if not segments:
            self._notice(connection_id, f"Invalid path: {file_path}")
            return False
        path = join_path(segments)
        name = segments[-1]
        node = Node.directory(name) if node_kind is NodeKind.DIRECTORY else Node.file(name, content or "")

        with self.registry.locked(room_id) as room:
            if not self._is_member(room, connection_id):
                return False
            if not room.tree.upsert(path, node):
                self._notice(connection_id, f"Cannot create {path}: a file is in the way")
                return False
            self.gateway.to_room(room_id, events.ENTRY_CREATED, {
                "filePath": path,
                "node": node_to_dict(room.tree.resolve(path), path),
            })
            return True

    def delete_entry(self, connection_id: str, room_id: str, file_path: str) -> bool:
        """Delete an entry and its subtree; deleting a missing path is a silent no-op"""
        with self.registry.locked(room_id) as room:
            if not self._is_member(room, connection_id):
                return False
            if not room.tree.remove(file_path):
                logger.debug("Delete of missing %s in room %s", file_path, room_id)
                return False
            self.gateway.to_room(room_id, events.ENTRY_DELETED, {"filePath": _canonical(file_path)})
            return True

    def rename_entry(self, connection_id: str, room_id: str, old_path: str, new_path: str) -> bool:
        """Move an entry; missing parents of the new path are created"""
        with self.registry.locked(room_id) as room:
            if not self._is_member(room, connection_id):
                return False
            if not room.tree.move(old_path, new_path):
                logger.debug("Rename %s -> %s in room %s was a no-op", old_path, new_path, room_id)
                return False
            self.gateway.to_room(room_id, events.ENTRY_RENAMED, {
                "oldPath": _canonical(old_path),
                "newPath": _canonical(new_path),
            })
            return True

    def disconnect(self, connection_id: str) -> None:
        """Drop a connection; the room is destroyed when its last member leaves"""
        with self.lock:
            room_id = self.connections.pop(connection_id, None)
        if room_id is None:
            return

        with self.registry.locked(room_id) as room:
            if room is None:
                return
            remaining = self.registry.leave(room_id, connection_id)
            if remaining:
                self.gateway.to_room(room_id, events.MEMBER_LEFT, {
                    "memberId": connection_id,
                    "roster": roster_to_list(remaining),
                })

    def _is_member(self, room, connection_id: str) -> bool:
        if room is None:
            self._notice(connection_id, "Room not found")
            return False
        if room.member(connection_id) is None:
            self._notice(connection_id, "Not a member of this room")
            return False
        return True

    def _notice(self, connection_id: str, message: str) -> None:
        self.gateway.to_user(None, connection_id, events.ERROR_NOTICE, {"message": message})


def _canonical(path: str) -> str:
    """Normalized form of a path that a tree operation has already accepted"""
    segments = split_path(path)
    return join_path(segments) if segments else path
