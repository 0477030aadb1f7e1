"""Per-room fan-out of workspace and execution events."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from ..workspace.registry import RoomRegistry

logger = logging.getLogger(__name__)


class Channel(Protocol):
    """Transport that can push one event to one live connection."""

    def send(self, connection_id: str, event: str, payload: Any) -> None:
        ...


class BroadcastGateway:
    """Delivers events to the members of a room.

    The room's own lock is the single ordering point: every delivery takes it,
    and the roster is read under it at delivery time. Handlers that mutate a
    room hold the same (reentrant) lock across mutate + broadcast, so members
    see a room's events in the order they were applied. Rooms never share a
    lock, so there is no ordering across rooms.
    """

    def __init__(self, registry: RoomRegistry, channel: Channel) -> None:
        self.registry = registry
        self.channel = channel

    def to_room(self, room_id: str, event: str, payload: Any) -> int:
        return self._fan_out(room_id, event, payload, exclude=None)

    def to_room_except(
        self, room_id: str, origin_user_id: str, event: str, payload: Any
    ) -> int:
        return self._fan_out(room_id, event, payload, exclude=origin_user_id)

    def to_user(self, room_id: Optional[str], user_id: str, event: str, payload: Any) -> None:
        """Send to one connection, ordered with its room's events when it has one."""
        if room_id is None:
            self._deliver(user_id, event, payload)
            return
        with self.registry.locked(room_id):
            self._deliver(user_id, event, payload)

    def _fan_out(
        self, room_id: str, event: str, payload: Any, exclude: Optional[str]
    ) -> int:
        delivered = 0
        with self.registry.locked(room_id) as room:
            if room is None:
                return 0
            for user in list(room.users):
                if user.id == exclude:
                    continue
                if self._deliver(user.id, event, payload):
                    delivered += 1
        return delivered

    def _deliver(self, connection_id: str, event: str, payload: Any) -> bool:
        try:
            self.channel.send(connection_id, event, payload)
        except Exception as exc:
            # Remaining members still receive the event
            logger.warning("Failed to send %s to %s: %s", event, connection_id, exc)
            return False
        return True
