# Shared workspace module

from .file_tree import VirtualFileTree
from .models import Node, NodeKind, Room, User
from .registry import RoomRegistry

__all__ = ['Node', 'NodeKind', 'Room', 'RoomRegistry', 'User', 'VirtualFileTree']
