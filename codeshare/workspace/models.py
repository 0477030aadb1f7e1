# Data models for the shared workspace

from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime
from threading import RLock
from typing import Optional, Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .file_tree import VirtualFileTree


class NodeKind(Enum):
    """Kind of a workspace entry"""
    FILE = "file"
    DIRECTORY = "directory"


@dataclass
class Node:
    """
    A file or directory in a room's workspace tree

    The full path is never stored on the node; it is derived from the
    node's position while walking the tree.
    """
    name: str
    kind: NodeKind
    content: Optional[str] = None  # Files only
    children: Optional[Dict[str, "Node"]] = None  # Directories only, keyed by name
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def file(cls, name: str, content: str = "") -> "Node":
        return cls(name=name, kind=NodeKind.FILE, content=content)

    @classmethod
    def directory(cls, name: str) -> "Node":
        return cls(name=name, kind=NodeKind.DIRECTORY, children={})

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    def renamed(self, name: str) -> "Node":
        """Deep copy of this node under a new name (subtree included)"""
        if not self.is_dir:
            return Node(
                name=name,
                kind=self.kind,
                content=self.content,
                created_at=self.created_at,
            )
        return Node(
            name=name,
            kind=self.kind,
            children={
                child_name: child.renamed(child_name)
                for child_name, child in (self.children or {}).items()
            },
            created_at=self.created_at,
        )


@dataclass
class User:
    """A live connection that is a member of exactly one room"""
    id: str  # Connection ID
    name: str  # Display name, not unique
    joined_at: datetime = field(default_factory=datetime.now)


@dataclass
class Room:
    """Collaboration session owning one workspace tree and a roster"""
    id: str
    tree: "VirtualFileTree"
    users: List[User] = field(default_factory=list)  # Ordered by join time
    created_at: datetime = field(default_factory=datetime.now)
    closed: bool = False  # Set once the last user leaves
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    def member(self, user_id: str) -> Optional[User]:
        for user in self.users:
            if user.id == user_id:
                return user
        return None
