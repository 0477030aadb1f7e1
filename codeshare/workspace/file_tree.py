# Virtual file tree - path-addressed CRUD over a room's nested workspace

import logging
from typing import Iterator, Optional, Tuple

from .models import Node, NodeKind

logger = logging.getLogger(__name__)

ROOT_PATH = "/"


def split_path(path: str) -> Optional[Tuple[str, ...]]:
    """
    Normalize a slash-delimited path into its segments

    Empty segments are dropped, so ``//a//b`` and ``/a/b`` are equivalent.
    Returns None for paths containing ``.`` or ``..`` segments.
    """
    segments = tuple(part for part in path.split("/") if part)
    if any(part in (".", "..") for part in segments):
        return None
    return segments


def join_path(segments: Tuple[str, ...]) -> str:
    return "/" + "/".join(segments)


class VirtualFileTree:
    """
    In-memory workspace tree rooted at ``/``

    Every node is owned by exactly one parent's child map; paths are derived
    from position, never stored. The tree itself is not thread-safe: callers
    mutate it under the owning room's lock.
    """

    def __init__(self):
        self.root = Node(name=ROOT_PATH, kind=NodeKind.DIRECTORY, children={})

    def resolve(self, path: str) -> Optional[Node]:
        """Return the node at ``path`` or None (cannot descend through a file)"""
        segments = split_path(path)
        if segments is None:
            return None
        return self._walk(segments)

    def upsert(self, path: str, node: Node) -> bool:
        """
        Insert or replace the entry at ``path``

        Missing intermediate directories are created. The stored node takes
        the final path segment as its name.

        Returns:
            False (tree unchanged) if the path is the root, is invalid, or an
            intermediate segment is a file
        """
        segments = split_path(path)
        if not segments:
            return False
        parent = self._ensure_parent(segments[:-1])
        if parent is None:
            logger.debug("Upsert blocked at %s: a file sits on the path", path)
            return False
        name = segments[-1]
        if node.name != name:
            node = node.renamed(name)
        parent.children[name] = node
        return True

    def remove(self, path: str) -> bool:
        """Remove the entry at ``path`` and its subtree; False if nothing was there"""
        segments = split_path(path)
        if not segments:
            return False
        parent = self._walk(segments[:-1])
        if parent is None or not parent.is_dir:
            return False
        return parent.children.pop(segments[-1], None) is not None

    def move(self, old_path: str, new_path: str) -> bool:
        """
        Move an entry (and its subtree) to a new path

        Equivalent to resolve -> remove(old) -> upsert(new) with the node
        renamed to the new final segment. Nothing changes when the move is
        not possible; callers check the returned flag.
        """
        old_segments = split_path(old_path)
        new_segments = split_path(new_path)
        if not old_segments or not new_segments:
            return False
        node = self._walk(old_segments)
        if node is None:
            return False
        if old_segments == new_segments:
            return True
        if new_segments[:len(old_segments)] == old_segments:
            logger.debug("Refusing to move %s into itself (%s)", old_path, new_path)
            return False
        if self._blocked_by_file(new_segments[:-1]):
            return False
        self.remove(old_path)
        return self.upsert(join_path(new_segments), node.renamed(new_segments[-1]))

    def update_content(self, path: str, content: str) -> bool:
        """Replace a file's content; False for directories and missing paths"""
        node = self.resolve(path)
        if node is None or node.is_dir:
            return False
        node.content = content
        return True

    def walk(self) -> Iterator[Tuple[str, Node]]:
        """Yield ``(path, node)`` for every reachable node, root first"""
        stack = [((), self.root)]
        while stack:
            segments, node = stack.pop()
            yield join_path(segments), node
            if node.is_dir:
                for name in sorted(node.children, reverse=True):
                    stack.append((segments + (name,), node.children[name]))

    def _walk(self, segments: Tuple[str, ...]) -> Optional[Node]:
        current = self.root
        for part in segments:
            if not current.is_dir:
                return None
            current = current.children.get(part)
            if current is None:
                return None
        return current

    def _blocked_by_file(self, segments: Tuple[str, ...]) -> bool:
        current = self.root
        for part in segments:
            current = current.children.get(part)
            if current is None:
                return False
            if not current.is_dir:
                return True
        return False

    def _ensure_parent(self, segments: Tuple[str, ...]) -> Optional[Node]:
        if self._blocked_by_file(segments):
            return None
        current = self.root
        for part in segments:
            child = current.children.get(part)
            if child is None:
                child = Node.directory(part)
                current.children[part] = child
            current = child
        return current
