"""Serialization helpers for HTTP and real-time payloads.

Wire payloads use camelCase keys; internal models stay snake_case.
"""

from __future__ import annotations

from typing import Any

from .workspace.file_tree import ROOT_PATH, VirtualFileTree
from .workspace.models import Node, Room, User
from .execution.models import ExecutionResult, LanguageSpec


def node_to_dict(node: Node, path: str) -> dict[str, Any]:
    """Recursive node payload; ``path`` is derived from the walk, not stored."""
    payload: dict[str, Any] = {
        "name": node.name,
        "type": node.kind.value,
        "path": path,
        "createdAt": node.created_at.isoformat(),
    }
    if node.is_dir:
        base = path.rstrip("/")
        payload["children"] = {
            name: node_to_dict(child, f"{base}/{name}")
            for name, child in node.children.items()
        }
    else:
        payload["content"] = node.content
    return payload


def tree_to_dict(tree: VirtualFileTree) -> dict[str, Any]:
    """JSON-ready copy of a whole workspace tree, keyed by the root path."""
    return {ROOT_PATH: node_to_dict(tree.root, ROOT_PATH)}


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "joinedAt": user.joined_at.isoformat(),
    }


def roster_to_list(users: list[User]) -> list[dict[str, Any]]:
    return [user_to_dict(user) for user in users]


def room_to_dict(room: Room) -> dict[str, Any]:
    return {
        "id": room.id,
        "users": roster_to_list(room.users),
        "createdAt": room.created_at.isoformat(),
    }


def result_to_dict(result: ExecutionResult) -> dict[str, Any]:
    return {
        "output": result.output,
        "exitCode": result.exit_code,
        "error": result.error,
        "language": result.language,
        "status": result.status.value,
        "durationMs": result.duration_ms,
    }


def language_to_dict(spec: LanguageSpec) -> dict[str, Any]:
    return {
        "id": spec.id,
        "displayName": spec.display_name,
        "fileExtensions": list(spec.extensions),
    }
