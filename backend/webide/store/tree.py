"""Build the nested explorer tree from a project's flat node rows."""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Iterable

from webide.db.models import File


@dataclass
class TreeNode:
    node: File
    children: list["TreeNode"] = field(default_factory=list)


def sort_key(node: File) -> tuple[int, str]:
    """Folders before files, then ordinal (case-sensitive) name order."""
    return (0 if node.is_folder else 1, node.name)


def children_index(nodes: Iterable[File]) -> dict[str | None, list[File]]:
    index: dict[str | None, list[File]] = defaultdict(list)
    for node in nodes:
        index[node.parent_id].append(node)
    return index


def build_tree(nodes: Iterable[File]) -> list[TreeNode]:
    """Nest ``nodes`` by ``parent_id``.

    Only nodes reachable from a root (``parent_id is None``) appear; rows
    whose parent is missing are left out. Uses an explicit stack, so depth
    is not bounded by the interpreter's recursion limit.
    """
    index = children_index(nodes)
    roots = [TreeNode(n) for n in sorted(index.get(None, []), key=sort_key)]
    stack = list(roots)
    while stack:
        current = stack.pop()
        if not current.node.is_folder:
            continue
        for child in sorted(index.get(current.node.id, []), key=sort_key):
            item = TreeNode(child)
            current.children.append(item)
            stack.append(item)
    return roots


def iter_subtree(root_id: str, index: dict[str | None, list[File]]):
    """Yield every descendant of ``root_id`` parent-first (breadth-first)."""
    queue = deque(index.get(root_id, []))
    seen = {root_id}
    while queue:
        node = queue.popleft()
        if node.id in seen:
            continue
        seen.add(node.id)
        yield node
        queue.extend(index.get(node.id, []))
