"""Data access for a project's file/folder tree.

The ``parent_id`` chain is the source of truth for ancestry. ``path`` is a
materialized copy of that chain which every write keeps in step: creating a
node derives it from the parent, and renaming or moving a folder rewrites
the paths of its whole subtree inside the same transaction.
"""

from __future__ import annotations

import logging
import time
from collections import deque

import regex

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from webide.core.config import get_settings
from webide.core.errors import (
    Conflict,
    ContentTooLarge,
    InvalidCycle,
    InvalidOperation,
    InvalidParentType,
    NotFound,
)
from webide.db.enums import NodeType
from webide.db.models import File, Project, gen_id
from webide.store.tree import TreeNode, build_tree, children_index, iter_subtree
from webide.store.validation import (
    detect_language,
    join_path,
    normalize_path,
    validate_name,
)

log = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# "not given", as opposed to ``None`` which means "move to the root"
UNSET = _Unset()


class NodeStore:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()

    # -- reads ---------------------------------------------------------

    async def list_nodes(
        self, project_id: str, node_type: NodeType | None = None, fresh: bool = False
    ) -> list[File]:
        stmt = select(File).where(File.project_id == project_id)
        if fresh:
            # overwrite rows this session loaded before taking the project lock
            stmt = stmt.execution_options(populate_existing=True)
        if node_type is not None:
            stmt = stmt.where(File.type == NodeType(node_type).value)
        res = await self.db.execute(stmt)
        return list(res.scalars().all())

    async def build_tree(self, project_id: str) -> list[TreeNode]:
        return build_tree(await self.list_nodes(project_id))

    async def get(self, node_id: str, project_id: str | None = None) -> File:
        node = await self.db.get(File, node_id)
        if node is None or (project_id is not None and node.project_id != project_id):
            raise NotFound(f"node {node_id} not found")
        return node

    async def find_by_path(self, project_id: str, path: str) -> File | None:
        res = await self.db.execute(
            select(File).where(
                File.project_id == project_id, File.path == normalize_path(path)
            )
        )
        return res.scalar_one_or_none()

    async def ancestors(self, node_id: str) -> list[File]:
        """Folders from the root down to the node's parent."""
        node = await self.get(node_id)
        chain: list[File] = []
        seen = {node.id}
        parent_id = node.parent_id
        while parent_id is not None and parent_id not in seen:
            parent = await self.db.get(File, parent_id)
            if parent is None:
                break
            seen.add(parent.id)
            chain.append(parent)
            parent_id = parent.parent_id
        chain.reverse()
        return chain

    async def search(
        self,
        project_id: str,
        pattern: str,
        node_type: NodeType | str | None = None,
        limit: int | None = None,
    ) -> list[File]:
        """Nodes whose name or path matches ``pattern`` (case-insensitive).

        ``pattern`` is a regular expression; one that does not compile is
        matched as a plain substring instead. Matching is bounded by
        ``SEARCH_TIMEOUT_SECONDS``; a pattern that runs past it is rejected.
        """
        if not pattern:
            raise InvalidOperation("search pattern must not be empty")
        if limit is None:
            limit = self.settings.SEARCH_DEFAULT_LIMIT
        limit = max(1, min(limit, self.settings.SEARCH_MAX_LIMIT))
        try:
            rx = regex.compile(pattern, regex.IGNORECASE)
        except regex.error:
            rx = regex.compile(regex.escape(pattern), regex.IGNORECASE)
        kind = _node_type(node_type) if node_type else None
        nodes = await self.list_nodes(project_id, kind)
        deadline = time.monotonic() + self.settings.SEARCH_TIMEOUT_SECONDS
        hits = []
        try:
            for n in nodes:
                if _matches(rx, n, deadline):
                    hits.append(n)
        except TimeoutError:
            log.warning("search pattern timed out", extra={"project_id": project_id})
            raise InvalidOperation("search pattern is too expensive") from None
        hits.sort(key=lambda n: (0 if n.is_folder else 1, n.name, n.path))
        return hits[:limit]

    # -- writes --------------------------------------------------------

    async def create(
        self,
        project_id: str,
        name: str,
        node_type: NodeType | str,
        parent_id: str | None = None,
        content: str | None = None,
    ) -> File:
        kind = _node_type(node_type)
        validate_name(name)
        if kind is NodeType.folder and content:
            raise InvalidOperation("folders cannot hold content")
        if content is not None:
            self._check_content(content)

        await self._lock_project(project_id)
        parent = await self._resolve_parent(project_id, parent_id)
        path = join_path(parent.path if parent else None, name)
        await self._ensure_free(project_id, path, parent_id, name)

        node = File(
            id=gen_id(),
            project_id=project_id,
            parent_id=parent.id if parent else None,
            type=kind.value,
            name=name,
            path=path,
        )
        if kind is NodeType.file:
            node.content = content or ""
            node.size = len(node.content.encode("utf-8"))
            node.language, node.mime_type = detect_language(name)
        else:
            node.content = ""
            node.size = 0
        self.db.add(node)
        await self._commit(f"{path!r} already exists")
        await self.db.refresh(node)
        log.info(
            "created %s %s", kind.value, path,
            extra={"project_id": project_id, "node_id": node.id},
        )
        return node

    async def update_content(self, node_id: str, content: str) -> File:
        node = await self.get(node_id)
        if node.is_folder:
            raise InvalidOperation("folders have no content")
        self._check_content(content)
        node.content = content
        node.size = len(content.encode("utf-8"))
        # evaluated by the database, so concurrent writers never share a version
        node.version = File.version + 1
        await self._commit("content update conflicted")
        await self.db.refresh(node)
        log.info(
            "updated content of %s (v%d)", node.path, node.version,
            extra={"project_id": node.project_id, "node_id": node.id},
        )
        return node

    async def rename_or_move(self, node_id: str, name=UNSET, parent_id=UNSET) -> File:
        """Rename and/or reparent a node, cascading path changes downward.

        ``parent_id=None`` moves the node to the project root; leaving it
        ``UNSET`` keeps the current parent. The node and every rewritten
        descendant are committed together or not at all.
        """
        node = await self.get(node_id)
        if name is not UNSET and name is not None:
            validate_name(name)

        # every row of the project, node included, is re-read under the lock
        await self._lock_project(node.project_id)
        nodes = await self.list_nodes(node.project_id, fresh=True)
        if node.id not in {n.id for n in nodes}:
            raise NotFound(f"node {node_id} not found")
        new_name = node.name if name is UNSET or name is None else name
        new_parent_id = node.parent_id if parent_id is UNSET else parent_id
        if new_name == node.name and new_parent_id == node.parent_id:
            await self.db.commit()
            return node

        by_id = {n.id: n for n in nodes}

        new_parent = None
        if new_parent_id is not None:
            if new_parent_id == node.id:
                raise InvalidCycle("a node cannot be moved into itself")
            new_parent = by_id.get(new_parent_id)
            if new_parent is None:
                raise NotFound(f"parent folder {new_parent_id} not found")
            if not new_parent.is_folder:
                raise InvalidParentType("parent must be a folder")
            if _is_ancestor(node.id, new_parent, by_id):
                raise InvalidCycle("a folder cannot be moved into its own subtree")

        new_path = join_path(new_parent.path if new_parent else None, new_name)
        for other in nodes:
            if other.id == node.id:
                continue
            if other.path == new_path:
                raise Conflict(f"{new_path!r} already exists")
            if other.parent_id == new_parent_id and other.name == new_name:
                raise Conflict(f"a sibling named {new_name!r} already exists")

        # walk by parent_id, parents before children, so each child's path
        # is joined onto its parent's new path; nothing is mutated until
        # every new path is known to be valid
        new_paths = {node.id: new_path}
        if node.is_folder:
            for child in iter_subtree(node.id, children_index(nodes)):
                new_paths[child.id] = join_path(new_paths[child.parent_id], child.name)

        old_path = node.path
        node.name = new_name
        node.parent_id = new_parent_id
        if not node.is_folder:
            node.language, node.mime_type = detect_language(new_name)
        for nid, path in new_paths.items():
            by_id[nid].path = path
        moved = len(new_paths) - 1

        await self._commit(f"moving to {new_path!r} conflicted with a concurrent write")
        await self.db.refresh(node)
        log.info(
            "moved %s -> %s (%d descendants)", old_path, new_path, moved,
            extra={"project_id": node.project_id, "node_id": node.id},
        )
        return node

    async def delete_subtree(self, node_id: str) -> list[str]:
        """Delete a node and, for folders, everything below it.

        Returns the deleted ids, deepest first.
        """
        node = await self.get(node_id)
        ids = [node.id]
        if node.is_folder:
            await self._lock_project(node.project_id)
            index = children_index(await self.list_nodes(node.project_id, fresh=True))
            ids.extend(n.id for n in iter_subtree(node.id, index))
        ids.reverse()
        await self.db.execute(delete(File).where(File.id.in_(ids)))
        await self.db.commit()
        log.info(
            "deleted %s (%d nodes)", node.path, len(ids),
            extra={"project_id": node.project_id, "node_id": node.id},
        )
        return ids

    async def copy_project(self, src_project_id: str, dst_project_id: str) -> int:
        """Copy every reachable node of one project into another.

        Ids are regenerated and parent references remapped; paths, content
        and metadata are kept. The destination is expected to be empty.
        """
        index = children_index(await self.list_nodes(src_project_id))
        remap: dict[str | None, str | None] = {None: None}
        queue = deque(sorted(index.get(None, []), key=lambda n: n.path))
        count = 0
        while queue:
            src = queue.popleft()
            remap[src.id] = gen_id()
            self.db.add(
                File(
                    id=remap[src.id],
                    project_id=dst_project_id,
                    parent_id=remap[src.parent_id],
                    type=src.type,
                    name=src.name,
                    path=src.path,
                    content=src.content,
                    size=src.size,
                    language=src.language,
                    mime_type=src.mime_type,
                    version=1,
                )
            )
            count += 1
            queue.extend(index.get(src.id, []))
        await self._commit("destination project already has files")
        return count

    # -- helpers -------------------------------------------------------

    async def _lock_project(self, project_id: str):
        """Serialize tree writes of one project on its row.

        Held until the surrounding transaction commits or rolls back. A
        create that races a folder rename therefore sees the renamed
        parent path instead of the one it had cached. SQLite ignores
        ``FOR UPDATE`` and serializes writers itself.
        """
        await self.db.execute(
            select(Project.id).where(Project.id == project_id).with_for_update()
        )

    async def _resolve_parent(self, project_id: str, parent_id: str | None) -> File | None:
        if parent_id is None:
            return None
        parent = await self.db.get(File, parent_id, populate_existing=True)
        if parent is None or parent.project_id != project_id:
            raise NotFound(f"parent folder {parent_id} not found")
        if not parent.is_folder:
            raise InvalidParentType("parent must be a folder")
        return parent

    async def _ensure_free(self, project_id: str, path: str, parent_id: str | None, name: str):
        if await self.find_by_path(project_id, path) is not None:
            log.warning("rejected duplicate path %s", path, extra={"project_id": project_id})
            raise Conflict(f"{path!r} already exists")
        res = await self.db.execute(
            select(File.id).where(
                File.project_id == project_id,
                File.parent_id.is_(None) if parent_id is None else File.parent_id == parent_id,
                File.name == name,
            )
        )
        if res.first() is not None:
            raise Conflict(f"a sibling named {name!r} already exists")

    def _check_content(self, content: str):
        if len(content) > self.settings.MAX_CONTENT_CHARS:
            raise ContentTooLarge(
                f"content exceeds {self.settings.MAX_CONTENT_CHARS} characters"
            )

    async def _commit(self, conflict_message: str):
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            log.warning("integrity error: %s", exc.orig)
            raise Conflict(conflict_message) from exc


def _node_type(value: NodeType | str) -> NodeType:
    try:
        return NodeType(value)
    except ValueError:
        raise InvalidOperation(f"unknown node type {value!r}") from None


def _matches(rx, node: File, deadline: float) -> bool:
    for text in (node.name, node.path):
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TimeoutError("search deadline passed")
        if rx.search(text, timeout=remaining):
            return True
    return False


def _is_ancestor(candidate_id: str, node: File, by_id: dict[str, File]) -> bool:
    """True if ``candidate_id`` is ``node`` or sits on its parent chain."""
    seen = set()
    current: File | None = node
    while current is not None and current.id not in seen:
        if current.id == candidate_id:
            return True
        seen.add(current.id)
        current = by_id.get(current.parent_id) if current.parent_id else None
    return False
