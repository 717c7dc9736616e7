from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from webide.api.deps import (
    get_current_user,
    get_optional_user,
    get_db,
    get_store,
    load_project,
)
from webide.core.errors import NotFound
from webide.db.enums import NodeType
from webide.schemas.file import (
    DeleteOut,
    FileContentIn,
    FileCreate,
    FileDetail,
    FileMove,
    FileOut,
    SearchOut,
    TreeNodeOut,
)
from webide.services import events
from webide.services.stats import refresh_project_stats
from webide.store.nodes import UNSET, NodeStore
from webide.store.tree import TreeNode

router = APIRouter(tags=["files"])


def _uid(user):
    return user.id if user else None


def _tree_out(items: list[TreeNode]) -> list[TreeNodeOut]:
    return [
        TreeNodeOut(
            **FileOut.model_validate(t.node).model_dump(),
            children=_tree_out(t.children),
        )
        for t in items
    ]


@router.get("/projects/{pid}/tree", response_model=list[TreeNodeOut])
async def get_tree(
    pid: str,
    db: AsyncSession = Depends(get_db),
    store: NodeStore = Depends(get_store),
    user=Depends(get_optional_user),
):
    await load_project(db, pid, _uid(user))
    return _tree_out(await store.build_tree(pid))


@router.post(
    "/projects/{pid}/files",
    response_model=FileDetail,
    status_code=status.HTTP_201_CREATED,
)
async def create_file(
    pid: str,
    payload: FileCreate,
    db: AsyncSession = Depends(get_db),
    store: NodeStore = Depends(get_store),
    user=Depends(get_current_user),
):
    await load_project(db, pid, user.id, write=True)
    node = await store.create(
        pid, payload.name, payload.type, payload.parent_id, payload.content
    )
    await refresh_project_stats(db, pid)
    await events.publish_node_event(pid, events.NODE_CREATED, [node.id])
    return FileDetail.model_validate(node)


@router.get("/projects/{pid}/files/search", response_model=SearchOut)
async def search_files(
    pid: str,
    q: str = Query(min_length=1),
    type: NodeType | None = None,
    limit: int | None = Query(default=None, ge=1),
    db: AsyncSession = Depends(get_db),
    store: NodeStore = Depends(get_store),
    user=Depends(get_optional_user),
):
    await load_project(db, pid, _uid(user))
    hits = await store.search(pid, q, type, limit)
    return SearchOut(
        files=[FileOut.model_validate(n) for n in hits], total_results=len(hits)
    )


@router.get("/projects/{pid}/files/by-path", response_model=FileDetail)
async def get_file_by_path(
    pid: str,
    path: str,
    db: AsyncSession = Depends(get_db),
    store: NodeStore = Depends(get_store),
    user=Depends(get_optional_user),
):
    await load_project(db, pid, _uid(user))
    node = await store.find_by_path(pid, path)
    if not node:
        raise NotFound(f"no file at {path!r}")
    return FileDetail.model_validate(node)


@router.get("/files/{fid}", response_model=FileDetail)
async def get_file(
    fid: str,
    db: AsyncSession = Depends(get_db),
    store: NodeStore = Depends(get_store),
    user=Depends(get_optional_user),
):
    node = await store.get(fid)
    await load_project(db, node.project_id, _uid(user))
    return FileDetail.model_validate(node)


@router.get("/files/{fid}/ancestors", response_model=list[FileOut])
async def get_ancestors(
    fid: str,
    db: AsyncSession = Depends(get_db),
    store: NodeStore = Depends(get_store),
    user=Depends(get_optional_user),
):
    node = await store.get(fid)
    await load_project(db, node.project_id, _uid(user))
    return [FileOut.model_validate(n) for n in await store.ancestors(fid)]


@router.put("/files/{fid}/content", response_model=FileDetail)
async def update_content(
    fid: str,
    payload: FileContentIn,
    db: AsyncSession = Depends(get_db),
    store: NodeStore = Depends(get_store),
    user=Depends(get_current_user),
):
    node = await store.get(fid)
    await load_project(db, node.project_id, user.id, write=True)
    node = await store.update_content(fid, payload.content)
    await refresh_project_stats(db, node.project_id)
    await events.publish_node_event(node.project_id, events.NODE_UPDATED, [node.id])
    return FileDetail.model_validate(node)


@router.patch("/files/{fid}", response_model=FileOut)
async def rename_or_move(
    fid: str,
    payload: FileMove,
    db: AsyncSession = Depends(get_db),
    store: NodeStore = Depends(get_store),
    user=Depends(get_current_user),
):
    node = await store.get(fid)
    await load_project(db, node.project_id, user.id, write=True)
    parent_id = payload.parent_id if "parent_id" in payload.model_fields_set else UNSET
    node = await store.rename_or_move(fid, name=payload.name, parent_id=parent_id)
    await refresh_project_stats(db, node.project_id)
    await events.publish_node_event(node.project_id, events.NODE_MOVED, [node.id])
    return FileOut.model_validate(node)


@router.delete("/files/{fid}", response_model=DeleteOut)
async def delete_file(
    fid: str,
    db: AsyncSession = Depends(get_db),
    store: NodeStore = Depends(get_store),
    user=Depends(get_current_user),
):
    node = await store.get(fid)
    pid = node.project_id
    await load_project(db, pid, user.id, write=True)
    deleted = await store.delete_subtree(fid)
    await refresh_project_stats(db, pid)
    await events.publish_node_event(pid, events.NODE_DELETED, deleted)
    return DeleteOut(deleted=deleted)
