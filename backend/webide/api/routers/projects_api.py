import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from webide.api.deps import get_current_user, get_optional_user, get_db, load_project
from webide.db.models import Project, File
from webide.schemas.project import ProjectCreate, ProjectUpdate, ProjectOut
from webide.services.stats import refresh_project_stats
from webide.store.nodes import NodeStore

router = APIRouter(prefix="/projects", tags=["projects"])
log = logging.getLogger(__name__)


@router.post("/", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    p = Project(
        owner_id=user.id,
        name=payload.name,
        description=payload.description,
        is_public=payload.is_public,
    )
    db.add(p)
    await db.commit()
    await db.refresh(p)
    log.info("created project %s", p.id, extra={"project_id": p.id})
    return ProjectOut.model_validate(p)


@router.get("/", response_model=list[ProjectOut])
async def list_projects(
    include_archived: bool = Query(default=False),
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    stmt = select(Project).where(Project.owner_id == user.id)
    if not include_archived:
        stmt = stmt.where(Project.is_archived.is_(False))
    res = await db.execute(stmt.order_by(Project.created_at.desc()))
    return [ProjectOut.model_validate(p) for p in res.scalars().all()]


@router.get("/public", response_model=list[ProjectOut])
async def list_public_projects(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    res = await db.execute(
        select(Project)
        .where(Project.is_public.is_(True), Project.is_archived.is_(False))
        .order_by(Project.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return [ProjectOut.model_validate(p) for p in res.scalars().all()]


@router.get("/{pid}", response_model=ProjectOut)
async def get_project(
    pid: str, db: AsyncSession = Depends(get_db), user=Depends(get_optional_user)
):
    p = await load_project(db, pid, user.id if user else None)
    return ProjectOut.model_validate(p)


@router.patch("/{pid}", response_model=ProjectOut)
async def update_project(
    pid: str,
    payload: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    p = await load_project(db, pid, user.id, write=True)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(p, field, value)
    await db.commit()
    await db.refresh(p)
    return ProjectOut.model_validate(p)


@router.delete("/{pid}")
async def delete_project(
    pid: str, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)
):
    p = await load_project(db, pid, user.id, write=True)
    res = await db.execute(delete(File).where(File.project_id == pid))
    await db.delete(p)
    await db.commit()
    log.info(
        "deleted project %s with %d nodes", pid, res.rowcount, extra={"project_id": pid}
    )
    return {"deleted": True}


@router.put("/{pid}/archive", response_model=ProjectOut)
async def archive_project(
    pid: str, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)
):
    p = await load_project(db, pid, user.id, write=True)
    p.is_archived = True
    p.archived_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(p)
    log.info("archived project %s", pid, extra={"project_id": pid})
    return ProjectOut.model_validate(p)


@router.put("/{pid}/restore", response_model=ProjectOut)
async def restore_project(
    pid: str, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)
):
    p = await load_project(db, pid, user.id, write=True)
    p.is_archived = False
    p.archived_at = None
    await db.commit()
    await db.refresh(p)
    log.info("restored project %s", pid, extra={"project_id": pid})
    return ProjectOut.model_validate(p)


@router.post(
    "/{pid}/duplicate", response_model=ProjectOut, status_code=status.HTTP_201_CREATED
)
async def duplicate_project(
    pid: str, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)
):
    src = await load_project(db, pid, user.id)
    p = Project(
        owner_id=user.id,
        name=f"{src.name} (Copy)",
        description=src.description,
        is_public=False,
    )
    db.add(p)
    await db.commit()
    await db.refresh(p)
    copied = await NodeStore(db).copy_project(src.id, p.id)
    await refresh_project_stats(db, p.id)
    await db.refresh(p)
    log.info("duplicated project %s into %s (%d nodes)", pid, p.id, copied)
    return ProjectOut.model_validate(p)
