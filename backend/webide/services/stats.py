from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from webide.db.models import Project, File
from webide.db.enums import NodeType


async def refresh_project_stats(db: AsyncSession, project_id: str) -> tuple[int, int]:
    """Recount files and total content size for a project.

    Returns ``(total_files, total_size)``.
    """
    res = await db.execute(
        select(func.count(File.id), func.coalesce(func.sum(File.size), 0)).where(
            File.project_id == project_id, File.type == NodeType.file.value
        )
    )
    total_files, total_size = res.one()
    await db.execute(
        update(Project)
        .where(Project.id == project_id)
        .values(
            total_files=total_files,
            total_size=total_size,
            last_modified=datetime.now(timezone.utc),
        )
    )
    await db.commit()
    return total_files, total_size
