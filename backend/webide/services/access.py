from webide.core.errors import Forbidden
from webide.db.models import Project


def can_read(project: Project, user_id: str | None) -> bool:
    return project.is_public or (user_id is not None and project.owner_id == user_id)


def can_write(project: Project, user_id: str | None) -> bool:
    return user_id is not None and project.owner_id == user_id


def authorize_project(project: Project, user_id: str | None, write: bool = False):
    """Raise ``Forbidden`` unless ``user_id`` may read (or write) the project."""
    allowed = can_write(project, user_id) if write else can_read(project, user_id)
    if not allowed:
        raise Forbidden("access denied")
