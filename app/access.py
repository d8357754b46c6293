"""
Ownership/membership evaluation and the access gate for projects and tasks.

Access is decided per call from a freshly loaded snapshot of the project's
owner id and member id set. Tasks have no membership of their own and are
judged by their parent project.
"""
import enum
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import ForbiddenError, NotFoundError
from app.logger import get_logger
from app.models import Project, Task, project_members

logger = get_logger(__name__)


class AccessLevel(enum.IntEnum):
    """Ordered outcome of an access check: none < member < owner."""
    NONE = 0
    MEMBER = 1
    OWNER = 2

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class ProjectAccess:
    """The part of a project that access decisions depend on."""
    project_id: str
    owner_id: str
    member_ids: FrozenSet[str]


def can_access(project: ProjectAccess, user_id: str) -> AccessLevel:
    """
    Report the caller's access level on a project.

    The owner check wins, so an owner who was also added as a member
    is reported as OWNER.
    """
    if project.owner_id == user_id:
        return AccessLevel.OWNER
    if user_id in project.member_ids:
        return AccessLevel.MEMBER
    return AccessLevel.NONE


def load_project_access(db: Session, project_id: str) -> Optional[ProjectAccess]:
    """Load a project's owner id and member id set, or None if it doesn't exist."""
    owner_id = db.execute(
        select(Project.owner_id).where(Project.id == project_id)
    ).scalar_one_or_none()
    if owner_id is None:
        return None

    member_ids = db.execute(
        select(project_members.c.user_id).where(project_members.c.project_id == project_id)
    ).scalars().all()
    return ProjectAccess(
        project_id=project_id,
        owner_id=owner_id,
        member_ids=frozenset(member_ids),
    )


def require_access(
    db: Session,
    project_id: str,
    user_id: str,
    minimum: AccessLevel,
    action: str = "access this project",
) -> AccessLevel:
    """
    Gate an operation on a project.

    Raises NotFoundError when the project doesn't exist, checked before the
    caller's access so the two failures stay distinct. Raises ForbiddenError
    when the caller's level is below ``minimum``.
    """
    snapshot = load_project_access(db, project_id)
    if snapshot is None:
        raise NotFoundError("Project not found")

    level = can_access(snapshot, user_id)
    if level < minimum:
        logger.warning(
            f"Denied user {user_id} ({level.label}) on project {project_id}: "
            f"'{action}' requires {minimum.label}"
        )
        raise ForbiddenError(f"You do not have permission to {action}")
    return level


def require_task_access(
    db: Session,
    task_id: str,
    user_id: str,
    minimum: AccessLevel,
    action: str = "access this task",
) -> Tuple[Task, AccessLevel]:
    """Gate an operation on a task through its parent project."""
    task = db.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task not found")

    level = require_access(db, task.project_id, user_id, minimum, action)
    return task, level
