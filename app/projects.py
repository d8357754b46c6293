"""
Project operations: listing, reading, creating, updating, team replacement
and deletion, each gated on the caller's access level.
"""
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from app.access import AccessLevel, require_access
from app.db import transaction
from app.errors import NotFoundError
from app.logger import get_logger, log_operation
from app.membership import MembershipDelta, reconcile_members
from app.models import Project, Task, project_members

logger = get_logger(__name__)


def _project_query():
    return select(Project).options(
        selectinload(Project.owner),
        selectinload(Project.team_members),
    )


def _load_project(db: Session, project_id: str, with_tasks: bool = False) -> Project:
    stmt = _project_query().where(Project.id == project_id)
    if with_tasks:
        stmt = stmt.options(selectinload(Project.tasks).selectinload(Task.assignee))
    project = db.execute(stmt).scalar_one_or_none()
    # The project can be deleted by another call after the gate passed.
    if project is None:
        raise NotFoundError("Project not found")
    return project


@log_operation("list_projects")
def list_projects(db: Session, user_id: str) -> List[Project]:
    """Projects the caller owns or belongs to, newest first."""
    stmt = (
        _project_query()
        .outerjoin(project_members, project_members.c.project_id == Project.id)
        .where(or_(Project.owner_id == user_id, project_members.c.user_id == user_id))
        .order_by(Project.created_at.desc())
    )
    return list(db.execute(stmt).scalars().unique().all())


@log_operation("get_project")
def get_project(db: Session, project_id: str, user_id: str) -> Project:
    require_access(db, project_id, user_id, AccessLevel.MEMBER, "view this project")
    return _load_project(db, project_id, with_tasks=True)


@log_operation("create_project")
def create_project(
    db: Session,
    user_id: str,
    title: str,
    description: str,
    team_members: Optional[Iterable[str]] = None,
) -> Project:
    """Create a project owned by the caller, optionally with an initial team."""
    with transaction(db):
        project = Project(title=title, description=description, owner_id=user_id)
        db.add(project)
        db.flush()
        if team_members:
            reconcile_members(db, project, team_members)

    logger.info(f"Project {project.id} created by {user_id}")
    return _load_project(db, project.id)


@log_operation("update_project")
def update_project(
    db: Session,
    project_id: str,
    user_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    team_members: Optional[Iterable[str]] = None,
) -> Project:
    """
    Update a project's fields and, when given, replace its team.
    Owner only. Field changes and the team replacement commit together.
    """
    with transaction(db):
        require_access(db, project_id, user_id, AccessLevel.OWNER, "update this project")
        project = _load_project(db, project_id)
        if title is not None:
            project.title = title
        if description is not None:
            project.description = description
        if team_members is not None:
            reconcile_members(db, project, team_members)

    logger.info(f"Project {project_id} updated by {user_id}")
    return _load_project(db, project_id)


@log_operation("replace_members")
def replace_members(
    db: Session,
    project_id: str,
    user_id: str,
    member_ids: Iterable[str],
) -> Tuple[Project, MembershipDelta]:
    """Replace the whole team of a project. Owner only."""
    with transaction(db):
        require_access(db, project_id, user_id, AccessLevel.OWNER, "manage this project's team")
        project = _load_project(db, project_id)
        delta = reconcile_members(db, project, member_ids)

    return _load_project(db, project_id), delta


@log_operation("delete_project")
def delete_project(db: Session, project_id: str, user_id: str) -> None:
    """Delete a project with its tasks and membership rows. Owner only."""
    with transaction(db):
        require_access(db, project_id, user_id, AccessLevel.OWNER, "delete this project")
        project = _load_project(db, project_id, with_tasks=True)
        task_count = len(project.tasks)
        db.delete(project)

    logger.info(f"Project {project_id} deleted by {user_id} along with {task_count} task(s)")
