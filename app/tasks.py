"""
Task operations. Any owner or member of the parent project may list,
create, update or delete its tasks, whoever they are assigned to.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.access import AccessLevel, require_access, require_task_access
from app.db import transaction
from app.errors import NotFoundError
from app.logger import get_logger, log_operation
from app.models import Task, TaskStatus, User

logger = get_logger(__name__)


def _load_task(db: Session, task_id: str) -> Task:
    stmt = select(Task).options(selectinload(Task.assignee)).where(Task.id == task_id)
    task = db.execute(stmt).scalar_one_or_none()
    if task is None:
        raise NotFoundError("Task not found")
    return task


def _ensure_user_exists(db: Session, user_id: str) -> None:
    # Assignees must be real users but need not belong to the project.
    if db.get(User, user_id) is None:
        raise NotFoundError("Assignee not found")


@log_operation("list_tasks")
def list_tasks(db: Session, project_id: str, user_id: str) -> List[Task]:
    """Tasks of a project in creation order."""
    require_access(db, project_id, user_id, AccessLevel.MEMBER, "view these tasks")
    stmt = (
        select(Task)
        .options(selectinload(Task.assignee))
        .where(Task.project_id == project_id)
        .order_by(Task.created_at)
    )
    return list(db.execute(stmt).scalars().all())


@log_operation("get_task")
def get_task(db: Session, task_id: str, user_id: str) -> Task:
    require_task_access(db, task_id, user_id, AccessLevel.MEMBER, "view this task")
    return _load_task(db, task_id)


@log_operation("create_task")
def create_task(
    db: Session,
    user_id: str,
    project_id: str,
    title: str,
    description: str,
    assigned_to: str,
    status: TaskStatus = TaskStatus.PENDING,
) -> Task:
    with transaction(db):
        require_access(db, project_id, user_id, AccessLevel.MEMBER, "create tasks in this project")
        _ensure_user_exists(db, assigned_to)
        task = Task(
            title=title,
            description=description,
            status=TaskStatus(status),
            project_id=project_id,
            assigned_to=assigned_to,
        )
        db.add(task)
        db.flush()
        task_id = task.id

    logger.info(f"Task {task_id} created in project {project_id} by {user_id}")
    return _load_task(db, task_id)


@log_operation("update_task")
def update_task(
    db: Session,
    task_id: str,
    user_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    assigned_to: Optional[str] = None,
) -> Task:
    """
    Apply a partial update to a task.
    Status may move to any value from any value, including back to Pending.
    """
    with transaction(db):
        task, _ = require_task_access(db, task_id, user_id, AccessLevel.MEMBER, "update this task")
        if title is not None:
            task.title = title
        if description is not None:
            task.description = description
        if status is not None:
            task.status = TaskStatus(status)
        if assigned_to is not None and assigned_to != task.assigned_to:
            _ensure_user_exists(db, assigned_to)
            task.assigned_to = assigned_to

    logger.info(f"Task {task_id} updated by {user_id}")
    return _load_task(db, task_id)


@log_operation("delete_task")
def delete_task(db: Session, task_id: str, user_id: str) -> str:
    """Delete a task and return the id of the project it belonged to."""
    with transaction(db):
        task, _ = require_task_access(db, task_id, user_id, AccessLevel.MEMBER, "delete this task")
        project_id = task.project_id
        db.delete(task)

    logger.info(f"Task {task_id} deleted from project {project_id} by {user_id}")
    return project_id
