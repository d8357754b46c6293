"""
HTTP routes for tasks. Access follows the task's parent project.
"""
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from app import tasks as task_service
from app.db import get_db
from app.notifier import relay
from auth.oauth2 import get_current_user_id
from schemas.task import TaskCreate, TaskUpdate

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])


@router.get("/project/{project_id}")
def list_tasks(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    tasks = task_service.list_tasks(db, project_id, user_id)
    return {"status": "success", "data": {"tasks": [t.to_dict() for t in tasks]}}


@router.post("", status_code=201)
def create_task(
    payload: TaskCreate,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    task = task_service.create_task(
        db,
        user_id,
        project_id=payload.project_id,
        title=payload.title,
        description=payload.description,
        assigned_to=payload.assigned_to,
        status=payload.status,
    )
    data = task.to_dict()
    background_tasks.add_task(relay.broadcast, "taskCreated", data)
    return {"status": "success", "data": {"task": data}}


@router.get("/{task_id}")
def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    task = task_service.get_task(db, task_id, user_id)
    return {"status": "success", "data": {"task": task.to_dict()}}


@router.patch("/{task_id}")
def update_task(
    task_id: str,
    payload: TaskUpdate,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    task = task_service.update_task(
        db,
        task_id,
        user_id,
        title=payload.title,
        description=payload.description,
        status=payload.status,
        assigned_to=payload.assigned_to,
    )
    data = task.to_dict()
    background_tasks.add_task(relay.broadcast, "taskUpdated", data)
    return {"status": "success", "data": {"task": data}}


@router.delete("/{task_id}")
def delete_task(
    task_id: str,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    project_id = task_service.delete_task(db, task_id, user_id)
    background_tasks.add_task(relay.broadcast, "taskDeleted", {"id": task_id, "projectId": project_id})
    return {"status": "success", "data": None}
