"""
HTTP routes for projects and their team membership.
"""
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from app import projects as project_service
from app.db import get_db
from app.notifier import relay
from auth.oauth2 import get_current_user_id
from schemas.project import MembersReplace, ProjectCreate, ProjectUpdate

router = APIRouter(prefix="/api/projects", tags=["Projects"])


@router.get("")
def list_projects(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Projects the caller owns or is a team member of."""
    projects = project_service.list_projects(db, user_id)
    return {"status": "success", "data": {"projects": [p.to_dict() for p in projects]}}


@router.get("/{project_id}")
def get_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    project = project_service.get_project(db, project_id, user_id)
    return {"status": "success", "data": {"project": project.to_dict(include_tasks=True)}}


@router.post("", status_code=201)
def create_project(
    payload: ProjectCreate,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    project = project_service.create_project(
        db,
        user_id,
        title=payload.title,
        description=payload.description,
        team_members=payload.team_members,
    )
    data = project.to_dict()
    background_tasks.add_task(relay.broadcast, "projectCreated", data)
    return {"status": "success", "data": {"project": data}}


@router.patch("/{project_id}")
def update_project(
    project_id: str,
    payload: ProjectUpdate,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    project = project_service.update_project(
        db,
        project_id,
        user_id,
        title=payload.title,
        description=payload.description,
        team_members=payload.team_members,
    )
    data = project.to_dict()
    background_tasks.add_task(relay.broadcast, "projectUpdated", data)
    return {"status": "success", "data": {"project": data}}


@router.put("/{project_id}/members")
def replace_members(
    project_id: str,
    payload: MembersReplace,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Replace the whole team; an empty list removes every member."""
    project, delta = project_service.replace_members(db, project_id, user_id, payload.team_members)
    data = project.to_dict()
    if delta.changed:
        background_tasks.add_task(relay.broadcast, "projectUpdated", data)
    return {
        "status": "success",
        "data": {
            "project": data,
            "added": delta.added,
            "removed": delta.removed,
        },
    }


@router.delete("/{project_id}")
def delete_project(
    project_id: str,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    project_service.delete_project(db, project_id, user_id)
    background_tasks.add_task(relay.broadcast, "projectDeleted", {"id": project_id})
    return {"status": "success", "data": None}
