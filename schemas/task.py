from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models import TaskStatus


class TaskCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=3)
    description: str = Field(..., min_length=10)
    status: TaskStatus = TaskStatus.PENDING
    project_id: str = Field(..., alias="projectId")
    assigned_to: str = Field(..., alias="assignedTo")


class TaskUpdate(BaseModel):
    """Partial update. The owning project of a task cannot be changed."""
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, min_length=3)
    description: Optional[str] = Field(default=None, min_length=10)
    status: Optional[TaskStatus] = None
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")
