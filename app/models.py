"""
SQLAlchemy models for the project tracker.
Users own projects, projects have team members and tasks.
"""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Table,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, enum.Enum):
    """Closed set of task states. Any state may follow any other."""
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


# Team membership join table; rows go away with either side.
project_members = Table(
    "project_members",
    Base.metadata,
    Column(
        "project_id",
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "user_id",
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class User(Base):
    """
    Model for registered users.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    owned_projects = relationship("Project", back_populates="owner")
    projects = relationship(
        "Project",
        secondary=project_members,
        back_populates="team_members",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
        }


class Project(Base):
    """
    Model for projects. The owner is fixed at creation.
    """
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    owner_id = Column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    owner = relationship("User", back_populates="owned_projects")
    team_members = relationship(
        "User",
        secondary=project_members,
        back_populates="projects",
    )
    tasks = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Task.created_at",
    )

    __table_args__ = (
        Index('ix_projects_owner', 'owner_id'),
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, title={self.title})>"

    def to_dict(self, include_tasks: bool = False) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "ownerId": self.owner_id,
            "owner": self.owner.to_dict() if self.owner else None,
            "teamMembers": [member.to_dict() for member in self.team_members],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_tasks:
            data["tasks"] = [task.to_dict() for task in self.tasks]
        return data


class Task(Base):
    """
    Model for tasks within a project.
    The assignee can be any user, not only a member of the project.
    """
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(
        Enum(TaskStatus, values_callable=lambda e: [member.value for member in e], name="task_status"),
        nullable=False,
        default=TaskStatus.PENDING,
    )
    project_id = Column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    assigned_to = Column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    project = relationship("Project", back_populates="tasks")
    assignee = relationship("User")

    __table_args__ = (
        Index('ix_tasks_project', 'project_id'),
        Index('ix_tasks_assigned_to', 'assigned_to'),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, project_id={self.project_id}, status={self.status})>"

    def to_dict(self) -> dict:
        status = self.status.value if isinstance(self.status, TaskStatus) else self.status
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": status,
            "projectId": self.project_id,
            "assignedTo": self.assigned_to,
            "assignee": self.assignee.to_dict() if self.assignee else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
