"""
Tests for ownership/membership evaluation and the access gate.
"""
import pytest

from app.access import (
    AccessLevel,
    ProjectAccess,
    can_access,
    load_project_access,
    require_access,
    require_task_access,
)
from app.errors import ForbiddenError, NotFoundError
from app.models import Project, Task, TaskStatus, User


def _snapshot(owner_id="owner", member_ids=()):
    return ProjectAccess(project_id="p1", owner_id=owner_id, member_ids=frozenset(member_ids))


class TestCanAccess:
    """Evaluator decisions on a loaded snapshot"""

    def test_owner(self):
        assert can_access(_snapshot(), "owner") is AccessLevel.OWNER

    def test_member(self):
        assert can_access(_snapshot(member_ids={"alice"}), "alice") is AccessLevel.MEMBER

    def test_stranger(self):
        assert can_access(_snapshot(member_ids={"alice"}), "bob") is AccessLevel.NONE

    def test_owner_listed_as_member_reports_owner(self):
        assert can_access(_snapshot(member_ids={"owner"}), "owner") is AccessLevel.OWNER

    def test_levels_are_ordered(self):
        assert AccessLevel.NONE < AccessLevel.MEMBER < AccessLevel.OWNER
        assert [level.label for level in AccessLevel] == ["none", "member", "owner"]


@pytest.fixture
def seeded(db, password_hash):
    owner = User(name="Owner", email="owner@example.com", password=password_hash)
    member = User(name="Member", email="member@example.com", password=password_hash)
    stranger = User(name="Stranger", email="stranger@example.com", password=password_hash)
    db.add_all([owner, member, stranger])
    db.flush()

    project = Project(title="Tracker", description="Internal tracker project", owner_id=owner.id)
    project.team_members.append(member)
    db.add(project)
    db.flush()

    task = Task(
        title="Ship it",
        description="Ship the first release",
        project_id=project.id,
        assigned_to=stranger.id,
    )
    db.add(task)
    db.commit()
    return {"owner": owner, "member": member, "stranger": stranger, "project": project, "task": task}


class TestGate:
    """Access gate against persisted projects"""

    def test_load_project_access(self, db, seeded):
        snapshot = load_project_access(db, seeded["project"].id)
        assert snapshot.owner_id == seeded["owner"].id
        assert snapshot.member_ids == frozenset({seeded["member"].id})

    def test_load_missing_project(self, db, seeded):
        assert load_project_access(db, "does-not-exist") is None

    def test_member_passes_member_gate(self, db, seeded):
        level = require_access(db, seeded["project"].id, seeded["member"].id, AccessLevel.MEMBER)
        assert level is AccessLevel.MEMBER

    def test_member_fails_owner_gate(self, db, seeded):
        with pytest.raises(ForbiddenError):
            require_access(db, seeded["project"].id, seeded["member"].id, AccessLevel.OWNER)

    def test_stranger_is_forbidden(self, db, seeded):
        with pytest.raises(ForbiddenError) as exc_info:
            require_access(db, seeded["project"].id, seeded["stranger"].id, AccessLevel.MEMBER, "view this project")
        assert exc_info.value.status_code == 403
        assert "view this project" in exc_info.value.message

    def test_missing_project_is_not_found_even_for_strangers(self, db, seeded):
        with pytest.raises(NotFoundError) as exc_info:
            require_access(db, "does-not-exist", seeded["stranger"].id, AccessLevel.OWNER)
        assert exc_info.value.status_code == 404

    def test_task_gate_uses_parent_project(self, db, seeded):
        task, level = require_task_access(db, seeded["task"].id, seeded["member"].id, AccessLevel.MEMBER)
        assert task.id == seeded["task"].id
        assert task.status is TaskStatus.PENDING
        assert level is AccessLevel.MEMBER

    def test_assignee_alone_gets_no_task_access(self, db, seeded):
        # The stranger is the assignee but not on the team.
        with pytest.raises(ForbiddenError):
            require_task_access(db, seeded["task"].id, seeded["stranger"].id, AccessLevel.MEMBER)

    def test_missing_task(self, db, seeded):
        with pytest.raises(NotFoundError):
            require_task_access(db, "does-not-exist", seeded["owner"].id, AccessLevel.MEMBER)
