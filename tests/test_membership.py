"""
Tests for team membership reconciliation.
"""
import pytest

from app.access import AccessLevel, can_access, load_project_access
from app.db import transaction
from app.errors import ConflictError
from app.membership import reconcile_members
from app.models import Project, User


@pytest.fixture
def people(db, password_hash):
    users = [
        User(name=name, email=f"{name.lower()}@example.com", password=password_hash)
        for name in ("Owner", "Ann", "Ben", "Cid")
    ]
    db.add_all(users)
    db.commit()
    return {user.name: user for user in users}


@pytest.fixture
def project(db, people):
    project = Project(title="Roadmap", description="Quarterly roadmap work", owner_id=people["Owner"].id)
    db.add(project)
    db.commit()
    return project


def _member_ids(db, project):
    return load_project_access(db, project.id).member_ids


def test_adds_and_removes(db, people, project):
    with transaction(db):
        reconcile_members(db, project, [people["Ann"].id, people["Ben"].id])

    with transaction(db):
        delta = reconcile_members(db, project, [people["Ben"].id, people["Cid"].id])

    assert delta.added == [people["Cid"].id]
    assert delta.removed == [people["Ann"].id]
    assert _member_ids(db, project) == {people["Ben"].id, people["Cid"].id}


def test_idempotent(db, people, project):
    desired = [people["Ann"].id, people["Ben"].id]
    with transaction(db):
        reconcile_members(db, project, desired)
    first = _member_ids(db, project)

    with transaction(db):
        delta = reconcile_members(db, project, desired)

    assert not delta.changed
    assert _member_ids(db, project) == first


def test_duplicates_are_collapsed(db, people, project):
    ann = people["Ann"].id
    with transaction(db):
        delta = reconcile_members(db, project, [ann, ann, ann])

    assert delta.added == [ann]
    assert _member_ids(db, project) == {ann}


def test_empty_set_removes_everyone_but_owner_keeps_access(db, people, project):
    with transaction(db):
        reconcile_members(db, project, [people["Ann"].id, people["Ben"].id])

    with transaction(db):
        delta = reconcile_members(db, project, [])

    assert sorted(delta.removed) == sorted([people["Ann"].id, people["Ben"].id])
    snapshot = load_project_access(db, project.id)
    assert snapshot.member_ids == frozenset()
    assert can_access(snapshot, people["Owner"].id) is AccessLevel.OWNER


def test_unknown_id_fails_whole_reconciliation(db, people, project):
    with transaction(db):
        reconcile_members(db, project, [people["Ann"].id])

    with pytest.raises(ConflictError):
        with transaction(db):
            reconcile_members(db, project, [people["Ben"].id, "no-such-user"])

    assert _member_ids(db, project) == {people["Ann"].id}


def test_owner_may_also_be_listed(db, people, project):
    owner_id = people["Owner"].id
    with transaction(db):
        reconcile_members(db, project, [owner_id])

    snapshot = load_project_access(db, project.id)
    assert owner_id in snapshot.member_ids
    assert can_access(snapshot, owner_id) is AccessLevel.OWNER
