"""
Team membership reconciliation.

The desired member set passed in is the whole truth for the project:
ids missing from it are removed, new ids are added, and ids present on
both sides are left alone. Changes are only flushed here; the caller's
transaction decides whether they become visible.
"""
from dataclasses import dataclass, field
from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.errors import ConflictError
from app.logger import get_logger
from app.models import Project, User

logger = get_logger(__name__)


@dataclass
class MembershipDelta:
    """Ids added to and removed from a project's team."""
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


def reconcile_members(db: Session, project: Project, desired_ids: Iterable[str]) -> MembershipDelta:
    """
    Replace a project's team with ``desired_ids``.

    Permission is not checked here; callers gate on ownership first.
    Any unknown user id fails the whole call with ConflictError before
    the team is touched.
    """
    desired = list(dict.fromkeys(desired_ids))

    users = []
    if desired:
        users = db.execute(select(User).where(User.id.in_(desired))).scalars().all()
    found = {user.id: user for user in users}

    missing = [user_id for user_id in desired if user_id not in found]
    if missing:
        raise ConflictError(f"Cannot add unknown user(s) to project: {', '.join(missing)}")

    current = {member.id: member for member in project.team_members}
    delta = MembershipDelta(
        added=[user_id for user_id in desired if user_id not in current],
        removed=[user_id for user_id in current if user_id not in found],
    )

    for user_id in delta.removed:
        project.team_members.remove(current[user_id])
    for user_id in delta.added:
        project.team_members.append(found[user_id])

    db.flush()

    if delta.changed:
        logger.info(
            f"Project {project.id} team reconciled: "
            f"+{len(delta.added)} -{len(delta.removed)} ({len(desired)} member(s))"
        )
    return delta
