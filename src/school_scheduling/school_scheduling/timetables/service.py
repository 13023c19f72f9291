from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.enums import ADMIN_ROLES, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..directory.model import Member
from ..policy.authorization import Actor, AllowAllPolicy, AuthorizationPort
from .engine import TimetableDraft, TimetableSlotEngine
from .model import ClassTarget, IndividualTarget, TimeTable
from .repository import TimeTableRepository

logger = logging.getLogger(__name__)


def matches_student(timetable: TimeTable, member: Member) -> bool:
    target = timetable.target
    if not isinstance(target, ClassTarget):
        return False

    if member.assignment and target.encode() == member.assignment:
        return True
    if member.assignment and target.name == member.assignment and member.grade in target.grades:
        return True
    # Fallback for students filed by designation rather than class/grade.
    return bool(member.designation) and member.designation in target.encode()


class TimetableService:
    """Timetable lookup, editing entry points and decommissioning."""

    def __init__(
        self,
        timetables: TimeTableRepository,
        engine: TimetableSlotEngine,
        *,
        authorization: Optional[AuthorizationPort] = None,
    ):
        self._timetables = timetables
        self._engine = engine
        self._authorization = authorization or AllowAllPolicy()

    def list(self, *, school: Optional[str] = None) -> Sequence[TimeTable]:
        rows = self._timetables.list_all()
        if school is not None:
            rows = [t for t in rows if t.school == school]
        return rows

    def get(self, timetable_id: str) -> Optional[TimeTable]:
        return self._timetables.get_by_id(timetable_id)

    def open(self, timetable_id: Optional[str] = None, *, school: Optional[str] = None) -> TimetableDraft:
        if not timetable_id:
            return self._engine.new_draft(school=school)

        tt = self._timetables.get_by_id(timetable_id)
        if tt is None:
            raise ValidationError(f"Timetable {timetable_id} does not exist")
        return self._engine.open(tt)

    def decommission(self, timetable_id: str, *, actor: Optional[Actor] = None) -> None:
        if not self._authorization.can_edit_timetable(actor, timetable_id):
            raise AuthorizationError("You are not allowed to edit timetables")
        if self._timetables.get_by_id(timetable_id) is None:
            raise ValidationError(f"Timetable {timetable_id} does not exist")

        self._timetables.delete(timetable_id)
        logger.info("Decommissioned timetable %s", timetable_id)

    def for_member(self, member: Member) -> Optional[TimeTable]:
        """The timetable a member follows; the first match wins when several bind the same target."""

        if member.role in ADMIN_ROLES:
            return None

        if member.role == Role.STUDENT:
            found = [t for t in self._timetables.list_all() if matches_student(t, member)]
        else:
            found = [
                t
                for t in self._timetables.list_all()
                if isinstance(t.target, IndividualTarget) and t.target.user_id == member.member_id
            ]

        if len(found) > 1:
            logger.warning(
                "Member %s matches %d timetables; using %s", member.member_id, len(found), found[0].timetable_id
            )
        return found[0] if found else None

    def refresh(self) -> None:
        self._timetables.refresh()
