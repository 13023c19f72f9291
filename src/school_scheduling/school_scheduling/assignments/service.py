from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Callable, List, Optional, Sequence

from ..common import ids
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_TARGET_NAME
from ..core.enums import TargetType
from ..core.exceptions import AssignmentOverlap, AuthorizationError, ValidationError
from ..policy.authorization import Actor, AllowAllPolicy, AuthorizationPort
from ..shifts.repository import ShiftRepository
from .model import ShiftAssignment
from .repository import AssignmentRepository

logger = logging.getLogger(__name__)

# Called with (target_id, day); day None means every date of the target.
ChangeListener = Callable[[str, Optional[date]], None]


class AssignmentResolver:
    """Decides which shift applies to a target on a date, and owns the write path."""

    def __init__(
        self,
        assignments: AssignmentRepository,
        shifts: ShiftRepository,
        *,
        authorization: Optional[AuthorizationPort] = None,
    ):
        self._assignments = assignments
        self._shifts = shifts
        self._authorization = authorization or AllowAllPolicy()
        self._listeners: List[ChangeListener] = []

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _notify(self, target_id: str, day: Optional[date]) -> None:
        for listener in self._listeners:
            listener(target_id, day)

    def _require_authority(self, actor: Optional[Actor], target_id: str, day: Optional[date]) -> None:
        if not self._authorization.can_bind(actor, target_id, day):
            raise AuthorizationError("You are not allowed to change shift assignments")

    def _new_assignment_id(self) -> str:
        taken = {a.assignment_id for a in self._assignments.list_all()}
        new_id = ids.assignment_id()
        while new_id in taken:
            new_id = ids.assignment_id()
        return new_id

    # Reads

    def list(self) -> Sequence[ShiftAssignment]:
        return self._assignments.list_all()

    def for_target(self, target_id: str) -> list[ShiftAssignment]:
        return [a for a in self._assignments.list_all() if a.target_id == target_id]

    def matches(self, target_id: str, day: date) -> list[ShiftAssignment]:
        """Every assignment of the target covering ``day``, in store order."""

        return [a for a in self.for_target(target_id) if a.covers(day)]

    def resolve(self, target_id: str, day: date) -> Optional[ShiftAssignment]:
        """First assignment in store order that covers the date.

        Overlapping bindings can only come from data written outside this
        service; for those the earliest record wins.
        """

        found = self.matches(target_id, day)
        if len(found) > 1:
            logger.warning(
                "Target %s has %d overlapping assignments on %s; using %s",
                target_id,
                len(found),
                day,
                found[0].assignment_id,
            )
        return found[0] if found else None

    # Writes

    def bind(
        self,
        *,
        target_id: str,
        day: date,
        shift_id: str,
        target_type: TargetType = TargetType.INDIVIDUAL,
        target_name: Optional[str] = None,
        actor: Optional[Actor] = None,
    ) -> ShiftAssignment:
        """Point the (target, day) cell at a shift.

        Re-binds the covering assignment when there is one, otherwise inserts a
        single-day record.
        """

        target_id = require_non_empty(target_id, "Target")
        shift_id = require_non_empty(shift_id, "Shift")
        self._require_authority(actor, target_id, day)
        if not self._shifts.get_by_id(shift_id):
            raise ValidationError(f"Shift {shift_id} does not exist")

        existing = self.resolve(target_id, day)
        if existing is not None:
            assignment = self._assignments.save(replace(existing, shift_id=shift_id))
            logger.info("Re-bound %s on %s to %s (%s)", target_id, day, shift_id, assignment.assignment_id)
            self._notify(target_id, None if assignment.is_range else day)
            return assignment

        assignment = self._assignments.save(
            ShiftAssignment(
                assignment_id=self._new_assignment_id(),
                shift_id=shift_id,
                target_id=target_id,
                target_type=target_type,
                target_name=target_name or DEFAULT_TARGET_NAME,
                assigned_date=day,
                start_date=day,
                end_date=day,
            )
        )
        logger.info("Bound %s on %s to %s (%s)", target_id, day, shift_id, assignment.assignment_id)
        self._notify(target_id, day)
        return assignment

    def unbind(self, *, target_id: str, day: date, actor: Optional[Actor] = None) -> Optional[ShiftAssignment]:
        """Delete the assignment covering (target, day). Returns it, or None if there was none."""

        target_id = require_non_empty(target_id, "Target")
        self._require_authority(actor, target_id, day)

        existing = self.resolve(target_id, day)
        if existing is None:
            return None

        self._assignments.delete(existing.assignment_id)
        logger.info("Unbound %s on %s (%s)", target_id, day, existing.assignment_id)
        self._notify(target_id, None if existing.is_range else day)
        return existing

    def assign_range(
        self,
        *,
        shift_id: str,
        target_id: str,
        target_type: TargetType,
        start_date: Optional[date],
        end_date: Optional[date],
        target_name: Optional[str] = None,
        actor: Optional[Actor] = None,
    ) -> ShiftAssignment:
        shift_id = require_non_empty(shift_id, "Shift")
        target_id = require_non_empty(target_id, "Target")
        if start_date is None or end_date is None:
            raise ValidationError("Start and end dates are required")
        if end_date < start_date:
            raise ValidationError("End date must not be before start date")
        self._require_authority(actor, target_id, start_date)
        if not self._shifts.get_by_id(shift_id):
            raise ValidationError(f"Shift {shift_id} does not exist")

        for existing in self.for_target(target_id):
            if existing.overlaps(start_date, end_date):
                raise AssignmentOverlap(target_id=target_id, assignment_id=existing.assignment_id)

        assignment = self._assignments.save(
            ShiftAssignment(
                assignment_id=self._new_assignment_id(),
                shift_id=shift_id,
                target_id=target_id,
                target_type=target_type,
                target_name=target_name or DEFAULT_TARGET_NAME,
                start_date=start_date,
                end_date=end_date,
            )
        )
        logger.info(
            "Bound %s from %s to %s to %s (%s)", target_id, start_date, end_date, shift_id, assignment.assignment_id
        )
        self._notify(target_id, None)
        return assignment

    def remove(self, assignment_id: str, *, actor: Optional[Actor] = None) -> None:
        existing = self._assignments.get_by_id(assignment_id)
        if existing is None:
            raise ValidationError(f"Assignment {assignment_id} does not exist")
        self._require_authority(actor, existing.target_id, existing.assigned_date or existing.start_date)

        self._assignments.delete(assignment_id)
        logger.info("Removed assignment %s", assignment_id)
        self._notify(existing.target_id, None)

    def refresh(self) -> None:
        self._assignments.refresh()
