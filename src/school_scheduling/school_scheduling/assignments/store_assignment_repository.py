from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import parse_optional_date
from ..core.constants import DEFAULT_TARGET_NAME, SHIFT_ASSIGNMENTS
from ..core.enums import TargetType
from ..store.repository import Record, RecordStore
from ..store.snapshot import SnapshotCollection
from .model import ShiftAssignment
from .repository import AssignmentRepository


def _iso(value) -> Optional[str]:
    return value.strftime("%Y-%m-%d") if value else None


def assignment_from_record(r: Record) -> ShiftAssignment:
    return ShiftAssignment(
        assignment_id=str(r["id"]),
        shift_id=str(r.get("shift_id") or ""),
        target_id=str(r["target_id"]),
        target_type=TargetType(r.get("target_type") or TargetType.INDIVIDUAL.value),
        target_name=r.get("target_name") or DEFAULT_TARGET_NAME,
        assigned_date=parse_optional_date(r.get("assigned_date")),
        start_date=parse_optional_date(r.get("start_date")),
        end_date=parse_optional_date(r.get("end_date")),
    )


def assignment_to_record(a: ShiftAssignment) -> Record:
    return {
        "id": a.assignment_id,
        "shift_id": a.shift_id,
        "target_id": a.target_id,
        "target_name": a.target_name,
        "target_type": a.target_type.value,
        "assigned_date": _iso(a.assigned_date),
        "start_date": _iso(a.start_date),
        "end_date": _iso(a.end_date),
    }


class StoreAssignmentRepository(AssignmentRepository):
    def __init__(self, store: RecordStore):
        self._rows = SnapshotCollection(
            store,
            SHIFT_ASSIGNMENTS,
            decode=assignment_from_record,
            encode=assignment_to_record,
            key=lambda a: a.assignment_id,
        )

    def list_all(self) -> Sequence[ShiftAssignment]:
        return self._rows.all()

    def get_by_id(self, assignment_id: str) -> Optional[ShiftAssignment]:
        return self._rows.get(assignment_id)

    def save(self, assignment: ShiftAssignment) -> ShiftAssignment:
        return self._rows.save(assignment)

    def delete(self, assignment_id: str) -> None:
        self._rows.remove(assignment_id)

    def refresh(self) -> Sequence[ShiftAssignment]:
        return self._rows.refresh()
