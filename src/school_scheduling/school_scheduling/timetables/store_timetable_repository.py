from __future__ import annotations

import json
from typing import Optional, Sequence

from ..common.datetime_utils import format_hhmm, parse_hhmm
from ..core.constants import DEFAULT_TIMETABLE_LABEL, TIME_TABLES
from ..core.enums import TargetType, TemplateStatus
from ..store.repository import Record, RecordStore
from ..store.snapshot import SnapshotCollection
from .model import TimeTable, TimeTableSlot, decode_target
from .repository import TimeTableRepository

# Slot keys inside the JSON ``content`` column keep the camelCase the web
# client has always written.


def slot_from_dict(d: dict) -> TimeTableSlot:
    return TimeTableSlot(
        slot_id=str(d["id"]),
        subject=d.get("subject") or "",
        day=d["day"],
        start_time=parse_hhmm(d["startTime"]),
        end_time=parse_hhmm(d["endTime"]),
        room=d.get("room") or None,
        faculty_id=d.get("facultyId") or None,
        faculty_name=d.get("facultyName") or None,
    )


def slot_to_dict(s: TimeTableSlot) -> dict:
    return {
        "id": s.slot_id,
        "subject": s.subject,
        "day": s.day,
        "startTime": format_hhmm(s.start_time),
        "endTime": format_hhmm(s.end_time),
        "room": s.room or "",
        "facultyId": s.faculty_id or "",
        "facultyName": s.faculty_name or "",
    }


def timetable_from_record(r: Record) -> TimeTable:
    content = r.get("content") or []
    if isinstance(content, str):
        content = json.loads(content) if content.strip() else []

    target_type = TargetType(r.get("target_type") or TargetType.CLASS.value)
    return TimeTable(
        timetable_id=str(r["id"]),
        shift_id=str(r.get("shift_id") or ""),
        target=decode_target(target_type, str(r.get("target_id") or "")),
        label=r.get("label") or DEFAULT_TIMETABLE_LABEL,
        school=r.get("school") or None,
        content=tuple(slot_from_dict(s) for s in content),
        status=TemplateStatus(r.get("status") or TemplateStatus.ACTIVE.value),
    )


def timetable_to_record(t: TimeTable) -> Record:
    return {
        "id": t.timetable_id,
        "label": t.label,
        "shift_id": t.shift_id,
        "target_id": t.target.encode() if t.target else "",
        "target_type": t.target.target_type.value if t.target else TargetType.CLASS.value,
        "school": t.school,
        "content": json.dumps([slot_to_dict(s) for s in t.content]),
        "status": t.status.value,
    }


class StoreTimeTableRepository(TimeTableRepository):
    def __init__(self, store: RecordStore):
        self._rows = SnapshotCollection(
            store,
            TIME_TABLES,
            decode=timetable_from_record,
            encode=timetable_to_record,
            key=lambda t: t.timetable_id,
        )

    def list_all(self) -> Sequence[TimeTable]:
        return self._rows.all()

    def get_by_id(self, timetable_id: str) -> Optional[TimeTable]:
        return self._rows.get(timetable_id)

    def save(self, timetable: TimeTable) -> TimeTable:
        return self._rows.save(timetable)

    def delete(self, timetable_id: str) -> None:
        self._rows.remove(timetable_id)

    def refresh(self) -> Sequence[TimeTable]:
        return self._rows.refresh()
