from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import format_hhmm, parse_hhmm
from ..core.constants import DEFAULT_CATEGORY, SHIFT_CATEGORIES, SHIFTS
from ..core.enums import CategoryStatus, TemplateStatus
from ..store.repository import Record, RecordStore
from ..store.snapshot import SnapshotCollection
from .model import ShiftCategory, ShiftTemplate
from .repository import ShiftCategoryRepository, ShiftRepository


def template_from_record(r: Record) -> ShiftTemplate:
    return ShiftTemplate(
        shift_id=str(r["id"]),
        label=r.get("label") or "",
        start_time=parse_hhmm(r["start_time"]),
        end_time=parse_hhmm(r["end_time"]),
        grace_period=int(r.get("grace_period") or 0),
        early_mark_minutes=int(r.get("early_mark_minutes") or 0),
        category=r.get("type") or DEFAULT_CATEGORY,
        status=TemplateStatus(r.get("status") or TemplateStatus.ACTIVE.value),
    )


def template_to_record(t: ShiftTemplate) -> Record:
    return {
        "id": t.shift_id,
        "label": t.label,
        "start_time": format_hhmm(t.start_time),
        "end_time": format_hhmm(t.end_time),
        "grace_period": t.grace_period,
        "early_mark_minutes": t.early_mark_minutes,
        "type": t.category,
        "status": t.status.value,
    }


def category_from_record(r: Record) -> ShiftCategory:
    return ShiftCategory(
        category_id=str(r["id"]),
        label=r.get("label") or "",
        description=r.get("description") or "",
        color_code=r.get("color_code") or "#2563eb",
        status=CategoryStatus(r.get("status") or CategoryStatus.ACTIVE.value),
    )


def category_to_record(c: ShiftCategory) -> Record:
    return {
        "id": c.category_id,
        "label": c.label,
        "description": c.description,
        "color_code": c.color_code,
        "status": c.status.value,
    }


class StoreShiftRepository(ShiftRepository):
    def __init__(self, store: RecordStore):
        self._rows = SnapshotCollection(
            store, SHIFTS, decode=template_from_record, encode=template_to_record, key=lambda t: t.shift_id
        )

    def list_all(self) -> Sequence[ShiftTemplate]:
        return self._rows.all()

    def get_by_id(self, shift_id: str) -> Optional[ShiftTemplate]:
        return self._rows.get(shift_id)

    def save(self, template: ShiftTemplate) -> ShiftTemplate:
        return self._rows.save(template)

    def delete(self, shift_id: str) -> None:
        self._rows.remove(shift_id)

    def refresh(self) -> Sequence[ShiftTemplate]:
        return self._rows.refresh()


class StoreShiftCategoryRepository(ShiftCategoryRepository):
    def __init__(self, store: RecordStore):
        self._rows = SnapshotCollection(
            store,
            SHIFT_CATEGORIES,
            decode=category_from_record,
            encode=category_to_record,
            key=lambda c: c.category_id,
        )

    def list_all(self) -> Sequence[ShiftCategory]:
        return self._rows.all()

    def get_by_id(self, category_id: str) -> Optional[ShiftCategory]:
        return self._rows.get(category_id)

    def save(self, category: ShiftCategory) -> ShiftCategory:
        return self._rows.save(category)

    def delete(self, category_id: str) -> None:
        self._rows.remove(category_id)
