from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

from ..core.constants import CLASSES, USERS
from ..core.enums import Role
from ..store.repository import Record, RecordStore
from .model import Member, SchoolClass

logger = logging.getLogger(__name__)


def member_from_record(r: Record) -> Member:
    return Member(
        member_id=str(r["id"]),
        name=r.get("name") or "",
        role=Role(r["role"]),
        assignment=r.get("assignment") or "",
        grade=r.get("grade") or None,
        designation=r.get("designation") or None,
        school=r.get("school") or None,
    )


def class_from_record(r: Record) -> SchoolClass:
    grades = r.get("grades") or []
    if isinstance(grades, str):
        grades = json.loads(grades) if grades.strip() else []
    return SchoolClass(
        class_id=str(r["id"]),
        name=r.get("name") or "",
        grades=tuple(str(g) for g in grades),
        school=r.get("school") or None,
    )


class StoreDirectory:
    """Read-only view of the user and class directories."""

    def __init__(self, store: RecordStore):
        self._store = store

    def members(self) -> Sequence[Member]:
        out: list[Member] = []
        for r in self._store.list_all(USERS):
            try:
                out.append(member_from_record(r))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping user record %r: %s", r.get("id"), e)
        return out

    def get_member(self, member_id: str) -> Optional[Member]:
        return next((m for m in self.members() if m.member_id == member_id), None)

    def classes(self, *, school: Optional[str] = None) -> Sequence[SchoolClass]:
        rows = [class_from_record(r) for r in self._store.list_all(CLASSES)]
        if school is not None:
            rows = [c for c in rows if c.school == school]
        return rows
