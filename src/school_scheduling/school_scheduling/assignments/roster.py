from __future__ import annotations

from datetime import date
from typing import Dict, Optional, Sequence, Tuple

from ..common.datetime_utils import week_dates
from ..core.enums import Role
from ..directory.model import Member
from ..shifts.repository import ShiftRepository
from .model import RosterCell, RosterRow
from .service import AssignmentResolver


def filter_members(members: Sequence[Member], *, query: str = "", role: Optional[Role] = None) -> list[Member]:
    """Roster rows: staff only, narrowed by a name/id search and an optional role."""

    q = (query or "").strip().lower()
    out = []
    for m in members:
        if m.role == Role.STUDENT:
            continue
        if role is not None and m.role != role:
            continue
        if q and q not in m.name.lower() and q not in m.member_id.lower():
            continue
        out.append(m)
    return out


class RosterView:
    """Target x date grid of resolved shift labels.

    The resolved shift id of each cell is cached until the resolver reports a
    change for that target/date; labels are read from the templates on every
    lookup, so renamed templates show up at once.
    """

    def __init__(self, resolver: AssignmentResolver, shifts: ShiftRepository):
        self._resolver = resolver
        self._shifts = shifts
        self._cells: Dict[Tuple[str, date], Optional[str]] = {}
        resolver.add_listener(self.invalidate)

    def invalidate(self, target_id: str, day: Optional[date] = None) -> None:
        if day is not None:
            self._cells.pop((target_id, day), None)
            return
        for key in [k for k in self._cells if k[0] == target_id]:
            del self._cells[key]

    def clear(self) -> None:
        self._cells.clear()

    def refresh(self) -> None:
        self._resolver.refresh()
        self.clear()

    def cell(self, target_id: str, day: date) -> RosterCell:
        key = (target_id, day)
        if key not in self._cells:
            assignment = self._resolver.resolve(target_id, day)
            self._cells[key] = assignment.shift_id if assignment else None

        shift_id = self._cells[key]
        shift = self._shifts.get_by_id(shift_id) if shift_id else None
        return RosterCell(
            target_id=target_id,
            day=day,
            shift_id=shift.shift_id if shift else None,
            label=shift.label if shift else "",
        )

    def week(self, today: date, week_offset: int = 0) -> list[date]:
        return week_dates(today, week_offset)

    def grid(self, targets: Sequence[Member], dates: Sequence[date]) -> list[RosterRow]:
        # Only the week on screen stays cached.
        shown = set(dates)
        for key in [k for k in self._cells if k[1] not in shown]:
            del self._cells[key]

        return [
            RosterRow(
                target_id=m.member_id,
                target_name=m.name,
                cells=tuple(self.cell(m.member_id, d) for d in dates),
            )
            for m in targets
        ]
