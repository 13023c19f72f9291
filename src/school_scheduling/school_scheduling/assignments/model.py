from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.constants import DEFAULT_TARGET_NAME
from ..core.enums import TargetType


@dataclass(frozen=True)
class ShiftAssignment:
    """Binding of one shift template to one target for a day or a date range."""

    assignment_id: str
    shift_id: str
    target_id: str
    target_type: TargetType
    target_name: str = DEFAULT_TARGET_NAME
    assigned_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def is_range(self) -> bool:
        return self.start_date is not None and self.end_date is not None and self.start_date != self.end_date

    def covers(self, day: date) -> bool:
        if self.assigned_date is not None and day == self.assigned_date:
            return True
        if self.start_date is not None and self.end_date is not None:
            return self.start_date <= day <= self.end_date
        return False

    def overlaps(self, start: date, end: date) -> bool:
        if self.start_date is not None and self.end_date is not None:
            if self.start_date <= end and start <= self.end_date:
                return True
        return self.assigned_date is not None and start <= self.assigned_date <= end


@dataclass(frozen=True)
class RosterCell:
    target_id: str
    day: date
    shift_id: Optional[str]
    label: str


@dataclass(frozen=True)
class RosterRow:
    target_id: str
    target_name: str
    cells: tuple[RosterCell, ...]
