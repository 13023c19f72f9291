from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import TimeTable


class TimeTableRepository(Protocol):
    def list_all(self) -> Sequence[TimeTable]:
        raise NotImplementedError

    def get_by_id(self, timetable_id: str) -> Optional[TimeTable]:
        raise NotImplementedError

    def save(self, timetable: TimeTable) -> TimeTable:
        """Persist the whole timetable, slots included, as one record."""

        raise NotImplementedError

    def delete(self, timetable_id: str) -> None:
        raise NotImplementedError

    def refresh(self) -> Sequence[TimeTable]:
        raise NotImplementedError
