from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import format_12h, now_local, to_minutes, weekday_name
from ..core.constants import DAYS
from .model import TimeTable, TimeTableSlot


@dataclass(frozen=True)
class PeriodView:
    """Dashboard card for one period."""

    subject: str
    starts: str
    ends: str
    room: str
    faculty: str

    @classmethod
    def of(cls, slot: TimeTableSlot) -> "PeriodView":
        return cls(
            subject=slot.subject,
            starts=format_12h(slot.start_time),
            ends=format_12h(slot.end_time),
            room=slot.room or "",
            faculty=slot.faculty_name or "",
        )


def day_schedule(timetable: TimeTable, day: str) -> list[TimeTableSlot]:
    return sorted((s for s in timetable.content if s.day == day), key=lambda s: to_minutes(s.start_time))


def weekly_view(timetable: TimeTable) -> dict[str, list[TimeTableSlot]]:
    """Monday..Sunday, days without slots left out."""

    out: dict[str, list[TimeTableSlot]] = {}
    for day in DAYS:
        slots = day_schedule(timetable, day)
        if slots:
            out[day] = slots
    return out


def current_and_upcoming(
    timetable: TimeTable, now: datetime
) -> tuple[Optional[TimeTableSlot], Optional[TimeTableSlot]]:
    """The slot running at ``now`` and the next one to start today.

    A slot is current on the half-open interval [start, end).
    """

    now_minutes = now.hour * 60 + now.minute
    today = day_schedule(timetable, weekday_name(now.date()))

    current = next(
        (s for s in today if to_minutes(s.start_time) <= now_minutes < to_minutes(s.end_time)),
        None,
    )
    upcoming = next((s for s in today if to_minutes(s.start_time) > now_minutes), None)
    return current, upcoming


class LiveScheduleClock:
    """Now/next lookup for dashboard widgets. Holds no state besides the time source."""

    def __init__(self, now_provider: Callable[[], datetime] = now_local):
        self._now = now_provider

    def current_and_upcoming(
        self, timetable: TimeTable, now: Optional[datetime] = None
    ) -> tuple[Optional[TimeTableSlot], Optional[TimeTableSlot]]:
        return current_and_upcoming(timetable, now or self._now())

    def widget(self, timetable: TimeTable, now: Optional[datetime] = None) -> dict:
        current, upcoming = self.current_and_upcoming(timetable, now)
        return {
            "timetable_id": timetable.timetable_id,
            "current": asdict(PeriodView.of(current)) if current else None,
            "upcoming": asdict(PeriodView.of(upcoming)) if upcoming else None,
        }
