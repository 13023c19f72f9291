from __future__ import annotations

from datetime import datetime, time

from school_scheduling.timetables.clock import LiveScheduleClock, current_and_upcoming, day_schedule, weekly_view
from school_scheduling.timetables.model import IndividualTarget, TimeTable, TimeTableSlot


def _slot(slot_id, subject, day, start, end, **kw) -> TimeTableSlot:
    return TimeTableSlot(slot_id=slot_id, subject=subject, day=day, start_time=start, end_time=end, **kw)


# 2024-05-06 is a Monday.
MONDAY = datetime(2024, 5, 6)

TIMETABLE = TimeTable(
    timetable_id="TT-000001",
    shift_id="SH-200",
    target=IndividualTarget("T-1"),
    content=(
        _slot("s2", "Science", "Monday", time(9), time(10), room="Lab 2"),
        _slot("s1", "Math", "Monday", time(8), time(9), faculty_name="Ana"),
        _slot("s3", "History", "Tuesday", time(8), time(9)),
    ),
)


def test_current_and_upcoming_mid_period():
    current, upcoming = current_and_upcoming(TIMETABLE, MONDAY.replace(hour=8, minute=30))
    assert current.subject == "Math"
    assert upcoming.subject == "Science"


def test_period_end_is_exclusive():
    current, upcoming = current_and_upcoming(TIMETABLE, MONDAY.replace(hour=9))
    assert current.subject == "Science"
    assert upcoming is None


def test_before_first_period_and_after_last():
    current, upcoming = current_and_upcoming(TIMETABLE, MONDAY.replace(hour=7, minute=59))
    assert current is None
    assert upcoming.subject == "Math"

    assert current_and_upcoming(TIMETABLE, MONDAY.replace(hour=10)) == (None, None)


def test_only_todays_slots_count():
    sunday = datetime(2024, 5, 12, 8, 30)
    assert current_and_upcoming(TIMETABLE, sunday) == (None, None)

    tuesday = datetime(2024, 5, 7, 8, 15)
    assert current_and_upcoming(TIMETABLE, tuesday)[0].subject == "History"


def test_same_now_gives_same_answer():
    now = MONDAY.replace(hour=8, minute=45)
    assert current_and_upcoming(TIMETABLE, now) == current_and_upcoming(TIMETABLE, now)


def test_moving_past_end_promotes_next_period():
    assert current_and_upcoming(TIMETABLE, MONDAY.replace(hour=8, minute=59))[0].subject == "Math"
    assert current_and_upcoming(TIMETABLE, MONDAY.replace(hour=9, minute=0))[0].subject == "Science"


def test_gap_between_periods_has_no_current():
    gappy = TimeTable(
        timetable_id="TT-2",
        shift_id="SH-200",
        target=IndividualTarget("T-1"),
        content=(
            _slot("a", "Math", "Monday", time(8), time(9)),
            _slot("b", "Art", "Monday", time(10), time(11)),
        ),
    )
    current, upcoming = current_and_upcoming(gappy, MONDAY.replace(hour=9, minute=30))
    assert current is None
    assert upcoming.subject == "Art"


def test_day_schedule_and_weekly_view_are_sorted():
    assert [s.subject for s in day_schedule(TIMETABLE, "Monday")] == ["Math", "Science"]
    assert list(weekly_view(TIMETABLE)) == ["Monday", "Tuesday"]


def test_widget_uses_clock_time_source():
    clock = LiveScheduleClock(now_provider=lambda: MONDAY.replace(hour=9, minute=15))
    widget = clock.widget(TIMETABLE)

    assert widget["current"] == {
        "subject": "Science",
        "starts": "09:00 AM",
        "ends": "10:00 AM",
        "room": "Lab 2",
        "faculty": "",
    }
    assert widget["upcoming"] is None
