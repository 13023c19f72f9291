from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional

from ..core.constants import DAYS
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(str(value)[:10])


def parse_hhmm(value) -> time:
    """Parse 'HH:MM' (seconds tolerated and dropped) into a minute-precision time."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    v = (value or "").strip()
    parts = v.split(":")
    try:
        hours = int(parts[0])
        minutes = int(parts[1][:2]) if len(parts) > 1 and parts[1] else 0
        return time(hour=hours, minute=minutes)
    except (ValueError, IndexError):
        raise ValidationError(f"Invalid time (HH:MM): {value!r}")


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def format_12h(value: Optional[time]) -> str:
    if value is None:
        return "--:--"
    suffix = "PM" if value.hour >= 12 else "AM"
    h12 = value.hour % 12 or 12
    return f"{h12:02d}:{value.minute:02d} {suffix}"


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def weekday_name(value: date) -> str:
    """English weekday name, independent of the process locale."""
    return DAYS[value.weekday()]


def week_dates(today: date, week_offset: int = 0) -> list[date]:
    """The seven dates (Monday first) of the week ``week_offset`` weeks from today's."""
    monday = today - timedelta(days=today.weekday()) + timedelta(weeks=week_offset)
    return [monday + timedelta(days=i) for i in range(7)]


def now_local() -> datetime:
    """Current local time, wrapped so tests can patch it."""
    return datetime.now()
