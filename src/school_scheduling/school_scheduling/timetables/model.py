from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Optional, Union

from ..core.constants import DAYS, DEFAULT_TIMETABLE_LABEL
from ..core.enums import TargetType, TemplateStatus


@dataclass(frozen=True)
class ClassTarget:
    name: str
    grades: tuple[str, ...] = ()

    @property
    def target_type(self) -> TargetType:
        return TargetType.CLASS

    def encode(self) -> str:
        # Grades keep the order they were picked in; stored ids compare as raw strings.
        if not self.grades:
            return self.name
        return f"{self.name}:{','.join(self.grades)}"


@dataclass(frozen=True)
class IndividualTarget:
    user_id: str

    @property
    def target_type(self) -> TargetType:
        return TargetType.INDIVIDUAL

    def encode(self) -> str:
        return self.user_id


Target = Union[ClassTarget, IndividualTarget]


def decode_target(target_type: TargetType, target_id: str) -> Target:
    """Parse the stored target id. Class ids are ``"<className>:<grade1,grade2>"``."""

    if target_type == TargetType.INDIVIDUAL:
        return IndividualTarget(user_id=target_id)

    name, sep, grade_str = target_id.partition(":")
    grades = tuple(g for g in grade_str.split(",") if g) if sep else ()
    return ClassTarget(name=name, grades=grades)


@dataclass(frozen=True)
class TimeTableSlot:
    slot_id: str
    subject: str
    day: str
    start_time: time
    end_time: time
    room: Optional[str] = None
    faculty_id: Optional[str] = None
    faculty_name: Optional[str] = None

    def __post_init__(self):
        if self.day not in DAYS:
            raise ValueError(f"Unknown weekday: {self.day!r}")


@dataclass(frozen=True)
class TimeTable:
    timetable_id: str
    shift_id: str
    target: Optional[Target]
    label: str = DEFAULT_TIMETABLE_LABEL
    school: Optional[str] = None
    content: tuple[TimeTableSlot, ...] = field(default_factory=tuple)
    status: TemplateStatus = TemplateStatus.ACTIVE

    def slot(self, slot_id: str) -> Optional[TimeTableSlot]:
        return next((s for s in self.content if s.slot_id == slot_id), None)
