from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from ..core.constants import DEFAULT_CATEGORY
from ..core.enums import CategoryStatus, TemplateStatus


@dataclass(frozen=True)
class ShiftTemplate:
    """A named, reusable time window with a grace period."""

    shift_id: str
    label: str
    start_time: time
    end_time: time
    grace_period: int = 0
    early_mark_minutes: int = 0
    category: str = DEFAULT_CATEGORY
    status: TemplateStatus = TemplateStatus.ACTIVE

    @property
    def is_overnight(self) -> bool:
        return self.end_time <= self.start_time


@dataclass(frozen=True)
class ShiftCategory:
    category_id: str
    label: str
    description: str = ""
    color_code: str = "#2563eb"
    status: CategoryStatus = CategoryStatus.ACTIVE
