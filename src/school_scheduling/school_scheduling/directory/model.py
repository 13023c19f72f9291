from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Member:
    """A person from the user directory, as the scheduling core sees them."""

    member_id: str
    name: str
    role: Role
    assignment: str = ""
    grade: Optional[str] = None
    designation: Optional[str] = None
    school: Optional[str] = None


@dataclass(frozen=True)
class SchoolClass:
    class_id: str
    name: str
    grades: tuple[str, ...] = ()
    school: Optional[str] = None
