from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles as stored in the user directory."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    CAMPUS_HEAD = "CAMPUS_HEAD"
    SCHOOL_ADMIN = "SCHOOL_ADMIN"
    TEACHER = "TEACHER"
    RESOURCE_PERSON = "RESOURCE_PERSON"
    STUDENT = "STUDENT"


ADMIN_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.CAMPUS_HEAD, Role.SCHOOL_ADMIN})


class TargetType(str, Enum):
    CLASS = "Class"
    INDIVIDUAL = "Individual"


class TemplateStatus(str, Enum):
    ACTIVE = "Active"
    DRAFT = "Draft"


class CategoryStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class SlotState(str, Enum):
    """Editing state of a single timetable slot inside a draft."""

    COLLAPSED = "Collapsed"
    EXPANDED = "Expanded"
    REMOVED = "Removed"


class SchemaDrift(str, Enum):
    MISSING_TABLE = "MISSING_TABLE"
    MISSING_COLUMN = "MISSING_COLUMN"
