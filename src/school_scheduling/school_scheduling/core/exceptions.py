from __future__ import annotations

from typing import Optional

from .enums import SchemaDrift


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when an actor lacks permission for an action."""


class ReferentialConflict(DomainError):
    """Raised when deleting a shift template that assignments still reference."""

    def __init__(self, shift_id: str, references: int):
        super().__init__(f"Shift {shift_id} is bound to {references} target(s); unbind them before deleting")
        self.shift_id = shift_id
        self.references = references


class SlotCollision(ValidationError):
    """Raised when two slots of one timetable share weekday and start time."""

    def __init__(self, *, subject: str, day: str, start_time: str):
        super().__init__(f'The slot {start_time} on {day} is already assigned to "{subject}"')
        self.subject = subject
        self.day = day
        self.start_time = start_time


class AssignmentOverlap(ValidationError):
    """Raised when a new binding would cover dates another binding already covers."""

    def __init__(self, *, target_id: str, assignment_id: str):
        super().__init__(f"Target {target_id} already has assignment {assignment_id} in that period")
        self.target_id = target_id
        self.assignment_id = assignment_id


class StoreError(DomainError):
    """Failure reported by the external record store.

    ``drift`` is set when the failure is a known schema mismatch; ``schema_patch``
    then holds a statement the operator can run to fix it.
    """

    def __init__(
        self,
        message: str,
        *,
        collection: Optional[str] = None,
        drift: Optional[SchemaDrift] = None,
        schema_patch: Optional[str] = None,
    ):
        super().__init__(message)
        self.collection = collection
        self.drift = drift
        self.schema_patch = schema_patch
