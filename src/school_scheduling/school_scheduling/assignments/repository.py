from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ShiftAssignment


class AssignmentRepository(Protocol):
    def list_all(self) -> Sequence[ShiftAssignment]:
        """All assignments, in store order."""

        raise NotImplementedError

    def get_by_id(self, assignment_id: str) -> Optional[ShiftAssignment]:
        raise NotImplementedError

    def save(self, assignment: ShiftAssignment) -> ShiftAssignment:
        raise NotImplementedError

    def delete(self, assignment_id: str) -> None:
        raise NotImplementedError

    def refresh(self) -> Sequence[ShiftAssignment]:
        raise NotImplementedError
