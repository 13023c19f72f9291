from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ShiftCategory, ShiftTemplate


class ShiftRepository(Protocol):
    def list_all(self) -> Sequence[ShiftTemplate]:
        raise NotImplementedError

    def get_by_id(self, shift_id: str) -> Optional[ShiftTemplate]:
        raise NotImplementedError

    def save(self, template: ShiftTemplate) -> ShiftTemplate:
        raise NotImplementedError

    def delete(self, shift_id: str) -> None:
        raise NotImplementedError

    def refresh(self) -> Sequence[ShiftTemplate]:
        """Re-read the snapshot from the record store."""

        raise NotImplementedError


class ShiftCategoryRepository(Protocol):
    def list_all(self) -> Sequence[ShiftCategory]:
        raise NotImplementedError

    def get_by_id(self, category_id: str) -> Optional[ShiftCategory]:
        raise NotImplementedError

    def save(self, category: ShiftCategory) -> ShiftCategory:
        raise NotImplementedError

    def delete(self, category_id: str) -> None:
        raise NotImplementedError
