from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..assignments.model import ShiftAssignment
from ..assignments.repository import AssignmentRepository
from ..common import ids
from ..common.datetime_utils import format_hhmm
from ..common.validators import require_non_empty, require_non_negative
from ..core.exceptions import AuthorizationError, ReferentialConflict, ValidationError
from ..policy.authorization import Actor, AllowAllPolicy, AuthorizationPort
from .model import ShiftCategory, ShiftTemplate
from .repository import ShiftCategoryRepository, ShiftRepository

logger = logging.getLogger(__name__)


class ShiftTemplateRegistry:
    """Owns shift templates and the category labels they carry."""

    def __init__(
        self,
        shifts: ShiftRepository,
        assignments: AssignmentRepository,
        categories: Optional[ShiftCategoryRepository] = None,
        *,
        authorization: Optional[AuthorizationPort] = None,
    ):
        self._shifts = shifts
        self._assignments = assignments
        self._categories = categories
        self._authorization = authorization or AllowAllPolicy()

    def _require_authority(self, actor: Optional[Actor]) -> None:
        if not self._authorization.can_manage_templates(actor):
            raise AuthorizationError("You are not allowed to manage shift templates")

    def _validate(self, template: ShiftTemplate) -> ShiftTemplate:
        label = require_non_empty(template.label, "Shift label")
        grace = require_non_negative(template.grace_period, "Grace period")
        early = require_non_negative(template.early_mark_minutes, "Early mark minutes")
        if template.is_overnight:
            # Stored as given; consumers treat end <= start as a same-day window.
            logger.warning(
                "Shift %s ends at or before it starts (%s-%s)",
                template.shift_id,
                format_hhmm(template.start_time),
                format_hhmm(template.end_time),
            )
        return replace(template, label=label, grace_period=grace, early_mark_minutes=early)

    def _new_shift_id(self) -> str:
        taken = {t.shift_id for t in self._shifts.list_all()}
        new_id = ids.shift_id()
        while new_id in taken:
            new_id = ids.shift_id()
        return new_id

    def create(self, template: ShiftTemplate, *, actor: Optional[Actor] = None) -> ShiftTemplate:
        self._require_authority(actor)
        if not template.shift_id:
            template = replace(template, shift_id=self._new_shift_id())
        elif self._shifts.get_by_id(template.shift_id):
            raise ValidationError(f"Shift {template.shift_id} already exists")

        saved = self._shifts.save(self._validate(template))
        logger.info("Created shift template %s (%s)", saved.shift_id, saved.label)
        return saved

    def update(self, template: ShiftTemplate, *, actor: Optional[Actor] = None) -> ShiftTemplate:
        self._require_authority(actor)
        if not self._shifts.get_by_id(template.shift_id):
            raise ValidationError(f"Shift {template.shift_id} does not exist")

        saved = self._shifts.save(self._validate(template))
        logger.info("Updated shift template %s", saved.shift_id)
        return saved

    def delete(self, shift_id: str, *, actor: Optional[Actor] = None) -> None:
        self._require_authority(actor)
        # Scans the current snapshot only; a concurrent writer can still bind.
        references = self.assignments_for(shift_id)
        if references:
            raise ReferentialConflict(shift_id, len(references))

        self._shifts.delete(shift_id)
        logger.info("Deleted shift template %s", shift_id)

    def list(self) -> Sequence[ShiftTemplate]:
        return self._shifts.list_all()

    def get(self, shift_id: str) -> Optional[ShiftTemplate]:
        return self._shifts.get_by_id(shift_id)

    def assignments_for(self, shift_id: str) -> list[ShiftAssignment]:
        return [a for a in self._assignments.list_all() if a.shift_id == shift_id]

    def refresh(self) -> None:
        self._shifts.refresh()
        self._assignments.refresh()

    # Categories

    def list_categories(self) -> Sequence[ShiftCategory]:
        return self._categories.list_all() if self._categories else []

    def save_category(self, category: ShiftCategory, *, actor: Optional[Actor] = None) -> ShiftCategory:
        self._require_authority(actor)
        if self._categories is None:
            raise ValidationError("Shift categories are not configured")

        label = require_non_empty(category.label, "Category label")
        category_id = category.category_id
        if not category_id:
            taken = {c.category_id for c in self._categories.list_all()}
            category_id = ids.category_id()
            while category_id in taken:
                category_id = ids.category_id()

        saved = self._categories.save(
            replace(category, category_id=category_id, label=label, description=(category.description or "").strip())
        )
        logger.info("Saved shift category %s (%s)", saved.category_id, saved.label)
        return saved

    def delete_category(self, category_id: str, *, actor: Optional[Actor] = None) -> None:
        self._require_authority(actor)
        if self._categories is None:
            raise ValidationError("Shift categories are not configured")
        # Templates keep the label text; nothing cascades.
        self._categories.delete(category_id)
        logger.info("Deleted shift category %s", category_id)
