from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Sequence

from ..common import ids
from ..common.datetime_utils import format_12h, parse_hhmm
from ..core.constants import (
    DAYS,
    DEFAULT_SLOT_DAY,
    DEFAULT_SLOT_END,
    DEFAULT_SLOT_START,
    DEFAULT_SLOT_SUBJECT,
    DEFAULT_TIMETABLE_LABEL,
)
from ..core.enums import SlotState, TemplateStatus
from ..core.exceptions import AuthorizationError, SlotCollision, ValidationError
from ..policy.authorization import Actor, AllowAllPolicy, AuthorizationPort
from ..shifts.repository import ShiftRepository
from .model import ClassTarget, IndividualTarget, Target, TimeTable, TimeTableSlot
from .repository import TimeTableRepository

logger = logging.getLogger(__name__)

_SLOT_FIELDS = ("subject", "day", "start_time", "end_time", "room", "faculty_id", "faculty_name")


@dataclass
class TimetableDraft:
    """Editor state for one timetable.

    At most one slot is expanded at a time; its pending edits live in
    ``staged`` until they are saved. Slots added but never saved are listed in
    ``unsaved`` and dropped again when their edit is cancelled.
    """

    timetable: TimeTable
    is_new: bool = True
    expanded_slot_id: Optional[str] = None
    staged: Optional[TimeTableSlot] = None
    dirty: bool = False
    removed: set[str] = field(default_factory=set)
    unsaved: set[str] = field(default_factory=set)

    @property
    def content(self) -> tuple[TimeTableSlot, ...]:
        return self.timetable.content

    @property
    def can_commit(self) -> bool:
        return self.expanded_slot_id is None

    def slot_state(self, slot_id: str) -> SlotState:
        if slot_id in self.removed:
            return SlotState.REMOVED
        if slot_id == self.expanded_slot_id:
            return SlotState.EXPANDED
        if self.timetable.slot(slot_id) is None:
            raise ValidationError(f"Slot {slot_id} is not part of this timetable")
        return SlotState.COLLAPSED


def find_collision(content: Iterable[TimeTableSlot], slot: TimeTableSlot) -> Optional[TimeTableSlot]:
    """Another slot sharing the weekday and start time, if any."""

    return next(
        (s for s in content if s.slot_id != slot.slot_id and s.day == slot.day and s.start_time == slot.start_time),
        None,
    )


def _coerce_changes(changes: dict) -> dict:
    unknown = set(changes) - set(_SLOT_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown slot field(s): {', '.join(sorted(unknown))}")

    out = dict(changes)
    for key in ("start_time", "end_time"):
        if key in out:
            out[key] = parse_hhmm(out[key])
    if "day" in out and out["day"] not in DAYS:
        raise ValidationError(f"Unknown weekday: {out['day']!r}")
    for key in ("room", "faculty_id", "faculty_name"):
        if key in out:
            out[key] = (out[key] or "").strip() or None
    if "subject" in out:
        out["subject"] = (out["subject"] or "").strip()
    return out


class TimetableSlotEngine:
    """Slot editing and commit for weekly timetables."""

    def __init__(
        self,
        timetables: TimeTableRepository,
        shifts: Optional[ShiftRepository] = None,
        *,
        authorization: Optional[AuthorizationPort] = None,
    ):
        self._timetables = timetables
        self._shifts = shifts
        self._authorization = authorization or AllowAllPolicy()

    # Drafts

    def new_draft(self, *, school: Optional[str] = None) -> TimetableDraft:
        return TimetableDraft(
            timetable=TimeTable(timetable_id="", shift_id="", target=None, label="", school=school),
            is_new=True,
        )

    def open(self, timetable: TimeTable) -> TimetableDraft:
        return TimetableDraft(timetable=timetable, is_new=False)

    def set_details(
        self,
        draft: TimetableDraft,
        *,
        label: Optional[str] = None,
        shift_id: Optional[str] = None,
        target: Optional[Target] = None,
    ) -> None:
        changes = {}
        if label is not None:
            changes["label"] = label.strip()
        if shift_id is not None:
            changes["shift_id"] = shift_id.strip()
        if target is not None:
            changes["target"] = target
        if changes:
            draft.timetable = replace(draft.timetable, **changes)
            draft.dirty = True

    # Slots

    def _require_collapsed(self, draft: TimetableDraft, slot_id: Optional[str] = None) -> None:
        if draft.expanded_slot_id is not None and draft.expanded_slot_id != slot_id:
            raise ValidationError("Save or cancel the slot being edited first")

    def add_slot(self, draft: TimetableDraft) -> TimeTableSlot:
        """Append a default slot and open it for editing. Collisions are checked on save."""

        self._require_collapsed(draft)
        slot = TimeTableSlot(
            slot_id=ids.slot_id(),
            subject=DEFAULT_SLOT_SUBJECT,
            day=DEFAULT_SLOT_DAY,
            start_time=parse_hhmm(DEFAULT_SLOT_START),
            end_time=parse_hhmm(DEFAULT_SLOT_END),
        )
        draft.timetable = replace(draft.timetable, content=draft.content + (slot,))
        draft.unsaved.add(slot.slot_id)
        draft.expanded_slot_id = slot.slot_id
        draft.staged = slot
        draft.dirty = True
        return slot

    def expand(self, draft: TimetableDraft, slot_id: str) -> TimeTableSlot:
        self._require_collapsed(draft, slot_id)
        if draft.expanded_slot_id == slot_id and draft.staged is not None:
            return draft.staged

        slot = draft.timetable.slot(slot_id)
        if slot is None:
            raise ValidationError(f"Slot {slot_id} is not part of this timetable")
        draft.expanded_slot_id = slot_id
        draft.staged = slot
        return slot

    def update_slot(self, draft: TimetableDraft, slot_id: str, **changes) -> TimeTableSlot:
        staged = self.expand(draft, slot_id)
        draft.staged = replace(staged, **_coerce_changes(changes))
        return draft.staged

    def save_slot(self, draft: TimetableDraft, slot: Optional[TimeTableSlot] = None) -> TimeTableSlot:
        """Validate and write a slot into the draft content.

        Raises SlotCollision when another slot has the same day and start time;
        the content is left untouched and the slot stays expanded.
        """

        slot = slot or draft.staged
        if slot is None:
            raise ValidationError("No slot is being edited")
        if draft.timetable.slot(slot.slot_id) is None:
            raise ValidationError(f"Slot {slot.slot_id} is not part of this timetable")
        self._require_collapsed(draft, slot.slot_id)

        clash = find_collision(draft.content, slot)
        if clash is not None:
            draft.expanded_slot_id = slot.slot_id
            draft.staged = slot
            raise SlotCollision(subject=clash.subject, day=slot.day, start_time=format_12h(slot.start_time))

        draft.timetable = replace(
            draft.timetable,
            content=tuple(slot if s.slot_id == slot.slot_id else s for s in draft.content),
        )
        draft.unsaved.discard(slot.slot_id)
        draft.expanded_slot_id = None
        draft.staged = None
        draft.dirty = True
        return slot

    def cancel_edit(self, draft: TimetableDraft) -> None:
        slot_id = draft.expanded_slot_id
        if slot_id in draft.unsaved:
            draft.timetable = replace(
                draft.timetable, content=tuple(s for s in draft.content if s.slot_id != slot_id)
            )
            draft.unsaved.discard(slot_id)
        draft.expanded_slot_id = None
        draft.staged = None

    def remove_slot(self, draft: TimetableDraft, slot_id: str) -> None:
        if draft.timetable.slot(slot_id) is None:
            raise ValidationError(f"Slot {slot_id} is not part of this timetable")

        draft.timetable = replace(draft.timetable, content=tuple(s for s in draft.content if s.slot_id != slot_id))
        draft.removed.add(slot_id)
        draft.unsaved.discard(slot_id)
        if draft.expanded_slot_id == slot_id:
            self.cancel_edit(draft)
        draft.dirty = True

    def replace_content(self, draft: TimetableDraft, slots: Sequence[TimeTableSlot]) -> None:
        """Load a whole slot list at once, checking each slot against those before it."""

        self._require_collapsed(draft)
        accepted: list[TimeTableSlot] = []
        for slot in slots:
            if any(s.slot_id == slot.slot_id for s in accepted):
                raise ValidationError(f"Duplicate slot id {slot.slot_id}")
            clash = find_collision(accepted, slot)
            if clash is not None:
                raise SlotCollision(subject=clash.subject, day=slot.day, start_time=format_12h(slot.start_time))
            accepted.append(slot)

        previous = {s.slot_id for s in draft.content}
        draft.removed |= previous - {s.slot_id for s in accepted}
        draft.timetable = replace(draft.timetable, content=tuple(accepted))
        draft.dirty = True

    # Commit

    def _validate_target(self, target: Optional[Target]) -> Target:
        if isinstance(target, ClassTarget):
            if not target.name.strip():
                raise ValidationError("Please select a valid class")
            if not target.grades:
                raise ValidationError("Please select at least one grade")
            return target
        if isinstance(target, IndividualTarget) and target.user_id.strip():
            return target
        raise ValidationError("Shift and target are mandatory")

    def commit(self, draft: TimetableDraft, *, actor: Optional[Actor] = None) -> TimeTable:
        """Persist the whole timetable as one record."""

        if not draft.can_commit:
            raise ValidationError("A slot is still being edited; save it before committing")

        tt = draft.timetable
        if not self._authorization.can_edit_timetable(actor, tt.timetable_id or None):
            raise AuthorizationError("You are not allowed to edit timetables")

        target = self._validate_target(tt.target)
        if not tt.shift_id:
            raise ValidationError("Shift and target are mandatory")
        if self._shifts is not None and self._shifts.get_by_id(tt.shift_id) is None:
            raise ValidationError(f"Shift {tt.shift_id} does not exist")
        for index, slot in enumerate(tt.content):
            clash = find_collision(tt.content[:index], slot)
            if clash is not None:
                raise SlotCollision(subject=clash.subject, day=slot.day, start_time=format_12h(slot.start_time))

        timetable_id = tt.timetable_id
        if not timetable_id:
            taken = {t.timetable_id for t in self._timetables.list_all()}
            timetable_id = ids.timetable_id()
            while timetable_id in taken:
                timetable_id = ids.timetable_id()

        saved = self._timetables.save(
            replace(
                tt,
                timetable_id=timetable_id,
                target=target,
                label=tt.label or DEFAULT_TIMETABLE_LABEL,
                status=TemplateStatus.ACTIVE,
            )
        )
        draft.timetable = saved
        draft.is_new = False
        draft.dirty = False
        draft.removed.clear()
        logger.info("Committed timetable %s with %d slot(s)", saved.timetable_id, len(saved.content))
        return saved
