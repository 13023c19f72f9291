from __future__ import annotations

from datetime import time

import pytest

from school_scheduling.core.enums import Role, SlotState
from school_scheduling.core.exceptions import AuthorizationError, SlotCollision, ValidationError
from school_scheduling.policy.authorization import Actor, RolePolicy
from school_scheduling.shifts.model import ShiftTemplate
from school_scheduling.shifts.store_shift_repository import StoreShiftRepository, template_to_record
from school_scheduling.store.memory_store import InMemoryRecordStore
from school_scheduling.timetables.engine import TimetableSlotEngine
from school_scheduling.timetables.model import ClassTarget, IndividualTarget, TimeTable, TimeTableSlot
from school_scheduling.timetables.store_timetable_repository import StoreTimeTableRepository


def _engine(**kwargs):
    store = InMemoryRecordStore(
        {
            "shifts": [
                template_to_record(
                    ShiftTemplate(shift_id="SH-200", label="Morning", start_time=time(8), end_time=time(14))
                )
            ]
        }
    )
    timetables = StoreTimeTableRepository(store)
    return store, timetables, TimetableSlotEngine(timetables, StoreShiftRepository(store), **kwargs)


def _draft_with_math(engine):
    draft = engine.new_draft()
    engine.set_details(draft, label="Grade 10 Science", shift_id="SH-200", target=IndividualTarget("T-1"))
    math = engine.add_slot(draft)
    engine.update_slot(draft, math.slot_id, subject="Math", day="Monday", start_time="08:00", end_time="09:00")
    engine.save_slot(draft)
    return draft, math.slot_id


def test_add_slot_appends_default_and_expands_it():
    _, _, engine = _engine()
    draft = engine.new_draft()
    slot = engine.add_slot(draft)

    assert slot.slot_id.startswith("SLOT-")
    assert slot.subject == "New Subject"
    assert slot.day == "Monday"
    assert (slot.start_time, slot.end_time) == (time(8), time(9))
    assert draft.slot_state(slot.slot_id) == SlotState.EXPANDED
    assert draft.dirty


def test_edits_stay_staged_until_saved():
    _, _, engine = _engine()
    draft, math_id = _draft_with_math(engine)

    engine.update_slot(draft, math_id, subject="Algebra")
    assert draft.timetable.slot(math_id).subject == "Math"

    engine.save_slot(draft)
    assert draft.timetable.slot(math_id).subject == "Algebra"
    assert draft.slot_state(math_id) == SlotState.COLLAPSED


def test_save_slot_rejects_duplicate_day_and_start_then_accepts_after_change():
    _, _, engine = _engine()
    draft, _ = _draft_with_math(engine)

    science = engine.add_slot(draft)
    engine.update_slot(draft, science.slot_id, subject="Science", day="Monday", start_time="08:00")

    with pytest.raises(SlotCollision) as exc:
        engine.save_slot(draft)
    assert exc.value.subject == "Math"
    assert "Math" in str(exc.value)
    assert draft.slot_state(science.slot_id) == SlotState.EXPANDED
    assert draft.timetable.slot(science.slot_id).subject == "New Subject"

    engine.update_slot(draft, science.slot_id, start_time="09:00", end_time="10:00")
    engine.save_slot(draft)

    saved = draft.timetable.slot(science.slot_id)
    assert (saved.subject, saved.start_time) == ("Science", time(9))


def test_same_start_on_another_day_is_not_a_collision():
    _, _, engine = _engine()
    draft, _ = _draft_with_math(engine)

    other = engine.add_slot(draft)
    engine.update_slot(draft, other.slot_id, subject="Math", day="Tuesday", start_time="08:00")
    engine.save_slot(draft)

    assert len(draft.content) == 2


def test_only_one_slot_expanded_at_a_time():
    _, _, engine = _engine()
    draft, math_id = _draft_with_math(engine)
    engine.add_slot(draft)

    with pytest.raises(ValidationError):
        engine.expand(draft, math_id)
    with pytest.raises(ValidationError):
        engine.add_slot(draft)


def test_commit_blocked_while_a_slot_is_expanded():
    store, _, engine = _engine()
    draft, _ = _draft_with_math(engine)
    engine.add_slot(draft)

    with pytest.raises(ValidationError):
        engine.commit(draft)
    assert store.list_all("time_tables") == []


def test_remove_expanded_slot_collapses_and_unblocks_commit():
    _, _, engine = _engine()
    draft, _ = _draft_with_math(engine)
    extra = engine.add_slot(draft)

    engine.remove_slot(draft, extra.slot_id)

    assert draft.slot_state(extra.slot_id) == SlotState.REMOVED
    assert draft.can_commit
    engine.commit(draft)


def test_cancel_edit_discards_staged_changes():
    _, _, engine = _engine()
    draft, math_id = _draft_with_math(engine)
    engine.update_slot(draft, math_id, subject="Art")
    engine.cancel_edit(draft)

    assert draft.timetable.slot(math_id).subject == "Math"
    assert draft.can_commit


def test_commit_persists_whole_timetable_as_one_record():
    store, timetables, engine = _engine()
    draft, _ = _draft_with_math(engine)

    saved = engine.commit(draft)

    rows = store.list_all("time_tables")
    assert len(rows) == 1
    assert rows[0]["id"] == saved.timetable_id
    assert rows[0]["target_id"] == "T-1"
    assert rows[0]["target_type"] == "Individual"
    assert '"subject": "Math"' in rows[0]["content"]
    assert not draft.dirty
    assert timetables.get_by_id(saved.timetable_id).content == saved.content


def test_commit_class_target_encodes_composite_id():
    store, _, engine = _engine()
    draft = engine.new_draft()
    engine.set_details(draft, label="", shift_id="SH-200", target=ClassTarget("Alpha", ("10", "9")))

    saved = engine.commit(draft)

    assert saved.label == "Standard Schedule"
    assert store.list_all("time_tables")[0]["target_id"] == "Alpha:10,9"


def test_commit_requires_grades_for_class_target():
    _, _, engine = _engine()
    draft = engine.new_draft()
    engine.set_details(draft, shift_id="SH-200", target=ClassTarget("Alpha"))

    with pytest.raises(ValidationError):
        engine.commit(draft)


def test_commit_requires_shift_and_target():
    _, _, engine = _engine()
    draft = engine.new_draft()
    engine.set_details(draft, target=IndividualTarget("T-1"))
    with pytest.raises(ValidationError):
        engine.commit(draft)

    draft = engine.new_draft()
    engine.set_details(draft, shift_id="SH-200")
    with pytest.raises(ValidationError):
        engine.commit(draft)


def test_commit_checks_authorization():
    _, _, engine = _engine(authorization=RolePolicy())
    draft, _ = _draft_with_math(engine)

    with pytest.raises(AuthorizationError):
        engine.commit(draft, actor=Actor(user_id="T-1", role=Role.TEACHER))

    engine.commit(draft, actor=Actor(user_id="AD-1", role=Role.SUPER_ADMIN))


def test_replace_content_rejects_collisions():
    _, _, engine = _engine()
    draft, math_id = _draft_with_math(engine)
    math = draft.timetable.slot(math_id)

    clone = math.__class__(slot_id="SLOT-other", subject="Physics", day="Monday", start_time=time(8), end_time=time(9))
    with pytest.raises(SlotCollision):
        engine.replace_content(draft, [math, clone])

    assert [s.slot_id for s in draft.content] == [math_id]


def test_cancelling_a_new_slot_drops_it():
    store, _, engine = _engine()
    draft, math_id = _draft_with_math(engine)

    for _ in range(2):
        extra = engine.add_slot(draft)
        engine.cancel_edit(draft)
        assert draft.timetable.slot(extra.slot_id) is None

    saved = engine.commit(draft)
    assert [s.slot_id for s in saved.content] == [math_id]
    assert len(store.list_all("time_tables")) == 1


def test_cancelling_an_edit_of_a_saved_slot_keeps_it():
    _, _, engine = _engine()
    draft, math_id = _draft_with_math(engine)

    engine.expand(draft, math_id)
    engine.cancel_edit(draft)

    assert draft.timetable.slot(math_id).subject == "Math"


def test_commit_rejects_colliding_content():
    store, _, engine = _engine()
    legacy = TimeTable(
        timetable_id="TT-000007",
        shift_id="SH-200",
        target=IndividualTarget("T-1"),
        content=(
            TimeTableSlot(slot_id="a", subject="Math", day="Monday", start_time=time(8), end_time=time(9)),
            TimeTableSlot(slot_id="b", subject="Art", day="Monday", start_time=time(8), end_time=time(9)),
        ),
    )
    draft = engine.open(legacy)

    with pytest.raises(SlotCollision) as exc:
        engine.commit(draft)
    assert exc.value.subject == "Math"
    assert store.list_all("time_tables") == []
