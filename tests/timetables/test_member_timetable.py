from __future__ import annotations

from datetime import time

from school_scheduling.core.enums import Role, TargetType
from school_scheduling.directory.model import Member
from school_scheduling.store.memory_store import InMemoryRecordStore
from school_scheduling.timetables.engine import TimetableSlotEngine
from school_scheduling.timetables.model import (
    ClassTarget,
    IndividualTarget,
    TimeTable,
    decode_target,
)
from school_scheduling.timetables.service import TimetableService
from school_scheduling.timetables.store_timetable_repository import StoreTimeTableRepository, timetable_to_record


def _tt(timetable_id, target) -> TimeTable:
    return TimeTable(timetable_id=timetable_id, shift_id="SH-200", target=target)


def _service(*timetables):
    store = InMemoryRecordStore({"time_tables": [timetable_to_record(t) for t in timetables]})
    repo = StoreTimeTableRepository(store)
    return TimetableService(repo, TimetableSlotEngine(repo))


def test_student_matches_class_name_and_grade():
    service = _service(
        _tt("TT-1", ClassTarget("Alpha", ("9",))),
        _tt("TT-2", ClassTarget("Alpha", ("10", "11"))),
    )
    student = Member(member_id="ST-1", name="Sam", role=Role.STUDENT, assignment="Alpha", grade="10")

    assert service.for_member(student).timetable_id == "TT-2"


def test_student_matches_exact_composite_assignment():
    service = _service(_tt("TT-1", ClassTarget("Alpha", ("10", "9"))))
    student = Member(member_id="ST-1", name="Sam", role=Role.STUDENT, assignment="Alpha:10,9")

    assert service.for_member(student).timetable_id == "TT-1"


def test_student_falls_back_to_designation():
    service = _service(_tt("TT-1", ClassTarget("Beta", ("7B",))))
    student = Member(member_id="ST-1", name="Sam", role=Role.STUDENT, assignment="Campus North", designation="7B")

    assert service.for_member(student).timetable_id == "TT-1"


def test_student_without_match_gets_none():
    service = _service(_tt("TT-1", ClassTarget("Beta", ("7",))), _tt("TT-2", IndividualTarget("ST-1")))
    student = Member(member_id="ST-1", name="Sam", role=Role.STUDENT, assignment="Alpha", grade="7")

    assert service.for_member(student) is None


def test_staff_match_individual_target_and_first_binding_wins():
    service = _service(
        _tt("TT-1", ClassTarget("T-1", ("1",))),
        _tt("TT-2", IndividualTarget("T-1")),
        _tt("TT-3", IndividualTarget("T-1")),
    )
    teacher = Member(member_id="T-1", name="Ana", role=Role.TEACHER)

    assert service.for_member(teacher).timetable_id == "TT-2"


def test_admins_have_no_personal_timetable():
    service = _service(_tt("TT-1", IndividualTarget("AD-1")))
    assert service.for_member(Member(member_id="AD-1", name="Root", role=Role.ADMIN)) is None


def test_target_encoding_round_trips():
    assert decode_target(TargetType.CLASS, "Alpha:10,9") == ClassTarget("Alpha", ("10", "9"))
    assert decode_target(TargetType.CLASS, "Alpha") == ClassTarget("Alpha")
    assert ClassTarget("Alpha").encode() == "Alpha"
    assert decode_target(TargetType.INDIVIDUAL, "T-1:x") == IndividualTarget("T-1:x")


def test_stored_content_survives_reload():
    store = InMemoryRecordStore()
    repo = StoreTimeTableRepository(store)
    engine = TimetableSlotEngine(repo)
    service = TimetableService(repo, engine)
    draft = service.open()
    engine.set_details(draft, shift_id="SH-200", target=IndividualTarget("T-1"))
    slot = engine.add_slot(draft)
    engine.update_slot(draft, slot.slot_id, subject="Math", room="R1", start_time="10:15", end_time="11:00")
    engine.save_slot(draft)
    saved = engine.commit(draft)

    service.refresh()
    loaded = service.get(saved.timetable_id)
    assert loaded.content[0].room == "R1"
    assert loaded.content[0].start_time == time(10, 15)


def test_grade_order_of_stored_target_is_kept():
    store = InMemoryRecordStore(
        {"time_tables": [{"id": "TT-1", "shift_id": "SH-200", "target_id": "Alpha:B,A", "target_type": "Class"}]}
    )
    repo = StoreTimeTableRepository(store)
    service = TimetableService(repo, TimetableSlotEngine(repo))

    loaded = service.get("TT-1")
    assert loaded.target.encode() == "Alpha:B,A"
    assert timetable_to_record(loaded)["target_id"] == "Alpha:B,A"

    student = Member(member_id="ST-1", name="Sam", role=Role.STUDENT, assignment="Alpha:B,A")
    assert service.for_member(student).timetable_id == "TT-1"
