from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_hhmm, parse_hhmm
from ..common.http import current_actor, json_body
from ..core.constants import DEFAULT_SLOT_DAY, DEFAULT_SLOT_END, DEFAULT_SLOT_START, DEFAULT_SLOT_SUBJECT
from ..core.enums import TargetType
from ..core.exceptions import ValidationError
from ..container import Container
from .clock import weekly_view
from .model import ClassTarget, IndividualTarget, Target, TimeTable, TimeTableSlot


def slot_json(s: TimeTableSlot) -> dict:
    return {
        "id": s.slot_id,
        "subject": s.subject,
        "day": s.day,
        "start_time": format_hhmm(s.start_time),
        "end_time": format_hhmm(s.end_time),
        "room": s.room,
        "faculty_id": s.faculty_id,
        "faculty_name": s.faculty_name,
    }


def timetable_json(t: TimeTable) -> dict:
    target: dict = {}
    if isinstance(t.target, ClassTarget):
        target = {"name": t.target.name, "grades": list(t.target.grades)}
    elif isinstance(t.target, IndividualTarget):
        target = {"user_id": t.target.user_id}

    return {
        "id": t.timetable_id,
        "label": t.label,
        "shift_id": t.shift_id,
        "target_type": t.target.target_type.value if t.target else None,
        "target_id": t.target.encode() if t.target else None,
        "target": target,
        "school": t.school,
        "status": t.status.value,
        "content": [slot_json(s) for s in t.content],
        "week": {day: [s.slot_id for s in slots] for day, slots in weekly_view(t).items()},
    }


def _target_from_body(body: dict) -> Target:
    try:
        target_type = TargetType(body.get("target_type") or TargetType.CLASS.value)
    except ValueError:
        raise ValidationError(f"Unknown target type: {body.get('target_type')!r}")

    target = body.get("target") or {}
    if target_type == TargetType.CLASS:
        grades = target.get("grades") or []
        # Selection order is kept; repeated grades are dropped.
        return ClassTarget(
            name=str(target.get("name") or "").strip(),
            grades=tuple(dict.fromkeys(str(g) for g in grades)),
        )
    return IndividualTarget(user_id=str(target.get("user_id") or "").strip())


def _slot_from_body(d: dict) -> TimeTableSlot:
    if not d.get("id"):
        raise ValidationError("Every slot needs an id")
    try:
        return TimeTableSlot(
            slot_id=str(d["id"]),
            subject=str(d.get("subject") or DEFAULT_SLOT_SUBJECT).strip(),
            day=str(d.get("day") or DEFAULT_SLOT_DAY),
            start_time=parse_hhmm(d.get("start_time") or DEFAULT_SLOT_START),
            end_time=parse_hhmm(d.get("end_time") or DEFAULT_SLOT_END),
            room=(d.get("room") or "").strip() or None,
            faculty_id=(d.get("faculty_id") or "").strip() or None,
            faculty_name=(d.get("faculty_name") or "").strip() or None,
        )
    except ValueError as e:
        raise ValidationError(str(e))


def register(app: Flask, container: Container) -> None:
    service = container.timetable_service
    engine = container.slot_engine
    clock = container.clock

    def _now() -> Optional[datetime]:
        value = request.args.get("now")
        if not value:
            return None
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            raise ValidationError("now must be an ISO timestamp")

    @app.route("/api/timetables", methods=["GET"], endpoint="timetables_list")
    def timetables_list():
        return jsonify([timetable_json(t) for t in service.list(school=request.args.get("school"))])

    @app.route("/api/timetables/<timetable_id>", methods=["GET"], endpoint="timetables_get")
    def timetables_get(timetable_id: str):
        tt = service.get(timetable_id)
        if tt is None:
            return jsonify(error=f"Timetable {timetable_id} does not exist"), 404
        return jsonify(timetable_json(tt))

    @app.route("/api/timetables", methods=["POST"], endpoint="timetables_commit")
    def timetables_commit():
        body = json_body()
        draft = service.open(body.get("id") or None, school=body.get("school"))
        engine.set_details(
            draft,
            label=str(body.get("label") or ""),
            shift_id=str(body.get("shift_id") or ""),
            target=_target_from_body(body),
        )
        engine.replace_content(draft, [_slot_from_body(s) for s in body.get("content") or []])
        saved = engine.commit(draft, actor=current_actor())
        return jsonify(timetable_json(saved)), 200 if body.get("id") else 201

    @app.route("/api/timetables/<timetable_id>", methods=["DELETE"], endpoint="timetables_delete")
    def timetables_delete(timetable_id: str):
        service.decommission(timetable_id, actor=current_actor())
        return "", 204

    @app.route("/api/timetables/<timetable_id>/now", methods=["GET"], endpoint="timetables_now")
    def timetables_now(timetable_id: str):
        tt = service.get(timetable_id)
        if tt is None:
            return jsonify(error=f"Timetable {timetable_id} does not exist"), 404
        return jsonify(clock.widget(tt, _now()))

    @app.route("/api/classes", methods=["GET"], endpoint="classes_list")
    def classes_list():
        return jsonify(
            [
                {"id": c.class_id, "name": c.name, "grades": list(c.grades), "school": c.school}
                for c in container.directory.classes(school=request.args.get("school"))
            ]
        )

    @app.route("/api/members/<member_id>/timetable", methods=["GET"], endpoint="member_timetable")
    def member_timetable(member_id: str):
        member = container.directory.get_member(member_id)
        if member is None:
            return jsonify(error=f"Member {member_id} does not exist"), 404

        tt = service.for_member(member)
        if tt is None:
            return jsonify({"timetable": None, "current": None, "upcoming": None})

        widget = clock.widget(tt, _now())
        return jsonify({"timetable": timetable_json(tt), "current": widget["current"], "upcoming": widget["upcoming"]})
