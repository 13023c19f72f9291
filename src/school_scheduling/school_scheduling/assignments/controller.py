from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_optional_date
from ..common.http import current_actor, json_body
from ..core.enums import Role, TargetType
from ..core.exceptions import ValidationError
from ..container import Container
from .model import ShiftAssignment
from .roster import filter_members


def assignment_json(a: ShiftAssignment) -> dict:
    def iso(d):
        return d.strftime("%Y-%m-%d") if d else None

    return {
        "id": a.assignment_id,
        "shift_id": a.shift_id,
        "target_id": a.target_id,
        "target_name": a.target_name,
        "target_type": a.target_type.value,
        "assigned_date": iso(a.assigned_date),
        "start_date": iso(a.start_date),
        "end_date": iso(a.end_date),
    }


def _date_arg(value, field_name: str) -> date:
    try:
        return parse_iso_date(str(value or ""))
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def register(app: Flask, container: Container) -> None:
    resolver = container.assignment_resolver
    roster = container.roster

    @app.route("/api/roster", methods=["GET"], endpoint="roster_grid")
    def roster_grid():
        try:
            week = int(request.args.get("week") or 0)
        except ValueError:
            raise ValidationError("week must be an integer")
        today = _date_arg(request.args["today"], "today") if request.args.get("today") else date.today()
        role_s = request.args.get("role") or "All"
        try:
            role = None if role_s == "All" else Role(role_s)
        except ValueError:
            raise ValidationError(f"Unknown role: {role_s!r}")

        members = filter_members(container.directory.members(), query=request.args.get("q") or "", role=role)
        dates = roster.week(today, week)
        rows = roster.grid(members, dates)
        return jsonify(
            {
                "dates": [d.strftime("%Y-%m-%d") for d in dates],
                "rows": [
                    {
                        "target_id": r.target_id,
                        "target_name": r.target_name,
                        "cells": [{"date": c.day.strftime("%Y-%m-%d"), "shift_id": c.shift_id, "label": c.label} for c in r.cells],
                    }
                    for r in rows
                ],
            }
        )

    @app.route("/api/roster/cell", methods=["POST"], endpoint="roster_cell")
    def roster_cell():
        body = json_body()
        target_id = str(body.get("target_id") or "")
        day = _date_arg(body.get("date"), "date")
        shift_id = body.get("shift_id")

        if shift_id is None:
            resolver.unbind(target_id=target_id, day=day, actor=current_actor())
        else:
            member = container.directory.get_member(target_id)
            resolver.bind(
                target_id=target_id,
                day=day,
                shift_id=str(shift_id),
                target_type=TargetType.INDIVIDUAL,
                target_name=member.name if member else None,
                actor=current_actor(),
            )

        cell = roster.cell(target_id, day)
        return jsonify({"target_id": target_id, "date": day.strftime("%Y-%m-%d"), "shift_id": cell.shift_id, "label": cell.label})

    @app.route("/api/assignments", methods=["GET"], endpoint="assignments_list")
    def assignments_list():
        shift_id = request.args.get("shift_id")
        rows = resolver.list()
        if shift_id:
            rows = [a for a in rows if a.shift_id == shift_id]
        return jsonify([assignment_json(a) for a in rows])

    @app.route("/api/assignments", methods=["POST"], endpoint="assignments_create")
    def assignments_create():
        body = json_body()
        try:
            target_type = TargetType(body.get("target_type") or TargetType.CLASS.value)
            start = parse_optional_date(body.get("start_date"))
            end = parse_optional_date(body.get("end_date"))
        except ValueError as e:
            raise ValidationError(str(e))

        saved = resolver.assign_range(
            shift_id=str(body.get("shift_id") or ""),
            target_id=str(body.get("target_id") or ""),
            target_type=target_type,
            target_name=body.get("target_name"),
            start_date=start,
            end_date=end,
            actor=current_actor(),
        )
        return jsonify(assignment_json(saved)), 201

    @app.route("/api/assignments/<assignment_id>", methods=["DELETE"], endpoint="assignments_delete")
    def assignments_delete(assignment_id: str):
        resolver.remove(assignment_id, actor=current_actor())
        return "", 204
