from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import format_12h, format_hhmm, parse_hhmm
from ..common.http import current_actor, json_body
from ..core.constants import DEFAULT_CATEGORY, DEFAULT_GRACE_MINUTES, DEFAULT_SHIFT_END, DEFAULT_SHIFT_START
from ..core.enums import CategoryStatus, TemplateStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import ShiftCategory, ShiftTemplate


def template_json(t: ShiftTemplate, *, bindings: int = 0) -> dict:
    return {
        "id": t.shift_id,
        "label": t.label,
        "start_time": format_hhmm(t.start_time),
        "end_time": format_hhmm(t.end_time),
        "window": f"{format_12h(t.start_time)} - {format_12h(t.end_time)}",
        "grace_period": t.grace_period,
        "early_mark_minutes": t.early_mark_minutes,
        "category": t.category,
        "status": t.status.value,
        "bindings": bindings,
    }


def _template_from_body(body: dict, shift_id: str = "") -> ShiftTemplate:
    try:
        status = TemplateStatus(body.get("status") or TemplateStatus.ACTIVE.value)
    except ValueError:
        raise ValidationError(f"Unknown status: {body.get('status')!r}")

    return ShiftTemplate(
        shift_id=shift_id or str(body.get("id") or ""),
        label=str(body.get("label") or ""),
        start_time=parse_hhmm(body.get("start_time") or DEFAULT_SHIFT_START),
        end_time=parse_hhmm(body.get("end_time") or DEFAULT_SHIFT_END),
        grace_period=body.get("grace_period", DEFAULT_GRACE_MINUTES),
        early_mark_minutes=body.get("early_mark_minutes", 0),
        category=str(body.get("category") or DEFAULT_CATEGORY),
        status=status,
    )


def register(app: Flask, container: Container) -> None:
    registry = container.shift_registry

    @app.route("/api/shifts", methods=["GET"], endpoint="shifts_list")
    def shifts_list():
        return jsonify(
            [template_json(t, bindings=len(registry.assignments_for(t.shift_id))) for t in registry.list()]
        )

    @app.route("/api/shifts", methods=["POST"], endpoint="shifts_create")
    def shifts_create():
        saved = registry.create(_template_from_body(json_body()), actor=current_actor())
        return jsonify(template_json(saved)), 201

    @app.route("/api/shifts/<shift_id>", methods=["PUT"], endpoint="shifts_update")
    def shifts_update(shift_id: str):
        saved = registry.update(_template_from_body(json_body(), shift_id), actor=current_actor())
        return jsonify(template_json(saved, bindings=len(registry.assignments_for(shift_id))))

    @app.route("/api/shifts/<shift_id>", methods=["DELETE"], endpoint="shifts_delete")
    def shifts_delete(shift_id: str):
        registry.delete(shift_id, actor=current_actor())
        return "", 204

    @app.route("/api/shift-categories", methods=["GET"], endpoint="shift_categories_list")
    def shift_categories_list():
        return jsonify(
            [
                {
                    "id": c.category_id,
                    "label": c.label,
                    "description": c.description,
                    "color_code": c.color_code,
                    "status": c.status.value,
                }
                for c in registry.list_categories()
            ]
        )

    @app.route("/api/shift-categories", methods=["POST"], endpoint="shift_categories_save")
    def shift_categories_save():
        body = json_body()
        saved = registry.save_category(
            ShiftCategory(
                category_id=str(body.get("id") or ""),
                label=str(body.get("label") or ""),
                description=str(body.get("description") or ""),
                color_code=str(body.get("color_code") or "#2563eb"),
                status=CategoryStatus.ACTIVE,
            ),
            actor=current_actor(),
        )
        return jsonify({"id": saved.category_id, "label": saved.label}), 201

    @app.route("/api/shift-categories/<category_id>", methods=["DELETE"], endpoint="shift_categories_delete")
    def shift_categories_delete(category_id: str):
        registry.delete_category(category_id, actor=current_actor())
        return "", 204
