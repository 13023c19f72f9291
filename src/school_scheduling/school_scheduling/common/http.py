from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    ReferentialConflict,
    SlotCollision,
    AssignmentOverlap,
    StoreError,
    ValidationError,
)
from ..policy.authorization import Actor

logger = logging.getLogger(__name__)


def current_actor() -> Optional[Actor]:
    """Actor from the login session set up by the surrounding application."""

    user_id = session.get("user_id")
    role = session.get("role")
    if not user_id or not role:
        return None
    try:
        return Actor(user_id=str(user_id), role=Role(role))
    except ValueError:
        return None


def json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Expected a JSON object")
    return body


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(SlotCollision)
    def slot_collision(e: SlotCollision):
        return jsonify(error=str(e), kind="SlotCollision", subject=e.subject), 409

    @app.errorhandler(AssignmentOverlap)
    def assignment_overlap(e: AssignmentOverlap):
        return jsonify(error=str(e), kind="AssignmentOverlap", assignment_id=e.assignment_id), 409

    @app.errorhandler(ReferentialConflict)
    def referential_conflict(e: ReferentialConflict):
        return jsonify(error=str(e), kind="ReferentialConflict", references=e.references), 409

    @app.errorhandler(ValidationError)
    def validation_error(e: ValidationError):
        return jsonify(error=str(e), kind="ValidationError"), 400

    @app.errorhandler(AuthorizationError)
    def authorization_error(e: AuthorizationError):
        return jsonify(error=str(e), kind="AuthorizationError"), 403

    @app.errorhandler(StoreError)
    def store_error(e: StoreError):
        body = {"error": str(e), "kind": "StoreError", "collection": e.collection}
        if e.drift is not None:
            body["drift"] = e.drift.value
            body["schema_patch"] = e.schema_patch
        return jsonify(body), 502

    @app.errorhandler(DomainError)
    def domain_error(e: DomainError):
        logger.warning("Unhandled domain error: %s", e)
        return jsonify(error=str(e), kind=type(e).__name__), 400
