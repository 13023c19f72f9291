from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .common.http import register_error_handlers
from .container import build_container, build_store
from .database.bootstrap import apply_schema
from .database.connection import DBConfig, DatabaseConnection
from .policy.authorization import AuthorizationPort
from .settings import get_settings_module
from .store.repository import RecordStore

from .assignments.controller import register as register_assignments
from .shifts.controller import register as register_shifts
from .timetables.controller import register as register_timetables

logger = logging.getLogger(__name__)


def create_app(
    settings_module: Optional[str] = None,
    *,
    store: Optional[RecordStore] = None,
    authorization: Optional[AuthorizationPort] = None,
) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    backend = str(getattr(settings, "STORE_BACKEND", "memory")).lower()
    logger.info("settings=%s store=%s", settings_module, "injected" if store is not None else backend)

    if store is None and backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
        apply_schema(conn, schema_path=schema_path)

    container = build_container(store=store or build_store(settings), authorization=authorization)
    app.extensions["school_scheduling"] = container

    register_error_handlers(app)
    register_shifts(app, container)
    register_assignments(app, container)
    register_timetables(app, container)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify(status="ok")

    return app
