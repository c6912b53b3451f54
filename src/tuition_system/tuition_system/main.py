from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .common.logging_setup import configure_logging
from .database.bootstrap import apply_schema, list_tables

from .container import Container, build_container
from .analytics.controller import register as register_analytics
from .appointments.controller import register as register_appointments
from .attendance.controller import register as register_attendance
from .subjects.controller import register as register_subjects
from .timetable.controller import register as register_timetable
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Pass a ready container (tests use in-memory repositories); otherwise one is
    built against MySQL from the selected settings module.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), name=__package__)
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(
            db_config=db_config,
            strict_durations=bool(getattr(settings, "STRICT_DURATIONS", False)),
        )

    register_users(app, container)
    register_subjects(app, container)
    register_timetable(app, container)
    register_appointments(app, container)
    register_attendance(app, container)
    register_analytics(app, container)

    @app.errorhandler(404)
    def not_found(_):
        return jsonify({"error": "Not found"}), 404

    return app
