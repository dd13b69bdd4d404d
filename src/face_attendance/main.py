from __future__ import annotations

import atexit
import importlib
import logging
import os
from types import ModuleType
from typing import Optional, Union

from dotenv import load_dotenv
from flask import Flask, jsonify, send_from_directory

from .attendance.controller import register as register_attendance
from .common.responses import register_error_handlers
from .container import build_container
from .database.bootstrap import apply_schema, list_tables, seed_demo_students
from .logging_config import setup_logging
from .settings import get_settings_module
from .students.controller import register as register_students

logger = logging.getLogger(__name__)


def create_app(settings: Union[str, ModuleType, None] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    if settings is None:
        settings = get_settings_module()
    if isinstance(settings, str):
        settings = importlib.import_module(settings)

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(
        app,
        log_level=getattr(settings, "LOG_LEVEL", "INFO"),
        log_dir=getattr(settings, "LOG_DIR", "logs"),
    )

    storage_backend = getattr(settings, "STORAGE_BACKEND", "mysql")
    db_config: Optional[dict] = getattr(settings, "DB_CONFIG", None)
    threshold = float(getattr(settings, "FACE_DISTANCE_THRESHOLD", 0.48))
    upload_folder = getattr(settings, "UPLOAD_FOLDER", "public/uploads")

    logger.info(
        "settings=%s storage=%s threshold=%s",
        settings.__name__, storage_backend, threshold,
    )

    if storage_backend == "mysql" and getattr(settings, "AUTO_INIT_DB", False):
        apply_schema(db_config)
        logger.info(
            "Schema ready on %s@%s:%s/%s (tables=%d)",
            db_config.get("user"), db_config.get("host"), db_config.get("port", 3306),
            db_config.get("database"), len(list_tables(db_config)),
        )

    container = build_container(
        db_config=db_config,
        storage_backend=storage_backend,
        threshold=threshold,
        upload_folder=upload_folder,
    )
    app.extensions["face_attendance"] = container
    atexit.register(container.close)

    if getattr(settings, "AUTO_SEED_DB", False):
        seed_demo_students(container.students_repo)

    register_error_handlers(app)
    register_students(app, container)
    register_attendance(app, container)

    @app.route("/health", endpoint="health")
    def health():
        return jsonify({"ok": True, "storage": storage_backend, "threshold": container.attendance_service.threshold})

    @app.route("/uploads/<path:filename>", endpoint="uploads")
    def uploads(filename: str):
        return send_from_directory(os.path.abspath(upload_folder), filename)

    return app
