from __future__ import annotations

import importlib
import logging
import os
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.web import error_response
from .config import get_settings_module
from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .core.exceptions import AuthorizationError
from .reports.controller import register as register_reports
from .system.controller import register as register_system
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("tutortrack").setLevel(level.upper())


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["SETTINGS_MODULE"] = settings_module
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_SECURE"] = not app.config["DEBUG"] and not app.config["TESTING"]
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    # Presence only; values never leave the process.
    app.config["HEALTH_ENV"] = {
        "APP_ENV": os.getenv("APP_ENV", "development"),
        "DATABASE_URL": "Set" if os.getenv("DATABASE_URL") else "Missing",
        "SECRET_KEY": "Set" if os.getenv("SECRET_KEY") else "Missing",
    }

    if container is None:
        container = build_container(
            db_config=db_config,
            student_name=getattr(settings, "STUDENT_NAME", None),
            google_client_id=getattr(settings, "GOOGLE_CLIENT_ID", None),
            google_client_secret=getattr(settings, "GOOGLE_CLIENT_SECRET", None),
        )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        container.schema_initializer.initialize()

    app.extensions["tutortrack"] = container

    @app.errorhandler(AuthorizationError)
    def handle_unauthorized(e):
        return error_response(str(e), 401)

    register_users(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_system(app, container)

    return app
