from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import Flask, jsonify

from ..common.web import error_response, login_required
from ..container import Container
from ..database.bootstrap import ping

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        try:
            ping(container.conn)
            db_status = "Connected"
        except Exception as e:
            logger.error("Database connection error: %s", e)
            db_status = f"Error: {type(e).__name__}"

        return jsonify(
            {
                "status": "OK",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "environment": app.config.get("HEALTH_ENV", {}),
                "database": db_status,
            }
        )

    @app.route("/api/init-db", methods=["GET"], endpoint="init_db")
    @login_required
    def init_db():
        try:
            applied = container.schema_initializer.initialize()
        except Exception:
            logger.exception("Database initialization error")
            return error_response("Failed to initialize database", 500)

        if not applied:
            return jsonify({"message": "Database already initialized"})
        return jsonify({"message": "Database initialized successfully"})
