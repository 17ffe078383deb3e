from __future__ import annotations

import io
import logging

from flask import Flask, jsonify, request, send_file

from ..common.web import error_response, login_required
from ..container import Container
from ..core.exceptions import ValidationError
from .renderers import renderer_for

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/report", methods=["GET"], endpoint="report")
    @login_required
    def report():
        month = request.args.get("month")
        year = request.args.get("year")
        fmt = request.args.get("format")

        if not month or not year:
            return error_response("Month and year are required", 400)

        try:
            # Resolve the renderer first so a bad format never reaches the database.
            renderer = renderer_for(fmt) if fmt else None
            data = container.report_service.build_monthly_report(month=month, year=year)
            if renderer is None:
                return jsonify(data.to_dict())
            rendered = renderer.render(data)
        except ValidationError as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Error generating report")
            return error_response("Failed to generate report", 500)

        logger.info("Generated %s (%d bytes)", rendered.filename, len(rendered.content))
        return send_file(
            io.BytesIO(rendered.content),
            mimetype=rendered.mimetype,
            as_attachment=True,
            download_name=rendered.filename,
        )
