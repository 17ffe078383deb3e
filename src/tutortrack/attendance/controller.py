from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.web import error_response, json_body, login_required
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError
from .model import record_to_dict

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @login_required
    def attendance_list():
        try:
            listing = service.list_records(month=request.args.get("month"), year=request.args.get("year"))
        except ValidationError as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Error fetching attendance")
            return error_response("Failed to fetch attendance", 500)

        return jsonify(
            {
                "records": [record_to_dict(r) for r in listing.records],
                "presentCount": listing.present_count,
                "totalRecords": listing.total_records,
            }
        )

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_save")
    @login_required
    def attendance_save():
        data = json_body()
        try:
            record = service.record_for_date(
                attendance_date=data.get("date"),
                status=data.get("status"),
                topic=data.get("topic"),
                start_time=data.get("startTime"),
                end_time=data.get("endTime"),
            )
        except ValidationError as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Error saving attendance")
            return error_response("Failed to save attendance", 500)

        return jsonify(record_to_dict(record))

    @app.route("/api/attendance", methods=["PUT"], endpoint="attendance_update")
    @login_required
    def attendance_update():
        data = json_body()
        try:
            record = service.update_record(
                record_id=data.get("id"),
                status=data.get("status"),
                topic=data.get("topic"),
                start_time=data.get("startTime"),
                end_time=data.get("endTime"),
            )
        except NotFoundError as e:
            return error_response(str(e), 404)
        except ValidationError as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Error updating attendance")
            return error_response("Failed to update attendance", 500)

        return jsonify(record_to_dict(record))

    @app.route("/api/attendance", methods=["DELETE"], endpoint="attendance_delete")
    @login_required
    def attendance_delete():
        try:
            service.delete_record(request.args.get("id"))
        except NotFoundError as e:
            return error_response(str(e), 404)
        except ValidationError as e:
            return error_response(str(e), 400)
        except Exception:
            logger.exception("Error deleting attendance")
            return error_response("Failed to delete attendance", 500)

        return jsonify({"message": "Attendance record deleted successfully"})

    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required
    def dashboard():
        try:
            return jsonify(service.get_dashboard())
        except Exception:
            logger.exception("Error loading dashboard")
            return error_response("Failed to load dashboard", 500)
