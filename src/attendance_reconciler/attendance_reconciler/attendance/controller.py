from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..core.exceptions import ConcurrencyConflictError, ValidationError
from ..container import Container

log = logging.getLogger(__name__)


def _range_args():
    today = now_local().date()
    try:
        start = parse_iso_date(request.args["start_date"]) if request.args.get("start_date") else today - timedelta(days=30)
        end = parse_iso_date(request.args["end_date"]) if request.args.get("end_date") else today
    except ValueError:
        raise ValidationError("start_date and end_date must be YYYY-MM-DD") from None
    return start, end


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/<int:employee_id>", methods=["GET"], endpoint="api_attendance_records")
    def api_attendance_records(employee_id: int):
        try:
            start, end = _range_args()
            rows = container.review_service.get_records(employee_id, start, end)
            return jsonify({"success": True, "employee_id": employee_id, "records": rows}), 200
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            log.exception("Loading attendance for employee %s failed", employee_id)
            return jsonify({"success": False, "message": "Internal error while loading attendance"}), 500

    @app.route("/api/attendance/<int:attendance_id>/status", methods=["POST"], endpoint="api_attendance_status")
    def api_attendance_status(attendance_id: int):
        data = request.get_json(silent=True) or {}
        try:
            if data.get("status") in (None, ""):
                raise ValidationError("status is required")
            try:
                modified_by = int(data["modified_by"])
            except (KeyError, TypeError, ValueError):
                raise ValidationError("modified_by must be an employee id") from None

            record = container.review_service.change_status(
                attendance_id,
                str(data["status"]).upper(),
                modified_by=modified_by,
                note=data.get("note"),
                release=bool(data.get("release", False)),
            )
            return jsonify({
                "success": True,
                "attendance_id": record.attendance_id,
                "status": record.status.value,
                "manual_override": record.manual_override,
            }), 200
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except ConcurrencyConflictError as e:
            return jsonify({"success": False, "message": str(e)}), 409
        except Exception:
            log.exception("Status change for attendance %s failed", attendance_id)
            return jsonify({"success": False, "message": "Internal error while changing status"}), 500

    @app.route("/api/attendance/audit", methods=["GET"], endpoint="api_attendance_audit")
    def api_attendance_audit():
        try:
            start, end = _range_args()
            report = container.audit_service.audit(start, end)
            return jsonify({"success": True, **report.to_dict()}), 200
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            log.exception("Attendance audit failed")
            return jsonify({"success": False, "message": "Internal error while auditing"}), 500
