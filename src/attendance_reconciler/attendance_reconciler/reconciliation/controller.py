from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_MAX_RANGE_DAYS
from ..core.exceptions import ConfigurationError, PersistenceUnavailableError, ValidationError
from ..container import Container

log = logging.getLogger(__name__)


def _date_arg(payload: dict, key: str, *, required: bool = True):
    value = payload.get(key)
    if value in (None, ""):
        if required:
            raise ValidationError(f"{key} is required")
        return None
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{key} must be YYYY-MM-DD") from None


def _int_arg(payload: dict, key: str):
    value = payload.get(key)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer") from None


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reconcile", methods=["POST"], endpoint="api_reconcile")
    def api_reconcile():
        data = request.get_json(silent=True) or {}
        try:
            start_date = _date_arg(data, "start_date")
            end_date = _date_arg(data, "end_date")
            require_date_range(start_date, end_date, max_days=DEFAULT_MAX_RANGE_DAYS)
            result = container.reconciliation_service.reconcile(
                start_date=start_date,
                end_date=end_date,
                employee_id=_int_arg(data, "employee_id"),
                include_processed=bool(data.get("include_processed", False)),
            )
            return jsonify({"success": True, **result.to_dict()}), 200
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except ConfigurationError as e:
            log.error("Reconciliation rules are invalid: %s", e)
            return jsonify({"success": False, "message": str(e)}), 500
        except PersistenceUnavailableError as e:
            return jsonify({
                "success": False,
                "message": str(e),
                "groups": [o.to_dict() for o in e.outcomes],
            }), 503
        except Exception:
            log.exception("Reconciliation request failed")
            return jsonify({"success": False, "message": "Internal error while reconciling"}), 500

    @app.route("/api/devices/<device_id>/gaps", methods=["GET"], endpoint="api_device_gaps")
    def api_device_gaps(device_id: str):
        try:
            work_date = _date_arg(request.args, "date", required=False) or now_local().date()
            report = container.gap_verifier.verify(device_id, work_date)
            return jsonify({"success": True, **report.to_dict()}), 200
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            log.exception("Gap verification failed for device %s", device_id)
            return jsonify({"success": False, "message": "Internal error while verifying device"}), 500
