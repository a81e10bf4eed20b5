from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Mapping, Optional

from ..core.enums import MovementKind, VerificationKind
from ..core.exceptions import MalformedPunchError
from ..database.mysql_base import normalize_mysql_time
from .model import PunchEvent

# Device work codes as delivered by the sync collaborators.
_DEVICE_CODES = {
    "0": MovementKind.ENTRY,
    "1": MovementKind.EXIT,
    "4": MovementKind.EXIT,
    "5": MovementKind.ENTRY2,
}


def _movement(value: Any) -> MovementKind:
    if isinstance(value, MovementKind):
        return value
    raw = str(value).strip().upper()
    if raw in _DEVICE_CODES:
        return _DEVICE_CODES[raw]
    try:
        return MovementKind(raw)
    except ValueError:
        raise MalformedPunchError(f"unknown movement kind {value!r}") from None


def _verification(value: Any) -> VerificationKind:
    if value is None:
        return VerificationKind.UNKNOWN
    try:
        return VerificationKind(str(value).strip().upper())
    except ValueError:
        return VerificationKind.UNKNOWN


def _work_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), "%Y-%m-%d").date()
    except ValueError:
        raise MalformedPunchError(f"invalid punch date {value!r}") from None


def _punch_time(value: Any) -> time:
    try:
        return normalize_mysql_time(value)
    except (TypeError, ValueError) as e:
        raise MalformedPunchError(f"invalid punch time {value!r}: {e}") from None


def decode_punch(row: Mapping[str, Any]) -> PunchEvent:
    """Single typed decode step for a punch row.

    Raises ``MalformedPunchError`` when the row lacks employee, device, date
    or time, or carries an unknown movement code.
    """

    punch_id = row.get("punch_id")
    for key in ("employee_id", "device_id", "work_date", "punch_time", "movement"):
        if row.get(key) in (None, ""):
            raise MalformedPunchError(f"punch {punch_id!r} is missing {key}")

    attendance_id: Optional[Any] = row.get("attendance_id")
    is_processed = bool(row.get("is_processed", False))
    if is_processed and attendance_id is None:
        raise MalformedPunchError(f"punch {punch_id!r} is processed but has no attendance reference")

    try:
        return PunchEvent(
            punch_id=int(punch_id),
            employee_id=int(row["employee_id"]),
            device_id=str(row["device_id"]),
            work_date=_work_date(row["work_date"]),
            punch_time=_punch_time(row["punch_time"]),
            movement=_movement(row["movement"]),
            verification=_verification(row.get("verification")),
            confidence=int(row.get("confidence") if row.get("confidence") is not None else 100),
            failed_attempts=int(row.get("failed_attempts") or 0),
            is_processed=is_processed,
            is_effective=bool(row.get("is_effective", True)),
            attendance_id=int(attendance_id) if attendance_id is not None else None,
            deleted_at=row.get("deleted_at"),
            note=row.get("note"),
        )
    except (TypeError, ValueError) as e:
        raise MalformedPunchError(f"punch {punch_id!r} has an invalid field: {e}") from None
