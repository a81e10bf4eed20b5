from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import format_hours, now_local, to_decimal_hours
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_MAX_RANGE_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConcurrencyConflictError, ValidationError
from .model import AttendanceRecord
from .repository import AttendanceRepository

VALID_TRANSITIONS: dict[AttendanceStatus, frozenset[AttendanceStatus]] = {
    AttendanceStatus.PENDING: frozenset(
        {AttendanceStatus.COMPLETE, AttendanceStatus.ABSENT, AttendanceStatus.INCONSISTENT}
    ),
    AttendanceStatus.INCONSISTENT: frozenset(
        {AttendanceStatus.COMPLETE, AttendanceStatus.ABSENT, AttendanceStatus.UNDER_REVIEW}
    ),
    AttendanceStatus.ABSENT: frozenset({AttendanceStatus.COMPLETE}),
    AttendanceStatus.UNDER_REVIEW: frozenset(
        {AttendanceStatus.COMPLETE, AttendanceStatus.INCONSISTENT, AttendanceStatus.ABSENT}
    ),
    AttendanceStatus.COMPLETE: frozenset({AttendanceStatus.UNDER_REVIEW, AttendanceStatus.INCONSISTENT}),
}


def can_transition(current: AttendanceStatus, target: AttendanceStatus) -> bool:
    return target in VALID_TRANSITIONS.get(current, frozenset())


class AttendanceReviewService:
    """Manual corrections on top of the engine's records.

    A reviewed record carries ``manual_override`` so later reconciliation
    runs only link punches to it and never recompute it. ``release=True``
    hands the day back to the engine instead.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        clock: Callable[[], datetime] = now_local,
        logger: Optional[logging.Logger] = None,
    ):
        self._attendance = attendance
        self._clock = clock
        self._log = logger or logging.getLogger(__name__)

    def change_status(
        self,
        attendance_id: int,
        status: AttendanceStatus | str,
        *,
        modified_by: int,
        note: str | None = None,
        release: bool = False,
    ) -> AttendanceRecord:
        try:
            target = AttendanceStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown attendance status: {status}") from None

        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise ValidationError(f"Attendance record {attendance_id} does not exist")

        if not can_transition(record.status, target):
            raise ValidationError(f"Cannot change status from {record.status.value} to {target.value}")
        if release and target == AttendanceStatus.UNDER_REVIEW:
            raise ValidationError("A record flagged for review cannot be released to the engine")

        ok = self._attendance.update_review(
            attendance_id=int(record.attendance_id),
            expected_version=record.version,
            status=target,
            manual_override=not release,
            note=note if note is not None else record.note,
            modified_by=int(modified_by),
            modified_at=self._clock(),
        )
        if not ok:
            raise ConcurrencyConflictError(f"Attendance record {attendance_id} was modified concurrently")

        self._log.info(
            "Attendance %s: %s -> %s by %s%s",
            attendance_id, record.status.value, target.value, modified_by, " (released)" if release else "",
        )
        updated = self._attendance.get_by_id(int(attendance_id))
        return updated or record

    def flag_for_review(self, attendance_id: int, *, modified_by: int, note: str | None = None) -> AttendanceRecord:
        return self.change_status(attendance_id, AttendanceStatus.UNDER_REVIEW, modified_by=modified_by, note=note)

    def get_records(self, employee_id: int, start_date: date, end_date: date) -> list[dict]:
        require_date_range(start_date, end_date, max_days=DEFAULT_MAX_RANGE_DAYS)
        rows = self._attendance.list_for_range(start_date=start_date, end_date=end_date, employee_id=int(employee_id))
        return [self._to_row(r) for r in rows]

    def _to_row(self, r: AttendanceRecord) -> dict:
        def clock(value) -> str:
            return value.strftime("%H:%M:%S") if value else "-"

        return {
            "attendance_id": r.attendance_id,
            "employee_id": r.employee_id,
            "date": r.work_date.strftime("%Y-%m-%d"),
            "status": r.status.value,
            "entry": clock(r.entry),
            "exit": clock(r.exit),
            "entry2": clock(r.entry2),
            "exit2": clock(r.exit2),
            "lunch": format_hours(r.lunch),
            "regular": format_hours(r.regular),
            "overtime_25": format_hours(r.overtime_25),
            "overtime_50": format_hours(r.overtime_50),
            "overtime_100": format_hours(r.overtime_100),
            "night": format_hours(r.night),
            "worked": format_hours(r.worked),
            "worked_hours": str(to_decimal_hours(r.worked)),
            "manual_override": r.manual_override,
            "note": r.note or "",
        }
