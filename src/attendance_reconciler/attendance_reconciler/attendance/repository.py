from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Read/adjust side of the attendance store. Soft-deleted rows are hidden."""

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_range(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def update_review(
        self,
        *,
        attendance_id: int,
        expected_version: int,
        status: AttendanceStatus,
        manual_override: bool,
        note: Optional[str],
        modified_by: int,
        modified_at: datetime,
    ) -> bool:
        """Reviewer-only status change guarded by ``expected_version``.

        Returns False when the version no longer matches.
        """

        raise NotImplementedError
