from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_MAX_RANGE_DAYS
from ..core.enums import AttendanceStatus, AuditIssueKind
from ..hours.calculator.tiered_calculator import worked_time
from ..hours.model import ZERO
from .model import AttendanceRecord
from .repository import AttendanceRepository


@dataclass(frozen=True)
class AuditIssue:
    attendance_id: Optional[int]
    employee_id: int
    work_date: date
    kind: AuditIssueKind
    detail: str

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "employee_id": self.employee_id,
            "work_date": self.work_date.isoformat(),
            "kind": self.kind.value,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class AuditReport:
    start_date: date
    end_date: date
    records_checked: int
    issues: tuple[AuditIssue, ...]

    def counts(self) -> dict[str, int]:
        c = Counter(i.kind for i in self.issues)
        return {k.value: c.get(k, 0) for k in AuditIssueKind}

    @property
    def is_clean(self) -> bool:
        return not self.issues

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "records_checked": self.records_checked,
            "counts": self.counts(),
            "issues": [i.to_dict() for i in self.issues],
        }


def check_record(r: AttendanceRecord, today: date) -> list[tuple[AuditIssueKind, str]]:
    found: list[tuple[AuditIssueKind, str]] = []

    if r.work_date < today and r.entry is not None and r.exit is None and r.exit2 is None:
        found.append((AuditIssueKind.NO_EXIT, f"entry {r.entry} has no exit"))

    if r.entry is not None and r.exit is not None and r.entry > r.exit:
        found.append((AuditIssueKind.INVALID_TIME_ORDER, f"entry {r.entry} after exit {r.exit}"))
    if r.entry is not None and r.exit2 is not None and r.entry > r.exit2:
        found.append((AuditIssueKind.INVALID_TIME_ORDER, f"entry {r.entry} after final exit {r.exit2}"))

    buckets = {
        "lunch": r.lunch,
        "regular": r.regular,
        "overtime_25": r.overtime_25,
        "overtime_50": r.overtime_50,
        "overtime_100": r.overtime_100,
        "night": r.night,
    }
    negative = sorted(name for name, value in buckets.items() if value < ZERO)
    if negative:
        found.append((AuditIssueKind.NEGATIVE_HOURS, "negative " + ", ".join(negative)))

    if r.status == AttendanceStatus.COMPLETE and not r.manual_override:
        expected = worked_time(r.slots)
        if r.worked != expected:
            found.append(
                (AuditIssueKind.CONSERVATION, f"buckets sum to {r.worked} but punches give {expected}")
            )
    return found


class AttendanceAuditService:
    """Read-only integrity sweep over stored attendance records."""

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

    def audit(self, start_date: date, end_date: date) -> AuditReport:
        require_date_range(start_date, end_date, max_days=DEFAULT_MAX_RANGE_DAYS)
        today = self._clock().date()
        records = self._attendance.list_for_range(start_date=start_date, end_date=end_date)

        issues: list[AuditIssue] = []
        for r in records:
            for kind, detail in check_record(r, today):
                issues.append(AuditIssue(r.attendance_id, r.employee_id, r.work_date, kind, detail))

        report = AuditReport(start_date, end_date, len(records), tuple(issues))
        if issues:
            self._log.warning("Audit %s..%s found issues: %s", start_date, end_date, report.counts())
        else:
            self._log.info("Audit %s..%s clean (%d records)", start_date, end_date, len(records))
        return report
