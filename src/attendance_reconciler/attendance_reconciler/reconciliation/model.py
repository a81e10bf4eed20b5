from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus, OutcomeKind


@dataclass(frozen=True)
class GroupWrite:
    """One atomic unit of work for the store.

    ``write_record`` is False when the recomputed record equals the stored
    one; punch flags are still applied in that case.
    """

    record: AttendanceRecord
    write_record: bool
    processed_punch_ids: tuple[int, ...] = field(default_factory=tuple)
    ineffective_punch_ids: tuple[int, ...] = field(default_factory=tuple)
    effective_punch_ids: tuple[int, ...] = field(default_factory=tuple)

    @property
    def is_noop(self) -> bool:
        return not (
            self.write_record or self.processed_punch_ids or self.ineffective_punch_ids or self.effective_punch_ids
        )


@dataclass(frozen=True)
class GroupOutcome:
    employee_id: int
    work_date: date
    kind: OutcomeKind
    attendance_id: Optional[int] = None
    status: Optional[AttendanceStatus] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "work_date": self.work_date.strftime("%Y-%m-%d"),
            "outcome": self.kind.value,
            "attendance_id": self.attendance_id,
            "status": self.status.value if self.status else None,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class BatchResult:
    rules_version: str
    outcomes: tuple[GroupOutcome, ...] = field(default_factory=tuple)

    def count(self, kind: OutcomeKind) -> int:
        return sum(1 for o in self.outcomes if o.kind == kind)

    def summary(self) -> dict[str, int]:
        counts = Counter(o.kind.value for o in self.outcomes)
        return {kind.value: counts.get(kind.value, 0) for kind in OutcomeKind}

    def to_dict(self) -> dict:
        return {
            "rules_version": self.rules_version,
            "summary": self.summary(),
            "groups": [o.to_dict() for o in self.outcomes],
        }
