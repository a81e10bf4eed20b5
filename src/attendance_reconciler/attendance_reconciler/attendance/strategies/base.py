from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ...core.enums import AttendanceStatus
from ...punches.pairing import PairedDay
from ..model import AttendanceRecord


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None
    counts_hours: bool = False


@dataclass(frozen=True)
class DayContext:
    """Everything the status rules may look at for one employee-day."""

    work_date: date
    today: date
    paired: PairedDay
    effective_count: int
    existing: Optional[AttendanceRecord] = None

    @property
    def is_current(self) -> bool:
        return self.work_date >= self.today

    def order_violations(self) -> list[str]:
        s = self.paired.slots
        issues: list[str] = []
        if s.entry is not None and s.exit is not None and s.entry >= s.exit:
            issues.append(f"entry {s.entry} is not before exit {s.exit}")
        if s.entry2 is not None and s.exit2 is not None and s.entry2 >= s.exit2:
            issues.append(f"entry2 {s.entry2} is not before exit2 {s.exit2}")
        if s.exit is not None and s.entry2 is not None and s.exit > s.entry2:
            issues.append(f"lunch return {s.entry2} is before exit {s.exit}")
        if s.entry is not None and s.exit2 is not None and s.entry > s.exit2:
            issues.append(f"entry {s.entry} is after final exit {s.exit2}")
        return issues

    def open_pairs(self) -> list[str]:
        s = self.paired.slots
        issues: list[str] = []
        if s.entry is not None and s.exit is None:
            issues.append("missing exit")
        if s.entry2 is not None and s.exit2 is None:
            issues.append("missing final exit")
        return issues

    def unassigned_notes(self) -> list[str]:
        return [
            f"unpaired {u.punch.movement.value} at {u.punch.punch_time} ({u.reason})" for u in self.paired.unassigned
        ]

    def slots_consistent(self) -> bool:
        return (
            self.paired.slots.entry is not None
            and not self.paired.unassigned
            and not self.order_violations()
            and not self.open_pairs()
        )


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide a day's status."""

    @abstractmethod
    def decide(self, ctx: DayContext) -> StatusDecision:
        raise NotImplementedError
