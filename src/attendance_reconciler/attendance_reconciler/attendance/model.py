from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..core.enums import AttendanceStatus
from ..hours.model import ZERO, HoursBreakdown
from ..punches.pairing import DaySlots


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: the canonical attendance of one employee on one date."""

    attendance_id: Optional[int]
    employee_id: int
    work_date: date
    status: AttendanceStatus
    entry: Optional[time] = None
    exit: Optional[time] = None
    entry2: Optional[time] = None
    exit2: Optional[time] = None
    lunch: timedelta = ZERO
    regular: timedelta = ZERO
    overtime_25: timedelta = ZERO
    overtime_50: timedelta = ZERO
    overtime_100: timedelta = ZERO
    night: timedelta = ZERO
    manual_override: bool = False
    note: Optional[str] = None
    modified_by: Optional[int] = None
    modified_at: Optional[datetime] = None
    version: int = 0
    deleted_at: Optional[datetime] = None

    @property
    def slots(self) -> DaySlots:
        return DaySlots(entry=self.entry, exit=self.exit, entry2=self.entry2, exit2=self.exit2)

    @property
    def worked(self) -> timedelta:
        return self.regular + self.overtime_25 + self.overtime_50 + self.overtime_100

    def computed_fields(self) -> tuple:
        """Everything the engine derives from punches; equal tuples mean no-op."""
        return (
            self.status,
            self.entry,
            self.exit,
            self.entry2,
            self.exit2,
            self.lunch,
            self.regular,
            self.overtime_25,
            self.overtime_50,
            self.overtime_100,
            self.night,
            self.note,
        )

    def with_computation(
        self,
        *,
        status: AttendanceStatus,
        slots: DaySlots,
        hours: HoursBreakdown,
        note: Optional[str],
    ) -> "AttendanceRecord":
        return replace(
            self,
            status=status,
            entry=slots.entry,
            exit=slots.exit,
            entry2=slots.entry2,
            exit2=slots.exit2,
            lunch=hours.lunch,
            regular=hours.regular,
            overtime_25=hours.overtime_25,
            overtime_50=hours.overtime_50,
            overtime_100=hours.overtime_100,
            night=hours.night,
            note=note,
        )
