from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import MovementKind, VerificationKind


@dataclass(frozen=True)
class PunchEvent:
    """Domain entity: one biometric scan.

    Ingested rows never change except for the processing fields
    (``is_processed``, ``is_effective``, ``attendance_id``, ``note``).
    """

    punch_id: int
    employee_id: int
    device_id: str
    work_date: date
    punch_time: time
    movement: MovementKind
    verification: VerificationKind = VerificationKind.UNKNOWN
    confidence: int = 100
    failed_attempts: int = 0
    is_processed: bool = False
    is_effective: bool = True
    attendance_id: Optional[int] = None
    deleted_at: Optional[datetime] = None
    note: Optional[str] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def sort_key(self) -> tuple[time, int]:
        return (self.punch_time, self.punch_id)


@dataclass(frozen=True)
class UnassignedPunch:
    """A punch the pairer could not place in any slot."""

    punch: PunchEvent
    reason: str
