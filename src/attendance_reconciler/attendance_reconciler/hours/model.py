from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

ZERO = timedelta(0)


@dataclass(frozen=True)
class HoursBreakdown:
    """Computed durations of one day, unrounded."""

    worked: timedelta = ZERO
    lunch: timedelta = ZERO
    regular: timedelta = ZERO
    overtime_25: timedelta = ZERO
    overtime_50: timedelta = ZERO
    overtime_100: timedelta = ZERO
    night: timedelta = ZERO

    @property
    def overtime(self) -> timedelta:
        return self.overtime_25 + self.overtime_50 + self.overtime_100

    @classmethod
    def zero(cls) -> "HoursBreakdown":
        return cls()
