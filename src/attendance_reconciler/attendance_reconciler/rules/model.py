from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import FrozenSet, Optional, Tuple

OVERTIME_PERCENTAGES = (25, 50, 100)
OVERFLOW_PERCENTAGE = 100
WEEKDAY_NAMES = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")


@dataclass(frozen=True)
class OvertimeTier:
    """One surcharge bracket applied after the regular cap.

    ``limit`` is the width of the bracket; ``None`` means unbounded.
    """

    percentage: int
    limit: Optional[timedelta] = None


@dataclass(frozen=True)
class NightWindow:
    """Clock window counted as night work. ``start > end`` wraps midnight."""

    start: time
    end: time

    @property
    def wraps_midnight(self) -> bool:
        return self.start > self.end


@dataclass(frozen=True)
class SpecialPayDays:
    """Rest weekdays and holidays on which every worked hour is paid at 100%.

    Weekdays use ``date.weekday()`` numbering (Monday is 0).
    """

    rest_weekdays: FrozenSet[int] = frozenset()
    holidays: FrozenSet[date] = frozenset()

    def covers(self, work_date: date) -> bool:
        return work_date.weekday() in self.rest_weekdays or work_date in self.holidays


@dataclass(frozen=True)
class ReconciliationRules:
    """Typed, versioned rule set loaded once per batch and passed by value."""

    version: str
    regular_daily_cap: timedelta
    overtime_tiers: Tuple[OvertimeTier, ...]
    night_window: NightWindow
    dedup_threshold: timedelta
    gap_threshold: timedelta
    min_confidence: int
    max_conflict_retries: int
    special_pay_days: SpecialPayDays = SpecialPayDays()
