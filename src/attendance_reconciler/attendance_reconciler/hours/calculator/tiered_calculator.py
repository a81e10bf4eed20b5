from __future__ import annotations

from datetime import date, time, timedelta
from typing import Optional

from ...punches.pairing import DaySlots
from ...rules.model import OVERFLOW_PERCENTAGE, NightWindow, ReconciliationRules
from ..model import ZERO, HoursBreakdown
from .base import HoursCalculator

_DAY = timedelta(days=1)


def _clock(value: time) -> timedelta:
    return timedelta(hours=value.hour, minutes=value.minute, seconds=value.second, microseconds=value.microsecond)


def _pair(start: Optional[time], end: Optional[time]) -> Optional[tuple[timedelta, timedelta]]:
    if start is None or end is None or end <= start:
        return None
    return _clock(start), _clock(end)


def _intervals(slots: DaySlots) -> list[tuple[timedelta, timedelta]]:
    return [iv for iv in (_pair(slots.entry, slots.exit), _pair(slots.entry2, slots.exit2)) if iv]


def worked_time(slots: DaySlots) -> timedelta:
    """Sum of the closed, well-ordered pairs."""
    return sum((end - start for start, end in _intervals(slots)), ZERO)


def _night_intervals(window: NightWindow) -> list[tuple[timedelta, timedelta]]:
    start, end = _clock(window.start), _clock(window.end)
    if window.wraps_midnight:
        return [(ZERO, end), (start, _DAY)]
    return [(start, end)]


def _overlap(a: tuple[timedelta, timedelta], b: tuple[timedelta, timedelta]) -> timedelta:
    return max(ZERO, min(a[1], b[1]) - max(a[0], b[0]))


class TieredHoursCalculator(HoursCalculator):
    """Regular hours up to the daily cap, then overtime tier by tier.

    - worked = (exit - entry) + (exit2 - entry2) for each closed pair
    - lunch = entry2 - exit when both are set
    - overtime fills the configured tiers in order; whatever is left after
      the last bounded tier goes to the 100% bucket
    - night time is the overlap of the worked intervals with the night
      window and is reported alongside, not subtracted from, the split
    - on a special-pay day (rest weekday or holiday) every worked hour goes
      to the 100% bucket and nothing counts as regular
    """

    def calculate(
        self, slots: DaySlots, rules: ReconciliationRules, *, work_date: Optional[date] = None
    ) -> HoursBreakdown:
        intervals = _intervals(slots)
        worked = sum((end - start for start, end in intervals), ZERO)

        lunch = ZERO
        if slots.exit is not None and slots.entry2 is not None:
            lunch = max(ZERO, _clock(slots.entry2) - _clock(slots.exit))

        if work_date is not None and rules.special_pay_days.covers(work_date):
            regular = ZERO
            buckets = {25: ZERO, 50: ZERO, 100: worked}
        else:
            regular = min(worked, rules.regular_daily_cap)
            buckets = self.split_overtime(worked - regular, rules)

        night = ZERO
        for window in _night_intervals(rules.night_window):
            for iv in intervals:
                night += _overlap(iv, window)

        return HoursBreakdown(
            worked=worked,
            lunch=lunch,
            regular=regular,
            overtime_25=buckets[25],
            overtime_50=buckets[50],
            overtime_100=buckets[100],
            night=night,
        )

    def split_overtime(self, overtime: timedelta, rules: ReconciliationRules) -> dict[int, timedelta]:
        buckets = {25: ZERO, 50: ZERO, 100: ZERO}
        remaining = overtime
        for tier in rules.overtime_tiers:
            if remaining <= ZERO:
                break
            take = remaining if tier.limit is None else min(remaining, tier.limit)
            buckets[tier.percentage] += take
            remaining -= take
        if remaining > ZERO:
            buckets[OVERFLOW_PERCENTAGE] += remaining
        return buckets
