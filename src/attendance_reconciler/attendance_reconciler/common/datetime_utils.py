from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator, Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_clock(value: str) -> time:
    """Parse HH:MM or HH:MM:SS into time."""
    fmt = "%H:%M:%S" if value.count(":") == 2 else "%H:%M"
    return datetime.strptime(value.strip(), fmt).time()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def at(work_date: date, clock: time) -> datetime:
    return datetime.combine(work_date, clock)


def span(work_date: date, start: time, end: time) -> timedelta:
    """Elapsed time between two clock times of the same day (may be negative)."""
    return at(work_date, end) - at(work_date, start)


def iter_dates(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def to_decimal_hours(value: Optional[timedelta], places: int = 2) -> Decimal:
    """Presentation-only rounding of a duration to decimal hours."""
    if not value:
        return Decimal("0").quantize(Decimal(1).scaleb(-places))
    hours = Decimal(int(value.total_seconds())) / Decimal(3600)
    return hours.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_hours(value: Optional[timedelta]) -> str:
    """Render a duration as HH:MM (seconds rounded to the nearest minute)."""
    seconds = int(value.total_seconds()) if value else 0
    sign = "-" if seconds < 0 else ""
    minutes = (abs(seconds) + 30) // 60
    return f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"
