from __future__ import annotations

from datetime import date

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_date_range(start: date, end: date, *, max_days: int | None = None) -> None:
    if start > end:
        raise ValidationError("start_date must not be after end_date")
    if max_days is not None and (end - start).days + 1 > max_days:
        raise ValidationError(f"date range exceeds {max_days} days")
