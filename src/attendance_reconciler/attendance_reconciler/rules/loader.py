from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Mapping, Optional, Protocol

from ..common.datetime_utils import parse_clock, parse_iso_date
from ..core.constants import (
    DEFAULT_DEDUP_THRESHOLD_MINUTES,
    DEFAULT_GAP_THRESHOLD_MINUTES,
    DEFAULT_MAX_CONFLICT_RETRIES,
    DEFAULT_MIN_CONFIDENCE,
)
from ..core.exceptions import ConfigurationError
from .model import (
    OVERTIME_PERCENTAGES,
    WEEKDAY_NAMES,
    NightWindow,
    OvertimeTier,
    ReconciliationRules,
    SpecialPayDays,
)


class RulesProvider(Protocol):
    def current(self) -> ReconciliationRules:
        raise NotImplementedError


def _hours(value: Any, field_name: str) -> timedelta:
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{field_name} must be a number of hours, got {value!r}") from None
    if hours < 0:
        raise ConfigurationError(f"{field_name} must not be negative")
    return timedelta(hours=hours)


def _minutes(value: Any, field_name: str) -> timedelta:
    try:
        minutes = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{field_name} must be a number of minutes, got {value!r}") from None
    if minutes < 0:
        raise ConfigurationError(f"{field_name} must not be negative")
    return timedelta(minutes=minutes)


def _require(raw: Mapping[str, Any], key: str) -> Any:
    if raw.get(key) is None:
        raise ConfigurationError(f"missing required rule '{key}'")
    return raw[key]


def _tiers(raw_tiers: Any) -> tuple[OvertimeTier, ...]:
    if not isinstance(raw_tiers, (list, tuple)):
        raise ConfigurationError("overtime_tiers must be a list")

    tiers: list[OvertimeTier] = []
    for i, item in enumerate(raw_tiers):
        if not isinstance(item, Mapping):
            raise ConfigurationError(f"overtime_tiers[{i}] must be a mapping")
        percentage = int(_require(item, "percentage"))
        if percentage not in OVERTIME_PERCENTAGES:
            raise ConfigurationError(
                f"overtime_tiers[{i}].percentage must be one of {OVERTIME_PERCENTAGES}, got {percentage}"
            )
        limit = item.get("limit_hours")
        tiers.append(
            OvertimeTier(
                percentage=percentage,
                limit=_hours(limit, f"overtime_tiers[{i}].limit_hours") if limit is not None else None,
            )
        )

    for prev, nxt in zip(tiers, tiers[1:]):
        if nxt.percentage <= prev.percentage:
            raise ConfigurationError("overtime_tiers must be ordered by ascending percentage")
        if prev.limit is None:
            raise ConfigurationError("only the last overtime tier may be unbounded")
    return tuple(tiers)


def _night_window(raw: Any) -> NightWindow:
    if not isinstance(raw, Mapping):
        raise ConfigurationError("night_window must be a mapping with 'start' and 'end'")
    try:
        window = NightWindow(start=parse_clock(str(_require(raw, "start"))), end=parse_clock(str(_require(raw, "end"))))
    except ValueError as e:
        raise ConfigurationError(f"night_window has an invalid clock value: {e}") from None
    if window.start == window.end:
        raise ConfigurationError("night_window start and end must differ")
    return window


def _special_pay_days(raw: Any) -> SpecialPayDays:
    if raw is None:
        return SpecialPayDays()
    if not isinstance(raw, Mapping):
        raise ConfigurationError("special_pay_days must be a mapping with 'rest_weekdays' and 'holidays'")

    for key in ("rest_weekdays", "holidays"):
        if not isinstance(raw.get(key) or [], (list, tuple)):
            raise ConfigurationError(f"special_pay_days.{key} must be a list")

    weekdays: set[int] = set()
    for name in raw.get("rest_weekdays") or ():
        key = str(name).strip().upper()[:3]
        if key not in WEEKDAY_NAMES:
            raise ConfigurationError(f"special_pay_days.rest_weekdays has an unknown weekday {name!r}")
        weekdays.add(WEEKDAY_NAMES.index(key))

    holidays = set()
    for value in raw.get("holidays") or ():
        try:
            holidays.add(parse_iso_date(str(value)))
        except ValueError:
            raise ConfigurationError(f"special_pay_days.holidays must be YYYY-MM-DD, got {value!r}") from None

    return SpecialPayDays(rest_weekdays=frozenset(weekdays), holidays=frozenset(holidays))


def rules_from_mapping(raw: Mapping[str, Any]) -> ReconciliationRules:
    """Decode and validate a settings mapping into ``ReconciliationRules``.

    Labor values are required: ``regular_daily_cap_hours``, ``overtime_tiers``
    and ``night_window``. Operational values fall back to package defaults.
    ``special_pay_days`` is optional; without it no date is special.
    """

    if not isinstance(raw, Mapping):
        raise ConfigurationError("reconciliation rules must be a mapping")

    min_confidence = int(raw.get("min_confidence", DEFAULT_MIN_CONFIDENCE))
    if not 0 <= min_confidence <= 100:
        raise ConfigurationError("min_confidence must be between 0 and 100")

    retries = int(raw.get("max_conflict_retries", DEFAULT_MAX_CONFLICT_RETRIES))
    if retries < 0:
        raise ConfigurationError("max_conflict_retries must not be negative")

    regular_cap = _hours(_require(raw, "regular_daily_cap_hours"), "regular_daily_cap_hours")
    if regular_cap > timedelta(hours=24):
        raise ConfigurationError("regular_daily_cap_hours must not exceed 24")

    return ReconciliationRules(
        version=str(_require(raw, "version")),
        regular_daily_cap=regular_cap,
        overtime_tiers=_tiers(_require(raw, "overtime_tiers")),
        night_window=_night_window(_require(raw, "night_window")),
        dedup_threshold=_minutes(
            raw.get("dedup_threshold_minutes", DEFAULT_DEDUP_THRESHOLD_MINUTES), "dedup_threshold_minutes"
        ),
        gap_threshold=_minutes(raw.get("gap_threshold_minutes", DEFAULT_GAP_THRESHOLD_MINUTES), "gap_threshold_minutes"),
        min_confidence=min_confidence,
        max_conflict_retries=retries,
        special_pay_days=_special_pay_days(raw.get("special_pay_days")),
    )


class StaticRulesProvider:
    """Serves one already-decoded rule set (tests, CLI overrides)."""

    def __init__(self, rules: ReconciliationRules):
        self._rules = rules

    def current(self) -> ReconciliationRules:
        return self._rules


class SettingsRulesProvider:
    """Reads ``RECONCILIATION_RULES`` from a settings module on every call.

    Each batch calls ``current()`` once, so a redeployed settings value is
    picked up by the next run while a running batch keeps its copy.
    """

    def __init__(self, settings: Any, *, logger: Optional[logging.Logger] = None):
        self._settings = settings
        self._log = logger or logging.getLogger(__name__)

    def current(self) -> ReconciliationRules:
        raw = getattr(self._settings, "RECONCILIATION_RULES", None)
        if raw is None:
            raise ConfigurationError("settings module defines no RECONCILIATION_RULES")
        rules = rules_from_mapping(raw)
        self._log.debug("Loaded reconciliation rules version=%s", rules.version)
        return rules
