from __future__ import annotations

from dataclasses import replace
from datetime import date, time, timedelta

from src.attendance_reconciler.attendance_reconciler.hours.calculator.tiered_calculator import (
    TieredHoursCalculator,
    worked_time,
)
from src.attendance_reconciler.attendance_reconciler.punches.pairing import DaySlots
from src.attendance_reconciler.attendance_reconciler.rules.model import OvertimeTier, SpecialPayDays

H = timedelta(hours=1)


def test_regular_day_with_lunch(rules):
    hours = TieredHoursCalculator().calculate(DaySlots(time(8), time(12), time(13), time(17)), rules)

    assert hours.worked == 8 * H
    assert hours.lunch == 1 * H
    assert hours.regular == 8 * H
    assert hours.overtime == timedelta(0)
    assert hours.night == timedelta(0)


def test_ten_hours_fill_first_tier_only(rules):
    hours = TieredHoursCalculator().calculate(DaySlots(time(7), time(17)), rules)

    assert hours.regular == 8 * H
    assert hours.overtime_25 == 2 * H
    assert hours.overtime_50 == timedelta(0)
    assert hours.overtime_100 == timedelta(0)


def test_long_day_spills_into_every_tier(rules):
    hours = TieredHoursCalculator().calculate(DaySlots(time(6), time(23)), rules)

    assert hours.worked == 17 * H
    assert (hours.overtime_25, hours.overtime_50, hours.overtime_100) == (2 * H, 2 * H, 5 * H)
    assert hours.regular + hours.overtime == hours.worked


def test_night_window_wrapping_midnight(rules):
    # 05:00-06:00 and 19:00-22:00 fall in the 19:00-06:00 window
    hours = TieredHoursCalculator().calculate(DaySlots(time(5), time(12), time(14), time(22)), rules)

    assert hours.night == 4 * H
    assert hours.worked == 15 * H


def test_overflow_without_unbounded_tier_goes_to_100(rules):
    capped = replace(rules, overtime_tiers=(OvertimeTier(percentage=25, limit=1 * H),))

    hours = TieredHoursCalculator().calculate(DaySlots(time(8), time(20)), capped)

    assert hours.overtime_25 == 1 * H
    assert hours.overtime_100 == 3 * H


def test_open_or_inverted_pairs_do_not_count():
    assert worked_time(DaySlots(entry=time(8))) == timedelta(0)
    assert worked_time(DaySlots(time(12), time(8))) == timedelta(0)
    assert worked_time(DaySlots(time(8), time(12), time(13))) == 4 * H


def test_rest_days_and_holidays_pay_every_hour_at_100(rules):
    special = replace(
        rules, special_pay_days=SpecialPayDays(rest_weekdays=frozenset({6}), holidays=frozenset({date(2025, 1, 1)}))
    )
    slots = DaySlots(time(7), time(12), time(13), time(19))
    calc = TieredHoursCalculator()

    sunday = calc.calculate(slots, special, work_date=date(2025, 3, 9))
    new_year = calc.calculate(slots, special, work_date=date(2025, 1, 1))
    monday = calc.calculate(slots, special, work_date=date(2025, 3, 10))

    assert sunday == new_year
    assert sunday.regular == timedelta(0)
    assert (sunday.overtime_25, sunday.overtime_50, sunday.overtime_100) == (timedelta(0), timedelta(0), 11 * H)
    assert sunday.regular + sunday.overtime == sunday.worked
    assert monday.regular == 8 * H and monday.overtime_25 == 2 * H and monday.overtime_50 == 1 * H


def test_without_work_date_no_day_is_special(rules):
    everyday = replace(rules, special_pay_days=SpecialPayDays(rest_weekdays=frozenset(range(7))))

    hours = TieredHoursCalculator().calculate(DaySlots(time(8), time(16)), everyday)

    assert hours.regular == 8 * H
