from __future__ import annotations

from dataclasses import replace
from datetime import date, time, timedelta

from src.attendance_reconciler.attendance_reconciler.attendance.model import AttendanceRecord
from src.attendance_reconciler.attendance_reconciler.core.enums import AttendanceStatus, MovementKind
from src.attendance_reconciler.attendance_reconciler.reconciliation.pipeline import DayPipeline
from src.attendance_reconciler.attendance_reconciler.rules.model import SpecialPayDays

H = timedelta(hours=1)
DAY = date(2025, 3, 10)


def _compute(punches, rules, *, existing=None, today=DAY, work_date=DAY):
    return DayPipeline().compute(
        employee_id=7,
        work_date=work_date,
        punches=punches,
        existing=existing,
        rules=rules,
        today=today,
    )


def test_four_punch_day_is_complete(punch, rules):
    punches = [
        punch("08:00"),
        punch("12:00", MovementKind.EXIT),
        punch("13:00"),
        punch("17:00", MovementKind.EXIT),
    ]

    c = _compute(punches, rules)

    assert c.record.status == AttendanceStatus.COMPLETE
    assert c.record.regular == 8 * H
    assert c.record.lunch == 1 * H
    assert (c.record.overtime_25, c.record.overtime_50, c.record.overtime_100) == (timedelta(0),) * 3
    assert c.record.worked == c.hours.worked


def test_duplicate_entry_is_collapsed_before_pairing(punch, rules):
    first = punch("08:00:00")
    dup = punch("08:00:10")
    out = punch("17:00", MovementKind.EXIT)

    c = _compute([first, dup, out], rules)

    assert c.dedup.duplicates == (dup,)
    assert c.record.entry == time(8) and c.record.exit == time(17)
    assert c.record.status == AttendanceStatus.COMPLETE
    assert c.record.regular == 8 * H and c.record.overtime_25 == 1 * H

    write = DayPipeline().to_write(c)
    assert write.ineffective_punch_ids == (dup.punch_id,)
    assert set(write.processed_punch_ids) == {first.punch_id, out.punch_id}


def test_effectiveness_flags_are_written_only_where_they_flip(punch, rules):
    first = punch("08:00:00", is_processed=True)
    already_dup = punch("08:00:20", is_effective=False)
    restored = punch("08:03:00", is_effective=False)
    out = punch("17:00", MovementKind.EXIT, is_processed=True)

    write = DayPipeline().to_write(_compute([first, already_dup, restored, out], rules))

    assert write.ineffective_punch_ids == ()
    assert write.effective_punch_ids == (restored.punch_id,)


def test_saturday_hours_all_go_to_the_100_bucket(punch, rules):
    saturday = date(2025, 3, 8)
    weekend_rules = replace(rules, special_pay_days=SpecialPayDays(rest_weekdays=frozenset({5, 6})))
    punches = [punch("08:00", work_date=saturday), punch("14:00", MovementKind.EXIT, work_date=saturday)]

    c = _compute(punches, weekend_rules, work_date=saturday)

    assert c.record.status == AttendanceStatus.COMPLETE
    assert c.record.regular == timedelta(0)
    assert c.record.overtime_100 == 6 * H


def test_pending_day_keeps_punches_unprocessed(punch, rules):
    c = _compute([punch("08:00")], rules)
    write = DayPipeline().to_write(c)

    assert c.record.status == AttendanceStatus.PENDING
    assert write.write_record
    assert write.processed_punch_ids == ()


def test_inconsistent_day_has_no_hours(punch, rules):
    yesterday = date(2025, 3, 9)
    c = _compute([punch("08:00", work_date=yesterday)], rules, work_date=yesterday)

    assert c.record.status == AttendanceStatus.INCONSISTENT
    assert c.record.worked == timedelta(0)


def test_manual_override_record_is_left_alone(punch, rules):
    existing = AttendanceRecord(
        attendance_id=5,
        employee_id=7,
        work_date=DAY,
        status=AttendanceStatus.COMPLETE,
        entry=time(9),
        exit=time(18),
        regular=9 * H,
        manual_override=True,
        version=4,
    )

    c = _compute([punch("08:00"), punch("17:00", MovementKind.EXIT)], rules, existing=existing)
    write = DayPipeline().to_write(c)

    assert c.record == existing
    assert not write.write_record
    assert len(write.processed_punch_ids) == 2


def test_recomputing_stored_record_is_unchanged(punch, rules):
    punches = [punch("08:00"), punch("17:00", MovementKind.EXIT)]
    first = _compute(punches, rules).record
    stored = replace(first, attendance_id=1, version=1)

    again = _compute(punches, rules, existing=stored)

    assert not again.changed
    assert not DayPipeline().to_write(again).write_record
