from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from src.attendance_reconciler.attendance_reconciler.core.enums import MovementKind
from src.attendance_reconciler.attendance_reconciler.core.exceptions import ValidationError
from src.attendance_reconciler.attendance_reconciler.devices.gap_verifier import GapVerifier, find_gaps

DAY = date(2025, 3, 10)


def test_find_gaps_strictly_above_threshold(punch):
    punches = [punch("08:00"), punch("08:05", MovementKind.EXIT), punch("08:11"), punch("08:12")]

    gaps = find_gaps(punches, timedelta(minutes=5))

    assert len(gaps) == 1
    assert (gaps[0].start, gaps[0].end, gaps[0].duration) == (time(8, 5), time(8, 11), timedelta(minutes=6))


def test_find_gaps_ignores_soft_deleted(punch):
    punches = [punch("08:00"), punch("08:04", deleted_at=datetime(2025, 3, 10, 9)), punch("08:20")]
    assert len(find_gaps(punches, timedelta(minutes=5))) == 1


def test_verify_device_report(punch, punches_repo, rules_provider):
    punches_repo.add(
        punch("08:00", device_id="GATE"),
        punch("08:03", device_id="GATE", employee_id=8),
        punch("09:00", device_id="GATE"),
        punch("08:30", device_id="OTHER"),
    )

    report = GapVerifier(punches_repo, rules_provider).verify("GATE", DAY)

    assert report.punch_count == 3
    assert report.has_gaps
    assert report.total_gap == timedelta(minutes=57)
    assert report.to_dict()["gaps"] == [{"start": "08:03:00", "end": "09:00:00", "duration_minutes": 57}]


def test_verify_quiet_device_has_no_gaps(punches_repo, rules_provider):
    report = GapVerifier(punches_repo, rules_provider).verify("IDLE", DAY)
    assert report.punch_count == 0
    assert not report.has_gaps


def test_verify_many_and_validation(punch, punches_repo, rules_provider):
    punches_repo.add(punch("08:00", device_id="A"), punch("08:10", device_id="A"), punch("08:00", device_id="B"))
    verifier = GapVerifier(punches_repo, rules_provider)

    reports = verifier.verify_many(["A", "B"], DAY)

    assert [(r.device_id, r.has_gaps) for r in reports] == [("A", True), ("B", False)]
    with pytest.raises(ValidationError):
        verifier.verify("  ", DAY)
