from __future__ import annotations

from datetime import datetime, timedelta

from src.attendance_reconciler.attendance_reconciler.core.enums import MovementKind
from src.attendance_reconciler.attendance_reconciler.punches.deduplicator import PunchDeduplicator


def test_second_punch_within_threshold_is_duplicate(punch):
    first = punch("08:00:00")
    second = punch("08:00:30")

    result = PunchDeduplicator(timedelta(seconds=60)).deduplicate([second, first])

    assert result.effective == (first,)
    assert result.duplicates == (second,)


def test_dedup_is_deterministic_regardless_of_input_order(punch):
    punches = [punch("08:00:00"), punch("08:00:30"), punch("08:01:10"), punch("17:00", MovementKind.EXIT)]
    dedup = PunchDeduplicator(timedelta(seconds=60))

    forward = dedup.deduplicate(punches)
    backward = dedup.deduplicate(list(reversed(punches)))

    assert forward == backward
    # 08:01:10 is 70s after the last kept punch (08:00:00), so it survives
    assert [p.punch_time.isoformat() for p in forward.effective] == ["08:00:00", "08:01:10", "17:00:00"]


def test_exact_threshold_is_not_a_duplicate(punch):
    result = PunchDeduplicator(timedelta(minutes=2)).deduplicate([punch("08:00"), punch("08:02")])
    assert len(result.effective) == 2
    assert result.duplicates == ()


def test_groups_by_device_and_movement(punch):
    a = punch("08:00:00", device_id="DEV-1")
    b = punch("08:00:20", device_id="DEV-2")
    c = punch("08:00:40", MovementKind.EXIT, device_id="DEV-1")

    result = PunchDeduplicator(timedelta(minutes=2)).deduplicate([a, b, c])

    assert result.effective == (a, b, c)


def test_low_confidence_and_deleted_punches(punch):
    weak = punch("08:00", confidence=40)
    gone = punch("08:05", deleted_at=datetime(2025, 3, 10, 9, 0))
    good = punch("08:20")

    result = PunchDeduplicator(timedelta(minutes=2), min_confidence=85).deduplicate([weak, gone, good])

    assert result.effective == (good,)
    assert result.rejected == (weak,)
    assert result.ineffective == (weak,)


def test_stored_effective_flag_is_recomputed(punch):
    # 08:01 was kept by an earlier run and 08:02:30 suppressed as its duplicate
    earliest = punch("08:00:00")
    kept_before = punch("08:01:00")
    dropped_before = punch("08:02:30", is_effective=False)

    result = PunchDeduplicator(timedelta(minutes=2)).deduplicate([kept_before, dropped_before, earliest])

    assert result.effective == (earliest, dropped_before)
    assert result.duplicates == (kept_before,)
