from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime

import pytest

from src.attendance_reconciler.attendance_reconciler.attendance.model import AttendanceRecord
from src.attendance_reconciler.attendance_reconciler.core.enums import AttendanceStatus, MovementKind
from src.attendance_reconciler.attendance_reconciler.core.exceptions import ConcurrencyConflictError
from src.attendance_reconciler.attendance_reconciler.punches.model import PunchEvent
from src.attendance_reconciler.attendance_reconciler.rules.loader import StaticRulesProvider, rules_from_mapping

RULES = {
    "version": "test-1",
    "regular_daily_cap_hours": 8,
    "overtime_tiers": [
        {"percentage": 25, "limit_hours": 2},
        {"percentage": 50, "limit_hours": 2},
        {"percentage": 100},
    ],
    "night_window": {"start": "19:00", "end": "06:00"},
    "dedup_threshold_minutes": 2,
    "gap_threshold_minutes": 5,
    "min_confidence": 85,
    "max_conflict_retries": 2,
}


class PunchFactory:
    def __init__(self):
        self._next_id = 1

    def __call__(
        self,
        clock: str,
        movement: MovementKind | str = MovementKind.ENTRY,
        *,
        employee_id: int = 7,
        work_date: date = date(2025, 3, 10),
        device_id: str = "DEV-1",
        **kwargs,
    ) -> PunchEvent:
        pid = self._next_id
        self._next_id += 1
        fmt = "%H:%M:%S" if clock.count(":") == 2 else "%H:%M"
        return PunchEvent(
            punch_id=pid,
            employee_id=employee_id,
            device_id=device_id,
            work_date=work_date,
            punch_time=datetime.strptime(clock, fmt).time(),
            movement=MovementKind(movement),
            **kwargs,
        )


class InMemoryPunchRepository:
    def __init__(self, punches=()):
        self._lock = threading.Lock()
        self.punches: dict[int, PunchEvent] = {p.punch_id: p for p in punches}

    def add(self, *punches: PunchEvent) -> None:
        with self._lock:
            for p in punches:
                self.punches[p.punch_id] = p

    def _live(self):
        return sorted((p for p in list(self.punches.values()) if not p.is_deleted), key=lambda p: (p.work_date, p.sort_key))

    def list_unprocessed(self, *, start_date, end_date, employee_id=None):
        return [
            p
            for p in self._live()
            if p.is_effective
            and not p.is_processed
            and start_date <= p.work_date <= end_date
            and (employee_id is None or p.employee_id == employee_id)
        ]

    def list_effective(self, *, start_date, end_date, employee_id=None):
        return [
            p
            for p in self._live()
            if p.is_effective
            and start_date <= p.work_date <= end_date
            and (employee_id is None or p.employee_id == employee_id)
        ]

    def list_for_employee_and_date(self, employee_id, work_date):
        return [p for p in self._live() if p.employee_id == employee_id and p.work_date == work_date]

    def list_for_device_and_date(self, device_id, work_date):
        return [p for p in self._live() if p.device_id == device_id and p.work_date == work_date]


class InMemoryAttendanceRepository:
    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self.records: dict[int, AttendanceRecord] = {}

    def put(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._lock:
            if record.attendance_id is None:
                record = replace(record, attendance_id=self._next_id, version=max(record.version, 1))
                self._next_id += 1
            self.records[record.attendance_id] = record
            return record

    def live(self):
        with self._lock:
            snapshot = list(self.records.values())
        return [r for r in snapshot if r.deleted_at is None]

    def get_by_id(self, attendance_id):
        r = self.records.get(int(attendance_id))
        return r if r and r.deleted_at is None else None

    def get_for_employee_and_date(self, employee_id, work_date):
        for r in self.live():
            if r.employee_id == employee_id and r.work_date == work_date:
                return r
        return None

    def list_for_range(self, *, start_date, end_date, employee_id=None):
        rows = [
            r
            for r in self.live()
            if start_date <= r.work_date <= end_date and (employee_id is None or r.employee_id == employee_id)
        ]
        return sorted(rows, key=lambda r: (r.work_date, r.employee_id))

    def update_review(self, *, attendance_id, expected_version, status, manual_override, note, modified_by, modified_at):
        with self._lock:
            r = self.get_by_id(attendance_id)
            if not r or r.version != expected_version:
                return False
            self.records[r.attendance_id] = replace(
                r,
                status=status,
                manual_override=manual_override,
                note=note,
                modified_by=modified_by,
                modified_at=modified_at,
                version=r.version + 1,
            )
            return True


class InMemoryReconciliationStore:
    """Applies a GroupWrite the way the MySQL store does, under one lock.

    ``fail_with`` maps (employee_id, work_date) to an exception raised on
    commit; ``interference`` is called before each commit to simulate a
    concurrent writer.
    """

    def __init__(self, punches: InMemoryPunchRepository, attendance: InMemoryAttendanceRepository):
        self.punches = punches
        self.attendance = attendance
        self.fail_with: dict = {}
        self.interference = None
        self.commits = 0
        self.escalated: list[tuple[int, str]] = []
        self._lock = threading.Lock()

    def commit_group(self, write):
        record = write.record
        key = (record.employee_id, record.work_date)
        if key in self.fail_with:
            raise self.fail_with[key]
        if self.interference is not None:
            self.interference(write)

        with self._lock:
            if record.attendance_id is None:
                if self.attendance.get_for_employee_and_date(*key) is not None:
                    raise ConcurrencyConflictError("record created concurrently")
                attendance_id = self.attendance.put(replace(record, version=1)).attendance_id
            else:
                attendance_id = record.attendance_id
                if write.write_record:
                    current = self.attendance.get_by_id(attendance_id)
                    if current is None or current.version != record.version:
                        raise ConcurrencyConflictError("version moved")
                    self.attendance.put(replace(record, version=record.version + 1))

            for pid in write.ineffective_punch_ids:
                p = self.punches.punches[pid]
                self.punches.punches[pid] = replace(p, is_effective=False)
            for pid in write.effective_punch_ids:
                p = self.punches.punches[pid]
                self.punches.punches[pid] = replace(p, is_effective=True)
            for pid in write.processed_punch_ids:
                p = self.punches.punches[pid]
                if not p.is_processed:
                    self.punches.punches[pid] = replace(p, is_processed=True, attendance_id=attendance_id)
            self.commits += 1
            return attendance_id

    def escalate(self, attendance_id, note):
        with self._lock:
            r = self.attendance.get_by_id(attendance_id)
            self.attendance.put(replace(r, status=AttendanceStatus.UNDER_REVIEW, note=note, version=r.version + 1))
            self.escalated.append((attendance_id, note))


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 10, 18, 0, 0)


@pytest.fixture
def rules():
    return rules_from_mapping(RULES)


@pytest.fixture
def rules_provider(rules):
    return StaticRulesProvider(rules)


@pytest.fixture
def punch():
    return PunchFactory()


@pytest.fixture
def punches_repo():
    return InMemoryPunchRepository()


@pytest.fixture
def attendance_repo():
    return InMemoryAttendanceRepository()


@pytest.fixture
def store(punches_repo, attendance_repo):
    return InMemoryReconciliationStore(punches_repo, attendance_repo)

