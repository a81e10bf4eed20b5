from __future__ import annotations

import logging
from typing import Optional, Sequence

import mysql.connector

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConcurrencyConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, seconds_or_none
from .model import GroupWrite
from .store import ReconciliationStore

_DUPLICATE_KEY = 1062
INEFFECTIVE_NOTE = "duplicate or low confidence"


def _computed_params(record: AttendanceRecord) -> tuple:
    return (
        record.entry,
        record.exit,
        record.entry2,
        record.exit2,
        seconds_or_none(record.lunch),
        seconds_or_none(record.regular),
        seconds_or_none(record.overtime_25),
        seconds_or_none(record.overtime_50),
        seconds_or_none(record.overtime_100),
        seconds_or_none(record.night),
        record.status.value,
        record.note,
    )


def _in_clause(ids: Sequence[int]) -> str:
    return ",".join(["%s"] * len(ids))


class MySQLReconciliationStore(ReconciliationStore):
    """Commits a reconciled group in a single MySQL transaction."""

    def __init__(self, conn_factory: DatabaseConnection, *, logger: Optional[logging.Logger] = None):
        self._conn_factory = conn_factory
        self._log = logger or logging.getLogger(__name__)

    def commit_group(self, write: GroupWrite) -> int:
        record = write.record
        with db_cursor(self._conn_factory) as (_, cur):
            if record.attendance_id is None:
                attendance_id = self._insert(cur, record)
            else:
                attendance_id = int(record.attendance_id)
                if write.write_record:
                    self._update(cur, record)

            if write.ineffective_punch_ids:
                ids = list(write.ineffective_punch_ids)
                cur.execute(
                    f"""
                    UPDATE punch_events
                    SET is_effective=0, note=COALESCE(note, %s)
                    WHERE punch_id IN ({_in_clause(ids)})
                    """,
                    (INEFFECTIVE_NOTE, *ids),
                )

            if write.effective_punch_ids:
                ids = list(write.effective_punch_ids)
                cur.execute(
                    f"""
                    UPDATE punch_events
                    SET is_effective=1, note=NULLIF(note, %s)
                    WHERE punch_id IN ({_in_clause(ids)})
                    """,
                    (INEFFECTIVE_NOTE, *ids),
                )

            if write.processed_punch_ids:
                ids = list(write.processed_punch_ids)
                cur.execute(
                    f"""
                    UPDATE punch_events
                    SET is_processed=1, attendance_id=%s
                    WHERE punch_id IN ({_in_clause(ids)}) AND is_processed=0
                    """,
                    (attendance_id, *ids),
                )
            return attendance_id

    def _insert(self, cur, record: AttendanceRecord) -> int:
        try:
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, work_date,
                    entry_time, exit_time, entry2_time, exit2_time,
                    lunch_seconds, regular_seconds, overtime_25_seconds, overtime_50_seconds,
                    overtime_100_seconds, night_seconds, status, note, manual_override, version
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,0,1)
                """,
                (int(record.employee_id), record.work_date, *_computed_params(record)),
            )
        except mysql.connector.errors.IntegrityError as e:
            if e.errno == _DUPLICATE_KEY:
                raise ConcurrencyConflictError(
                    f"record for employee {record.employee_id} on {record.work_date} was created concurrently"
                ) from e
            raise
        return int(cur.lastrowid)

    def _update(self, cur, record: AttendanceRecord) -> None:
        cur.execute(
            """
            UPDATE attendance_records
            SET entry_time=%s, exit_time=%s, entry2_time=%s, exit2_time=%s,
                lunch_seconds=%s, regular_seconds=%s, overtime_25_seconds=%s, overtime_50_seconds=%s,
                overtime_100_seconds=%s, night_seconds=%s, status=%s, note=%s,
                version=version+1
            WHERE attendance_id=%s AND version=%s AND deleted_at IS NULL
            """,
            (*_computed_params(record), int(record.attendance_id), int(record.version)),
        )
        if cur.rowcount == 0:
            raise ConcurrencyConflictError(
                f"attendance {record.attendance_id} is no longer at version {record.version}"
            )

    def escalate(self, attendance_id: int, note: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, note=%s, version=version+1
                WHERE attendance_id=%s AND deleted_at IS NULL
                """,
                (AttendanceStatus.UNDER_REVIEW.value, note, int(attendance_id)),
            )
        self._log.info("Attendance %s moved to %s", attendance_id, AttendanceStatus.UNDER_REVIEW.value)
