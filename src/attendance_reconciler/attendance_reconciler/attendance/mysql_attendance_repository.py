from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duration_from_seconds, fetchall, fetchone, normalize_mysql_time
from .model import AttendanceRecord
from .repository import AttendanceRepository

RECORD_COLUMNS = """
    attendance_id, employee_id, work_date, entry_time, exit_time, entry2_time, exit2_time,
    lunch_seconds, regular_seconds, overtime_25_seconds, overtime_50_seconds, overtime_100_seconds,
    night_seconds, status, manual_override, note, modified_by, modified_at, version, deleted_at
"""


def row_to_record(r: Mapping[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        entry=normalize_mysql_time(r.get("entry_time")),
        exit=normalize_mysql_time(r.get("exit_time")),
        entry2=normalize_mysql_time(r.get("entry2_time")),
        exit2=normalize_mysql_time(r.get("exit2_time")),
        lunch=duration_from_seconds(r.get("lunch_seconds")),
        regular=duration_from_seconds(r.get("regular_seconds")),
        overtime_25=duration_from_seconds(r.get("overtime_25_seconds")),
        overtime_50=duration_from_seconds(r.get("overtime_50_seconds")),
        overtime_100=duration_from_seconds(r.get("overtime_100_seconds")),
        night=duration_from_seconds(r.get("night_seconds")),
        manual_override=bool(r.get("manual_override")),
        note=r.get("note"),
        modified_by=int(r["modified_by"]) if r.get("modified_by") is not None else None,
        modified_at=r.get("modified_at"),
        version=int(r.get("version") or 0),
        deleted_at=r.get("deleted_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {RECORD_COLUMNS}
                FROM attendance_records
                WHERE attendance_id=%s AND deleted_at IS NULL
                """,
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return row_to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {RECORD_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s AND deleted_at IS NULL
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return row_to_record(r) if r else None

    def list_for_range(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["work_date BETWEEN %s AND %s", "deleted_at IS NULL"]
        params: list[object] = [start_date, end_date]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {RECORD_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date ASC, employee_id ASC
                """,
                tuple(params),
            )
            return [row_to_record(r) for r in fetchall(cur)]

    def update_review(
        self,
        *,
        attendance_id: int,
        expected_version: int,
        status: AttendanceStatus,
        manual_override: bool,
        note: Optional[str],
        modified_by: int,
        modified_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, manual_override=%s, note=%s, modified_by=%s, modified_at=%s,
                    version=version+1
                WHERE attendance_id=%s AND version=%s AND deleted_at IS NULL
                """,
                (
                    status.value,
                    int(bool(manual_override)),
                    note,
                    int(modified_by),
                    modified_at,
                    int(attendance_id),
                    int(expected_version),
                ),
            )
            return cur.rowcount > 0
