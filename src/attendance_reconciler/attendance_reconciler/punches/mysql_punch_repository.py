from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from ..core.exceptions import MalformedPunchError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .decoder import decode_punch
from .model import PunchEvent
from .repository import PunchRepository

_COLUMNS = """
    punch_id, employee_id, device_id, work_date, punch_time, movement, verification,
    confidence, failed_attempts, is_processed, is_effective, attendance_id, deleted_at, note
"""


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, logger: Optional[logging.Logger] = None):
        self._conn_factory = conn_factory
        self._log = logger or logging.getLogger(__name__)

    def _decode_all(self, rows: Iterable[dict[str, Any]]) -> list[PunchEvent]:
        punches: list[PunchEvent] = []
        for r in rows:
            try:
                punches.append(decode_punch(r))
            except MalformedPunchError as e:
                self._log.warning("Dropping malformed punch row: %s", e)
        return punches

    def _select(self, where: str, params: Sequence[object]) -> list[PunchEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM punch_events
                WHERE deleted_at IS NULL AND {where}
                ORDER BY work_date ASC, punch_time ASC, punch_id ASC
                """,
                tuple(params),
            )
            return self._decode_all(fetchall(cur))

    def list_unprocessed(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[PunchEvent]:
        clauses = ["is_effective = 1", "is_processed = 0", "work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if employee_id is not None:
            clauses.append("employee_id = %s")
            params.append(int(employee_id))
        return self._select(" AND ".join(clauses), params)

    def list_effective(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[PunchEvent]:
        clauses = ["is_effective = 1", "work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if employee_id is not None:
            clauses.append("employee_id = %s")
            params.append(int(employee_id))
        return self._select(" AND ".join(clauses), params)

    def list_for_employee_and_date(self, employee_id: int, work_date: date) -> Sequence[PunchEvent]:
        return self._select("employee_id = %s AND work_date = %s", (int(employee_id), work_date))

    def list_for_device_and_date(self, device_id: str, work_date: date) -> Sequence[PunchEvent]:
        return self._select("device_id = %s AND work_date = %s", (str(device_id), work_date))
