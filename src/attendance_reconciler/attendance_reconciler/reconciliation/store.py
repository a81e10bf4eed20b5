from __future__ import annotations

from typing import Protocol

from .model import GroupWrite


class ReconciliationStore(Protocol):
    def commit_group(self, write: GroupWrite) -> int:
        """Persist one group atomically and return the attendance id.

        - ``attendance_id is None``: insert with version 1; a concurrent
          insert for the same (employee, date) raises
          ``ConcurrencyConflictError``.
        - otherwise: update guarded by ``record.version``; a mismatch raises
          ``ConcurrencyConflictError`` and nothing is written.
        - punches in ``processed_punch_ids`` get ``is_processed`` and the
          back-reference (only if not already processed);
          ``ineffective_punch_ids`` get ``is_effective = false`` and
          ``effective_punch_ids`` get it back.
        """

        raise NotImplementedError

    def escalate(self, attendance_id: int, note: str) -> None:
        """Force the record to UNDER_REVIEW after repeated conflicts."""

        raise NotImplementedError
