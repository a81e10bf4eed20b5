from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from typing import Callable, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_RECONCILE_WORKERS
from ..core.enums import AttendanceStatus, OutcomeKind
from ..core.exceptions import (
    ConcurrencyConflictError,
    PersistenceTimeoutError,
    PersistenceUnavailableError,
)
from ..punches.repository import PunchRepository
from ..rules.loader import RulesProvider
from ..rules.model import ReconciliationRules
from .model import BatchResult, GroupOutcome
from .pipeline import DayPipeline
from .store import ReconciliationStore

GroupKey = tuple[int, date]


class _BatchState:
    """Shared between workers: the first store outage stops every later group."""

    def __init__(self, cancel: Optional[threading.Event]):
        self.cancel = cancel or threading.Event()
        self.error: Optional[PersistenceUnavailableError] = None
        self._lock = threading.Lock()

    @property
    def stopped(self) -> bool:
        return self.cancel.is_set() or self.error is not None

    def fail(self, error: PersistenceUnavailableError) -> None:
        with self._lock:
            if self.error is None:
                self.error = error


class ReconciliationService:
    """Batch entry point: reconcile punches into daily attendance records.

    Each (employee, date) group runs the day pipeline and commits through
    the store as one atomic unit. Groups are independent: a failing group
    is reported and its siblings keep going, except when the store itself
    is unavailable, which stops further commits.
    """

    def __init__(
        self,
        punches: PunchRepository,
        attendance: AttendanceRepository,
        store: ReconciliationStore,
        rules: RulesProvider,
        *,
        pipeline: Optional[DayPipeline] = None,
        clock: Callable[[], datetime] = now_local,
        workers: int = DEFAULT_RECONCILE_WORKERS,
        logger: Optional[logging.Logger] = None,
    ):
        self._punches = punches
        self._attendance = attendance
        self._store = store
        self._rules = rules
        self._log = logger or logging.getLogger(__name__)
        self._pipeline = pipeline or DayPipeline(logger=self._log)
        self._clock = clock
        self._workers = max(1, int(workers))

    def reconcile(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
        include_processed: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> BatchResult:
        """Reconcile every group with pending punches in the date range.

        ``include_processed`` re-derives groups whose punches were all
        processed already (a no-op unless data changed). ``cancel`` is
        checked between groups; groups not started are reported CANCELLED.
        Raises ``PersistenceUnavailableError`` with ``outcomes`` set to what
        was already committed plus the FAILED group that hit the outage.
        """

        require_date_range(start_date, end_date)
        rules = self._rules.current()
        today = self._clock().date()

        source = self._punches.list_effective if include_processed else self._punches.list_unprocessed
        pending = source(start_date=start_date, end_date=end_date, employee_id=employee_id)
        keys = sorted({(p.employee_id, p.work_date) for p in pending})

        self._log.info(
            "Reconciling %d group(s) %s..%s employee=%s rules=%s",
            len(keys), start_date, end_date, employee_id if employee_id is not None else "*", rules.version,
        )

        state = _BatchState(cancel)

        if self._workers == 1 or len(keys) <= 1:
            outcomes = [self._run_guarded(k, rules, today, state) for k in keys]
        else:
            with ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="reconcile") as pool:
                futures = [pool.submit(self._run_guarded, k, rules, today, state) for k in keys]
                outcomes = [f.result() for f in futures]

        result = BatchResult(rules_version=rules.version, outcomes=tuple(outcomes))
        self._log.info("Reconciliation finished: %s", result.summary())

        if state.error is not None:
            state.error.outcomes = [o for o in result.outcomes if o.kind != OutcomeKind.CANCELLED]
            raise state.error
        return result

    def _run_guarded(
        self,
        key: GroupKey,
        rules: ReconciliationRules,
        today: date,
        state: _BatchState,
    ) -> GroupOutcome:
        employee_id, work_date = key
        if state.stopped:
            return GroupOutcome(employee_id, work_date, OutcomeKind.CANCELLED, reason="batch stopped before group")

        try:
            return self.reconcile_group(employee_id, work_date, rules=rules, today=today)
        except PersistenceTimeoutError as e:
            self._log.warning("Group %s/%s timed out, will retry next run: %s", employee_id, work_date, e)
            return GroupOutcome(employee_id, work_date, OutcomeKind.FAILED, reason=str(e))
        except PersistenceUnavailableError as e:
            self._log.error("Store unavailable at group %s/%s, halting batch: %s", employee_id, work_date, e)
            state.fail(e)
            return GroupOutcome(employee_id, work_date, OutcomeKind.FAILED, reason=str(e))
        except Exception as e:
            self._log.exception("Group %s/%s failed", employee_id, work_date)
            return GroupOutcome(employee_id, work_date, OutcomeKind.FAILED, reason=str(e))

    def reconcile_group(
        self,
        employee_id: int,
        work_date: date,
        *,
        rules: ReconciliationRules,
        today: date,
    ) -> GroupOutcome:
        """Reconcile one employee-day, retrying on version conflicts."""

        attempt = 0
        last_seen_id: Optional[int] = None
        while True:
            existing = self._attendance.get_for_employee_and_date(employee_id, work_date)
            if existing is not None:
                last_seen_id = existing.attendance_id
            punches = self._punches.list_for_employee_and_date(employee_id, work_date)

            computation = self._pipeline.compute(
                employee_id=employee_id,
                work_date=work_date,
                punches=punches,
                existing=existing,
                rules=rules,
                today=today,
            )
            write = self._pipeline.to_write(computation)
            record = computation.record

            if write.is_noop:
                return GroupOutcome(employee_id, work_date, OutcomeKind.UNCHANGED, record.attendance_id, record.status)

            try:
                attendance_id = self._store.commit_group(write)
            except ConcurrencyConflictError as e:
                attempt += 1
                if attempt > rules.max_conflict_retries:
                    return self._escalate(employee_id, work_date, last_seen_id, attempt, e)
                self._log.warning(
                    "Version conflict on %s/%s (attempt %d/%d): %s",
                    employee_id, work_date, attempt, rules.max_conflict_retries, e,
                )
                continue

            if existing is None:
                kind = OutcomeKind.CREATED
            elif write.write_record:
                kind = OutcomeKind.UPDATED
            else:
                kind = OutcomeKind.UNCHANGED

            self._log.info(
                "Group %s/%s %s attendance_id=%s status=%s duplicates=%d rejected=%d",
                employee_id, work_date, kind.value, attendance_id, record.status.value,
                len(computation.dedup.duplicates), len(computation.dedup.rejected),
            )
            return GroupOutcome(employee_id, work_date, kind, attendance_id, record.status)

    def _escalate(
        self,
        employee_id: int,
        work_date: date,
        attendance_id: Optional[int],
        attempts: int,
        error: ConcurrencyConflictError,
    ) -> GroupOutcome:
        if attendance_id is None:
            current = self._attendance.get_for_employee_and_date(employee_id, work_date)
            attendance_id = current.attendance_id if current else None
        if attendance_id is None:
            self._log.error("Group %s/%s kept conflicting and has no record to escalate", employee_id, work_date)
            return GroupOutcome(employee_id, work_date, OutcomeKind.FAILED, reason=str(error))

        note = f"escalated after {attempts} concurrent update conflicts"
        self._store.escalate(attendance_id, note)
        self._log.warning("Group %s/%s escalated to review: %s", employee_id, work_date, note)

        return GroupOutcome(
            employee_id, work_date, OutcomeKind.ESCALATED, attendance_id, AttendanceStatus.UNDER_REVIEW, reason=note
        )
