from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..attendance.factory import AttendanceStrategyFactory
from ..attendance.model import AttendanceRecord
from ..attendance.strategies.base import DayContext, StatusDecision
from ..core.enums import AttendanceStatus
from ..hours.calculator.base import HoursCalculator
from ..hours.calculator.tiered_calculator import TieredHoursCalculator
from ..hours.model import HoursBreakdown
from ..punches.deduplicator import DedupResult, PunchDeduplicator
from ..punches.model import PunchEvent
from ..punches.pairing import PairedDay, PunchPairer
from ..rules.model import ReconciliationRules
from .model import GroupWrite


@dataclass(frozen=True)
class DayComputation:
    record: AttendanceRecord
    dedup: DedupResult
    paired: PairedDay
    decision: StatusDecision
    hours: HoursBreakdown
    existing_fields: Optional[tuple] = None

    @property
    def changed(self) -> bool:
        return self.record.computed_fields() != self.existing_fields


class DayPipeline:
    """Dedup -> pair -> (hours + status) for one employee-day.

    Pure and in-memory: the same punches, rules and ``today`` always yield
    the same record fields.
    """

    def __init__(
        self,
        *,
        pairer: Optional[PunchPairer] = None,
        calculator: Optional[HoursCalculator] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._pairer = pairer or PunchPairer()
        self._calculator = calculator or TieredHoursCalculator()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._log = logger or logging.getLogger(__name__)

    def compute(
        self,
        *,
        employee_id: int,
        work_date: date,
        punches: Sequence[PunchEvent],
        existing: Optional[AttendanceRecord],
        rules: ReconciliationRules,
        today: date,
    ) -> DayComputation:
        dedup = PunchDeduplicator(
            rules.dedup_threshold, min_confidence=rules.min_confidence, logger=self._log
        ).deduplicate(p for p in punches if p.employee_id == employee_id and p.work_date == work_date)
        paired = self._pairer.pair(dedup.effective)
        ctx = DayContext(
            work_date=work_date,
            today=today,
            paired=paired,
            effective_count=len(dedup.effective),
            existing=existing,
        )
        decision = self._factory.detect(ctx)
        if decision.counts_hours:
            hours = self._calculator.calculate(paired.slots, rules, work_date=work_date)
        else:
            hours = HoursBreakdown.zero()

        base = existing or AttendanceRecord(
            attendance_id=None,
            employee_id=employee_id,
            work_date=work_date,
            status=AttendanceStatus.PENDING,
        )
        if existing is not None and existing.manual_override:
            record = existing
        else:
            record = base.with_computation(status=decision.status, slots=paired.slots, hours=hours, note=decision.note)

        return DayComputation(
            record=record,
            dedup=dedup,
            paired=paired,
            decision=decision,
            hours=hours,
            existing_fields=existing.computed_fields() if existing is not None else None,
        )

    def to_write(self, computation: DayComputation) -> GroupWrite:
        """Build the store write for a computed day.

        PENDING days keep their punches unprocessed so the next run revisits
        them once the exit arrives or the day closes.
        Effectiveness flags are written only where they flip.
        """

        record = computation.record
        if record.status == AttendanceStatus.PENDING:
            processed: tuple[int, ...] = ()
        else:
            processed = tuple(p.punch_id for p in computation.dedup.effective if not p.is_processed)

        return GroupWrite(
            record=record,
            write_record=record.attendance_id is None or computation.changed,
            processed_punch_ids=processed,
            ineffective_punch_ids=tuple(p.punch_id for p in computation.dedup.ineffective if p.is_effective),
            effective_punch_ids=tuple(p.punch_id for p in computation.dedup.effective if not p.is_effective),
        )
