from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import AttendanceStatus
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy, DayContext, StatusDecision
from .strategies.complete_strategy import CompleteStrategy
from .strategies.inconsistent_strategy import InconsistentStrategy
from .strategies.pending_strategy import PendingStrategy
from .strategies.review_strategy import UnderReviewStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the status rule for a paired day.

    Acts as the anomaly detector. Rules are checked in priority order:
    review stickiness, absence, hard inconsistencies, open pairs (pending
    today, inconsistent once the day is closed), then complete.
    """

    def for_day(self, ctx: DayContext) -> AttendanceStrategy:
        existing = ctx.existing
        if existing and (existing.manual_override or existing.status == AttendanceStatus.UNDER_REVIEW):
            return UnderReviewStrategy()

        if ctx.effective_count == 0:
            return AbsentStrategy()

        if ctx.paired.unassigned or ctx.order_violations() or ctx.paired.slots.entry is None:
            return InconsistentStrategy()

        if ctx.open_pairs():
            return PendingStrategy() if ctx.is_current else InconsistentStrategy()

        return CompleteStrategy()

    def detect(self, ctx: DayContext) -> StatusDecision:
        return self.for_day(ctx).decide(ctx)
