from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DayContext, StatusDecision


class CompleteStrategy(AttendanceStrategy):
    """All slots present and in chronological order."""

    def decide(self, ctx: DayContext) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.COMPLETE, counts_hours=True)
