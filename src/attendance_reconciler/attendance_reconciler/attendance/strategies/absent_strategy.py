from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DayContext, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """No effective punch survived dedup/screening."""

    def decide(self, ctx: DayContext) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT, note="no effective punches")
