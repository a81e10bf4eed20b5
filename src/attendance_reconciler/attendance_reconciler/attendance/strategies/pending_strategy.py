from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DayContext, StatusDecision


class PendingStrategy(AttendanceStrategy):
    """Today, still waiting for an exit punch."""

    def decide(self, ctx: DayContext) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PENDING, note="; ".join(ctx.open_pairs()) or None)
