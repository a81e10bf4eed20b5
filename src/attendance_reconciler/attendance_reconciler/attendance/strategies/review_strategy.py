from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DayContext, StatusDecision


class UnderReviewStrategy(AttendanceStrategy):
    """Sticky: a day awaiting a supervisor stays there until manual action.

    Slots and hours are still refreshed from punches so the reviewer sees
    current data, but hours only count when the slots are consistent.
    """

    def decide(self, ctx: DayContext) -> StatusDecision:
        existing_note = ctx.existing.note if ctx.existing else None
        return StatusDecision(
            status=AttendanceStatus.UNDER_REVIEW,
            note=existing_note,
            counts_hours=ctx.slots_consistent(),
        )
