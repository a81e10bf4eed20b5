from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DayContext, StatusDecision


class InconsistentStrategy(AttendanceStrategy):
    """Unplaceable punches, bad slot order, or an exit that never came.

    Hours are never derived for these days; a reviewer adjudicates them.
    """

    def decide(self, ctx: DayContext) -> StatusDecision:
        notes = ctx.unassigned_notes() + ctx.order_violations()
        if not ctx.is_current:
            notes += [f"{issue} on a closed day" for issue in ctx.open_pairs()]
        if ctx.paired.slots.entry is None and not notes:
            notes.append("no entry punch")
        return StatusDecision(status=AttendanceStatus.INCONSISTENT, note="; ".join(notes) or None)
