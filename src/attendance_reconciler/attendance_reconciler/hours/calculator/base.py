from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from ...punches.pairing import DaySlots
from ...rules.model import ReconciliationRules
from ..model import HoursBreakdown


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for labor-hour rules)."""

    @abstractmethod
    def calculate(
        self, slots: DaySlots, rules: ReconciliationRules, *, work_date: Optional[date] = None
    ) -> HoursBreakdown:
        raise NotImplementedError
