from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import PunchEvent


class PunchRepository(Protocol):
    """Read side of the punch source fed by the device-sync collaborators.

    Every method filters soft-deleted rows. Writes to punches only happen
    inside ``ReconciliationStore.commit_group``.
    """

    def list_unprocessed(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[PunchEvent]:
        """Effective punches with ``is_processed = false`` in the range."""

        raise NotImplementedError

    def list_effective(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[PunchEvent]:
        """Effective punches in the range, processed or not."""

        raise NotImplementedError

    def list_for_employee_and_date(self, employee_id: int, work_date: date) -> Sequence[PunchEvent]:
        raise NotImplementedError

    def list_for_device_and_date(self, device_id: str, work_date: date) -> Sequence[PunchEvent]:
        raise NotImplementedError
