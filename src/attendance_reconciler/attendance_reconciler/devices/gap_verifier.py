from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import span
from ..common.validators import require_non_empty
from ..punches.model import PunchEvent
from ..punches.repository import PunchRepository
from ..rules.loader import RulesProvider
from .model import CommunicationGap, DeviceIntegrityReport


def find_gaps(punches: Iterable[PunchEvent], threshold: timedelta) -> tuple[CommunicationGap, ...]:
    """Successive raw punches further apart than ``threshold``.

    A delta exactly equal to the threshold is not a gap.
    """

    ordered = sorted((p for p in punches if not p.is_deleted), key=lambda p: p.sort_key)
    gaps: list[CommunicationGap] = []
    for prev, nxt in zip(ordered, ordered[1:]):
        delta = span(prev.work_date, prev.punch_time, nxt.punch_time)
        if delta > threshold:
            gaps.append(CommunicationGap(start=prev.punch_time, end=nxt.punch_time, duration=delta))
    return tuple(gaps)


class GapVerifier:
    """Read-only check for silent periods in a device's punch stream."""

    def __init__(
        self,
        punches: PunchRepository,
        rules: RulesProvider,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._punches = punches
        self._rules = rules
        self._log = logger or logging.getLogger(__name__)

    def verify(self, device_id: str, work_date: date) -> DeviceIntegrityReport:
        device_id = require_non_empty(str(device_id), "device_id")
        threshold = self._rules.current().gap_threshold
        return self._verify(device_id, work_date, threshold)

    def verify_many(self, device_ids: Sequence[str], work_date: date) -> list[DeviceIntegrityReport]:
        threshold = self._rules.current().gap_threshold
        return [self._verify(require_non_empty(str(d), "device_id"), work_date, threshold) for d in device_ids]

    def _verify(self, device_id: str, work_date: date, threshold: timedelta) -> DeviceIntegrityReport:
        punches = [
            p
            for p in self._punches.list_for_device_and_date(device_id, work_date)
            if p.work_date == work_date and not p.is_deleted
        ]
        gaps = find_gaps(punches, threshold)
        if gaps:
            self._log.warning(
                "Device %s on %s has %d communication gap(s) above %s", device_id, work_date, len(gaps), threshold
            )
        return DeviceIntegrityReport(device_id=device_id, work_date=work_date, punch_count=len(punches), gaps=gaps)
