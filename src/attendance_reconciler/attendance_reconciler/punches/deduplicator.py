from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Iterable, Optional

from ..common.datetime_utils import span
from ..core.enums import MovementKind
from .model import PunchEvent

GroupKey = tuple[int, str, MovementKind]


@dataclass(frozen=True)
class DedupResult:
    effective: tuple[PunchEvent, ...]
    duplicates: tuple[PunchEvent, ...] = field(default_factory=tuple)
    rejected: tuple[PunchEvent, ...] = field(default_factory=tuple)

    @property
    def ineffective(self) -> tuple[PunchEvent, ...]:
        return self.duplicates + self.rejected


class PunchDeduplicator:
    """Collapse near-duplicate scans of one calendar date.

    Punches are clustered per (employee, device, movement). Inside a group a
    punch closer than ``threshold`` to the last *kept* punch is a duplicate;
    the earliest punch of a cluster always survives. Nothing is deleted:
    callers flag ``duplicates`` and ``rejected`` as ineffective.

    The stored ``is_effective`` flag is an output, never an input: every
    pass re-derives it from all live punches, so a late-arriving earlier
    scan can demote a punch kept by a previous run and restore one it
    suppressed. Only soft-deleted punches are out of play.
    """

    def __init__(
        self,
        threshold: timedelta,
        *,
        min_confidence: int = 0,
        logger: Optional[logging.Logger] = None,
    ):
        self._threshold = threshold
        self._min_confidence = int(min_confidence)
        self._log = logger or logging.getLogger(__name__)

    def screen(self, punches: Iterable[PunchEvent]) -> tuple[list[PunchEvent], list[PunchEvent]]:
        """Split candidates from low-confidence rejects.

        Soft-deleted punches are neither.
        """

        candidates: list[PunchEvent] = []
        rejected: list[PunchEvent] = []
        for p in punches:
            if p.is_deleted:
                continue
            if p.confidence < self._min_confidence:
                self._log.debug(
                    "Rejecting punch %s: confidence %s below %s", p.punch_id, p.confidence, self._min_confidence
                )
                rejected.append(p)
                continue
            candidates.append(p)
        return candidates, rejected

    def deduplicate(self, punches: Iterable[PunchEvent]) -> DedupResult:
        candidates, rejected = self.screen(punches)

        groups: dict[GroupKey, list[PunchEvent]] = defaultdict(list)
        for p in candidates:
            groups[(p.employee_id, p.device_id, p.movement)].append(p)

        kept: list[PunchEvent] = []
        duplicates: list[PunchEvent] = []
        for key in sorted(groups, key=lambda k: (k[0], k[1], k[2].value)):
            group_kept, group_dupes = self._collapse(groups[key])
            kept.extend(group_kept)
            duplicates.extend(group_dupes)

        kept.sort(key=lambda p: p.sort_key)
        duplicates.sort(key=lambda p: p.sort_key)
        return DedupResult(effective=tuple(kept), duplicates=tuple(duplicates), rejected=tuple(rejected))

    def _collapse(self, group: list[PunchEvent]) -> tuple[list[PunchEvent], list[PunchEvent]]:
        ordered = sorted(group, key=lambda p: p.sort_key)
        kept: list[PunchEvent] = []
        duplicates: list[PunchEvent] = []
        last_kept: Optional[PunchEvent] = None

        for p in ordered:
            if last_kept is not None and span(p.work_date, last_kept.punch_time, p.punch_time) < self._threshold:
                self._log.debug("Punch %s duplicates punch %s", p.punch_id, last_kept.punch_id)
                duplicates.append(p)
                continue
            kept.append(p)
            last_kept = p
        return kept, duplicates
