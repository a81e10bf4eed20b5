from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Iterable, Optional

from .model import PunchEvent, UnassignedPunch


@dataclass(frozen=True)
class DaySlots:
    """Slot-filled skeleton of one day: entry, exit, lunch return, final exit."""

    entry: Optional[time] = None
    exit: Optional[time] = None
    entry2: Optional[time] = None
    exit2: Optional[time] = None

    @property
    def is_empty(self) -> bool:
        return self.entry is None and self.exit is None and self.entry2 is None and self.exit2 is None


@dataclass(frozen=True)
class PairedDay:
    slots: DaySlots
    unassigned: tuple[UnassignedPunch, ...] = field(default_factory=tuple)
    assigned: tuple[PunchEvent, ...] = field(default_factory=tuple)


# Slot order and the movement family each slot accepts.
_SLOTS = (("entry", True), ("exit", False), ("entry2", True), ("exit2", False))


class PunchPairer:
    """Place a day's effective punches into the four slots.

    Walks the punches chronologically with a cursor over the slot order.
    A punch of the expected family fills the slot (exits must be strictly
    later than the slot they close); anything else is reported as
    unassigned, never dropped.
    """

    def pair(self, punches: Iterable[PunchEvent]) -> PairedDay:
        ordered = sorted(punches, key=lambda p: p.sort_key)
        filled: dict[str, time] = {}
        assigned: list[PunchEvent] = []
        unassigned: list[UnassignedPunch] = []
        cursor = 0

        for p in ordered:
            if cursor >= len(_SLOTS):
                unassigned.append(UnassignedPunch(p, "after final exit"))
                continue

            slot, wants_entry = _SLOTS[cursor]
            if wants_entry:
                if p.movement.is_entry:
                    filled[slot] = p.punch_time
                    assigned.append(p)
                    cursor += 1
                elif cursor == 0:
                    unassigned.append(UnassignedPunch(p, "exit before any entry"))
                else:
                    unassigned.append(UnassignedPunch(p, "consecutive exit without entry"))
                continue

            opened = filled[_SLOTS[cursor - 1][0]]
            if p.movement.is_entry:
                unassigned.append(UnassignedPunch(p, "consecutive entry without exit"))
            elif p.punch_time <= opened:
                unassigned.append(UnassignedPunch(p, "exit not after its entry"))
            else:
                filled[slot] = p.punch_time
                assigned.append(p)
                cursor += 1

        return PairedDay(slots=DaySlots(**filled), unassigned=tuple(unassigned), assigned=tuple(assigned))
