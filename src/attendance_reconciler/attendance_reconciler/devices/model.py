from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time, timedelta

from ..common.datetime_utils import format_hours


@dataclass(frozen=True)
class CommunicationGap:
    start: time
    end: time
    duration: timedelta

    def to_dict(self) -> dict:
        return {
            "start": self.start.strftime("%H:%M:%S"),
            "end": self.end.strftime("%H:%M:%S"),
            "duration_minutes": int(self.duration.total_seconds() // 60),
        }


@dataclass(frozen=True)
class DeviceIntegrityReport:
    device_id: str
    work_date: date
    punch_count: int
    gaps: tuple[CommunicationGap, ...] = ()

    @property
    def has_gaps(self) -> bool:
        return bool(self.gaps)

    @property
    def total_gap(self) -> timedelta:
        return sum((g.duration for g in self.gaps), timedelta(0))

    def to_dict(self) -> dict:
        return {
            "device_id": self.device_id,
            "work_date": self.work_date.isoformat(),
            "punch_count": self.punch_count,
            "has_gaps": self.has_gaps,
            "total_gap": format_hours(self.total_gap),
            "gaps": [g.to_dict() for g in self.gaps],
        }
