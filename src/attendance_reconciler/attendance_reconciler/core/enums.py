from __future__ import annotations

from enum import Enum


class MovementKind(str, Enum):
    """Movement code reported by the biometric device."""

    ENTRY = "ENTRY"
    EXIT = "EXIT"
    ENTRY2 = "ENTRY2"
    EXIT2 = "EXIT2"

    @property
    def is_entry(self) -> bool:
        return self in (MovementKind.ENTRY, MovementKind.ENTRY2)

    @property
    def is_exit(self) -> bool:
        return self in (MovementKind.EXIT, MovementKind.EXIT2)


class VerificationKind(str, Enum):
    FINGERPRINT = "FINGERPRINT"
    FACE = "FACE"
    CARD = "CARD"
    PASSWORD = "PASSWORD"
    UNKNOWN = "UNKNOWN"


class AttendanceStatus(str, Enum):
    """Daily record status stored in the database."""

    PENDING = "PENDING"
    COMPLETE = "COMPLETE"
    ABSENT = "ABSENT"
    INCONSISTENT = "INCONSISTENT"
    UNDER_REVIEW = "UNDER_REVIEW"


class OutcomeKind(str, Enum):
    """What happened to one (employee, date) group in a batch run."""

    CREATED = "CREATED"
    UPDATED = "UPDATED"
    UNCHANGED = "UNCHANGED"
    ESCALATED = "ESCALATED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class AuditIssueKind(str, Enum):
    NO_EXIT = "NO_EXIT"
    INVALID_TIME_ORDER = "INVALID_TIME_ORDER"
    NEGATIVE_HOURS = "NEGATIVE_HOURS"
    CONSERVATION = "CONSERVATION"
