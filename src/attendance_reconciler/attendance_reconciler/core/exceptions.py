from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConfigurationError(DomainError):
    """Raised when the reconciliation rules are missing or inconsistent."""


class MalformedPunchError(DomainError):
    """Raised when a punch row lacks employee, device, date or time."""


class ConcurrencyConflictError(DomainError):
    """Raised when a version-guarded write finds a newer record version."""


class PersistenceUnavailableError(DomainError):
    """Raised when the store cannot be reached.

    The coordinator attaches the outcomes committed before the failure to
    ``outcomes`` so the caller knows which groups are already valid.
    """

    def __init__(self, message: str, *, outcomes: Sequence | None = None):
        super().__init__(message)
        self.outcomes = list(outcomes or [])


class PersistenceTimeoutError(PersistenceUnavailableError):
    """A single write timed out. Retryable: its punches stay unprocessed."""
