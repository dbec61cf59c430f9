from __future__ import annotations


class DomainError(Exception):
    """Base class for errors reported back to the caller."""


class NotFoundError(DomainError):
    pass


class ValidationError(DomainError):
    pass


class InconsistentStateError(DomainError):
    """Pause flag and pause ledger disagree (double pause, double resume)."""
