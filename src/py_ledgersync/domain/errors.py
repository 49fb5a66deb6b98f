"""Domain error hierarchy.

- DomainError: base class for business-rule violations.
- ValidationError: invalid input (bad account, bad amounts, bad window).
- UnbalancedEntryError: candidate entry does not balance.
- InvalidTransitionError: illegal journal entry state change.
- LockedRowError: attempt to remove a row derived from an immutable source.
"""
from __future__ import annotations

__all__ = [
    "DomainError",
    "ValidationError",
    "UnbalancedEntryError",
    "InvalidTransitionError",
    "LockedRowError",
]


class DomainError(Exception):
    """Base domain error (business invariant violation)."""


class ValidationError(DomainError):
    """Raised when input data is structurally invalid."""


class UnbalancedEntryError(DomainError):
    """Raised when debit and credit totals differ beyond the tolerance."""


class InvalidTransitionError(DomainError):
    """Raised on a state change the journal entry lifecycle does not allow."""


class LockedRowError(DomainError):
    """Raised when a locked ledger row is about to be removed."""
