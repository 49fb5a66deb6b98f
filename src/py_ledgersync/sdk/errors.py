"""Public exception types of the SDK and the mapping from internal errors.

Callers embedding the engine catch these four types instead of the domain
hierarchy. ``map_exception`` keeps the message and picks the closest type:

- ``ValidationError`` (bad row, bad window, bad entry input) -> ``UserInputError``
- other ``DomainError`` (unbalanced entry, illegal transition, locked row) -> ``DomainViolation``
- ``FileNotFoundError`` / ``LookupError`` -> ``NotFound``
- ``ValueError`` -> ``UserInputError``
- anything else -> ``UnexpectedError``

Each type carries the process exit code the CLI reports for it.
"""
from __future__ import annotations

from py_ledgersync.domain.errors import DomainError, ValidationError

__all__ = [
    "LedgerSyncError",
    "UserInputError",
    "DomainViolation",
    "NotFound",
    "UnexpectedError",
    "map_exception",
]


class LedgerSyncError(Exception):
    exit_code: int = 1


class UserInputError(LedgerSyncError):
    exit_code = 2


class DomainViolation(LedgerSyncError):
    exit_code = 2


class NotFound(LedgerSyncError):
    exit_code = 2


class UnexpectedError(LedgerSyncError):
    exit_code = 1


def map_exception(exc: BaseException) -> LedgerSyncError:
    if isinstance(exc, LedgerSyncError):
        return exc
    msg = str(exc)
    if isinstance(exc, ValidationError):
        return UserInputError(msg)
    if isinstance(exc, DomainError):
        return DomainViolation(msg)
    if isinstance(exc, (FileNotFoundError, LookupError)):
        return NotFound(msg)
    if isinstance(exc, ValueError):
        return UserInputError(msg)
    return UnexpectedError(msg)
