"""Public SDK surface: error mapping, JSON presenter and report exports."""

from .errors import DomainViolation, LedgerSyncError, NotFound, UnexpectedError, UserInputError, map_exception
from .json import to_dict, to_json

__all__ = [
    "DomainViolation",
    "LedgerSyncError",
    "NotFound",
    "UnexpectedError",
    "UserInputError",
    "map_exception",
    "to_dict",
    "to_json",
]
