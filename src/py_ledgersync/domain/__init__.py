from .accounts import (
    Account,
    AccountCategory,
    ChartOfAccounts,
    EntrySide,
    default_chart,
    extract_account_number,
    infer_category,
)
from .advisor import CounterAccountAdvisor, CounterAdvice, Suggestion
from .directives import (
    InventoryDirective,
    JsonDirective,
    KeyValueDirective,
    NoDirective,
    normalize_directive,
    parse_directive,
)
from .errors import (
    DomainError,
    InvalidTransitionError,
    LockedRowError,
    UnbalancedEntryError,
    ValidationError,
)
from .journal import EntryStatus, JournalEntry
from .ledger import DoubleEntryValidator, EntryLine, ValidationResult
from .merge import RowMergeStore, keep_first_seen, merge_rows
from .periods import PeriodAggregate, Window, WindowMode, aggregate
from .rows import LedgerRow, RowOrigin
from .sync_keys import build_sync_key

__all__ = [
    "Account",
    "AccountCategory",
    "ChartOfAccounts",
    "EntrySide",
    "default_chart",
    "extract_account_number",
    "infer_category",
    "CounterAccountAdvisor",
    "CounterAdvice",
    "Suggestion",
    "InventoryDirective",
    "JsonDirective",
    "KeyValueDirective",
    "NoDirective",
    "normalize_directive",
    "parse_directive",
    "DomainError",
    "InvalidTransitionError",
    "LockedRowError",
    "UnbalancedEntryError",
    "ValidationError",
    "EntryStatus",
    "JournalEntry",
    "DoubleEntryValidator",
    "EntryLine",
    "ValidationResult",
    "RowMergeStore",
    "keep_first_seen",
    "merge_rows",
    "PeriodAggregate",
    "Window",
    "WindowMode",
    "aggregate",
    "LedgerRow",
    "RowOrigin",
    "build_sync_key",
]
