from .book import AsyncLedgerBook
from .inventory_sync import AsyncInventorySync, CancellationToken
from .journal import AsyncComposeJournalEntry, AsyncQuickEntry
from .sequences import AsyncSequenceGenerator, strip_unique_tail

__all__ = [
    "AsyncLedgerBook",
    "AsyncInventorySync",
    "CancellationToken",
    "AsyncComposeJournalEntry",
    "AsyncQuickEntry",
    "AsyncSequenceGenerator",
    "strip_unique_tail",
]
