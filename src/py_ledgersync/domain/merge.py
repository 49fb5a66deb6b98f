"""Row merge store: one duplicate-free view over rows from several origins.

Rows are identified by ``LedgerRow.merge_key``:
``(origin_entry_id or entry_number, reference, date, account, debit, credit)``.
Merging is idempotent, and the resulting set does not depend on the order in
which sources are merged. On a key collision the conflict resolver decides
which row is kept; the default keeps the first-seen row. The memo is not part
of the key, so rows differing only in free text collapse into one.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

from .errors import LockedRowError, ValidationError
from .rows import LedgerRow, MergeKey, RowOrigin

__all__ = [
    "ConflictResolver",
    "keep_first_seen",
    "prefer_locked",
    "RowMergeStore",
    "merge_rows",
]

logger = logging.getLogger(__name__)

ConflictResolver = Callable[[LedgerRow, LedgerRow], LedgerRow]


def keep_first_seen(existing: LedgerRow, incoming: LedgerRow) -> LedgerRow:
    return existing


def prefer_locked(existing: LedgerRow, incoming: LedgerRow) -> LedgerRow:
    """Keep the first-seen row unless only the incoming one is locked."""
    if incoming.locked and not existing.locked:
        return incoming
    return existing


class RowMergeStore:
    """Ordered, keyed collection of ledger rows.

    ``generation`` increases on every change of the row set; callers use it to
    detect that a snapshot they are working on has been superseded.
    """

    def __init__(self, rows: Iterable[LedgerRow] = (), *, resolver: ConflictResolver = keep_first_seen) -> None:
        self._rows: dict[MergeKey, LedgerRow] = {}
        self._resolver = resolver
        self.generation = 0
        self.conflicts: list[tuple[LedgerRow, LedgerRow]] = []
        self.merge(rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[LedgerRow]:
        return iter(tuple(self._rows.values()))

    def __contains__(self, row: object) -> bool:
        return isinstance(row, LedgerRow) and row.merge_key in self._rows

    @property
    def rows(self) -> tuple[LedgerRow, ...]:
        return tuple(self._rows.values())

    def merge(self, *sources: Iterable[LedgerRow]) -> int:
        """Merge every source in order; return the number of rows added or replaced."""
        changed = 0
        for source in sources:
            for row in source:
                key = row.merge_key
                existing = self._rows.get(key)
                if existing is None:
                    self._rows[key] = row
                    changed += 1
                    continue
                if existing == row:
                    continue
                winner = self._resolver(existing, row)
                if winner is not existing:
                    # dict assignment keeps the first-seen position
                    self._rows[key] = winner
                    changed += 1
                self.conflicts.append((existing, row))
                logger.debug("Merge key collision on %s: kept %s row", key, winner.origin.value)
        if changed:
            self.generation += 1
        return changed

    def contains_entry(self, *, entry_id: str | None = None, reference: str = "", entry_number: str = "") -> bool:
        """True if any row already belongs to the given entry id, reference or entry number."""
        for row in self._rows.values():
            if entry_id and row.origin_entry_id == entry_id:
                return True
            if reference and row.reference == reference:
                return True
            if entry_number and row.entry_number == entry_number:
                return True
        return False

    def remove(self, row: LedgerRow) -> None:
        """User deletion of a single row; only unlocked manual rows may go."""
        key = row.merge_key
        current = self._rows.get(key)
        if current is None:
            raise ValidationError(f"Row not found: {key}")
        if current.locked:
            raise LockedRowError(f"Row {current.account} {current.document_number} is locked; delete its entry instead")
        if current.origin is not RowOrigin.MANUAL:
            raise ValidationError(f"Only manual rows can be deleted individually (origin={current.origin.value})")
        del self._rows[key]
        self.generation += 1

    def remove_entry(self, entry_id: str) -> int:
        """Cascade: drop every row produced by the entry; return the number removed."""
        keys = [k for k, r in self._rows.items() if r.origin_entry_id == entry_id]
        for k in keys:
            del self._rows[k]
        if keys:
            self.generation += 1
        return len(keys)


def merge_rows(*sources: Iterable[LedgerRow], resolver: ConflictResolver = keep_first_seen) -> list[LedgerRow]:
    """Functional form of RowMergeStore.merge."""
    store = RowMergeStore(resolver=resolver)
    store.merge(*sources)
    return list(store.rows)
