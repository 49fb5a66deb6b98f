from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from py_ledgersync.application.dto.models import SyncReport
from py_ledgersync.application.ports import Clock
from py_ledgersync.application.use_cases_async.inventory_sync import AsyncInventorySync, CancellationToken
from py_ledgersync.domain.accounts import ChartOfAccounts
from py_ledgersync.domain.advisor import CounterAccountAdvisor
from py_ledgersync.domain.errors import InvalidTransitionError
from py_ledgersync.domain.journal import EntryStatus, JournalEntry
from py_ledgersync.domain.ledger import DoubleEntryValidator, EntryLine, ValidationResult
from py_ledgersync.domain.merge import RowMergeStore
from py_ledgersync.domain.periods import Window
from py_ledgersync.domain.reports import (
    DEFAULT_CASH_ACCOUNTS,
    BalanceSheet,
    CashReport,
    FinancialSummary,
    ProfitAndLoss,
    TrialBalance,
    build_balance_sheet,
    build_cash_report,
    build_profit_and_loss,
    build_summary,
    build_trial_balance,
)
from py_ledgersync.domain.rows import LedgerRow, RowOrigin, rows_from_wire
from py_ledgersync.infrastructure.logging.config import get_logger
from py_ledgersync.infrastructure.persistence.inmemory.clock import SystemClock

__all__ = ["AsyncLedgerBook"]


@dataclass(slots=True)
class AsyncLedgerBook:
    """One logical book: merged rows, views over them, and inventory sync on change.

    Every change of the row set triggers a sync scan; a scan still in flight
    from an earlier change is cancelled first so it stops acting on stale rows.
    Views are pure computations over the current snapshot.
    """

    sync: AsyncInventorySync | None = None
    chart: ChartOfAccounts = field(default_factory=ChartOfAccounts)
    store: RowMergeStore = field(default_factory=RowMergeStore)
    clock: Clock = field(default_factory=SystemClock)
    validator: DoubleEntryValidator = field(default_factory=DoubleEntryValidator)
    _token: CancellationToken | None = field(default=None, repr=False)
    _log: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._log = get_logger("py_ledgersync.book")

    @property
    def rows(self) -> tuple[LedgerRow, ...]:
        return self.store.rows

    # --- row set changes -----------------------------------------------------

    async def ingest(
        self,
        rows: Iterable[LedgerRow | Mapping[str, Any]],
        origin: RowOrigin = RowOrigin.SERVER,
    ) -> SyncReport | None:
        """Merge rows from one origin; wire mappings are parsed, malformed ones skipped."""
        items = list(rows)
        parsed = [r for r in items if isinstance(r, LedgerRow)]
        parsed.extend(rows_from_wire((r for r in items if not isinstance(r, LedgerRow)), origin=origin))
        changed = self.store.merge(parsed)
        self._log.debug("book.ingest", origin=origin.value, received=len(items), changed=changed)
        if not changed:
            return None
        return await self.rescan()

    async def add_manual_row(
        self,
        *,
        day: date,
        account: str,
        debit: Decimal | int | str = 0,
        credit: Decimal | int | str = 0,
        memo: str = "",
        reference: str = "",
        entry_number: str = "",
    ) -> LedgerRow:
        """Single typed row; raises ValidationError unless exactly one side is positive."""
        row = LedgerRow(
            date=day,
            account=account,
            debit=Decimal(str(debit or 0)),
            credit=Decimal(str(credit or 0)),
            memo=memo,
            reference=reference,
            entry_number=entry_number,
            origin=RowOrigin.MANUAL,
            source="Manual",
        )
        await self.ingest([row], RowOrigin.MANUAL)
        return row

    async def delete_row(self, row: LedgerRow) -> SyncReport | None:
        self.store.remove(row)
        return await self.rescan()

    async def delete_entry(self, entry: JournalEntry | str) -> int:
        """Cascade-delete the rows of an entry. Posted entries are reversed instead."""
        if isinstance(entry, JournalEntry):
            if entry.is_posted:
                raise InvalidTransitionError(f"Entry {entry.entry_number or entry.id} is posted; create a reversing entry")
            entry_id = entry.id
        else:
            entry_id = entry
        removed = self.store.remove_entry(entry_id)
        if removed:
            await self.rescan()
        return removed

    async def post_entry(self, entry: JournalEntry, who: str) -> list[LedgerRow]:
        """Approve (if still draft), post and promote the entry into the book."""
        now = self.clock.now()
        if entry.status is EntryStatus.DRAFT:
            entry.approve(who, now, self.validator)
        if entry.status is EntryStatus.APPROVED:
            entry.post(who, now)
        return await self.promote(entry)

    async def promote(self, entry: JournalEntry) -> list[LedgerRow]:
        """Materialize a posted entry as locked rows unless the book already holds it.

        Entries that arrive already posted never went through approval here, so
        the balance check runs again before any row reaches the book.
        """
        if self.store.contains_entry(entry_id=entry.id, reference=entry.reference, entry_number=entry.entry_number):
            self._log.debug("book.promote_skipped", entry_id=entry.id)
            return []
        self.validator.ensure_valid(entry.lines, entry_rate=entry.fx_rate, currency=entry.currency)
        rows = entry.to_ledger_rows()
        await self.ingest(rows, RowOrigin.LOCAL_CACHE)
        return rows

    async def rescan(self) -> SyncReport | None:
        if self.sync is None:
            return None
        if self._token is not None:
            self._token.cancel()
        token = CancellationToken()
        self._token = token
        try:
            return await self.sync(self.store.rows, token)
        finally:
            if self._token is token:
                self._token = None

    # --- composing -----------------------------------------------------------

    def validate(self, lines: Sequence[EntryLine | Mapping[str, Any]], **kwargs: Any) -> ValidationResult:
        return self.validator.validate(lines, **kwargs)

    def advisor(self) -> CounterAccountAdvisor:
        return CounterAccountAdvisor(self.chart)

    # --- views ---------------------------------------------------------------

    def trial_balance(self, window: Window, *, account: str | None = None) -> TrialBalance:
        return build_trial_balance(self.store.rows, window, self.chart, account=account)

    def balance_sheet(self, window: Window, *, include_current_earnings: bool = False) -> BalanceSheet:
        return build_balance_sheet(
            self.store.rows, window, self.chart, include_current_earnings=include_current_earnings
        )

    def profit_and_loss(self, window: Window) -> ProfitAndLoss:
        return build_profit_and_loss(self.store.rows, window, self.chart)

    def cash_report(self, window: Window, cash_accounts: Iterable[str] = DEFAULT_CASH_ACCOUNTS) -> CashReport:
        return build_cash_report(self.store.rows, window, self.chart, cash_accounts=cash_accounts)

    def summary(self, window: Window) -> FinancialSummary:
        return build_summary(self.profit_and_loss(window), self.balance_sheet(window), self.cash_report(window))
