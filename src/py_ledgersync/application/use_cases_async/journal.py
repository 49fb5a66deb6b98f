from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import uuid4

from py_ledgersync.application.ports import Clock
from py_ledgersync.application.use_cases_async.sequences import AsyncSequenceGenerator
from py_ledgersync.domain.journal import JournalEntry, Participant
from py_ledgersync.domain.ledger import DoubleEntryValidator, EntryLine

__all__ = ["AsyncComposeJournalEntry", "AsyncQuickEntry"]


@dataclass(slots=True)
class AsyncComposeJournalEntry:
    """Validate candidate lines and create a numbered draft journal entry.

    Contract:
      AsyncComposeJournalEntry(sequences, clock)(lines, day=None, ...) -> JournalEntry

    Steps:
      1. Run DoubleEntryValidator.ensure_valid on the lines (UnbalancedEntryError /
         ValidationError block the save; nothing is numbered).
      2. Issue the entry number (display number of the day + unique tail) and,
         when none is given, a ``REF-YYYYMMDD-NNNN`` reference.
      3. Return the draft with ``prepared_by`` stamped from the clock.
    """

    sequences: AsyncSequenceGenerator
    clock: Clock
    validator: DoubleEntryValidator | None = None

    async def __call__(
        self,
        lines: Sequence[EntryLine | Mapping[str, Any]],
        *,
        day: date | None = None,
        reference: str = "",
        memo: str = "",
        currency: str | None = None,
        fx_rate: Decimal | str | int = 1,
        prepared_by: str = "",
        entry_id: str | None = None,
        scope: str = "JE",
    ) -> JournalEntry:
        validator = self.validator or DoubleEntryValidator()
        validator.ensure_valid(lines, entry_rate=fx_rate, currency=currency)
        now = self.clock.now()
        entry_day = day or now.date()
        entry_number = await self.sequences.entry_number(scope, entry_day)
        ref = reference or await self.sequences.reference_number(entry_day)
        return JournalEntry(
            id=entry_id or f"je:{uuid4().hex}",
            date=entry_day,
            lines=[li if isinstance(li, EntryLine) else EntryLine.from_mapping(li) for li in lines],
            entry_number=entry_number,
            reference=ref,
            memo=memo,
            currency=currency,
            fx_rate=Decimal(str(fx_rate)),
            prepared_by=Participant(name=prepared_by, at=now),
        )


@dataclass(slots=True)
class AsyncQuickEntry:
    """Two-account form: one debit, one credit of the same amount, through the same validator."""

    compose: AsyncComposeJournalEntry

    async def __call__(
        self,
        debit_account: str,
        credit_account: str,
        amount: Decimal | str | int,
        *,
        memo: str = "",
        day: date | None = None,
        reference: str = "",
        prepared_by: str = "",
    ) -> JournalEntry:
        lines = DoubleEntryValidator.quick_entry(debit_account, credit_account, amount, memo)
        return await self.compose(lines, day=day, reference=reference, memo=memo, prepared_by=prepared_by)
