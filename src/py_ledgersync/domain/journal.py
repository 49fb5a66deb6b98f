"""Journal entries and their lifecycle.

State machine: ``draft -> approved -> posted`` (terminal). Lines can only be
edited while in draft. Approval requires a balanced entry; posting requires
an approved entry with at least two lines and promotes it into locked ledger
rows. Corrections after posting are made with ``reversing_entry``.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from .accounts import extract_account_number
from .errors import InvalidTransitionError, ValidationError
from .ledger import DoubleEntryValidator, EntryLine, ValidationResult
from .quantize import ZERO, to_decimal
from .rows import LedgerRow, RowOrigin, parse_date

__all__ = [
    "EntryStatus",
    "Participant",
    "JournalEntry",
    "entry_from_mapping",
    "fallback_reference",
    "fallback_entry_number",
]


class EntryStatus(str, Enum):
    DRAFT = "draft"
    APPROVED = "approved"
    POSTED = "posted"


_NEXT_STATUS: dict[EntryStatus, EntryStatus] = {
    EntryStatus.DRAFT: EntryStatus.APPROVED,
    EntryStatus.APPROVED: EntryStatus.POSTED,
}


@dataclass(slots=True)
class Participant:
    name: str = ""
    at: datetime | None = None


def fallback_reference(entry_id: str, primary_account: str, day: date) -> str:
    """``{account}-{YYYYMMDD}-{last 3 of id}`` for entries that arrive without a reference."""
    return f"{primary_account or 'JE'}-{day:%Y%m%d}-{str(entry_id)[-3:]}"


def fallback_entry_number(entry_id: str, day: date) -> str:
    """``JE-{YYYYMMDD}-{last 4 of id}`` for entries that arrive without a number."""
    return f"JE-{day:%Y%m%d}-{str(entry_id)[-4:]}"


@dataclass(slots=True)
class JournalEntry:
    """Balanced group of lines sharing one entry number, date and reference."""

    id: str
    date: date
    lines: list[EntryLine] = field(default_factory=list)
    entry_number: str = ""
    reference: str = ""
    memo: str = ""
    currency: str | None = None
    fx_rate: Decimal = Decimal(1)
    status: EntryStatus = EntryStatus.DRAFT
    prepared_by: Participant = field(default_factory=Participant)
    approved_by: Participant = field(default_factory=Participant)
    posted_by: Participant = field(default_factory=Participant)

    def __post_init__(self) -> None:
        self.date = parse_date(self.date)
        self.status = EntryStatus(self.status)
        self.fx_rate = to_decimal(self.fx_rate) or Decimal(1)

    @property
    def is_draft(self) -> bool:
        return self.status is EntryStatus.DRAFT

    @property
    def is_posted(self) -> bool:
        return self.status is EntryStatus.POSTED

    @property
    def total_debit(self) -> Decimal:
        return sum((to_decimal(li.debit) for li in self.lines), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((to_decimal(li.credit) for li in self.lines), ZERO)

    @property
    def primary_account(self) -> str:
        """First line's account (the one a list view shows for the entry)."""
        for line in self.lines:
            if line.account:
                return extract_account_number(line.account)
        return ""

    def validate(self, validator: DoubleEntryValidator | None = None) -> ValidationResult:
        v = validator or DoubleEntryValidator()
        return v.validate(self.lines, entry_rate=self.fx_rate, currency=self.currency)

    def replace_lines(self, lines: Iterable[EntryLine]) -> None:
        if not self.is_draft:
            raise InvalidTransitionError(f"Entry {self.entry_number or self.id} is {self.status.value}; only drafts can be edited")
        self.lines = list(lines)

    def _advance(self, target: EntryStatus) -> None:
        if _NEXT_STATUS.get(self.status) is not target:
            raise InvalidTransitionError(
                f"Cannot move entry {self.entry_number or self.id} from {self.status.value} to {target.value}"
            )
        self.status = target

    def approve(self, name: str, at: datetime, validator: DoubleEntryValidator | None = None) -> ValidationResult:
        """Move draft -> approved. Raises UnbalancedEntryError/ValidationError if the lines do not balance."""
        if not self.is_draft:
            self._advance(EntryStatus.APPROVED)
        v = validator or DoubleEntryValidator()
        result = v.ensure_valid(self.lines, entry_rate=self.fx_rate, currency=self.currency)
        self._advance(EntryStatus.APPROVED)
        self.approved_by = Participant(name=name, at=at)
        return result

    def post(self, name: str, at: datetime) -> None:
        """Move approved -> posted."""
        if self.status is not EntryStatus.APPROVED:
            self._advance(EntryStatus.POSTED)
        if len([li for li in self.lines if li.account]) < 2:
            raise ValidationError(f"Entry {self.entry_number or self.id} needs at least two lines to post")
        # a line LedgerRow refuses must fail here, while the entry is still approved
        self._ledger_rows(RowOrigin.LOCAL_CACHE)
        self._advance(EntryStatus.POSTED)
        self.posted_by = Participant(name=name, at=at)

    def to_ledger_rows(self, origin: RowOrigin = RowOrigin.LOCAL_CACHE) -> list[LedgerRow]:
        """Promote a posted entry into locked ledger rows, one per line with an amount."""
        if not self.is_posted:
            raise InvalidTransitionError(f"Entry {self.entry_number or self.id} must be posted before promotion")
        return self._ledger_rows(origin)

    def _ledger_rows(self, origin: RowOrigin) -> list[LedgerRow]:
        reference = self.reference or fallback_reference(self.id, self.primary_account, self.date)
        entry_number = self.entry_number or fallback_entry_number(self.id, self.date)
        rows: list[LedgerRow] = []
        for line in self.lines:
            debit = to_decimal(line.debit)
            credit = to_decimal(line.credit)
            if not line.account or (debit <= 0 and credit <= 0):
                continue
            rows.append(
                LedgerRow(
                    date=self.date,
                    account=line.account,
                    debit=debit if debit > 0 else ZERO,
                    credit=credit if debit <= 0 else ZERO,
                    memo=line.memo or self.memo,
                    reference=reference,
                    entry_number=entry_number,
                    origin_entry_id=self.id,
                    origin=origin,
                    locked=True,
                    source="JE",
                )
            )
        return rows

    def reversing_entry(self, new_id: str, day: date, *, entry_number: str = "", memo: str | None = None) -> JournalEntry:
        """New draft with every line's sides swapped."""
        swapped = [
            EntryLine(
                account=li.account,
                debit=to_decimal(li.credit),
                credit=to_decimal(li.debit),
                memo=li.memo,
                currency=li.currency,
                fx_rate=li.fx_rate,
            )
            for li in self.lines
        ]
        return JournalEntry(
            id=new_id,
            date=day,
            lines=swapped,
            entry_number=entry_number,
            reference=self.reference,
            memo=memo if memo is not None else f"Reversal of {self.entry_number or self.id}",
            currency=self.currency,
            fx_rate=self.fx_rate,
        )


def _participant(data: Any) -> Participant:
    if not isinstance(data, Mapping):
        return Participant(name=str(data or ""))
    at = data.get("at")
    when: datetime | None = None
    if isinstance(at, datetime):
        when = at
    elif at:
        try:
            when = datetime.fromisoformat(str(at).replace("Z", "+00:00"))
        except ValueError:
            when = None
    return Participant(name=str(data.get("name") or ""), at=when)


def entry_from_mapping(data: Mapping[str, Any]) -> JournalEntry:
    """Read the wire form of a journal entry (``_id``/``id``, ``jeNumber``/``journalNo``, lines...)."""
    entry_id = data.get("id") or data.get("_id")
    if not entry_id:
        raise ValidationError("Journal entry requires an id")
    raw_lines: Sequence[Mapping[str, Any]] = data.get("lines") or []
    participants = data.get("participants") or {}
    return JournalEntry(
        id=str(entry_id),
        date=data.get("date"),  # type: ignore[arg-type]
        lines=[EntryLine.from_mapping(li) for li in raw_lines],
        entry_number=str(data.get("entryNumber") or data.get("jeNumber") or data.get("journalNo") or ""),
        reference=str(data.get("reference") or ""),
        memo=str(data.get("memo") or ""),
        currency=(str(data["currency"]).upper() if data.get("currency") else None),
        fx_rate=to_decimal(data.get("fxRate") or data.get("exchangeRate") or 1),
        status=EntryStatus(str(data.get("status") or "draft").lower()),
        prepared_by=_participant(participants.get("preparedBy")),
        approved_by=_participant(participants.get("approvedBy")),
        posted_by=_participant(participants.get("postedBy")),
    )
