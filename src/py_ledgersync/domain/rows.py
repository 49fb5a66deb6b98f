"""Ledger rows: one debit-or-credit leg of a posting.

Rows are immutable value objects. Every row carries exactly one strictly
positive side. ``merge_key`` is the composite natural key used to recognise
the same logical row arriving from different origins.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from .accounts import EntrySide, extract_account_number
from .errors import ValidationError
from .quantize import ZERO, money_quantize, to_amount

__all__ = [
    "RowOrigin",
    "LedgerRow",
    "MergeKey",
    "parse_date",
    "rows_from_wire",
]

logger = logging.getLogger(__name__)

MergeKey = tuple[str, str, str, str, Decimal, Decimal]


class RowOrigin(str, Enum):
    SERVER = "server"
    LOCAL_CACHE = "local-cache"
    MANUAL = "manual"


def parse_date(value: Any) -> date:
    """Accept ``date``, ``datetime`` or an ISO-8601 string (time part ignored)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if len(text) < 10:
        raise ValidationError(f"Invalid date: {value!r}")
    try:
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {value!r}") from exc


@dataclass(slots=True, frozen=True)
class LedgerRow:
    date: date
    account: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    memo: str = ""
    reference: str = ""
    entry_number: str = ""
    origin_entry_id: str | None = None
    origin: RowOrigin = RowOrigin.MANUAL
    locked: bool = False
    source: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", parse_date(self.date))
        account = extract_account_number(self.account)
        if not account:
            raise ValidationError("Ledger row requires an account")
        object.__setattr__(self, "account", account)
        for name in ("debit", "credit"):
            raw = getattr(self, name)
            value = raw if isinstance(raw, Decimal) else to_amount(raw)
            if value < 0:
                raise ValidationError(f"Ledger row {name} must be non-negative")
            object.__setattr__(self, name, money_quantize(value))
        if (self.debit > 0) == (self.credit > 0):
            raise ValidationError(
                f"Ledger row for account {account} must have exactly one positive side "
                f"(debit={self.debit}, credit={self.credit})"
            )
        object.__setattr__(self, "origin", RowOrigin(self.origin))

    @property
    def side(self) -> EntrySide:
        return EntrySide.DEBIT if self.debit > 0 else EntrySide.CREDIT

    @property
    def amount(self) -> Decimal:
        return self.debit if self.debit > 0 else self.credit

    @property
    def document_number(self) -> str:
        """Reference if present, otherwise the entry number."""
        return self.reference or self.entry_number

    @property
    def merge_key(self) -> MergeKey:
        return (
            self.origin_entry_id or self.entry_number,
            self.reference,
            self.date.isoformat(),
            self.account,
            self.debit,
            self.credit,
        )

    def with_origin(self, origin: RowOrigin) -> LedgerRow:
        return replace(self, origin=origin)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], origin: RowOrigin = RowOrigin.SERVER) -> LedgerRow:
        """Build a row from its wire form.

        Accepts ``entryNumber``/``jeNumber``/``journalNo`` and ``originEntryId``/``journalId``
        spellings. Raises ValidationError for rows that violate the one-sided invariant.
        """
        entry_number = data.get("entryNumber") or data.get("jeNumber") or data.get("journalNo") or ""
        origin_entry_id = data.get("originEntryId") or data.get("journalId")
        known = {
            "date", "account", "debit", "credit", "memo", "reference", "entryNumber", "jeNumber",
            "journalNo", "originEntryId", "journalId", "source", "locked",
        }
        return cls(
            date=data.get("date"),  # type: ignore[arg-type]
            account=str(data.get("account") or ""),
            debit=to_amount(data.get("debit")),
            credit=to_amount(data.get("credit")),
            memo=str(data.get("memo") or ""),
            reference=str(data.get("reference") or ""),
            entry_number=str(entry_number),
            origin_entry_id=str(origin_entry_id) if origin_entry_id else None,
            origin=origin,
            locked=bool(data.get("locked", False)),
            source=str(data.get("source") or ""),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_mapping(self) -> dict[str, Any]:
        """Wire form: ISO date, numeric amounts, camelCase keys; empty optionals omitted."""
        out: dict[str, Any] = {
            "date": self.date.isoformat(),
            "account": self.account,
            "memo": self.memo,
            "debit": float(self.debit),
            "credit": float(self.credit),
        }
        if self.reference:
            out["reference"] = self.reference
        if self.entry_number:
            out["entryNumber"] = self.entry_number
        if self.source:
            out["source"] = self.source
        if self.locked:
            out["locked"] = True
        if self.origin_entry_id:
            out["originEntryId"] = self.origin_entry_id
        return out


def rows_from_wire(items: Iterable[Mapping[str, Any]], origin: RowOrigin = RowOrigin.SERVER) -> list[LedgerRow]:
    """Parse wire rows, skipping (and logging) the ones that cannot form a valid row."""
    rows: list[LedgerRow] = []
    for index, item in enumerate(items):
        try:
            rows.append(LedgerRow.from_mapping(item, origin=origin))
        except ValidationError as exc:
            logger.warning("Skipping malformed %s row #%s: %s", origin.value, index, exc)
    return rows
