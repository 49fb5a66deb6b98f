"""Period windows and per-account aggregation.

Accumulation keeps raw debit/credit sums only; the sign convention of an
account's normal balance is applied later by the views. Sums are exact
Decimal additions, so totals do not depend on row order or on how often the
same row set was merged.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from .accounts import account_sort_key, extract_account_number
from .errors import ValidationError
from .quantize import ZERO
from .rows import LedgerRow, parse_date

__all__ = [
    "WindowMode",
    "Bucket",
    "Window",
    "PeriodAggregate",
    "aggregate",
]


class WindowMode(str, Enum):
    PERIOD = "PERIOD"
    AS_OF = "AS_OF"


class Bucket(str, Enum):
    OPENING = "opening"
    MOVEMENT = "movement"


@dataclass(slots=True, frozen=True)
class Window:
    """``PERIOD`` over ``[start, end]`` or ``AS_OF`` a single day.

    Build with ``Window.period(start, end)`` or ``Window.as_of(day)``.
    """

    mode: WindowMode
    start: date
    end: date

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", WindowMode(self.mode))
        if self.start > self.end:
            raise ValidationError(f"Window start {self.start} is after end {self.end}")
        if self.mode is WindowMode.AS_OF and self.start != self.end:
            raise ValidationError("AS_OF window covers a single day")

    @classmethod
    def period(cls, start: date | str, end: date | str) -> Window:
        return cls(WindowMode.PERIOD, parse_date(start), parse_date(end))

    @classmethod
    def as_of(cls, day: date | str) -> Window:
        d = parse_date(day)
        return cls(WindowMode.AS_OF, d, d)

    @property
    def as_of_date(self) -> date:
        return self.end

    def bucket(self, day: date) -> Bucket | None:
        """Opening before the window, movement inside it, None (ignored) after it."""
        if day < self.start:
            return Bucket.OPENING
        if day <= self.end:
            return Bucket.MOVEMENT
        return None

    def label(self) -> str:
        if self.mode is WindowMode.AS_OF:
            return f"as of {self.end.isoformat()}"
        return f"{self.start.isoformat()} .. {self.end.isoformat()}"


@dataclass(slots=True, frozen=True)
class PeriodAggregate:
    account: str
    opening_debit: Decimal = ZERO
    opening_credit: Decimal = ZERO
    period_debit: Decimal = ZERO
    period_credit: Decimal = ZERO

    @property
    def opening(self) -> Decimal:
        """Net opening balance, debit positive."""
        return self.opening_debit - self.opening_credit

    @property
    def ending(self) -> Decimal:
        return self.opening + self.period_debit - self.period_credit

    @property
    def is_zero(self) -> bool:
        return not (self.opening_debit or self.opening_credit or self.period_debit or self.period_credit)


def aggregate(rows: Iterable[LedgerRow], window: Window, account: str | None = None) -> list[PeriodAggregate]:
    """Per-account aggregates for ``window``, sorted by account code.

    ``account`` restricts the result to a single account. Accounts whose rows
    all fall after the window are omitted.
    """
    only = extract_account_number(account) if account else None
    sums: dict[str, list[Decimal]] = {}
    for row in rows:
        if only is not None and row.account != only:
            continue
        bucket = window.bucket(row.date)
        if bucket is None:
            continue
        acc = sums.setdefault(row.account, [ZERO, ZERO, ZERO, ZERO])
        if bucket is Bucket.OPENING:
            acc[0] += row.debit
            acc[1] += row.credit
        else:
            acc[2] += row.debit
            acc[3] += row.credit
    return [
        PeriodAggregate(code, od, oc, pd, pc)
        for code, (od, oc, pd, pc) in sorted(sums.items(), key=lambda kv: account_sort_key(kv[0]))
    ]
