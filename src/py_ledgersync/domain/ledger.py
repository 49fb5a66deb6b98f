"""Double-entry validation of candidate journal lines.

DoubleEntryValidator.validate is a pure check returning a ValidationResult;
ensure_valid raises instead. Both the two-account quick form (quick_entry)
and the free N-line form go through the same rules:

1. Each line is normalized: account code resolved, amounts coerced to
   non-negative Decimals (negatives clamp to zero), base-currency amount computed from the line rate,
   else the entry rate, else 1.
2. Completely blank lines are ignored. A line with an amount but no account,
   a line carrying both a debit and a credit, an amount that rounds to zero
   at money scale, or a non-positive rate rejects the entry.
3. At least two lines must carry an amount, and both the entry-currency and
   the base-currency totals must agree within the balance tolerance.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .accounts import EntrySide, extract_account_number
from .errors import UnbalancedEntryError, ValidationError
from .quantize import ZERO, balance_epsilon, money_quantize, to_amount, to_decimal

__all__ = [
    "EntryLine",
    "NormalizedLine",
    "EntryTotals",
    "ValidationResult",
    "DoubleEntryValidator",
]


@dataclass(slots=True, frozen=True)
class EntryLine:
    """Candidate line of a journal entry as typed by a user or read from the wire."""

    account: str | None
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    memo: str = ""
    currency: str | None = None
    fx_rate: Decimal | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> EntryLine:
        rate = data.get("fxRate", data.get("fx_rate"))
        return cls(
            account=extract_account_number(data.get("account")) or None,
            debit=to_decimal(data.get("debit")),
            credit=to_decimal(data.get("credit")),
            memo=str(data.get("memo") or ""),
            currency=(str(data["currency"]).upper() if data.get("currency") else None),
            fx_rate=(to_decimal(rate) if rate not in (None, "") else None),
        )

    def to_mapping(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "account": self.account or "",
            "debit": str(self.debit),
            "credit": str(self.credit),
            "memo": self.memo,
        }
        if self.currency:
            out["currency"] = self.currency
        if self.fx_rate is not None:
            out["fxRate"] = str(self.fx_rate)
        return out


@dataclass(slots=True, frozen=True)
class NormalizedLine:
    account: str
    debit: Decimal
    credit: Decimal
    memo: str
    currency: str
    fx_rate: Decimal
    base_amount: Decimal

    @property
    def side(self) -> EntrySide:
        return EntrySide.DEBIT if self.debit > 0 else EntrySide.CREDIT

    @property
    def amount(self) -> Decimal:
        return self.debit if self.debit > 0 else self.credit

    @property
    def base_debit(self) -> Decimal:
        return self.base_amount if self.debit > 0 else ZERO

    @property
    def base_credit(self) -> Decimal:
        return self.base_amount if self.credit > 0 else ZERO


@dataclass(slots=True, frozen=True)
class EntryTotals:
    debit: Decimal
    credit: Decimal
    base_debit: Decimal
    base_credit: Decimal

    @property
    def difference(self) -> Decimal:
        return self.debit - self.credit

    @property
    def base_difference(self) -> Decimal:
        return self.base_debit - self.base_credit


@dataclass(slots=True, frozen=True)
class ValidationResult:
    ok: bool
    reason: str | None = None
    totals: EntryTotals | None = None
    lines: tuple[NormalizedLine, ...] = ()

    def __bool__(self) -> bool:
        return self.ok


class _Rejected(Exception):
    def __init__(self, reason: str, *, unbalanced: bool = False) -> None:
        super().__init__(reason)
        self.reason = reason
        self.unbalanced = unbalanced


class DoubleEntryValidator:
    """Balance invariant check shared by every entry style.

    epsilon: absolute tolerance; defaults to BALANCE_EPSILON from settings.
    base_currency: currency assumed for lines that name none.
    """

    def __init__(self, *, epsilon: Decimal | None = None, base_currency: str | None = None) -> None:
        from py_ledgersync.infrastructure.config.settings import get_settings

        self.epsilon = balance_epsilon() if epsilon is None else Decimal(epsilon)
        self.base_currency = (base_currency or get_settings().base_currency).upper()

    @staticmethod
    def quick_entry(
        debit_account: str,
        credit_account: str,
        amount: Decimal | str | int,
        memo: str = "",
    ) -> list[EntryLine]:
        """Two-line candidate for the simplified form (one debit, one credit)."""
        value = to_amount(amount)
        return [
            EntryLine(account=extract_account_number(debit_account) or None, debit=value, memo=memo),
            EntryLine(account=extract_account_number(credit_account) or None, credit=value, memo=memo),
        ]

    def _normalize(self, index: int, line: EntryLine, entry_rate: Decimal, currency: str) -> NormalizedLine | None:
        account = extract_account_number(line.account) if line.account else ""
        raw_debit = to_amount(line.debit)
        raw_credit = to_amount(line.credit)
        if raw_debit > 0 and raw_credit > 0:
            raise _Rejected(f"Line {index}: a line cannot carry both debit and credit")
        if raw_debit == 0 and raw_credit == 0:
            return None
        if not account:
            raise _Rejected(f"Line {index}: account is required")
        rate = entry_rate if line.fx_rate is None else to_decimal(line.fx_rate)
        if rate <= 0:
            raise _Rejected(f"Line {index}: exchange rate must be positive")
        amount = raw_debit if raw_debit > 0 else raw_credit
        if money_quantize(amount) == 0:
            raise _Rejected(f"Line {index}: amount {amount} rounds to zero")
        return NormalizedLine(
            account=account,
            debit=raw_debit,
            credit=raw_credit,
            memo=line.memo,
            currency=(line.currency or currency).upper(),
            fx_rate=rate,
            base_amount=money_quantize(amount * rate),
        )

    def _check(
        self,
        lines: Iterable[EntryLine | Mapping[str, Any]],
        entry_rate: Decimal | str | int | None,
        currency: str | None,
    ) -> tuple[tuple[NormalizedLine, ...], EntryTotals]:
        rate = Decimal(1) if entry_rate in (None, "") else to_decimal(entry_rate)
        if rate <= 0:
            raise _Rejected("Entry exchange rate must be positive")
        entry_currency = (currency or self.base_currency).upper()
        normalized: list[NormalizedLine] = []
        for index, raw in enumerate(lines, start=1):
            line = raw if isinstance(raw, EntryLine) else EntryLine.from_mapping(raw)
            norm = self._normalize(index, line, rate, entry_currency)
            if norm is not None:
                normalized.append(norm)
        totals = EntryTotals(
            debit=sum((n.debit for n in normalized), ZERO),
            credit=sum((n.credit for n in normalized), ZERO),
            base_debit=sum((n.base_debit for n in normalized), ZERO),
            base_credit=sum((n.base_credit for n in normalized), ZERO),
        )
        if len(normalized) < 2:
            raise _Rejected("An entry needs at least two lines with an amount")
        if abs(totals.difference) >= self.epsilon:
            raise _Rejected(
                f"Entry is not balanced: debit {totals.debit} != credit {totals.credit}",
                unbalanced=True,
            )
        if abs(totals.base_difference) >= self.epsilon:
            raise _Rejected(
                f"Entry is not balanced in {self.base_currency}: "
                f"debit {totals.base_debit} != credit {totals.base_credit}",
                unbalanced=True,
            )
        return tuple(normalized), totals

    def validate(
        self,
        lines: Sequence[EntryLine | Mapping[str, Any]],
        *,
        entry_rate: Decimal | str | int | None = None,
        currency: str | None = None,
    ) -> ValidationResult:
        """Return ``ValidationResult(ok, reason)``; never raises for bad input."""
        try:
            normalized, totals = self._check(lines, entry_rate, currency)
        except _Rejected as rej:
            return ValidationResult(ok=False, reason=rej.reason)
        return ValidationResult(ok=True, totals=totals, lines=normalized)

    def ensure_valid(
        self,
        lines: Sequence[EntryLine | Mapping[str, Any]],
        *,
        entry_rate: Decimal | str | int | None = None,
        currency: str | None = None,
    ) -> ValidationResult:
        """Same as validate but raises UnbalancedEntryError / ValidationError on rejection."""
        try:
            normalized, totals = self._check(lines, entry_rate, currency)
        except _Rejected as rej:
            if rej.unbalanced:
                raise UnbalancedEntryError(rej.reason) from None
            raise ValidationError(rej.reason) from None
        return ValidationResult(ok=True, totals=totals, lines=normalized)
