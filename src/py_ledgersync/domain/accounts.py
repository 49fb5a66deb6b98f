"""Accounts, categories and the chart of accounts.

Public API:
- EntrySide: debit/credit side of a posting.
- AccountCategory: ASSET, LIABILITY, EQUITY, REVENUE, EXPENSE.
- extract_account_number: resolve a code from labels like ``"1000 Cash"``.
- infer_category: category from the leading digit of a code.
- Account / ChartOfAccounts: catalog with optional category overrides and the
  current/non-current split.
- default_chart: a small standard chart used when no catalog is supplied.

No infrastructure dependencies beyond the threshold defaults read from settings.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import ValidationError

__all__ = [
    "EntrySide",
    "AccountCategory",
    "BALANCE_SHEET_CATEGORIES",
    "PROFIT_AND_LOSS_CATEGORIES",
    "extract_account_number",
    "infer_category",
    "account_sort_key",
    "Account",
    "ChartOfAccounts",
    "default_chart",
]


class EntrySide(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"

    @property
    def opposite(self) -> EntrySide:
        return EntrySide.CREDIT if self is EntrySide.DEBIT else EntrySide.DEBIT

    @classmethod
    def parse(cls, value: str | EntrySide) -> EntrySide:
        if isinstance(value, EntrySide):
            return value
        key = str(value or "").strip().lower()
        if key in {"debit", "dr", "d"}:
            return cls.DEBIT
        if key in {"credit", "cr", "c"}:
            return cls.CREDIT
        raise ValidationError(f"Unknown entry side: {value!r}")


class AccountCategory(str, Enum):
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    @property
    def normal_side(self) -> EntrySide:
        """Side on which the balance of this category is conventionally positive."""
        if self in (AccountCategory.ASSET, AccountCategory.EXPENSE):
            return EntrySide.DEBIT
        return EntrySide.CREDIT

    @classmethod
    def parse(cls, value: str | AccountCategory) -> AccountCategory:
        if isinstance(value, AccountCategory):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise ValidationError(f"Unknown account category: {value!r}") from exc


BALANCE_SHEET_CATEGORIES = frozenset({AccountCategory.ASSET, AccountCategory.LIABILITY, AccountCategory.EQUITY})
PROFIT_AND_LOSS_CATEGORIES = frozenset({AccountCategory.REVENUE, AccountCategory.EXPENSE})

_LEADING_DIGIT_CATEGORY: dict[str, AccountCategory] = {
    "1": AccountCategory.ASSET,
    "2": AccountCategory.LIABILITY,
    "3": AccountCategory.EQUITY,
    "4": AccountCategory.REVENUE,
}

_ACCOUNT_NUMBER_RE = re.compile(r"^\s*(\d{3,})")


def extract_account_number(value: Any) -> str:
    """Return the account code embedded at the start of a label, else the trimmed text.

    ``"1000 Cash"`` -> ``"1000"``; ``" 4000"`` -> ``"4000"``; ``"Misc"`` -> ``"Misc"``.
    """
    text = "" if value is None else str(value)
    m = _ACCOUNT_NUMBER_RE.match(text)
    return m.group(1) if m else text.strip()


def infer_category(code: str) -> AccountCategory:
    """Derive the category from the leading digit (5-9 and non-numeric codes are EXPENSE)."""
    head = extract_account_number(code)[:1]
    return _LEADING_DIGIT_CATEGORY.get(head, AccountCategory.EXPENSE)


def account_sort_key(code: str) -> tuple[int, int, str]:
    """Numeric codes first, in numeric order; anything else after, alphabetically."""
    if code.isdigit():
        return (0, int(code), code)
    return (1, 0, code)


@dataclass(slots=True, frozen=True)
class Account:
    """Chart of accounts entry.

    ``category`` is an explicit override; when None the leading-digit rule applies.
    """

    code: str
    name: str = ""
    description: str = ""
    category: AccountCategory | None = None

    def __post_init__(self) -> None:
        code = extract_account_number(self.code)
        if not code:
            raise ValidationError("Account code is required")
        object.__setattr__(self, "code", code)
        if self.category is not None:
            object.__setattr__(self, "category", AccountCategory.parse(self.category))

    @property
    def resolved_category(self) -> AccountCategory:
        return self.category or infer_category(self.code)

    @property
    def label(self) -> str:
        return f"{self.code} {self.name}".strip()


class ChartOfAccounts:
    """Lookup of accounts by code with category and section resolution.

    Codes absent from the catalog still resolve: category by leading digit, empty name.
    """

    def __init__(
        self,
        accounts: Iterable[Account] = (),
        *,
        current_asset_limit: int | None = None,
        current_liability_limit: int | None = None,
    ) -> None:
        from py_ledgersync.infrastructure.config.settings import get_settings

        settings = get_settings()
        self._accounts: dict[str, Account] = {}
        for acc in accounts:
            self.add(acc)
        self.current_asset_limit = (
            settings.current_asset_limit if current_asset_limit is None else current_asset_limit
        )
        self.current_liability_limit = (
            settings.current_liability_limit if current_liability_limit is None else current_liability_limit
        )

    @classmethod
    def from_mappings(cls, items: Iterable[Mapping[str, Any]], **kwargs: Any) -> ChartOfAccounts:
        """Build from wire records ``{number|code, name, description?, category?}``."""
        accounts = []
        for item in items:
            code = item.get("code") or item.get("number") or item.get("account")
            category = item.get("category") or item.get("type")
            accounts.append(
                Account(
                    code=str(code or ""),
                    name=str(item.get("name") or ""),
                    description=str(item.get("description") or ""),
                    category=AccountCategory.parse(category) if category else None,
                )
            )
        return cls(accounts, **kwargs)

    def add(self, account: Account) -> None:
        self._accounts[account.code] = account

    def get(self, code: str) -> Account | None:
        return self._accounts.get(extract_account_number(code))

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and extract_account_number(code) in self._accounts

    def __iter__(self) -> Iterator[Account]:
        return iter(sorted(self._accounts.values(), key=lambda a: account_sort_key(a.code)))

    def __len__(self) -> int:
        return len(self._accounts)

    def category_of(self, code: str) -> AccountCategory:
        acc = self.get(code)
        if acc is not None:
            return acc.resolved_category
        return infer_category(code)

    def name_of(self, code: str) -> str:
        acc = self.get(code)
        return acc.name if acc is not None else ""

    def is_current(self, code: str) -> bool:
        """Numeric-range rule: asset/liability codes below their limit are current.

        Non-numeric codes are treated as current.
        """
        number = extract_account_number(code)
        if not number.isdigit():
            return True
        category = self.category_of(number)
        if category is AccountCategory.ASSET:
            return int(number) < self.current_asset_limit
        if category is AccountCategory.LIABILITY:
            return int(number) < self.current_liability_limit
        return False


_DEFAULT_ACCOUNTS: tuple[tuple[str, str, str], ...] = (
    ("1000", "Cash", "Kasse"),
    ("1010", "Petty Cash", "Småkasse"),
    ("1100", "Bank", "Bankkonto"),
    ("1200", "Accounts Receivable", "Debitorer"),
    ("1300", "Inventory", "Varelager"),
    ("1400", "Prepaid Expenses", "Forudbetalte omkostninger"),
    ("1500", "Equipment", "Inventar og udstyr"),
    ("1600", "Vehicles", "Køretøjer"),
    ("2000", "Accounts Payable", "Leverandørgæld"),
    ("2100", "VAT Payable", "Skyldig moms"),
    ("2200", "Deferred Revenue", "Udskudt indtægt"),
    ("2300", "Accrued Salaries", "Skyldig løn"),
    ("2600", "Long-term Loans", "Langfristet gæld"),
    ("3000", "Share Capital", "Egenkapital"),
    ("3100", "Retained Earnings", "Overført resultat"),
    ("4000", "Sales Revenue", "Salg af varer"),
    ("4100", "Service Revenue", "Salg af ydelser"),
    ("5000", "Cost of Goods Sold", "Vareforbrug"),
    ("6000", "Rent", "Husleje"),
    ("6100", "Salaries", "Lønninger"),
    ("6200", "Utilities", "El, vand og varme"),
    ("6300", "Office Supplies", "Kontorartikler"),
    ("7000", "Bank Fees", "Bankgebyrer"),
    ("8000", "Depreciation", "Afskrivninger"),
)


def default_chart() -> ChartOfAccounts:
    """Return a fresh standard chart (codes follow the leading-digit convention)."""
    return ChartOfAccounts(Account(code, name, description) for code, name, description in _DEFAULT_ACCOUNTS)
