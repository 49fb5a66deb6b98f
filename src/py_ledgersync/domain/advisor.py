"""Counter-account advice.

Given an account already chosen for one side of an entry, the advisor
returns the categories permitted on the opposite side and ranks the chart's
accounts within them. Ranking rewards membership in curated code sets
(cash-like, payables, receivables, capital) above name/description matches.
There is no score for category alone, so accounts matching neither tier
stay in the "also plausible" group.
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .accounts import Account, AccountCategory, ChartOfAccounts, EntrySide, account_sort_key, extract_account_number
from .quantize import to_amount

__all__ = [
    "COUNTER_RULES",
    "Role",
    "Suggestion",
    "CounterAdvice",
    "CounterAccountAdvisor",
]

A = AccountCategory

# (side of the chosen account, its category) -> categories allowed on the other side
COUNTER_RULES: Mapping[EntrySide, Mapping[AccountCategory, tuple[AccountCategory, ...]]] = {
    EntrySide.DEBIT: {
        A.EXPENSE: (A.ASSET, A.LIABILITY),
        A.ASSET: (A.ASSET, A.LIABILITY, A.EQUITY),
        A.LIABILITY: (A.ASSET, A.EXPENSE),
        A.EQUITY: (A.ASSET, A.LIABILITY),
        A.REVENUE: (A.ASSET, A.LIABILITY),
    },
    EntrySide.CREDIT: {
        A.REVENUE: (A.ASSET, A.LIABILITY),
        A.LIABILITY: (A.ASSET, A.EXPENSE),
        A.ASSET: (A.EXPENSE, A.ASSET),
        A.EQUITY: (A.ASSET,),
        A.EXPENSE: (A.ASSET, A.LIABILITY),
    },
}


class Role(str, Enum):
    CASHLIKE = "cashlike"
    PAYABLES = "payables"
    RECEIVABLES = "receivables"
    CAPITAL = "capital"
    DEFERRED_REVENUE = "deferred_revenue"


_PREFERRED_CODES: Mapping[Role, frozenset[str]] = {
    Role.CASHLIKE: frozenset({"1000", "1010", "1100"}),
    Role.PAYABLES: frozenset({"2000"}),
    Role.RECEIVABLES: frozenset({"1200"}),
    Role.CAPITAL: frozenset({"3000"}),
}

_NAME_PATTERNS: Mapping[Role, re.Pattern[str]] = {
    Role.CASHLIKE: re.compile(r"(cash|bank|checking|konto|kasse)", re.IGNORECASE),
    Role.PAYABLES: re.compile(r"(accounts?\s*payable|leverandørgæld|kreditor)", re.IGNORECASE),
    Role.RECEIVABLES: re.compile(r"(accounts?\s*receivable|debitor)", re.IGNORECASE),
    Role.DEFERRED_REVENUE: re.compile(r"(deferred\s*rev|udskudt\s*indtægt)", re.IGNORECASE),
}

_CODE_SCORE: Mapping[Role, int] = {
    Role.CASHLIKE: 10,
    Role.PAYABLES: 9,
    Role.RECEIVABLES: 9,
    Role.CAPITAL: 8,
}
_NAME_SCORE: Mapping[Role, int] = {
    Role.CASHLIKE: 6,
    Role.PAYABLES: 5,
    Role.RECEIVABLES: 5,
    Role.DEFERRED_REVENUE: 4,
}

# roles worth promoting for (side of the chosen account, its category)
_PREFERRED_ROLES: Mapping[EntrySide, Mapping[AccountCategory, tuple[Role, ...]]] = {
    EntrySide.DEBIT: {
        A.EXPENSE: (Role.CASHLIKE, Role.PAYABLES),
        A.ASSET: (Role.CASHLIKE, Role.PAYABLES, Role.CAPITAL),
        A.LIABILITY: (Role.CASHLIKE,),
        A.EQUITY: (Role.CASHLIKE, Role.PAYABLES),
        A.REVENUE: (Role.CASHLIKE,),
    },
    EntrySide.CREDIT: {
        A.REVENUE: (Role.RECEIVABLES, Role.CASHLIKE),
        A.LIABILITY: (Role.CASHLIKE,),
        A.ASSET: (Role.CASHLIKE,),
        A.EQUITY: (Role.CASHLIKE,),
        A.EXPENSE: (Role.CASHLIKE, Role.PAYABLES),
    },
}


@dataclass(slots=True, frozen=True)
class Suggestion:
    account: Account
    category: AccountCategory
    score: int


@dataclass(slots=True, frozen=True)
class CounterAdvice:
    account: str
    side: EntrySide
    category: AccountCategory
    permitted: tuple[AccountCategory, ...]
    primary: tuple[Suggestion, ...]
    also_plausible: tuple[Suggestion, ...]

    @property
    def groups(self) -> dict[str, tuple[Suggestion, ...]]:
        return {"primary suggestions": self.primary, "also plausible": self.also_plausible}

    @property
    def suggestions(self) -> tuple[Suggestion, ...]:
        return self.primary + self.also_plausible


class CounterAccountAdvisor:
    """Advisory only: never mutates the chart, never blocks validation."""

    def __init__(self, chart: ChartOfAccounts) -> None:
        self.chart = chart

    def permitted_categories(self, account: str, side: EntrySide | str) -> tuple[AccountCategory, ...]:
        s = EntrySide.parse(side)
        return COUNTER_RULES[s][self.chart.category_of(account)]

    def is_permitted(self, account: str, side: EntrySide | str, counter_account: str) -> bool:
        return self.chart.category_of(counter_account) in self.permitted_categories(account, side)

    def _score(self, acc: Account, roles: Sequence[Role]) -> int:
        text = f"{acc.name} {acc.description}"
        best = 0
        for role in roles:
            if acc.code in _PREFERRED_CODES.get(role, ()):
                best = max(best, _CODE_SCORE[role])
            pattern = _NAME_PATTERNS.get(role)
            if pattern is not None and pattern.search(text):
                best = max(best, _NAME_SCORE[role])
        return best

    def advise(self, account: str, side: EntrySide | str) -> CounterAdvice:
        s = EntrySide.parse(side)
        code = extract_account_number(account)
        category = self.chart.category_of(code)
        permitted = COUNTER_RULES[s][category]
        roles = _PREFERRED_ROLES[s][category]
        scored: list[Suggestion] = []
        for acc in self.chart:
            if acc.code == code:
                continue
            cat = acc.resolved_category
            if cat not in permitted:
                continue
            scored.append(Suggestion(account=acc, category=cat, score=self._score(acc, roles)))
        primary = sorted((x for x in scored if x.score > 0), key=lambda x: (-x.score, account_sort_key(x.account.code)))
        rest = sorted((x for x in scored if x.score == 0), key=lambda x: account_sort_key(x.account.code))
        return CounterAdvice(
            account=code,
            side=s,
            category=category,
            permitted=permitted,
            primary=tuple(primary),
            also_plausible=tuple(rest),
        )

    def options_for_open_line(self, lines: Sequence[Mapping[str, Any]], index: int) -> CounterAdvice | None:
        """Advice for the line at ``index`` of an entry being composed.

        Only when exactly one other line carries an account and an amount is
        there an anchor to advise against; otherwise None (offer everything).
        """
        anchors = []
        for i, line in enumerate(lines):
            if i == index:
                continue
            acc = extract_account_number(line.get("account"))
            debit = to_amount(line.get("debit"))
            credit = to_amount(line.get("credit"))
            if acc and (debit > 0 or credit > 0):
                anchors.append((acc, EntrySide.DEBIT if debit > 0 else EntrySide.CREDIT))
        if len(anchors) != 1:
            return None
        acc, side = anchors[0]
        return self.advise(acc, side)
