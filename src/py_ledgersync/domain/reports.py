"""Report view models built from ledger rows and a window.

Every builder is a pure function ``(rows, window, ...) -> immutable view``.
Inconsistencies (trial balance not balancing, balance sheet diff) are
reported in ``warnings`` and never corrected.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from .accounts import (
    BALANCE_SHEET_CATEGORIES,
    PROFIT_AND_LOSS_CATEGORIES,
    AccountCategory,
    ChartOfAccounts,
    EntrySide,
    extract_account_number,
)
from .periods import PeriodAggregate, Window, WindowMode, aggregate
from .quantize import ZERO, balance_epsilon
from .rows import LedgerRow

__all__ = [
    "split_sign",
    "TrialBalanceLine",
    "TrialBalance",
    "build_trial_balance",
    "BalanceSheetSection",
    "BalanceSheetLine",
    "BalanceSheet",
    "build_balance_sheet",
    "ProfitAndLossLine",
    "ProfitAndLoss",
    "build_profit_and_loss",
    "CashLine",
    "CashReport",
    "build_cash_report",
    "FinancialSummary",
    "build_summary",
    "DEFAULT_CASH_ACCOUNTS",
]

logger = logging.getLogger(__name__)

DEFAULT_CASH_ACCOUNTS: tuple[str, ...] = ("1000", "1010", "1100")


def split_sign(value: Decimal) -> tuple[Decimal, Decimal]:
    """Debit-positive net value -> (Dr, Cr) columns."""
    if value >= 0:
        return value, ZERO
    return ZERO, -value


def _normal(category: AccountCategory, net_debit: Decimal) -> Decimal:
    return net_debit if category.normal_side is EntrySide.DEBIT else -net_debit


# --- Trial balance ---------------------------------------------------------


@dataclass(slots=True, frozen=True)
class TrialBalanceLine:
    aggregate: PeriodAggregate
    name: str
    category: AccountCategory

    @property
    def account(self) -> str:
        return self.aggregate.account

    @property
    def opening_debit(self) -> Decimal:
        return split_sign(self.aggregate.opening)[0]

    @property
    def opening_credit(self) -> Decimal:
        return split_sign(self.aggregate.opening)[1]

    @property
    def period_debit(self) -> Decimal:
        return self.aggregate.period_debit

    @property
    def period_credit(self) -> Decimal:
        return self.aggregate.period_credit

    @property
    def ending(self) -> Decimal:
        return self.aggregate.ending

    @property
    def ending_debit(self) -> Decimal:
        return split_sign(self.aggregate.ending)[0]

    @property
    def ending_credit(self) -> Decimal:
        return split_sign(self.aggregate.ending)[1]

    @property
    def normal_ending(self) -> Decimal:
        """Ending balance signed by the account's normal side (revenue credit shows positive)."""
        return _normal(self.category, self.aggregate.ending)


@dataclass(slots=True, frozen=True)
class TrialBalance:
    window: Window
    lines: tuple[TrialBalanceLine, ...]
    epsilon: Decimal

    @property
    def total_opening_debit(self) -> Decimal:
        return sum((x.opening_debit for x in self.lines), ZERO)

    @property
    def total_opening_credit(self) -> Decimal:
        return sum((x.opening_credit for x in self.lines), ZERO)

    @property
    def total_period_debit(self) -> Decimal:
        return sum((x.period_debit for x in self.lines), ZERO)

    @property
    def total_period_credit(self) -> Decimal:
        return sum((x.period_credit for x in self.lines), ZERO)

    @property
    def total_ending_debit(self) -> Decimal:
        return sum((x.ending_debit for x in self.lines), ZERO)

    @property
    def total_ending_credit(self) -> Decimal:
        return sum((x.ending_credit for x in self.lines), ZERO)

    @property
    def difference(self) -> Decimal:
        return self.total_ending_debit - self.total_ending_credit

    @property
    def is_balanced(self) -> bool:
        return abs(self.difference) < self.epsilon

    @property
    def warnings(self) -> tuple[str, ...]:
        if self.is_balanced:
            return ()
        return (
            f"Trial balance is out of balance by {self.difference} "
            f"(ending debit {self.total_ending_debit}, ending credit {self.total_ending_credit})",
        )

    def line(self, account: str) -> TrialBalanceLine | None:
        code = extract_account_number(account)
        return next((x for x in self.lines if x.account == code), None)


def build_trial_balance(
    rows: Iterable[LedgerRow],
    window: Window,
    chart: ChartOfAccounts | None = None,
    *,
    account: str | None = None,
    include_zero: bool = False,
) -> TrialBalance:
    coa = chart or ChartOfAccounts()
    lines = tuple(
        TrialBalanceLine(aggregate=agg, name=coa.name_of(agg.account), category=coa.category_of(agg.account))
        for agg in aggregate(rows, window, account)
        if include_zero or agg.opening or agg.period_debit or agg.period_credit
    )
    tb = TrialBalance(window=window, lines=lines, epsilon=balance_epsilon())
    for message in tb.warnings:
        logger.warning(message)
    return tb


# --- Balance sheet ---------------------------------------------------------


class BalanceSheetSection(str, Enum):
    CURRENT_ASSETS = "Current Assets"
    NON_CURRENT_ASSETS = "Non-current Assets"
    CURRENT_LIABILITIES = "Current Liabilities"
    NON_CURRENT_LIABILITIES = "Non-current Liabilities"
    EQUITY = "Equity"


_ASSET_SECTIONS = (BalanceSheetSection.CURRENT_ASSETS, BalanceSheetSection.NON_CURRENT_ASSETS)
_LIABILITY_SECTIONS = (BalanceSheetSection.CURRENT_LIABILITIES, BalanceSheetSection.NON_CURRENT_LIABILITIES)

CURRENT_EARNINGS_ACCOUNT = "Current period earnings"


@dataclass(slots=True, frozen=True)
class BalanceSheetLine:
    section: BalanceSheetSection
    account: str
    name: str
    amount: Decimal


@dataclass(slots=True, frozen=True)
class BalanceSheet:
    window: Window
    lines: tuple[BalanceSheetLine, ...]
    epsilon: Decimal

    def section(self, section: BalanceSheetSection) -> tuple[BalanceSheetLine, ...]:
        return tuple(x for x in self.lines if x.section is section)

    def _total(self, sections: Iterable[BalanceSheetSection]) -> Decimal:
        wanted = set(sections)
        return sum((x.amount for x in self.lines if x.section in wanted), ZERO)

    @property
    def total_assets(self) -> Decimal:
        return self._total(_ASSET_SECTIONS)

    @property
    def total_liabilities(self) -> Decimal:
        return self._total(_LIABILITY_SECTIONS)

    @property
    def total_equity(self) -> Decimal:
        return self._total((BalanceSheetSection.EQUITY,))

    @property
    def diff(self) -> Decimal:
        return self.total_assets - (self.total_liabilities + self.total_equity)

    @property
    def is_balanced(self) -> bool:
        return abs(self.diff) < self.epsilon

    @property
    def warnings(self) -> tuple[str, ...]:
        if self.is_balanced:
            return ()
        return (f"Balance sheet does not balance: Assets - (Liabilities + Equity) = {self.diff}",)


def _section_for(chart: ChartOfAccounts, code: str, category: AccountCategory) -> BalanceSheetSection:
    current = chart.is_current(code)
    if category is AccountCategory.ASSET:
        return BalanceSheetSection.CURRENT_ASSETS if current else BalanceSheetSection.NON_CURRENT_ASSETS
    if category is AccountCategory.LIABILITY:
        return BalanceSheetSection.CURRENT_LIABILITIES if current else BalanceSheetSection.NON_CURRENT_LIABILITIES
    return BalanceSheetSection.EQUITY


def build_balance_sheet(
    rows: Iterable[LedgerRow],
    window: Window,
    chart: ChartOfAccounts | None = None,
    *,
    include_current_earnings: bool = False,
) -> BalanceSheet:
    """Balances at the end of ``window`` (inclusive), signed by normal side.

    With ``include_current_earnings`` the cumulative net income of revenue and
    expense accounts is added as a synthetic equity line.
    """
    coa = chart or ChartOfAccounts()
    lines: list[BalanceSheetLine] = []
    earnings = ZERO
    for agg in aggregate(rows, window):
        category = coa.category_of(agg.account)
        if category in PROFIT_AND_LOSS_CATEGORIES:
            earnings -= agg.ending
            continue
        if category not in BALANCE_SHEET_CATEGORIES:
            continue
        amount = _normal(category, agg.ending)
        if amount == 0:
            continue
        lines.append(
            BalanceSheetLine(
                section=_section_for(coa, agg.account, category),
                account=agg.account,
                name=coa.name_of(agg.account),
                amount=amount,
            )
        )
    if include_current_earnings and earnings != 0:
        lines.append(BalanceSheetLine(BalanceSheetSection.EQUITY, "", CURRENT_EARNINGS_ACCOUNT, earnings))
    order = list(BalanceSheetSection)
    lines.sort(key=lambda x: order.index(x.section))
    sheet = BalanceSheet(window=window, lines=tuple(lines), epsilon=balance_epsilon())
    for message in sheet.warnings:
        logger.warning(message)
    return sheet


# --- Profit and loss -------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ProfitAndLossLine:
    account: str
    name: str
    category: AccountCategory
    debit: Decimal
    credit: Decimal

    @property
    def net(self) -> Decimal:
        return self.credit - self.debit


@dataclass(slots=True, frozen=True)
class ProfitAndLoss:
    window: Window
    lines: tuple[ProfitAndLossLine, ...]

    @property
    def revenue(self) -> Decimal:
        return sum((x.net for x in self.lines if x.category is AccountCategory.REVENUE), ZERO)

    @property
    def expenses(self) -> Decimal:
        """Total cost as a positive number."""
        return -sum((x.net for x in self.lines if x.category is AccountCategory.EXPENSE), ZERO)

    @property
    def net_income(self) -> Decimal:
        return sum((x.net for x in self.lines), ZERO)


def build_profit_and_loss(
    rows: Iterable[LedgerRow],
    window: Window,
    chart: ChartOfAccounts | None = None,
) -> ProfitAndLoss:
    """Revenue/expense activity: the period movement for PERIOD windows, cumulative up to the day for AS_OF."""
    coa = chart or ChartOfAccounts()
    lines: list[ProfitAndLossLine] = []
    for agg in aggregate(rows, window):
        category = coa.category_of(agg.account)
        if category not in PROFIT_AND_LOSS_CATEGORIES:
            continue
        debit, credit = agg.period_debit, agg.period_credit
        if window.mode is WindowMode.AS_OF:
            debit += agg.opening_debit
            credit += agg.opening_credit
        if not debit and not credit:
            continue
        lines.append(ProfitAndLossLine(agg.account, coa.name_of(agg.account), category, debit, credit))
    return ProfitAndLoss(window=window, lines=tuple(lines))


# --- Cash ------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class CashLine:
    account: str
    name: str
    opening: Decimal
    inflow: Decimal
    outflow: Decimal

    @property
    def net_change(self) -> Decimal:
        return self.inflow - self.outflow

    @property
    def ending(self) -> Decimal:
        return self.opening + self.net_change


@dataclass(slots=True, frozen=True)
class CashReport:
    window: Window
    lines: tuple[CashLine, ...]

    @property
    def opening(self) -> Decimal:
        return sum((x.opening for x in self.lines), ZERO)

    @property
    def inflow(self) -> Decimal:
        return sum((x.inflow for x in self.lines), ZERO)

    @property
    def outflow(self) -> Decimal:
        return sum((x.outflow for x in self.lines), ZERO)

    @property
    def net_change(self) -> Decimal:
        return self.inflow - self.outflow

    @property
    def ending(self) -> Decimal:
        return self.opening + self.net_change


def build_cash_report(
    rows: Iterable[LedgerRow],
    window: Window,
    chart: ChartOfAccounts | None = None,
    *,
    cash_accounts: Iterable[str] = DEFAULT_CASH_ACCOUNTS,
) -> CashReport:
    coa = chart or ChartOfAccounts()
    targets = {extract_account_number(a) for a in cash_accounts}
    lines = tuple(
        CashLine(
            account=agg.account,
            name=coa.name_of(agg.account),
            opening=agg.opening,
            inflow=agg.period_debit,
            outflow=agg.period_credit,
        )
        for agg in aggregate(rows, window)
        if agg.account in targets
    )
    return CashReport(window=window, lines=lines)


# --- Summary ---------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class FinancialSummary:
    revenue: Decimal
    expenses: Decimal
    net_income: Decimal
    assets: Decimal
    liabilities: Decimal
    equity: Decimal
    current_assets: Decimal
    current_liabilities: Decimal
    cash_ending: Decimal
    current_ratio: Decimal | None
    debt_to_equity: Decimal | None
    cash_coverage: Decimal | None


def _ratio(numerator: Decimal, denominator: Decimal) -> Decimal | None:
    if denominator == 0:
        return None
    return (numerator / denominator).quantize(Decimal("0.01"))


def build_summary(pnl: ProfitAndLoss, sheet: BalanceSheet, cash: CashReport) -> FinancialSummary:
    """Key figures and ratios; a ratio with a zero denominator is None."""
    current_assets = sum((x.amount for x in sheet.section(BalanceSheetSection.CURRENT_ASSETS)), ZERO)
    current_liabilities = sum((x.amount for x in sheet.section(BalanceSheetSection.CURRENT_LIABILITIES)), ZERO)
    return FinancialSummary(
        revenue=pnl.revenue,
        expenses=pnl.expenses,
        net_income=pnl.net_income,
        assets=sheet.total_assets,
        liabilities=sheet.total_liabilities,
        equity=sheet.total_equity,
        current_assets=current_assets,
        current_liabilities=current_liabilities,
        cash_ending=cash.ending,
        current_ratio=_ratio(current_assets, current_liabilities),
        debt_to_equity=_ratio(sheet.total_liabilities, sheet.total_equity),
        cash_coverage=_ratio(cash.ending, pnl.expenses),
    )
