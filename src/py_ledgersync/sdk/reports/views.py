"""Plain-dict projections of the report views for JSON output.

Derived figures (splits, totals, diff) are properties on the domain views,
so the generic ``to_dict`` would miss them; these functions spell them out.
"""
from __future__ import annotations

from typing import Any

from py_ledgersync.domain.periods import Window
from py_ledgersync.domain.reports import (
    BalanceSheet,
    BalanceSheetSection,
    CashReport,
    FinancialSummary,
    ProfitAndLoss,
    TrialBalance,
)
from py_ledgersync.sdk.json import to_dict

__all__ = [
    "trial_balance_view",
    "balance_sheet_view",
    "profit_and_loss_view",
    "cash_report_view",
    "summary_view",
]


def _window(window: Window) -> dict[str, Any]:
    return {"mode": window.mode.value, "start": window.start, "end": window.end, "label": window.label()}


def trial_balance_view(tb: TrialBalance) -> dict[str, Any]:
    return to_dict(
        {
            "window": _window(tb.window),
            "lines": [
                {
                    "account": x.account,
                    "name": x.name,
                    "category": x.category,
                    "opening": x.aggregate.opening,
                    "openingDebit": x.opening_debit,
                    "openingCredit": x.opening_credit,
                    "periodDebit": x.period_debit,
                    "periodCredit": x.period_credit,
                    "ending": x.ending,
                    "endingDebit": x.ending_debit,
                    "endingCredit": x.ending_credit,
                }
                for x in tb.lines
            ],
            "totals": {
                "openingDebit": tb.total_opening_debit,
                "openingCredit": tb.total_opening_credit,
                "periodDebit": tb.total_period_debit,
                "periodCredit": tb.total_period_credit,
                "endingDebit": tb.total_ending_debit,
                "endingCredit": tb.total_ending_credit,
            },
            "balanced": tb.is_balanced,
            "warnings": tb.warnings,
        }
    )


def balance_sheet_view(sheet: BalanceSheet) -> dict[str, Any]:
    return to_dict(
        {
            "window": _window(sheet.window),
            "sections": {
                section.value: [
                    {"account": x.account, "name": x.name, "amount": x.amount} for x in sheet.section(section)
                ]
                for section in BalanceSheetSection
            },
            "totalAssets": sheet.total_assets,
            "totalLiabilities": sheet.total_liabilities,
            "totalEquity": sheet.total_equity,
            "diff": sheet.diff,
            "balanced": sheet.is_balanced,
            "warnings": sheet.warnings,
        }
    )


def profit_and_loss_view(pnl: ProfitAndLoss) -> dict[str, Any]:
    return to_dict(
        {
            "window": _window(pnl.window),
            "lines": [
                {
                    "account": x.account,
                    "name": x.name,
                    "category": x.category,
                    "debit": x.debit,
                    "credit": x.credit,
                    "net": x.net,
                }
                for x in pnl.lines
            ],
            "revenue": pnl.revenue,
            "expenses": pnl.expenses,
            "netIncome": pnl.net_income,
        }
    )


def cash_report_view(cash: CashReport) -> dict[str, Any]:
    return to_dict(
        {
            "window": _window(cash.window),
            "lines": [
                {
                    "account": x.account,
                    "name": x.name,
                    "opening": x.opening,
                    "inflow": x.inflow,
                    "outflow": x.outflow,
                    "netChange": x.net_change,
                    "ending": x.ending,
                }
                for x in cash.lines
            ],
            "opening": cash.opening,
            "inflow": cash.inflow,
            "outflow": cash.outflow,
            "netChange": cash.net_change,
            "ending": cash.ending,
        }
    )


def summary_view(summary: FinancialSummary) -> dict[str, Any]:
    return to_dict(summary)
