"""CSV exports of the report views.

Amounts use a comma decimal separator (``1234,50``); fields containing the
delimiter or quotes are quoted by the csv writer, so the output opens as-is
in spreadsheet tools configured for a comma decimal locale.
"""
from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence

from py_ledgersync.domain.quantize import format_amount
from py_ledgersync.domain.reports import BalanceSheet, ProfitAndLoss, TrialBalance
from py_ledgersync.domain.rows import LedgerRow

__all__ = [
    "TRIAL_BALANCE_HEADER",
    "BALANCE_SHEET_HEADER",
    "GENERAL_LEDGER_HEADER",
    "PROFIT_AND_LOSS_HEADER",
    "trial_balance_csv",
    "balance_sheet_csv",
    "general_ledger_csv",
    "profit_and_loss_csv",
]

TRIAL_BALANCE_HEADER = (
    "Account",
    "Name",
    "Opening Dr",
    "Opening Cr",
    "Period Debit",
    "Period Credit",
    "Ending Dr",
    "Ending Cr",
)
BALANCE_SHEET_HEADER = ("Section", "Account", "Name", "Amount")
GENERAL_LEDGER_HEADER = ("Date", "Account", "Description", "Debit", "Credit", "Reference", "Entry No.")
PROFIT_AND_LOSS_HEADER = ("Category", "Account", "Name", "Debit", "Credit", "Net")


def _render(header: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buf.getvalue()


def trial_balance_csv(tb: TrialBalance) -> str:
    rows = [
        (
            line.account,
            line.name,
            format_amount(line.opening_debit),
            format_amount(line.opening_credit),
            format_amount(line.period_debit),
            format_amount(line.period_credit),
            format_amount(line.ending_debit),
            format_amount(line.ending_credit),
        )
        for line in tb.lines
    ]
    rows.append(
        (
            "TOTAL",
            "",
            format_amount(tb.total_opening_debit),
            format_amount(tb.total_opening_credit),
            format_amount(tb.total_period_debit),
            format_amount(tb.total_period_credit),
            format_amount(tb.total_ending_debit),
            format_amount(tb.total_ending_credit),
        )
    )
    return _render(TRIAL_BALANCE_HEADER, rows)


def balance_sheet_csv(sheet: BalanceSheet) -> str:
    """Section lines, then TOTAL rows per side and the CHECK row ``Assets - (Liabilities + Equity)``."""
    rows: list[tuple[str, str, str, str]] = [
        (line.section.value, line.account, line.name, format_amount(line.amount)) for line in sheet.lines
    ]
    rows.append(("TOTAL", "", "Assets", format_amount(sheet.total_assets)))
    rows.append(("TOTAL", "", "Liabilities", format_amount(sheet.total_liabilities)))
    rows.append(("TOTAL", "", "Equity", format_amount(sheet.total_equity)))
    rows.append(("CHECK", "", "Assets - (Liabilities + Equity)", format_amount(sheet.diff)))
    return _render(BALANCE_SHEET_HEADER, rows)


def general_ledger_csv(rows: Iterable[LedgerRow]) -> str:
    """All rows ordered by date then account, one line each."""
    ordered = sorted(rows, key=lambda r: (r.date, r.account))
    return _render(
        GENERAL_LEDGER_HEADER,
        (
            (
                r.date.isoformat(),
                r.account,
                r.memo,
                format_amount(r.debit),
                format_amount(r.credit),
                r.reference,
                r.entry_number,
            )
            for r in ordered
        ),
    )


def profit_and_loss_csv(pnl: ProfitAndLoss) -> str:
    rows = [
        (
            line.category.value,
            line.account,
            line.name,
            format_amount(line.debit),
            format_amount(line.credit),
            format_amount(line.net),
        )
        for line in pnl.lines
    ]
    rows.append(("NET INCOME", "", "", "", "", format_amount(pnl.net_income)))
    return _render(PROFIT_AND_LOSS_HEADER, rows)
