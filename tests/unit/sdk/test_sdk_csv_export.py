from __future__ import annotations

import csv
import io
from decimal import Decimal

from py_ledgersync.domain.accounts import default_chart
from py_ledgersync.domain.periods import Window
from py_ledgersync.domain.reports import build_balance_sheet, build_profit_and_loss, build_trial_balance
from py_ledgersync.domain.rows import LedgerRow
from py_ledgersync.sdk.reports import (
    BALANCE_SHEET_HEADER,
    GENERAL_LEDGER_HEADER,
    TRIAL_BALANCE_HEADER,
    balance_sheet_csv,
    general_ledger_csv,
    profit_and_loss_csv,
    trial_balance_csv,
)

JANUARY = Window.period("2025-01-01", "2025-01-31")


def _row(day: str, account: str, debit: str = "0", credit: str = "0", memo: str = "", ref: str = "") -> LedgerRow:
    return LedgerRow(date=day, account=account, debit=Decimal(debit), credit=Decimal(credit), memo=memo, reference=ref)  # type: ignore[arg-type]


ROWS = [
    _row("2025-01-10", "4000", credit="1234.5", memo="Sale", ref="INV-1"),
    _row("2025-01-10", "1000", debit="1234.5", memo="Sale", ref="INV-1"),
    _row("2025-01-05", "6000", debit="200", memo="Rent, January", ref="R-1"),
    _row("2025-01-05", "1100", credit="200", memo="Rent, January", ref="R-1"),
]


def _parse(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_trial_balance_csv_header_amounts_and_total() -> None:
    table = _parse(trial_balance_csv(build_trial_balance(ROWS, JANUARY, default_chart())))
    assert tuple(table[0]) == TRIAL_BALANCE_HEADER
    by_account = {r[0]: r for r in table[1:]}
    assert by_account["1000"][1] == "Cash"
    assert by_account["1000"][4] == "1234,50"
    assert by_account["4000"][7] == "1234,50"
    total = table[-1]
    assert total[0] == "TOTAL"
    assert total[4] == total[5] == "1434,50"
    assert total[6] == total[7]


def test_balance_sheet_csv_has_totals_and_check_row() -> None:
    sheet = build_balance_sheet(ROWS, JANUARY, default_chart(), include_current_earnings=True)
    table = _parse(balance_sheet_csv(sheet))
    assert tuple(table[0]) == BALANCE_SHEET_HEADER
    labels = [(r[0], r[2]) for r in table if r[0] in ("TOTAL", "CHECK")]
    assert labels == [
        ("TOTAL", "Assets"),
        ("TOTAL", "Liabilities"),
        ("TOTAL", "Equity"),
        ("CHECK", "Assets - (Liabilities + Equity)"),
    ]
    assert table[-1][3] == "0,00"


def test_general_ledger_csv_is_sorted_and_quotes_commas() -> None:
    text = general_ledger_csv(ROWS)
    table = _parse(text)
    assert tuple(table[0]) == GENERAL_LEDGER_HEADER
    assert [(r[0], r[1]) for r in table[1:]] == [
        ("2025-01-05", "1100"),
        ("2025-01-05", "6000"),
        ("2025-01-10", "1000"),
        ("2025-01-10", "4000"),
    ]
    assert table[1][2] == "Rent, January"
    assert '"Rent, January"' in text
    assert '"200,00"' in text


def test_profit_and_loss_csv_net_income_row() -> None:
    table = _parse(profit_and_loss_csv(build_profit_and_loss(ROWS, JANUARY, default_chart())))
    assert table[-1][0] == "NET INCOME"
    assert table[-1][-1] == "1034,50"
