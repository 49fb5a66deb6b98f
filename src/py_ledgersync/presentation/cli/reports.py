"""Report commands over a rows file.

Each command loads ledger rows from JSON, builds the view for the requested
window and prints it as a rich table, JSON or CSV. CSV amounts use a comma
decimal separator; JSON amounts are Decimal strings.
"""
from __future__ import annotations

from enum import Enum
from pathlib import Path

from rich.console import Console
from rich.table import Table
from typer import Argument, Option, Typer

from py_ledgersync.domain.errors import ValidationError
from py_ledgersync.domain.quantize import format_amount
from py_ledgersync.domain.reports import (
    BalanceSheetSection,
    build_balance_sheet,
    build_cash_report,
    build_profit_and_loss,
    build_summary,
    build_trial_balance,
)
from py_ledgersync.sdk.json import to_json
from py_ledgersync.sdk.reports import (
    balance_sheet_csv,
    balance_sheet_view,
    cash_report_view,
    general_ledger_csv,
    profit_and_loss_csv,
    profit_and_loss_view,
    summary_view,
    trial_balance_csv,
    trial_balance_view,
)

from .infra import load_chart, load_rows, resolve_window

report = Typer(help="Reports over a ledger rows file")
console = Console()


class OutputFormat(str, Enum):
    table = "table"
    json = "json"
    csv = "csv"


_ROWS = Argument(..., help="JSON file with ledger rows")
_START = Option(None, "--start", help="Period start (YYYY-MM-DD)")
_END = Option(None, "--end", help="Period end (YYYY-MM-DD)")
_AS_OF = Option(None, "--as-of", help="Single day; balances cumulative up to and including it")
_CHART = Option(None, "--chart", help="JSON chart of accounts (default chart when omitted)")
_FORMAT = Option(OutputFormat.table, "--format", "-f", help="table, json or csv")


def _emit_csv(text: str) -> None:
    print(text, end="")


@report.command("trial-balance")
def trial_balance_cmd(
    rows_file: Path = _ROWS,
    start: str | None = _START,
    end: str | None = _END,
    as_of: str | None = _AS_OF,
    account: str | None = Option(None, "--account", help="Restrict to one account"),  # noqa: B008
    chart_file: Path | None = _CHART,
    fmt: OutputFormat = _FORMAT,
) -> None:
    """Opening, period movement and ending balance per account."""
    window = resolve_window(start, end, as_of)
    tb = build_trial_balance(load_rows(rows_file), window, load_chart(chart_file), account=account)
    if fmt is OutputFormat.json:
        print(to_json(trial_balance_view(tb)))
        return
    if fmt is OutputFormat.csv:
        _emit_csv(trial_balance_csv(tb))
        return
    table = Table(title=f"Trial balance {window.label()}")
    for col in ("Account", "Name", "Opening Dr", "Opening Cr", "Period Debit", "Period Credit", "Ending Dr", "Ending Cr"):
        table.add_column(col, justify="left" if col in {"Account", "Name"} else "right")
    for line in tb.lines:
        table.add_row(
            line.account,
            line.name,
            format_amount(line.opening_debit),
            format_amount(line.opening_credit),
            format_amount(line.period_debit),
            format_amount(line.period_credit),
            format_amount(line.ending_debit),
            format_amount(line.ending_credit),
        )
    table.add_row(
        "TOTAL",
        "",
        format_amount(tb.total_opening_debit),
        format_amount(tb.total_opening_credit),
        format_amount(tb.total_period_debit),
        format_amount(tb.total_period_credit),
        format_amount(tb.total_ending_debit),
        format_amount(tb.total_ending_credit),
        style="bold",
    )
    console.print(table)
    for warning in tb.warnings:
        console.print(f"[yellow]{warning}[/yellow]")


@report.command("balance-sheet")
def balance_sheet_cmd(
    rows_file: Path = _ROWS,
    start: str | None = _START,
    end: str | None = _END,
    as_of: str | None = _AS_OF,
    include_current_earnings: bool = Option(  # noqa: B008
        False, "--include-current-earnings", help="Add cumulative net income as an equity line"
    ),
    chart_file: Path | None = _CHART,
    fmt: OutputFormat = _FORMAT,
) -> None:
    """Balances at the end of the window grouped into sections, with the Assets - (Liabilities + Equity) check."""
    window = resolve_window(start, end, as_of)
    sheet = build_balance_sheet(
        load_rows(rows_file), window, load_chart(chart_file), include_current_earnings=include_current_earnings
    )
    if fmt is OutputFormat.json:
        print(to_json(balance_sheet_view(sheet)))
        return
    if fmt is OutputFormat.csv:
        _emit_csv(balance_sheet_csv(sheet))
        return
    table = Table(title=f"Balance sheet {window.label()}")
    table.add_column("Section")
    table.add_column("Account")
    table.add_column("Name")
    table.add_column("Amount", justify="right")
    for section in BalanceSheetSection:
        for line in sheet.section(section):
            table.add_row(section.value, line.account, line.name, format_amount(line.amount))
    table.add_row("TOTAL", "", "Assets", format_amount(sheet.total_assets), style="bold")
    table.add_row("TOTAL", "", "Liabilities", format_amount(sheet.total_liabilities), style="bold")
    table.add_row("TOTAL", "", "Equity", format_amount(sheet.total_equity), style="bold")
    table.add_row("CHECK", "", "Assets - (Liabilities + Equity)", format_amount(sheet.diff), style="bold")
    console.print(table)
    for warning in sheet.warnings:
        console.print(f"[yellow]{warning}[/yellow]")


@report.command("pnl")
def pnl_cmd(
    rows_file: Path = _ROWS,
    start: str | None = _START,
    end: str | None = _END,
    as_of: str | None = _AS_OF,
    chart_file: Path | None = _CHART,
    fmt: OutputFormat = _FORMAT,
) -> None:
    """Revenue and expense activity with net income."""
    window = resolve_window(start, end, as_of)
    pnl = build_profit_and_loss(load_rows(rows_file), window, load_chart(chart_file))
    if fmt is OutputFormat.json:
        print(to_json(profit_and_loss_view(pnl)))
        return
    if fmt is OutputFormat.csv:
        _emit_csv(profit_and_loss_csv(pnl))
        return
    table = Table(title=f"Profit and loss {window.label()}")
    for col in ("Category", "Account", "Name", "Debit", "Credit", "Net"):
        table.add_column(col, justify="right" if col in {"Debit", "Credit", "Net"} else "left")
    for line in pnl.lines:
        table.add_row(
            line.category.value,
            line.account,
            line.name,
            format_amount(line.debit),
            format_amount(line.credit),
            format_amount(line.net),
        )
    table.add_row("NET INCOME", "", "", "", "", format_amount(pnl.net_income), style="bold")
    console.print(table)


@report.command("cash")
def cash_cmd(
    rows_file: Path = _ROWS,
    start: str | None = _START,
    end: str | None = _END,
    as_of: str | None = _AS_OF,
    cash_account: list[str] = Option([], "--cash-account", help="Cash account code (repeatable)"),  # noqa: B008
    chart_file: Path | None = _CHART,
    fmt: OutputFormat = _FORMAT,
) -> None:
    """Opening, inflow, outflow and ending balance of the cash accounts."""
    if fmt is OutputFormat.csv:
        raise ValidationError("CSV output is not available for the cash report")
    window = resolve_window(start, end, as_of)
    kwargs = {"cash_accounts": cash_account} if cash_account else {}
    cash = build_cash_report(load_rows(rows_file), window, load_chart(chart_file), **kwargs)
    if fmt is OutputFormat.json:
        print(to_json(cash_report_view(cash)))
        return
    table = Table(title=f"Cash {window.label()}")
    table.add_column("Account")
    table.add_column("Name")
    for col in ("Opening", "Inflow", "Outflow", "Net change", "Ending"):
        table.add_column(col, justify="right")
    for line in cash.lines:
        table.add_row(
            line.account,
            line.name,
            format_amount(line.opening),
            format_amount(line.inflow),
            format_amount(line.outflow),
            format_amount(line.net_change),
            format_amount(line.ending),
        )
    table.add_row(
        "TOTAL",
        "",
        format_amount(cash.opening),
        format_amount(cash.inflow),
        format_amount(cash.outflow),
        format_amount(cash.net_change),
        format_amount(cash.ending),
        style="bold",
    )
    console.print(table)


@report.command("summary")
def summary_cmd(
    rows_file: Path = _ROWS,
    start: str | None = _START,
    end: str | None = _END,
    as_of: str | None = _AS_OF,
    chart_file: Path | None = _CHART,
    json_output: bool = Option(False, "--json", help="Output JSON"),  # noqa: B008
) -> None:
    """Key figures and ratios (current ratio, debt to equity, cash coverage)."""
    window = resolve_window(start, end, as_of)
    rows = load_rows(rows_file)
    chart = load_chart(chart_file)
    summary = build_summary(
        build_profit_and_loss(rows, window, chart),
        build_balance_sheet(rows, window, chart),
        build_cash_report(rows, window, chart),
    )
    data = summary_view(summary)
    if json_output:
        print(to_json(data))
        return
    table = Table(title=f"Summary {window.label()}")
    table.add_column("Figure")
    table.add_column("Value", justify="right")
    for key, value in data.items():
        table.add_row(key, "-" if value is None else str(value))
    console.print(table)


@report.command("gl-export")
def gl_export_cmd(rows_file: Path = _ROWS) -> None:
    """General ledger CSV: Date, Account, Description, Debit, Credit, Reference, Entry No."""
    _emit_csv(general_ledger_csv(load_rows(rows_file)))
