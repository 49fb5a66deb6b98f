"""Journal entry commands: balance validation and counter-account suggestions."""
from __future__ import annotations

from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table
from typer import Argument, Option, Typer

from py_ledgersync.domain.accounts import EntrySide
from py_ledgersync.domain.advisor import CounterAccountAdvisor
from py_ledgersync.domain.errors import ValidationError
from py_ledgersync.domain.ledger import DoubleEntryValidator
from py_ledgersync.domain.quantize import format_amount
from py_ledgersync.sdk.json import to_json

from .infra import load_chart, load_json

entry = Typer(help="Journal entry helpers")
console = Console()


def _entry_parts(data: Any) -> tuple[list[dict[str, Any]], Any, str | None]:
    """Accept a bare list of lines or an entry object ``{lines, fxRate?, currency?}``."""
    if isinstance(data, list):
        return [x for x in data if isinstance(x, dict)], None, None
    if isinstance(data, dict):
        lines = data.get("lines")
        if not isinstance(lines, list):
            raise ValidationError("Entry requires a 'lines' list")
        rate = data.get("fxRate", data.get("exchangeRate"))
        currency = data.get("currency")
        return [x for x in lines if isinstance(x, dict)], rate, (str(currency) if currency else None)
    raise ValidationError("Entry file must hold a JSON object or a list of lines")


@entry.command("validate")
def validate_cmd(
    entry_file: Path = Argument(..., help="JSON file with the entry or its lines"),  # noqa: B008
    json_output: bool = Option(False, "--json", help="Output JSON totals"),  # noqa: B008
) -> None:
    """Check that the entry balances; exit code 2 with the reason when it does not."""
    lines, rate, currency = _entry_parts(load_json(entry_file))
    result = DoubleEntryValidator().ensure_valid(lines, entry_rate=rate, currency=currency)
    totals = result.totals
    if totals is None:  # pragma: no cover
        raise ValidationError("Entry could not be totalled")
    if json_output:
        print(
            to_json(
                {
                    "ok": True,
                    "debit": totals.debit,
                    "credit": totals.credit,
                    "baseDebit": totals.base_debit,
                    "baseCredit": totals.base_credit,
                    "lines": len(result.lines),
                }
            )
        )
        return
    print(f"OK lines={len(result.lines)} debit={format_amount(totals.debit)} credit={format_amount(totals.credit)}")


@entry.command("suggest")
def suggest_cmd(
    account: str = Argument(..., help="Account the counter line is for"),  # noqa: B008
    side: str = Option(..., "--side", help="Side of ACCOUNT: debit or credit"),  # noqa: B008
    chart_file: Path | None = Option(None, "--chart", help="JSON chart of accounts"),  # noqa: B008
    json_output: bool = Option(False, "--json", help="Output JSON"),  # noqa: B008
) -> None:
    """Counter-account suggestions grouped into primary and also plausible."""
    advice = CounterAccountAdvisor(load_chart(chart_file)).advise(account, EntrySide.parse(side))
    if json_output:
        print(
            to_json(
                {
                    "account": advice.account,
                    "side": advice.side,
                    "category": advice.category,
                    "permitted": advice.permitted,
                    "groups": {
                        name: [
                            {"code": s.account.code, "name": s.account.name, "category": s.category, "score": s.score}
                            for s in group
                        ]
                        for name, group in advice.groups.items()
                    },
                }
            )
        )
        return
    table = Table(title=f"Counter accounts for {advice.account} ({advice.side.value}, {advice.category.value})")
    table.add_column("Group")
    table.add_column("Account")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    for name, group in advice.groups.items():
        for s in group:
            table.add_row(name, s.account.code, s.account.name, s.category.value, str(s.score))
    console.print(table)
