from __future__ import annotations

import csv
import io
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

from py_ledgersync import __version__
from py_ledgersync.presentation.cli.main import cli

ROWS = [
    {"date": "2024-12-20", "account": "1100", "debit": 500, "credit": 0, "memo": "Capital", "reference": "C-1"},
    {"date": "2024-12-20", "account": "3000", "debit": 0, "credit": 500, "memo": "Capital", "reference": "C-1"},
    {"date": "2025-01-10", "account": "1000", "debit": 1000, "credit": 0, "memo": "Sale", "reference": "INV-1"},
    {"date": "2025-01-10", "account": "4000", "debit": 0, "credit": 1000, "memo": "Sale", "reference": "INV-1"},
    {"date": "2025-01-12", "account": "6000", "debit": 300, "credit": 0, "memo": "Rent", "reference": "R-1"},
    {"date": "2025-01-12", "account": "1100", "debit": 0, "credit": 300, "memo": "Rent", "reference": "R-1"},
    {"date": "2025-01-13", "account": "1000", "debit": 0, "credit": 0, "memo": "broken row"},
]


@pytest.fixture(autouse=True)
def _no_db_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("LEDGERSYNC__DATABASE_URL", raising=False)


@pytest.fixture
def rows_file(tmp_path: Path) -> Path:
    path = tmp_path / "rows.json"
    path.write_text(json.dumps({"rows": ROWS}), encoding="utf-8")
    return path


def _write(tmp_path: Path, name: str, data: Any) -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _period(rows_file: Path) -> list[str]:
    return [str(rows_file), "--start", "2025-01-01", "--end", "2025-01-31"]


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli(["version"]) == 0
    assert capsys.readouterr().out.strip() == __version__


def test_trial_balance_json(rows_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli(["report", "trial-balance", *_period(rows_file), "--format", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    lines = {x["account"]: x for x in data["lines"]}
    assert Decimal(lines["1100"]["opening"]) == Decimal("500")
    assert Decimal(lines["1100"]["periodCredit"]) == Decimal("300")
    assert Decimal(lines["1100"]["ending"]) == Decimal("200")
    assert data["balanced"] is True
    assert data["window"]["mode"] == "PERIOD"


def test_trial_balance_csv(rows_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli(["report", "trial-balance", *_period(rows_file), "-f", "csv"]) == 0
    table = list(csv.reader(io.StringIO(capsys.readouterr().out)))
    assert table[0][0] == "Account"
    assert table[-1][0] == "TOTAL"
    assert table[-1][4] == "1300,00"


def test_trial_balance_table(rows_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli(["report", "trial-balance", str(rows_file), "--as-of", "2025-01-31"]) == 0
    out = capsys.readouterr().out
    assert "Trial balance" in out
    assert "TOTAL" in out


def test_balance_sheet_csv_check_row(rows_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    args = ["report", "balance-sheet", *_period(rows_file), "--include-current-earnings", "-f", "csv"]
    assert cli(args) == 0
    table = list(csv.reader(io.StringIO(capsys.readouterr().out)))
    assert table[-1] == ["CHECK", "", "Assets - (Liabilities + Equity)", "0,00"]


def test_balance_sheet_without_earnings_warns(rows_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli(["report", "balance-sheet", *_period(rows_file), "-f", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert Decimal(data["diff"]) == Decimal("700")
    assert data["balanced"] is False
    assert data["warnings"]


def test_pnl_csv(rows_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli(["report", "pnl", *_period(rows_file), "-f", "csv"]) == 0
    table = list(csv.reader(io.StringIO(capsys.readouterr().out)))
    assert table[-1][0] == "NET INCOME"
    assert table[-1][-1] == "700,00"


def test_cash_json_and_csv_refused(rows_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli(["report", "cash", *_period(rows_file), "-f", "json", "--cash-account", "1000"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert [x["account"] for x in data["lines"]] == ["1000"]
    assert Decimal(data["ending"]) == Decimal("1000")

    assert cli(["report", "cash", *_period(rows_file), "-f", "csv"]) == 2
    assert "CSV output is not available" in capsys.readouterr().err


def test_summary_json(rows_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli(["report", "summary", *_period(rows_file), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data


def test_gl_export_skips_malformed_rows(rows_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli(["report", "gl-export", str(rows_file)]) == 0
    table = list(csv.reader(io.StringIO(capsys.readouterr().out)))
    assert table[0] == ["Date", "Account", "Description", "Debit", "Credit", "Reference", "Entry No."]
    assert len(table) == 1 + 6
    assert table[1][0] == "2024-12-20"


def test_bad_window_exit_code_2(rows_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli(["report", "pnl", str(rows_file), "--start", "2025-01-01"]) == 2
    assert "--as-of" in capsys.readouterr().err
    assert cli(["report", "pnl", str(rows_file), "--as-of", "2025-01-01", "--end", "2025-01-31"]) == 2


def test_missing_rows_file_exit_code_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli(["report", "gl-export", str(tmp_path / "nope.json")]) == 2
    assert "[ERROR]" in capsys.readouterr().err


def test_entry_validate_ok(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write(
        tmp_path,
        "entry.json",
        {"lines": [{"account": "6000", "debit": "250"}, {"account": "1100", "credit": "250"}]},
    )
    assert cli(["entry", "validate", str(path)]) == 0
    assert capsys.readouterr().out.strip() == "OK lines=2 debit=250,00 credit=250,00"

    assert cli(["entry", "validate", str(path), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["ok"] is True
    assert Decimal(data["debit"]) == Decimal(data["credit"]) == Decimal("250")


def test_entry_validate_unbalanced(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write(tmp_path, "bad.json", [{"account": "6000", "debit": "250"}, {"account": "1100", "credit": "200"}])
    assert cli(["entry", "validate", str(path)]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[ERROR]" in captured.err


def test_entry_suggest_json(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli(["entry", "suggest", "6000", "--side", "debit", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["account"] == "6000"
    assert data["side"] == "debit"
    assert list(data["groups"]) == ["primary suggestions", "also plausible"]
    assert data["groups"]["primary suggestions"][0]["code"] == "1000"


def test_seq_next_persists_between_runs(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db = f"sqlite+aiosqlite:///{tmp_path / 'seq.db'}"
    assert cli(["seq", "next", "MOV", "--date", "2025-01-10", "--db", db]) == 0
    assert cli(["seq", "next", "MOV", "--date", "2025-01-10", "--db", db]) == 0
    assert capsys.readouterr().out.split() == ["1", "2"]

    assert cli(["seq", "doc-number", "ref", "--date", "2025-01-10", "--db", db]) == 0
    assert capsys.readouterr().out.strip() == "REF-20250110-0001"


def test_seq_invalid_prefix(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db = f"sqlite+aiosqlite:///{tmp_path / 'seq.db'}"
    assert cli(["seq", "next", "9-bad", "--db", db]) == 2
    assert "Invalid sequence prefix" in capsys.readouterr().err
