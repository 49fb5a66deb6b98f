"""Sequence commands backed by the SQLAlchemy Unit of Work.

Counters persist in ``ledger_counters`` so repeated invocations against the
same database continue the per-day numbering.
"""
from __future__ import annotations

from datetime import date

from typer import Argument, Option, Typer

from py_ledgersync.application.use_cases_async.sequences import AsyncSequenceGenerator
from py_ledgersync.domain.rows import parse_date

from .infra import run_ephemeral_async_uow

seq = Typer(help="Document and reference numbering")

_PREFIX = Argument(..., help="Sequence prefix, e.g. REF, MOV, INV")
_DATE = Option(None, "--date", help="Calendar day (YYYY-MM-DD); today when omitted")
_DB = Option(None, "--db", help="Database URL (defaults to DATABASE_URL or ./ledgersync_cli.db)")


def _day(value: str | None) -> date:
    return parse_date(value) if value else date.today()


@seq.command("next")
def next_cmd(prefix: str = _PREFIX, day: str | None = _DATE, db: str | None = _DB) -> None:
    """Print the next integer for (PREFIX, day), starting at 1."""
    target = _day(day)

    async def _logic(uow):
        return await AsyncSequenceGenerator(uow.sequences).next(prefix, target)

    print(run_ephemeral_async_uow(_logic, db))


@seq.command("doc-number")
def doc_number_cmd(prefix: str = _PREFIX, day: str | None = _DATE, db: str | None = _DB) -> None:
    """Print ``PREFIX-YYYYMMDD-NNNN`` using the same counter as ``next``."""
    target = _day(day)

    async def _logic(uow):
        return await AsyncSequenceGenerator(uow.sequences).doc_number(prefix, target)

    print(run_ephemeral_async_uow(_logic, db))
