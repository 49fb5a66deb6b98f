"""Shared CLI infrastructure helpers.

Centralizes ephemeral async UnitOfWork creation, schema initialization and
input file loading so command modules stay thin.

- Schema creation (create_all) is idempotent and runs on every invocation.
- The database URL comes from ``--db``, then DATABASE_URL, then a local SQLite file.
- Bad input files raise ValidationError (exit code 2 in main.cli).
"""

from __future__ import annotations

import asyncio
import json
import os
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, Protocol, TypeVar

from py_ledgersync.domain.accounts import ChartOfAccounts, default_chart
from py_ledgersync.domain.errors import ValidationError
from py_ledgersync.domain.periods import Window
from py_ledgersync.domain.rows import LedgerRow, RowOrigin, rows_from_wire
from py_ledgersync.infrastructure.persistence.sqlalchemy.models import Base
from py_ledgersync.infrastructure.persistence.sqlalchemy.uow import AsyncSqlAlchemyUnitOfWork

__all__ = [
    "run_ephemeral_async_uow",
    "load_json",
    "load_rows",
    "load_chart",
    "resolve_window",
]

_DEFAULT_DB_URL_ASYNC = "sqlite+aiosqlite:///./ledgersync_cli.db"


class AsyncUowProtocol(Protocol):
    async def __aenter__(self) -> AsyncUowProtocol:
        ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: Any | None,
    ) -> None:
        ...


def _resolve_url(url: str | None) -> str:
    return url or os.getenv("LEDGERSYNC__DATABASE_URL") or os.getenv("DATABASE_URL") or _DEFAULT_DB_URL_ASYNC


async def _prep_uow(url: str) -> AsyncSqlAlchemyUnitOfWork:
    uow = AsyncSqlAlchemyUnitOfWork(url)
    async with uow.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return uow


UowT = TypeVar("UowT", bound=AsyncUowProtocol)
T = TypeVar("T")


def run_ephemeral_async_uow(
    fn: Callable[[UowT], Awaitable[T]],
    url: str | None = None,
) -> T:
    """Run an async callable with a freshly prepared AsyncSqlAlchemyUnitOfWork.

    Steps:
    1. Resolve URL (option, env or default file).
    2. Create UoW and ensure schema (idempotent create_all).
    3. Enter transactional context, invoke fn(uow), auto-commit on success.
    4. Dispose the engine so the event loop closes cleanly.
    """

    async def _driver() -> T:
        uow = await _prep_uow(_resolve_url(url))
        try:
            async with uow:
                return await fn(uow)  # type: ignore[arg-type]
        finally:
            await uow.engine.dispose()

    return asyncio.run(_driver())


def load_json(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValidationError(f"Cannot read {path}: {exc.strerror or exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON in {path}: {exc.msg} (line {exc.lineno})") from exc


def load_rows(path: Path) -> list[LedgerRow]:
    """Rows file: a JSON list of row objects or ``{"rows": [...]}``. Malformed rows are skipped."""
    data = load_json(path)
    if isinstance(data, dict):
        data = data.get("rows")
    if not isinstance(data, list):
        raise ValidationError(f"{path}: expected a list of ledger rows")
    return rows_from_wire([x for x in data if isinstance(x, dict)], origin=RowOrigin.SERVER)


def load_chart(path: Path | None) -> ChartOfAccounts:
    """Chart file: a JSON list of ``{code, name, category?}`` or ``{"accounts": [...]}``; default chart otherwise."""
    if path is None:
        return default_chart()
    data = load_json(path)
    if isinstance(data, dict):
        data = data.get("accounts")
    if not isinstance(data, list):
        raise ValidationError(f"{path}: expected a list of accounts")
    return ChartOfAccounts.from_mappings(x for x in data if isinstance(x, dict))


def resolve_window(start: str | None, end: str | None, as_of: str | None) -> Window:
    if as_of:
        if start or end:
            raise ValidationError("Use either --as-of or --start/--end, not both")
        return Window.as_of(as_of)
    if not (start and end):
        raise ValidationError("Provide --as-of or both --start and --end")
    return Window.period(start, end)
