from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio

from py_ledgersync.infrastructure.persistence.sqlalchemy.models import Base
from py_ledgersync.infrastructure.persistence.sqlalchemy.uow import AsyncSqlAlchemyUnitOfWork


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """File-backed database so commits are visible to a second unit of work."""
    return f"sqlite+aiosqlite:///{tmp_path / 'ledgersync_test.db'}"


@pytest_asyncio.fixture
async def async_uow(sqlite_url: str) -> AsyncIterator[AsyncSqlAlchemyUnitOfWork]:
    """Active unit of work over a fresh schema; committed on clean teardown."""
    uow = AsyncSqlAlchemyUnitOfWork(url=sqlite_url)
    async with uow.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        async with uow:
            yield uow
    finally:
        await uow.engine.dispose()
