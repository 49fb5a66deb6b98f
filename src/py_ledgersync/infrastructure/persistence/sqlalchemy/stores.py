"""Asynchronous SQLAlchemy stores for sequence counters and sync keys.

Both stores operate inside the session of the enclosing Unit of Work and
flush after every write; committing is the Unit of Work's job.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from py_ledgersync.infrastructure.persistence.sqlalchemy.models import CounterORM, SyncRecordORM


class AsyncSqlAlchemySequenceStore:
    """Key -> value counter store backed by ``ledger_counters``."""

    def __init__(self, session: AsyncSession) -> None:
        """Bind store to an AsyncSession within a UoW transaction."""
        self.session = session

    async def get(self, key: str) -> str | None:
        res = await self.session.execute(select(CounterORM.value).where(CounterORM.key == key))
        return res.scalar_one_or_none()

    async def set(self, key: str, value: str) -> None:
        obj = await self.session.get(CounterORM, key)
        if obj is None:
            self.session.add(CounterORM(key=key, value=value))
        else:
            obj.value = value
        await self.session.flush()

    async def list_all(self) -> dict[str, str]:
        res = await self.session.execute(select(CounterORM.key, CounterORM.value).order_by(CounterORM.key))
        return {k: v for k, v in res.all()}


class AsyncSqlAlchemySyncKeyStore:
    """Append-only key set backed by ``sync_records``.

    ``add`` of a known key is a no-op.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Bind store to an AsyncSession within a UoW transaction."""
        self.session = session

    async def contains(self, key: str) -> bool:
        res = await self.session.execute(select(SyncRecordORM.key).where(SyncRecordORM.key == key))
        return res.scalar_one_or_none() is not None

    async def add(self, key: str) -> None:
        if await self.contains(key):
            return None
        self.session.add(SyncRecordORM(key=key))
        await self.session.flush()

    async def count(self) -> int:
        res = await self.session.execute(select(func.count()).select_from(SyncRecordORM))
        return int(res.scalar_one())
