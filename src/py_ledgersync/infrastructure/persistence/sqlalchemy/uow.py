from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from py_ledgersync.infrastructure.config.settings import get_settings
from py_ledgersync.infrastructure.persistence.sqlalchemy.async_engine import (
    get_async_engine,
    get_async_session_factory,
)
from py_ledgersync.infrastructure.persistence.sqlalchemy.stores import (
    AsyncSqlAlchemySequenceStore,
    AsyncSqlAlchemySyncKeyStore,
)

logger = logging.getLogger(__name__)

# serialization failure, deadlock detected
_TRANSIENT_SQLSTATES = frozenset({"40001", "40P01"})


@dataclass(frozen=True, slots=True)
class CommitRetryPolicy:
    attempts: int = 3
    backoff_ms: int = 50
    max_backoff_ms: int = 1000

    @classmethod
    def from_settings(cls) -> CommitRetryPolicy:
        s = get_settings()
        backoff = max(1, int(s.db_retry_backoff_ms))
        return cls(
            attempts=max(1, int(s.db_retry_attempts)),
            backoff_ms=backoff,
            max_backoff_ms=max(backoff, int(s.db_retry_max_backoff_ms)),
        )

    def delay(self, attempt: int) -> float:
        """Seconds to wait after failed ``attempt`` (1-based), doubling up to the cap."""
        return min(self.max_backoff_ms, self.backoff_ms * (2 ** (attempt - 1))) / 1000.0


def is_transient(exc: BaseException) -> bool:
    if getattr(exc, "connection_invalidated", False):
        return True
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code is not None and str(code) in _TRANSIENT_SQLSTATES


class AsyncSqlAlchemyUnitOfWork:
    """Transaction boundary around the counter and sync-key stores.

    ``async with uow:`` opens a session and a transaction. A clean exit
    commits (retrying transient failures per ``CommitRetryPolicy``), an
    exception rolls back, and the session is closed either way. The same
    instance may be entered again after it has exited, never while active.

    Sync keys must only become visible together with the counters issued in
    the same block, so both stores share the one session.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        echo: bool = False,
        retry: CommitRetryPolicy | None = None,
    ) -> None:
        self._url = url or get_settings().database_url
        self._engine: AsyncEngine = get_async_engine(self._url, echo=echo)
        self._session_factory = get_async_session_factory(self._engine)
        self._retry = retry or CommitRetryPolicy.from_settings()
        self._session: AsyncSession | None = None
        self._sequences: AsyncSqlAlchemySequenceStore | None = None
        self._sync_keys: AsyncSqlAlchemySyncKeyStore | None = None

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of work is not active; use 'async with'")
        return self._session

    @property
    def sequences(self) -> AsyncSqlAlchemySequenceStore:
        if self._sequences is None:
            self._sequences = AsyncSqlAlchemySequenceStore(self.session)
        return self._sequences

    @property
    def sync_keys(self) -> AsyncSqlAlchemySyncKeyStore:
        if self._sync_keys is None:
            self._sync_keys = AsyncSqlAlchemySyncKeyStore(self.session)
        return self._sync_keys

    async def __aenter__(self) -> AsyncSqlAlchemyUnitOfWork:
        if self._session is not None:
            raise RuntimeError("Unit of work is already active")
        self._session = self._session_factory()
        await self._session.begin()
        logger.debug("uow: transaction opened on %s", self._engine.url.render_as_string(hide_password=True))
        return self

    async def __aexit__(self, exc_type: Any, exc: BaseException | None, tb: Any) -> None:
        session = self._session
        if session is None:
            return None
        try:
            if exc is not None:
                logger.debug("uow: rollback after %s", type(exc).__name__)
                await session.rollback()
            else:
                try:
                    await self.commit()
                except Exception:
                    logger.exception("uow: commit on exit failed")
                    await session.rollback()
                    raise
        finally:
            await session.close()
            self._session = None
            self._sequences = None
            self._sync_keys = None

    async def commit(self) -> None:
        session = self.session
        for attempt in range(1, self._retry.attempts + 1):
            try:
                await session.commit()
            except DBAPIError as exc:
                if attempt == self._retry.attempts or not is_transient(exc):
                    raise
                await session.rollback()
                delay = self._retry.delay(attempt)
                logger.warning(
                    "uow: transient commit failure %s (attempt %s/%s), retrying in %.3fs",
                    type(exc).__name__,
                    attempt,
                    self._retry.attempts,
                    delay,
                )
                await asyncio.sleep(delay)
            else:
                return

    async def rollback(self) -> None:
        await self.session.rollback()
