"""Engine and session factory for the counter and sync-key tables.

Counters and sync keys are tiny key tables, so the engine setup mostly deals
with driver selection:

- ``postgresql://`` and other sync Postgres URLs run on ``asyncpg``
- ``sqlite://`` / ``sqlite+pysqlite://`` run on ``aiosqlite``
- an in-memory SQLite database is pinned to one shared connection, otherwise
  the schema created on one connection is invisible to the next session
"""
from __future__ import annotations

from typing import Any

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

__all__ = [
    "normalize_async_url",
    "get_async_engine",
    "get_async_session_factory",
]

_ASYNC_DRIVERS = {
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def _to_async(url: URL) -> URL:
    backend = url.get_backend_name()
    target = _ASYNC_DRIVERS.get(backend)
    if target is None or url.drivername == target:
        return url
    return url.set(drivername=target)


def normalize_async_url(url: str) -> str:
    """Return ``url`` rewritten to its async driver; other backends pass through.

    Raises ValueError for an empty URL.
    """
    if not url or not url.strip():
        raise ValueError("Database URL must be a non-empty string")
    return _to_async(make_url(url)).render_as_string(hide_password=False)


def _is_memory_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def get_async_engine(url: str, *, echo: bool = False, engine_kwargs: dict[str, Any] | None = None) -> AsyncEngine:
    sa_url = make_url(normalize_async_url(url))
    kwargs: dict[str, Any] = {"echo": echo}
    if _is_memory_sqlite(sa_url):
        kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
    else:
        kwargs["pool_pre_ping"] = True
    kwargs.update(engine_kwargs or {})
    return create_async_engine(sa_url, **kwargs)


def get_async_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Sessions keep loaded rows usable after commit; schema is created by the caller."""
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
