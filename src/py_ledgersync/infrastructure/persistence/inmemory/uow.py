from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from py_ledgersync.application.ports import AsyncUnitOfWork, SequenceStore, SyncKeyStore
from py_ledgersync.infrastructure.persistence.inmemory.stores import InMemorySequenceStore, InMemorySyncKeyStore


@dataclass
class InMemoryUnitOfWork(AsyncUnitOfWork):  # type: ignore[misc]
    sequences_store: InMemorySequenceStore = field(default_factory=InMemorySequenceStore)
    sync_keys_store: InMemorySyncKeyStore = field(default_factory=InMemorySyncKeyStore)

    @property
    def sequences(self) -> SequenceStore:  # noqa: D401
        return self.sequences_store

    @property
    def sync_keys(self) -> SyncKeyStore:  # noqa: D401
        return self.sync_keys_store

    async def __aenter__(self) -> InMemoryUnitOfWork:
        return self

    async def __aexit__(self, exc_type: Any, exc: BaseException | None, tb: Any) -> None:
        return None

    async def commit(self) -> None:  # noqa: D401
        return None

    async def rollback(self) -> None:  # noqa: D401
        return None
