from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from py_ledgersync.application.dto.models import CreatedMovementDTO, SourceDocumentDTO, StockMovePayload

__all__ = [
    "Clock",
    "SequenceStore",
    "SyncKeyStore",
    "InventoryMovementService",
    "DocumentResolver",
    "AsyncUnitOfWork",
]


@runtime_checkable
class Clock(Protocol):
    """Clock abstraction to decouple time in tests.

    Implementations typically return timezone-aware UTC datetimes.
    """

    def now(self) -> datetime: ...


@runtime_checkable
class SequenceStore(Protocol):
    """Persistent key -> value counter store.

    Values are strings: plain integers for counters, full numbers for display
    numbers that are issued once per day.
    """

    async def get(self, key: str) -> str | None: ...
    async def set(self, key: str, value: str) -> None: ...


@runtime_checkable
class SyncKeyStore(Protocol):
    """Append-only set of idempotency keys of applied side effects.

    ``add`` of an already recorded key is a no-op.
    """

    async def contains(self, key: str) -> bool: ...
    async def add(self, key: str) -> None: ...


@runtime_checkable
class InventoryMovementService(Protocol):
    """Inventory module: creates a movement, then optionally posts it.

    ``create_movement`` may return a CreatedMovementDTO or a mapping with ``id``/``_id``.
    """

    async def create_movement(self, payload: StockMovePayload) -> CreatedMovementDTO | Mapping[str, Any]: ...
    async def post_movement(self, movement_id: str, who: str) -> None: ...


@runtime_checkable
class DocumentResolver(Protocol):
    """Looks up the sales/purchase document a reference number points to."""

    async def get_document_by_reference(self, reference: str) -> SourceDocumentDTO | Mapping[str, Any] | None: ...


@runtime_checkable
class AsyncUnitOfWork(Protocol):
    """Transactional boundary exposing the persistent stores."""

    @property
    def sequences(self) -> SequenceStore: ...
    @property
    def sync_keys(self) -> SyncKeyStore: ...

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
