from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from py_ledgersync.application.dto.models import StockMovePayload
from py_ledgersync.infrastructure.persistence.inmemory import InMemorySequenceStore, InMemorySyncKeyStore


class FakeInventoryService:
    """Records created/posted movements; can fail the next N creates or every post."""

    def __init__(self, *, fail_create: int = 0, fail_post: bool = False) -> None:
        self.created: list[StockMovePayload] = []
        self.posted: list[tuple[str, str]] = []
        self.fail_create = fail_create
        self.fail_post = fail_post

    async def create_movement(self, payload: StockMovePayload) -> Mapping[str, Any]:
        if self.fail_create:
            self.fail_create -= 1
            raise RuntimeError("inventory service unavailable")
        self.created.append(payload)
        return {"_id": f"mv-{len(self.created)}"}

    async def post_movement(self, movement_id: str, who: str) -> None:
        if self.fail_post:
            raise RuntimeError("post rejected")
        self.posted.append((movement_id, who))


class FakeDocumentResolver:
    def __init__(self, documents: Mapping[str, Any] | None = None, *, error: Exception | None = None) -> None:
        self.documents = dict(documents or {})
        self.error = error
        self.calls: list[str] = []

    async def get_document_by_reference(self, reference: str) -> Any:
        self.calls.append(reference)
        if self.error is not None:
            raise self.error
        return self.documents.get(reference)


@pytest.fixture
def inventory() -> FakeInventoryService:
    return FakeInventoryService()


@pytest.fixture
def sync_keys() -> InMemorySyncKeyStore:
    return InMemorySyncKeyStore()


@pytest.fixture
def sequence_store() -> InMemorySequenceStore:
    return InMemorySequenceStore()


@pytest.fixture
def make_inventory():
    return FakeInventoryService


@pytest.fixture
def make_resolver():
    return FakeDocumentResolver
