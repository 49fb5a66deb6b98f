from __future__ import annotations

import asyncio
from datetime import date

import pytest

from py_ledgersync.application.use_cases_async import AsyncSequenceGenerator, strip_unique_tail
from py_ledgersync.domain.errors import ValidationError
from py_ledgersync.infrastructure.persistence.inmemory import InMemorySequenceStore, InMemoryUnitOfWork

DAY = date(2025, 1, 10)


@pytest.mark.asyncio
async def test_counter_per_prefix_and_day(sequence_store) -> None:
    gen = AsyncSequenceGenerator(sequence_store)
    assert await gen.next("REF", DAY) == 1
    assert await gen.next("ref", DAY) == 2
    assert await gen.next("REF", date(2025, 1, 11)) == 1
    assert await gen.next("MOV", DAY) == 1
    assert sequence_store.snapshot()["seq:REF:20250110"] == "2"


@pytest.mark.asyncio
async def test_document_numbers(sequence_store) -> None:
    gen = AsyncSequenceGenerator(sequence_store)
    assert await gen.doc_number("inv", DAY) == "INV-20250110-0001"
    assert await gen.reference_number(DAY) == "REF-20250110-0001"
    assert await gen.reference_number(DAY) == "REF-20250110-0002"
    assert await gen.movement_number(DAY) == "MOV-20250110-0001"


@pytest.mark.asyncio
async def test_counters_survive_a_new_generator(sequence_store) -> None:
    await AsyncSequenceGenerator(sequence_store).doc_number("REF", DAY)
    assert await AsyncSequenceGenerator(sequence_store).doc_number("REF", DAY) == "REF-20250110-0002"


@pytest.mark.asyncio
@pytest.mark.parametrize("prefix", ["", "1REF", "RE F", "RE-F"])
async def test_invalid_prefix(prefix: str) -> None:
    with pytest.raises(ValidationError):
        await AsyncSequenceGenerator(InMemorySequenceStore()).next(prefix, DAY)


@pytest.mark.asyncio
async def test_non_numeric_counter_is_rejected() -> None:
    gen = AsyncSequenceGenerator(InMemorySequenceStore({"seq:REF:20250110": "abc"}))
    with pytest.raises(ValidationError):
        await gen.next("REF", DAY)


@pytest.mark.asyncio
async def test_entry_numbers_share_display_number(sequence_store) -> None:
    gen = AsyncSequenceGenerator(sequence_store)
    first = await gen.entry_number("JE", DAY)
    second = await gen.entry_number("JE", DAY)
    assert first == "JE-20250110-0001-01"
    assert second == "JE-20250110-0001-02"
    assert strip_unique_tail(first) == strip_unique_tail(second) == "JE-20250110-0001"
    assert await gen.display_number("JE", date(2025, 1, 11)) == "JE-20250111-0001"


def test_strip_unique_tail_leaves_short_numbers() -> None:
    assert strip_unique_tail("REF-20250110-0001") == "REF-20250110-0001"
    assert strip_unique_tail("JE-20250110-0001-07") == "JE-20250110-0001"


@pytest.mark.asyncio
async def test_journal_number_per_year(sequence_store) -> None:
    gen = AsyncSequenceGenerator(sequence_store)
    assert await gen.journal_number(2025) == "J-2025-00001"
    assert await gen.journal_number(2025) == "J-2025-00002"
    assert await gen.journal_number(2026) == "J-2026-00001"


@pytest.mark.asyncio
async def test_concurrent_requests_get_distinct_numbers(sequence_store) -> None:
    gen = AsyncSequenceGenerator(sequence_store)
    values = await asyncio.gather(*(gen.next("REF", DAY) for _ in range(20)))
    assert sorted(values) == list(range(1, 21))


@pytest.mark.asyncio
async def test_generator_over_in_memory_unit_of_work() -> None:
    uow = InMemoryUnitOfWork()
    async with uow:
        gen = AsyncSequenceGenerator(uow.sequences)
        assert await gen.movement_number(DAY) == "MOV-20250110-0001"
        await uow.sync_keys.add("k")
        await uow.commit()
    assert uow.sequences_store.snapshot() == {"seq:MOV:20250110": "1"}
    assert await uow.sync_keys.contains("k")
