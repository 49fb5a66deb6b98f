from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest

from py_ledgersync.application.use_cases_async import (
    AsyncComposeJournalEntry,
    AsyncQuickEntry,
    AsyncSequenceGenerator,
)
from py_ledgersync.domain.errors import UnbalancedEntryError
from py_ledgersync.domain.journal import EntryStatus
from py_ledgersync.infrastructure.persistence.inmemory import FixedClock

NOW = datetime(2025, 1, 10, 9, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_compose_numbers_a_balanced_draft(sequence_store) -> None:
    compose = AsyncComposeJournalEntry(AsyncSequenceGenerator(sequence_store), FixedClock(NOW))
    entry = await compose(
        [{"account": "6000", "debit": "250"}, {"account": "1000", "credit": "250"}],
        memo="January rent",
        prepared_by="alice",
    )
    assert entry.id.startswith("je:")
    assert entry.status is EntryStatus.DRAFT
    assert entry.date == date(2025, 1, 10)
    assert entry.entry_number == "JE-20250110-0001-01"
    assert entry.reference == "REF-20250110-0001"
    assert entry.prepared_by.name == "alice"
    assert entry.prepared_by.at == NOW


@pytest.mark.asyncio
async def test_compose_keeps_given_reference(sequence_store) -> None:
    compose = AsyncComposeJournalEntry(AsyncSequenceGenerator(sequence_store), FixedClock(NOW))
    entry = await compose(
        [{"account": "6000", "debit": "1"}, {"account": "1000", "credit": "1"}],
        day=date(2025, 2, 1),
        reference="BILL-20250201-0001",
    )
    assert entry.reference == "BILL-20250201-0001"
    assert entry.entry_number == "JE-20250201-0001-01"
    assert "seq:REF:20250201" not in sequence_store.snapshot()


@pytest.mark.asyncio
async def test_unbalanced_entry_is_not_numbered(sequence_store) -> None:
    compose = AsyncComposeJournalEntry(AsyncSequenceGenerator(sequence_store), FixedClock(NOW))
    with pytest.raises(UnbalancedEntryError):
        await compose([{"account": "6000", "debit": "250"}, {"account": "1000", "credit": "200"}])
    assert sequence_store.snapshot() == {}


@pytest.mark.asyncio
async def test_quick_entry(sequence_store) -> None:
    compose = AsyncComposeJournalEntry(AsyncSequenceGenerator(sequence_store), FixedClock(NOW))
    entry = await AsyncQuickEntry(compose)("6000", "1000", "99.95", memo="Stamps")
    assert entry.total_debit == entry.total_credit == Decimal("99.95")
    assert [li.memo for li in entry.lines] == ["Stamps", "Stamps"]


@pytest.mark.asyncio
async def test_participants_follow_the_clock(sequence_store) -> None:
    clock = FixedClock(NOW)
    compose = AsyncComposeJournalEntry(AsyncSequenceGenerator(sequence_store), clock)
    entry = await compose([{"account": "6000", "debit": "5"}, {"account": "1000", "credit": "5"}], prepared_by="alice")
    approved_at = clock.advance(timedelta(hours=2))
    entry.approve("bob", clock.now())
    entry.post("bob", clock.advance(timedelta(minutes=5)))
    assert entry.prepared_by.at == NOW
    assert entry.approved_by.at == approved_at
    assert entry.posted_by.at == NOW + timedelta(hours=2, minutes=5)
    assert entry.status is EntryStatus.POSTED
