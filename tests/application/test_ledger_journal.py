"""Tests for the LedgerJournal."""

import asyncio
from datetime import datetime
from unittest.mock import MagicMock

from branch_finance.application.use_cases import LedgerJournal
from branch_finance.domain.constants import TRANSFER_TYPE
from tests.fakes import InMemoryStore, InMemoryUnitOfWork, make_transfer

AT = datetime(2024, 3, 15, 12, 0)


async def _record_twice(store, journal, transfer):
    async with InMemoryUnitOfWork(store) as uow:
        first = await journal.record_transfer_pair(uow.ledger, transfer, AT)
    async with InMemoryUnitOfWork(store) as uow:
        second = await journal.record_transfer_pair(uow.ledger, transfer, AT)
    return first, second


def test_record_is_idempotent_per_transfer():
    """Recording twice returns the existing pair without new rows."""
    store = InMemoryStore()
    journal = LedgerJournal(logger=MagicMock())
    transfer = make_transfer("t1", amount="75.00")

    first, second = asyncio.run(_record_twice(store, journal, transfer))

    assert len(store.ledger) == 2
    assert first == second
    assert all(row.metadata.transfer_id == "t1" for row in store.ledger)
    assert all(row.metadata.transfer_type == TRANSFER_TYPE for row in first)


def test_descriptions_fall_back_to_branch_ids():
    """Without a directory the branch ids name the counterparties."""
    store = InMemoryStore()
    journal = LedgerJournal(logger=MagicMock())

    first, _ = asyncio.run(
        _record_twice(store, journal, make_transfer("t1"))
    )

    assert first[0].description == "Transfer out to b"
    assert first[1].description == "Transfer in from a"


def test_verify_pair_rejects_unbalanced_rows():
    """A pair with mismatched amounts is not valid."""
    store = InMemoryStore()
    journal = LedgerJournal(logger=MagicMock())
    transfer = make_transfer("t1")
    first, _ = asyncio.run(_record_twice(store, journal, transfer))

    assert LedgerJournal.verify_pair(transfer, first)
    assert not LedgerJournal.verify_pair(transfer, first[:1])
    assert not LedgerJournal.verify_pair(
        make_transfer("t1", amount="99.00"),
        first,
    )
