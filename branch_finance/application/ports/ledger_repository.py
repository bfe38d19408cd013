"""Port for the append-only branch ledger."""

from collections.abc import Collection
from datetime import datetime
from typing import Protocol

from branch_finance.domain.models import LedgerEntryType, LedgerTransaction


class LedgerRepositoryPort(Protocol):
    """Port exposing appends and reads on ledger transactions."""

    async def add_many(self, entries: list[LedgerTransaction]) -> None:
        """Append ledger rows. Rows are never updated or deleted."""

    async def find_by_transfer(
        self,
        transfer_id: str,
    ) -> list[LedgerTransaction]:
        """Return the rows tagged with the given transfer id."""

    async def fetch_entries(
        self,
        entry_type: LedgerEntryType,
        categories: Collection[str],
        start: datetime,
        end: datetime,
        branch_id: str | None = None,
    ) -> list[LedgerTransaction]:
        """Return rows in ``[start, end)`` matching type and categories."""


__all__ = ["LedgerRepositoryPort"]
