"""Port for persisting branch transfers."""

from collections.abc import Collection
from typing import Protocol

from branch_finance.domain.models import BranchTransfer, TransferStatus


class TransferRepositoryPort(Protocol):
    """Port exposing transfer reads and compare-and-set writes."""

    async def get(self, transfer_id: str) -> BranchTransfer | None:
        """Return the transfer or None when the id is unknown."""

    async def add(self, transfer: BranchTransfer) -> None:
        """Insert a new transfer."""

    async def update_if_status(
        self,
        transfer: BranchTransfer,
        expected_status: TransferStatus,
    ) -> bool:
        """Write ``transfer`` only if the stored status still matches.

        Returns:
            bool: False when a concurrent change won the race.
        """

    async def delete_if_status(
        self,
        transfer_id: str,
        expected_status: TransferStatus,
    ) -> bool:
        """Delete a transfer only if the stored status still matches."""

    async def list_transfers(
        self,
        statuses: Collection[TransferStatus] | None = None,
        branch_id: str | None = None,
        to_branch_ids: Collection[str] | None = None,
        limit: int | None = None,
    ) -> list[BranchTransfer]:
        """Return transfers ordered by status, newest first.

        Args:
            statuses: Restrict to these statuses.
            branch_id: Restrict to transfers touching this branch.
            to_branch_ids: Restrict to these destination branches.
            limit: Maximum number of rows.
        """

    async def count_by_status(
        self,
        branch_id: str | None = None,
    ) -> dict[TransferStatus, int]:
        """Return transfer counts per status."""


__all__ = ["TransferRepositoryPort"]
