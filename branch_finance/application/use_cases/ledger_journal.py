"""Paired, idempotent ledger entries for approved transfers."""

import asyncio
import uuid
from collections.abc import Callable
from datetime import datetime

from branch_finance.application.ports.directories import BranchDirectoryPort
from branch_finance.application.ports.ledger_repository import (
    LedgerRepositoryPort,
)
from branch_finance.domain.constants import (
    TRANSFER_IN_CATEGORY,
    TRANSFER_OUT_CATEGORY,
    TRANSFER_PAYMENT_METHOD,
    TRANSFER_TYPE,
)
from branch_finance.domain.models import (
    BranchTransfer,
    LedgerEntryType,
    LedgerMetadata,
    LedgerTransaction,
)
from branch_finance.infrastructure.logging.logger import get_app_logger


class LedgerJournal:
    """Append the two ledger rows that mirror an approved transfer."""

    def __init__(
        self,
        branch_directory: BranchDirectoryPort | None = None,
        logger=None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the journal.

        Args:
            branch_directory: Optional directory used to name branches in
                entry descriptions.
            logger: Optional logger compatible with logging.Logger-like API.
            id_factory: Callable producing ledger row ids.
        """
        self._branch_directory = branch_directory
        self._logger = logger or get_app_logger()
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

    async def record_transfer_pair(
        self,
        ledger: LedgerRepositoryPort,
        transfer: BranchTransfer,
        at: datetime,
        batch: bool = False,
    ) -> list[LedgerTransaction]:
        """Record the outgoing and incoming rows for a transfer.

        The call is a no-op when rows tagged with the transfer id already
        exist, so retries never duplicate money movement.

        Args:
            ledger: Ledger repository bound to the caller's unit of work.
            transfer: Transfer being approved.
            at: Timestamp stamped on both rows.
            batch: Whether the approval came from a batch run.

        Returns:
            list[LedgerTransaction]: The pair, existing or newly created.
        """
        existing = await ledger.find_by_transfer(transfer.id)
        if existing:
            self._logger.info(
                f"Ledger entries already recorded for transfer {transfer.id}"
            )
            return existing

        from_name, to_name = await self._branch_names(transfer)
        metadata = LedgerMetadata(
            transfer_id=transfer.id,
            transfer_type=TRANSFER_TYPE,
            batch_approval=batch,
        )
        entries = [
            LedgerTransaction(
                id=self._id_factory(),
                reference_id=f"TRF-OUT-{transfer.reference_id}",
                branch_id=transfer.from_branch_id,
                type=LedgerEntryType.EXPENSE,
                category=TRANSFER_OUT_CATEGORY,
                amount=transfer.amount,
                currency=transfer.currency,
                date=at,
                description=f"Transfer out to {to_name}",
                payment_method=TRANSFER_PAYMENT_METHOD,
                metadata=metadata,
            ),
            LedgerTransaction(
                id=self._id_factory(),
                reference_id=f"TRF-IN-{transfer.reference_id}",
                branch_id=transfer.to_branch_id,
                type=LedgerEntryType.INCOME,
                category=TRANSFER_IN_CATEGORY,
                amount=transfer.amount,
                currency=transfer.currency,
                date=at,
                description=f"Transfer in from {from_name}",
                payment_method=TRANSFER_PAYMENT_METHOD,
                metadata=metadata,
            ),
        ]
        await ledger.add_many(entries)
        self._logger.info(
            f"Recorded ledger pair for transfer {transfer.reference_id}: "
            f"{transfer.amount} {transfer.currency}"
        )
        return entries

    @staticmethod
    def verify_pair(
        transfer: BranchTransfer,
        entries: list[LedgerTransaction],
    ) -> bool:
        """Return whether ``entries`` form a valid pair for ``transfer``.

        A valid pair is exactly two rows tagged with the transfer id, with
        equal amount and currency, opposite types and zero net effect.
        """
        if len(entries) != 2:
            return False
        if any(entry.metadata.transfer_id != transfer.id for entry in entries):
            return False
        if {entry.type for entry in entries} != set(LedgerEntryType):
            return False
        if {entry.currency for entry in entries} != {transfer.currency}:
            return False
        if any(entry.amount != transfer.amount for entry in entries):
            return False
        return sum(entry.signed_amount for entry in entries) == 0

    async def _branch_names(self, transfer: BranchTransfer) -> tuple[str, str]:
        if self._branch_directory is None:
            return transfer.from_branch_id, transfer.to_branch_id
        from_branch, to_branch = await asyncio.gather(
            self._branch_directory.get_branch(transfer.from_branch_id),
            self._branch_directory.get_branch(transfer.to_branch_id),
        )
        return (
            from_branch.name if from_branch else transfer.from_branch_id,
            to_branch.name if to_branch else transfer.to_branch_id,
        )


__all__ = ["LedgerJournal"]
