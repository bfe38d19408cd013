"""Use case listing transfers for the approvals screen."""

import asyncio

from branch_finance.application.ports.directories import BranchDirectoryPort
from branch_finance.application.ports.unit_of_work import UnitOfWorkFactory
from branch_finance.application.use_cases.authorization import (
    AuthorizationResolver,
)
from branch_finance.domain.constants import TRANSFER_LIST_LIMIT
from branch_finance.domain.errors import ValidationError
from branch_finance.domain.models import (
    Actor,
    BranchTransfer,
    TransferListing,
    TransferStats,
    TransferStatus,
    TransferView,
)
from branch_finance.infrastructure.logging.logger import get_app_logger

LISTING_TYPES = ("pending", "my-approvals", "history")

HISTORY_STATUSES = (
    TransferStatus.APPROVED,
    TransferStatus.REJECTED,
    TransferStatus.COMPLETED,
)


class ListTransfersUseCase:
    """List transfers by queue type with per-status statistics."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        authorization: AuthorizationResolver,
        branch_directory: BranchDirectoryPort,
        limit: int = TRANSFER_LIST_LIMIT,
        logger=None,
    ) -> None:
        self._uow_factory = uow_factory
        self._authorization = authorization
        self._branch_directory = branch_directory
        self._limit = limit
        self._logger = logger or get_app_logger()

    async def execute(
        self,
        actor: Actor,
        listing_type: str | None = None,
        branch_id: str | None = None,
    ) -> TransferListing:
        """Return the transfers of a queue and the status counts.

        Args:
            actor: Caller; drives the ``my-approvals`` queue.
            listing_type: ``pending``, ``my-approvals``, ``history`` or None
                for every status.
            branch_id: Optional branch on either side of the transfer.

        Returns:
            TransferListing: Transfers with branches attached and stats.
        """
        if listing_type is not None and listing_type not in LISTING_TYPES:
            raise ValidationError(f"Unknown listing type: {listing_type}")

        statuses = None
        to_branch_ids = None
        if listing_type in ("pending", "my-approvals"):
            statuses = (TransferStatus.PENDING,)
        elif listing_type == "history":
            statuses = HISTORY_STATUSES
        if listing_type == "my-approvals":
            to_branch_ids = await self._authorization.approvable_branch_ids(
                actor
            )

        async with self._uow_factory() as uow:
            if to_branch_ids is not None and not to_branch_ids:
                transfers = []
            else:
                transfers = await uow.transfers.list_transfers(
                    statuses=statuses,
                    branch_id=branch_id,
                    to_branch_ids=to_branch_ids,
                    limit=self._limit,
                )
            counts = await uow.transfers.count_by_status(branch_id=branch_id)

        views = await self._attach_branches(transfers)
        stats = TransferStats(
            pending=counts.get(TransferStatus.PENDING, 0),
            approved=counts.get(TransferStatus.APPROVED, 0),
            rejected=counts.get(TransferStatus.REJECTED, 0),
            completed=counts.get(TransferStatus.COMPLETED, 0),
        )
        self._logger.info(
            f"Listed {len(views)} transfers (type={listing_type}, "
            f"branch={branch_id}) for {actor.id}"
        )
        return TransferListing(transfers=views, stats=stats)

    async def _attach_branches(
        self,
        transfers: list[BranchTransfer],
    ) -> list[TransferView]:
        branch_ids = sorted(
            {t.from_branch_id for t in transfers}
            | {t.to_branch_id for t in transfers}
        )
        branches = await asyncio.gather(
            *(self._branch_directory.get_branch(bid) for bid in branch_ids)
        )
        branch_map = dict(zip(branch_ids, branches))
        return [
            TransferView(
                transfer=transfer,
                from_branch=branch_map.get(transfer.from_branch_id),
                to_branch=branch_map.get(transfer.to_branch_id),
            )
            for transfer in transfers
        ]


__all__ = ["ListTransfersUseCase", "LISTING_TYPES"]
