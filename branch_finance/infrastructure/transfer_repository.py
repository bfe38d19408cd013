"""SQLAlchemy repository for branch transfers."""

from collections.abc import Collection

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from branch_finance.application.ports.transfer_repository import (
    TransferRepositoryPort,
)
from branch_finance.domain.models import (
    BranchTransfer,
    TransferMetadata,
    TransferStatus,
)
from branch_finance.infrastructure.schema import branch_transfers
from branch_finance.infrastructure.storage_errors import wrap_storage_errors
from branch_finance.utils.decimal_utils import coerce_decimal


def _to_row(transfer: BranchTransfer) -> dict:
    return {
        "id": transfer.id,
        "reference_id": transfer.reference_id,
        "from_branch_id": transfer.from_branch_id,
        "to_branch_id": transfer.to_branch_id,
        "amount": transfer.amount,
        "currency": transfer.currency,
        "status": transfer.status.value,
        "description": transfer.description,
        "requested_by": transfer.requested_by,
        "approved_by": transfer.approved_by,
        "approved_at": transfer.approved_at,
        "rejected_at": transfer.rejected_at,
        "rejection_reason": transfer.rejection_reason,
        "completed_at": transfer.completed_at,
        "created_at": transfer.created_at,
        "metadata": transfer.metadata.to_dict(),
    }


def _from_row(row) -> BranchTransfer:
    data = row._mapping
    return BranchTransfer(
        id=data["id"],
        reference_id=data["reference_id"],
        from_branch_id=data["from_branch_id"],
        to_branch_id=data["to_branch_id"],
        amount=coerce_decimal(data["amount"]),
        currency=data["currency"],
        status=TransferStatus(data["status"]),
        requested_by=data["requested_by"],
        created_at=data["created_at"],
        description=data["description"],
        approved_by=data["approved_by"],
        approved_at=data["approved_at"],
        rejected_at=data["rejected_at"],
        rejection_reason=data["rejection_reason"],
        completed_at=data["completed_at"],
        metadata=TransferMetadata.from_dict(data["metadata"]),
    )


class SqlAlchemyTransferRepository(TransferRepositoryPort):
    """Transfer repository bound to one transactional connection."""

    def __init__(self, conn: AsyncConnection) -> None:
        """Initialize the repository.

        Args:
            conn: Connection owned by the surrounding unit of work.
        """
        self._conn = conn

    @wrap_storage_errors
    async def get(self, transfer_id: str) -> BranchTransfer | None:
        result = await self._conn.execute(
            select(branch_transfers).where(branch_transfers.c.id == transfer_id)
        )
        row = result.first()
        return _from_row(row) if row is not None else None

    @wrap_storage_errors
    async def add(self, transfer: BranchTransfer) -> None:
        await self._conn.execute(insert(branch_transfers), [_to_row(transfer)])

    @wrap_storage_errors
    async def update_if_status(
        self,
        transfer: BranchTransfer,
        expected_status: TransferStatus,
    ) -> bool:
        values = _to_row(transfer)
        values.pop("id")
        result = await self._conn.execute(
            update(branch_transfers)
            .where(
                branch_transfers.c.id == transfer.id,
                branch_transfers.c.status == expected_status.value,
            )
            .values(**values)
        )
        return result.rowcount == 1

    @wrap_storage_errors
    async def delete_if_status(
        self,
        transfer_id: str,
        expected_status: TransferStatus,
    ) -> bool:
        result = await self._conn.execute(
            delete(branch_transfers).where(
                branch_transfers.c.id == transfer_id,
                branch_transfers.c.status == expected_status.value,
            )
        )
        return result.rowcount == 1

    @wrap_storage_errors
    async def list_transfers(
        self,
        statuses: Collection[TransferStatus] | None = None,
        branch_id: str | None = None,
        to_branch_ids: Collection[str] | None = None,
        limit: int | None = None,
    ) -> list[BranchTransfer]:
        query = select(branch_transfers)
        if statuses is not None:
            query = query.where(
                branch_transfers.c.status.in_([s.value for s in statuses])
            )
        if to_branch_ids is not None:
            query = query.where(
                branch_transfers.c.to_branch_id.in_(list(to_branch_ids))
            )
        if branch_id is not None:
            query = query.where(self._touches_branch(branch_id))
        query = query.order_by(
            branch_transfers.c.status.asc(),
            branch_transfers.c.created_at.desc(),
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self._conn.execute(query)
        return [_from_row(row) for row in result.all()]

    @wrap_storage_errors
    async def count_by_status(
        self,
        branch_id: str | None = None,
    ) -> dict[TransferStatus, int]:
        query = select(
            branch_transfers.c.status,
            func.count().label("count"),
        ).group_by(branch_transfers.c.status)
        if branch_id is not None:
            query = query.where(self._touches_branch(branch_id))
        result = await self._conn.execute(query)
        return {
            TransferStatus(row._mapping["status"]): row._mapping["count"]
            for row in result.all()
        }

    @staticmethod
    def _touches_branch(branch_id: str):
        return or_(
            branch_transfers.c.from_branch_id == branch_id,
            branch_transfers.c.to_branch_id == branch_id,
        )


__all__ = ["SqlAlchemyTransferRepository"]
