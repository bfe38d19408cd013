"""SQLAlchemy repository for the append-only ledger."""

from collections.abc import Collection
from datetime import datetime

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncConnection

from branch_finance.application.ports.ledger_repository import (
    LedgerRepositoryPort,
)
from branch_finance.domain.models import (
    LedgerEntryType,
    LedgerMetadata,
    LedgerTransaction,
)
from branch_finance.infrastructure.schema import ledger_transactions
from branch_finance.infrastructure.storage_errors import wrap_storage_errors
from branch_finance.utils.decimal_utils import coerce_decimal


def _to_row(entry: LedgerTransaction) -> dict:
    return {
        "id": entry.id,
        "reference_id": entry.reference_id,
        "branch_id": entry.branch_id,
        "type": entry.type.value,
        "category": entry.category,
        "amount": entry.amount,
        "currency": entry.currency,
        "date": entry.date,
        "description": entry.description,
        "payment_method": entry.payment_method,
        "transfer_id": entry.metadata.transfer_id,
        "metadata": entry.metadata.to_dict(),
    }


def _from_row(row) -> LedgerTransaction:
    data = row._mapping
    return LedgerTransaction(
        id=data["id"],
        reference_id=data["reference_id"],
        branch_id=data["branch_id"],
        type=LedgerEntryType(data["type"]),
        category=data["category"],
        amount=coerce_decimal(data["amount"]),
        currency=data["currency"],
        date=data["date"],
        description=data["description"],
        payment_method=data["payment_method"],
        metadata=LedgerMetadata.from_dict(data["metadata"]),
    )


class SqlAlchemyLedgerRepository(LedgerRepositoryPort):
    """Ledger repository bound to one transactional connection."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    @wrap_storage_errors
    async def add_many(self, entries: list[LedgerTransaction]) -> None:
        if not entries:
            return
        await self._conn.execute(
            insert(ledger_transactions),
            [_to_row(entry) for entry in entries],
        )

    @wrap_storage_errors
    async def find_by_transfer(
        self,
        transfer_id: str,
    ) -> list[LedgerTransaction]:
        result = await self._conn.execute(
            select(ledger_transactions)
            .where(ledger_transactions.c.transfer_id == transfer_id)
            .order_by(ledger_transactions.c.reference_id)
        )
        return [_from_row(row) for row in result.all()]

    @wrap_storage_errors
    async def fetch_entries(
        self,
        entry_type: LedgerEntryType,
        categories: Collection[str],
        start: datetime,
        end: datetime,
        branch_id: str | None = None,
    ) -> list[LedgerTransaction]:
        query = select(ledger_transactions).where(
            ledger_transactions.c.type == entry_type.value,
            ledger_transactions.c.category.in_(list(categories)),
            ledger_transactions.c.date >= start,
            ledger_transactions.c.date < end,
        )
        if branch_id is not None:
            query = query.where(ledger_transactions.c.branch_id == branch_id)
        result = await self._conn.execute(
            query.order_by(ledger_transactions.c.date)
        )
        return [_from_row(row) for row in result.all()]


__all__ = ["SqlAlchemyLedgerRepository"]
