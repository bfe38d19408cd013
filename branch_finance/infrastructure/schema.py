"""Table definitions for the branch finance store."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.ext.asyncio import AsyncEngine

metadata = MetaData()

branches = Table(
    "branches",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(200), nullable=False),
    Column("code", String(32), nullable=False),
    Column("currency", String(8), nullable=False),
)

branch_permissions = Table(
    "branch_permissions",
    metadata,
    Column("user_id", String(64), primary_key=True),
    Column("branch_id", String(64), primary_key=True),
    Column("capabilities", JSON, nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
)

branch_transfers = Table(
    "branch_transfers",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("reference_id", String(64), nullable=False, unique=True),
    Column("from_branch_id", String(64), nullable=False, index=True),
    Column("to_branch_id", String(64), nullable=False, index=True),
    Column("amount", Numeric(18, 2), nullable=False),
    Column("currency", String(8), nullable=False),
    Column("status", String(16), nullable=False, index=True),
    Column("description", Text),
    Column("requested_by", String(64), nullable=False),
    Column("approved_by", String(64)),
    Column("approved_at", DateTime),
    Column("rejected_at", DateTime),
    Column("rejection_reason", Text),
    Column("completed_at", DateTime),
    Column("created_at", DateTime, nullable=False),
    Column("metadata", JSON, nullable=False),
)

# Append-only: the adapters never issue UPDATE or DELETE here.
ledger_transactions = Table(
    "ledger_transactions",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("reference_id", String(80), nullable=False),
    Column("branch_id", String(64), nullable=False, index=True),
    Column("type", String(16), nullable=False),
    Column("category", String(32), nullable=False),
    Column("amount", Numeric(18, 2), nullable=False),
    Column("currency", String(8), nullable=False),
    Column("date", DateTime, nullable=False, index=True),
    Column("description", Text),
    Column("payment_method", String(32)),
    Column("transfer_id", String(64), index=True),
    Column("metadata", JSON, nullable=False),
)

branch_budgets = Table(
    "branch_budgets",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("branch_id", String(64), nullable=False, index=True),
    Column("year", Integer, nullable=False),
    Column("quarter", Integer),
    Column("month", Integer),
    Column("category", String(16), nullable=False),
    Column("allocated", Numeric(18, 2), nullable=False),
    Column("spent", Numeric(18, 2), nullable=False),
    Column("remaining", Numeric(18, 2), nullable=False),
    Column("currency", String(8), nullable=False),
    Column("status", String(16), nullable=False),
    Column("description", Text),
    Column("created_by", String(64)),
    Column("approved_by", String(64)),
    Column("approved_at", DateTime),
    Column("updated_at", DateTime, nullable=False),
    Column("metadata", JSON, nullable=False),
    Column("revision", Integer, nullable=False, default=0),
    UniqueConstraint(
        "branch_id",
        "year",
        "quarter",
        "month",
        "category",
        name="uq_branch_budget_period",
    ),
)


async def create_schema(engine: AsyncEngine) -> None:
    """Create every table that does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


__all__ = [
    "metadata",
    "branches",
    "branch_permissions",
    "branch_transfers",
    "ledger_transactions",
    "branch_budgets",
    "create_schema",
]
