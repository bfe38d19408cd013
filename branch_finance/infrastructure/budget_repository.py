"""SQLAlchemy repository for branch budgets."""

from datetime import datetime

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from branch_finance.application.ports.budget_repository import (
    BudgetRepositoryPort,
)
from branch_finance.domain.constants import ACTIVE_BUDGET_STATUS
from branch_finance.domain.models import (
    BranchBudget,
    BudgetCategory,
    BudgetMetadata,
    BudgetPeriod,
)
from branch_finance.infrastructure.schema import branch_budgets
from branch_finance.infrastructure.storage_errors import wrap_storage_errors
from branch_finance.utils.decimal_utils import coerce_decimal


def _to_row(budget: BranchBudget) -> dict:
    return {
        "id": budget.id,
        "branch_id": budget.branch_id,
        "year": budget.year,
        "quarter": budget.quarter,
        "month": budget.month,
        "category": budget.category.value,
        "allocated": budget.allocated,
        "spent": budget.spent,
        "remaining": budget.remaining,
        "currency": budget.currency,
        "status": budget.status,
        "description": budget.description,
        "created_by": budget.created_by,
        "approved_by": budget.approved_by,
        "approved_at": budget.approved_at,
        "updated_at": budget.updated_at,
        "metadata": budget.metadata.to_dict(),
        "revision": budget.revision,
    }


def _from_row(row) -> BranchBudget:
    data = row._mapping
    return BranchBudget(
        id=data["id"],
        branch_id=data["branch_id"],
        year=data["year"],
        quarter=data["quarter"],
        month=data["month"],
        category=BudgetCategory(data["category"]),
        allocated=coerce_decimal(data["allocated"]),
        spent=coerce_decimal(data["spent"]),
        remaining=coerce_decimal(data["remaining"]),
        currency=data["currency"],
        status=data["status"],
        updated_at=data["updated_at"],
        description=data["description"],
        created_by=data["created_by"],
        approved_by=data["approved_by"],
        approved_at=data["approved_at"],
        metadata=BudgetMetadata.from_dict(data["metadata"]),
        revision=data["revision"],
    )


def _period_clause(period: BudgetPeriod) -> list:
    clauses = [branch_budgets.c.year == period.year]
    if period.month is not None:
        clauses.append(branch_budgets.c.month == period.month)
    elif period.quarter is not None:
        clauses.append(branch_budgets.c.quarter == period.quarter)
        clauses.append(branch_budgets.c.month.is_(None))
    else:
        clauses.append(branch_budgets.c.quarter.is_(None))
        clauses.append(branch_budgets.c.month.is_(None))
    return clauses


def _guarded_update(budget_id: str, expected_revision: int):
    return (
        update(branch_budgets)
        .where(
            branch_budgets.c.id == budget_id,
            branch_budgets.c.revision == expected_revision,
        )
        .values(revision=branch_budgets.c.revision + 1)
    )


class SqlAlchemyBudgetRepository(BudgetRepositoryPort):
    """Budget repository bound to one transactional connection."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    @wrap_storage_errors
    async def get(self, budget_id: str) -> BranchBudget | None:
        result = await self._conn.execute(
            select(branch_budgets).where(branch_budgets.c.id == budget_id)
        )
        row = result.first()
        return _from_row(row) if row is not None else None

    @wrap_storage_errors
    async def add(self, budget: BranchBudget) -> None:
        await self._conn.execute(insert(branch_budgets), [_to_row(budget)])

    @wrap_storage_errors
    async def find_duplicate(
        self,
        branch_id: str,
        period: BudgetPeriod,
        category: str,
    ) -> BranchBudget | None:
        result = await self._conn.execute(
            select(branch_budgets).where(
                branch_budgets.c.branch_id == branch_id,
                branch_budgets.c.category == category,
                *_period_clause(period),
            )
        )
        row = result.first()
        return _from_row(row) if row is not None else None

    @wrap_storage_errors
    async def list_active(
        self,
        branch_id: str | None = None,
    ) -> list[BranchBudget]:
        query = select(branch_budgets).where(
            branch_budgets.c.status == ACTIVE_BUDGET_STATUS
        )
        if branch_id is not None:
            query = query.where(branch_budgets.c.branch_id == branch_id)
        query = query.order_by(
            branch_budgets.c.branch_id.asc(),
            branch_budgets.c.year.desc(),
            branch_budgets.c.quarter.asc(),
            branch_budgets.c.month.asc(),
        )
        result = await self._conn.execute(query)
        return [_from_row(row) for row in result.all()]

    @wrap_storage_errors
    async def list_for_period(
        self,
        period: BudgetPeriod,
        branch_id: str | None = None,
    ) -> list[BranchBudget]:
        query = select(branch_budgets).where(
            branch_budgets.c.status == ACTIVE_BUDGET_STATUS,
            *_period_clause(period),
        )
        if branch_id is not None:
            query = query.where(branch_budgets.c.branch_id == branch_id)
        result = await self._conn.execute(query.order_by(branch_budgets.c.id))
        return [_from_row(row) for row in result.all()]

    @wrap_storage_errors
    async def list_budgets(
        self,
        year: int,
        branch_id: str | None = None,
        quarter: int | None = None,
        month: int | None = None,
        category: str | None = None,
    ) -> list[BranchBudget]:
        query = select(branch_budgets).where(branch_budgets.c.year == year)
        if branch_id is not None:
            query = query.where(branch_budgets.c.branch_id == branch_id)
        if quarter is not None:
            query = query.where(branch_budgets.c.quarter == quarter)
        if month is not None:
            query = query.where(branch_budgets.c.month == month)
        if category is not None:
            query = query.where(branch_budgets.c.category == category)
        query = query.order_by(
            branch_budgets.c.branch_id.asc(),
            branch_budgets.c.quarter.asc(),
            branch_budgets.c.month.asc(),
            branch_budgets.c.category.asc(),
        )
        result = await self._conn.execute(query)
        return [_from_row(row) for row in result.all()]

    @wrap_storage_errors
    async def update_spending(
        self,
        budget_id: str,
        spent,
        remaining,
        metadata: BudgetMetadata,
        updated_at: datetime,
        expected_revision: int,
    ) -> bool:
        result = await self._conn.execute(
            _guarded_update(budget_id, expected_revision).values(
                spent=spent,
                remaining=remaining,
                metadata=metadata.to_dict(),
                updated_at=updated_at,
            )
        )
        return result.rowcount == 1

    @wrap_storage_errors
    async def update_metadata(
        self,
        budget_id: str,
        metadata: BudgetMetadata,
        updated_at: datetime,
        expected_revision: int,
    ) -> bool:
        result = await self._conn.execute(
            _guarded_update(budget_id, expected_revision).values(
                metadata=metadata.to_dict(),
                updated_at=updated_at,
            )
        )
        return result.rowcount == 1

    @wrap_storage_errors
    async def update_details(
        self,
        budget: BranchBudget,
        expected_revision: int,
    ) -> bool:
        result = await self._conn.execute(
            _guarded_update(budget.id, expected_revision).values(
                allocated=budget.allocated,
                remaining=budget.remaining,
                description=budget.description,
                status=budget.status,
                approved_by=budget.approved_by,
                approved_at=budget.approved_at,
                updated_at=budget.updated_at,
            )
        )
        return result.rowcount == 1

    @wrap_storage_errors
    async def delete_if_revision(
        self,
        budget_id: str,
        expected_revision: int,
    ) -> bool:
        result = await self._conn.execute(
            delete(branch_budgets).where(
                branch_budgets.c.id == budget_id,
                branch_budgets.c.revision == expected_revision,
            )
        )
        return result.rowcount == 1


__all__ = ["SqlAlchemyBudgetRepository"]
