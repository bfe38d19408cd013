"""Port for persisting branch budgets."""

from datetime import datetime
from typing import Protocol

from branch_finance.domain.models import (
    BranchBudget,
    BudgetMetadata,
    BudgetPeriod,
)


class BudgetRepositoryPort(Protocol):
    """Port exposing budget reads and the narrow writes allowed on them.

    Every write takes the revision the caller read and returns False,
    leaving the row untouched, when another writer got there first.
    """

    async def get(self, budget_id: str) -> BranchBudget | None:
        """Return the budget or None when the id is unknown."""

    async def add(self, budget: BranchBudget) -> None:
        """Insert a new budget."""

    async def find_duplicate(
        self,
        branch_id: str,
        period: BudgetPeriod,
        category: str,
    ) -> BranchBudget | None:
        """Return the budget covering the same branch, period and category."""

    async def list_active(
        self,
        branch_id: str | None = None,
    ) -> list[BranchBudget]:
        """Return ACTIVE budgets ordered by branch and period."""

    async def list_for_period(
        self,
        period: BudgetPeriod,
        branch_id: str | None = None,
    ) -> list[BranchBudget]:
        """Return ACTIVE budgets of exactly this period's granularity."""

    async def list_budgets(
        self,
        year: int,
        branch_id: str | None = None,
        quarter: int | None = None,
        month: int | None = None,
        category: str | None = None,
    ) -> list[BranchBudget]:
        """Return budgets of any status matching every given column."""

    async def update_spending(
        self,
        budget_id: str,
        spent,
        remaining,
        metadata: BudgetMetadata,
        updated_at: datetime,
        expected_revision: int,
    ) -> bool:
        """Store recomputed spent and remaining values."""

    async def update_metadata(
        self,
        budget_id: str,
        metadata: BudgetMetadata,
        updated_at: datetime,
        expected_revision: int,
    ) -> bool:
        """Replace the budget metadata side-record."""

    async def update_details(
        self,
        budget: BranchBudget,
        expected_revision: int,
    ) -> bool:
        """Store allocation, remaining, description, status and approval."""

    async def delete_if_revision(
        self,
        budget_id: str,
        expected_revision: int,
    ) -> bool:
        """Delete the budget if nobody wrote it since it was read."""


__all__ = ["BudgetRepositoryPort"]
