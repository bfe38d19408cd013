"""Use cases listing, reading, editing and deleting branch budgets.

``spent`` is never accepted from callers here; the budget aggregator stays
its only writer. Edits and deletes are guarded by the budget revision.
"""

import asyncio
from dataclasses import replace
from decimal import Decimal

from branch_finance.application.ports.directories import (
    BranchDirectoryPort,
    TimeSourcePort,
)
from branch_finance.application.ports.unit_of_work import UnitOfWorkFactory
from branch_finance.application.use_cases.authorization import (
    AuthorizationResolver,
)
from branch_finance.application.use_cases.optimistic import retry_on_conflict
from branch_finance.domain.constants import ACTIVE_BUDGET_STATUS
from branch_finance.domain.errors import (
    AuthorizationError,
    ConcurrentUpdateError,
    InvalidStateTransition,
    NotFoundError,
    ValidationError,
)
from branch_finance.domain.models import Actor, BranchBudget, BudgetView
from branch_finance.domain.services import (
    parse_budget_category,
    validate_allocation,
    validate_budget_period,
    validate_budget_status,
)
from branch_finance.infrastructure.logging.logger import get_app_logger


class ListBudgetsUseCase:
    """List budgets of one year with optional column filters."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        branch_directory: BranchDirectoryPort,
        time_source: TimeSourcePort,
        logger=None,
    ) -> None:
        self._uow_factory = uow_factory
        self._branch_directory = branch_directory
        self._time_source = time_source
        self._logger = logger or get_app_logger()

    async def execute(
        self,
        actor: Actor,
        year: int | None = None,
        branch_id: str | None = None,
        quarter: int | None = None,
        month: int | None = None,
        category: str | None = None,
    ) -> list[BudgetView]:
        """Return matching budgets of every status with their branch.

        Args:
            actor: Caller, recorded in the log.
            year: Budget year; defaults to the current year.
            branch_id: Optional branch filter.
            quarter: Optional quarter filter. Monthly budgets carry the
                quarter of their month and match it too.
            month: Optional month filter.
            category: Optional category filter.

        Returns:
            list[BudgetView]: Budgets ordered by branch, period and category.
        """
        year = self._time_source.today().year if year is None else year
        validate_budget_period(year, None, month)
        validate_budget_period(year, quarter, None)
        category_value = (
            parse_budget_category(category).value
            if category is not None
            else None
        )
        async with self._uow_factory() as uow:
            budgets = await uow.budgets.list_budgets(
                year,
                branch_id=branch_id,
                quarter=quarter,
                month=month,
                category=category_value,
            )
        branch_ids = sorted({budget.branch_id for budget in budgets})
        branches = await asyncio.gather(
            *(self._branch_directory.get_branch(bid) for bid in branch_ids)
        )
        branch_map = dict(zip(branch_ids, branches))
        self._logger.info(
            f"Listed {len(budgets)} budgets for {year} "
            f"(branch={branch_id}) for {actor.id}"
        )
        return [
            BudgetView(budget=budget, branch=branch_map.get(budget.branch_id))
            for budget in budgets
        ]


class GetBudgetUseCase:
    """Return one budget with its branch."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        branch_directory: BranchDirectoryPort,
    ) -> None:
        self._uow_factory = uow_factory
        self._branch_directory = branch_directory

    async def execute(self, budget_id: str) -> BudgetView:
        async with self._uow_factory() as uow:
            budget = await uow.budgets.get(budget_id)
        if budget is None:
            raise NotFoundError(f"Budget not found: {budget_id}")
        branch = await self._branch_directory.get_branch(budget.branch_id)
        return BudgetView(budget=budget, branch=branch)


class UpdateBudgetUseCase:
    """Edit allocation, description or status, or approve a budget."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        authorization: AuthorizationResolver,
        time_source: TimeSourcePort,
        logger=None,
    ) -> None:
        self._uow_factory = uow_factory
        self._authorization = authorization
        self._time_source = time_source
        self._logger = logger or get_app_logger()

    async def execute(
        self,
        actor: Actor,
        budget_id: str,
        allocated=None,
        description: str | None = None,
        status: str | None = None,
        approve: bool = False,
    ) -> BranchBudget:
        """Apply the given changes; None leaves a field as it is.

        A new allocation recomputes ``remaining`` against the stored
        ``spent``. Approving makes the budget ACTIVE and records who
        approved it and when.

        Raises:
            ValidationError: On an invalid allocation or status, when
                approving together with a status, or when nothing changes.
            NotFoundError: If the budget id is unknown.
            AuthorizationError: If the actor may not manage the branch.
            ConcurrentUpdateError: If every attempt lost its race.
        """
        allocated_value = (
            validate_allocation(allocated) if allocated is not None else None
        )
        status_value = (
            validate_budget_status(status) if status is not None else None
        )
        if approve and status_value is not None:
            raise ValidationError("Cannot set a status while approving")
        if not approve and all(
            value is None
            for value in (allocated_value, description, status_value)
        ):
            raise ValidationError("Nothing to update")

        updated = await retry_on_conflict(
            lambda: self._update_once(
                actor,
                budget_id,
                allocated_value,
                description,
                status_value,
                approve,
            ),
            self._logger,
        )
        self._logger.info(
            f"Budget {budget_id} updated by {actor.id}: "
            f"allocated={updated.allocated}, status={updated.status}"
        )
        return updated

    async def _update_once(
        self,
        actor: Actor,
        budget_id: str,
        allocated: Decimal | None,
        description: str | None,
        status: str | None,
        approve: bool,
    ) -> BranchBudget:
        async with self._uow_factory() as uow:
            budget = await uow.budgets.get(budget_id)
            if budget is None:
                raise NotFoundError(f"Budget not found: {budget_id}")
            if not await self._authorization.can_manage_budgets(
                actor,
                budget.branch_id,
            ):
                raise AuthorizationError(
                    "Not allowed to manage this branch's budgets"
                )

            now = self._time_source.now()
            updated = replace(budget, updated_at=now)
            if allocated is not None:
                updated = replace(
                    updated,
                    allocated=allocated,
                    remaining=max(Decimal("0"), allocated - budget.spent),
                )
            if description is not None:
                updated = replace(updated, description=description)
            if status is not None:
                updated = replace(updated, status=status)
            if approve:
                updated = replace(
                    updated,
                    status=ACTIVE_BUDGET_STATUS,
                    approved_by=actor.id,
                    approved_at=now,
                )
            if not await uow.budgets.update_details(updated, budget.revision):
                raise ConcurrentUpdateError(
                    f"Budget {budget_id} changed during update"
                )
        return replace(updated, revision=budget.revision + 1)


class DeleteBudgetUseCase:
    """Delete a budget nothing has been spent against yet."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        authorization: AuthorizationResolver,
        logger=None,
    ) -> None:
        self._uow_factory = uow_factory
        self._authorization = authorization
        self._logger = logger or get_app_logger()

    async def execute(self, actor: Actor, budget_id: str) -> None:
        """Delete the budget. Only global admins may do this.

        Raises:
            AuthorizationError: If the actor is not a global admin.
            NotFoundError: If the budget id is unknown.
            InvalidStateTransition: If spending is recorded on the budget.
        """
        if not self._authorization.is_admin(actor):
            raise AuthorizationError("Only administrators can delete budgets")
        await retry_on_conflict(
            lambda: self._delete_once(budget_id),
            self._logger,
        )
        self._logger.info(f"Budget {budget_id} deleted by {actor.id}")

    async def _delete_once(self, budget_id: str) -> None:
        async with self._uow_factory() as uow:
            budget = await uow.budgets.get(budget_id)
            if budget is None:
                raise NotFoundError(f"Budget not found: {budget_id}")
            if budget.spent > 0:
                raise InvalidStateTransition(
                    "Cannot delete a budget with recorded spending"
                )
            if not await uow.budgets.delete_if_revision(
                budget_id,
                budget.revision,
            ):
                raise ConcurrentUpdateError(
                    f"Budget {budget_id} changed before it could be deleted"
                )


__all__ = [
    "ListBudgetsUseCase",
    "GetBudgetUseCase",
    "UpdateBudgetUseCase",
    "DeleteBudgetUseCase",
]
