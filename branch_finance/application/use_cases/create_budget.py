"""Use case creating a branch budget."""

import uuid
from collections.abc import Callable
from decimal import Decimal

from branch_finance.application.ports.directories import (
    BranchDirectoryPort,
    TimeSourcePort,
)
from branch_finance.application.ports.unit_of_work import UnitOfWorkFactory
from branch_finance.application.use_cases.authorization import (
    AuthorizationResolver,
)
from branch_finance.domain.constants import ACTIVE_BUDGET_STATUS
from branch_finance.domain.errors import AuthorizationError, ValidationError
from branch_finance.domain.models import Actor, BranchBudget
from branch_finance.domain.services import validate_budget_request
from branch_finance.infrastructure.logging.logger import get_app_logger


class CreateBudgetUseCase:
    """Create an ACTIVE budget with nothing spent yet."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        authorization: AuthorizationResolver,
        branch_directory: BranchDirectoryPort,
        time_source: TimeSourcePort,
        logger=None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._authorization = authorization
        self._branch_directory = branch_directory
        self._time_source = time_source
        self._logger = logger or get_app_logger()
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

    async def execute(
        self,
        actor: Actor,
        branch_id: str,
        year: int,
        category: str,
        allocated,
        quarter: int | None = None,
        month: int | None = None,
        description: str | None = None,
    ) -> BranchBudget:
        """Create the budget.

        A monthly budget is stored with the quarter containing its month.

        Raises:
            ValidationError: On an invalid period, category or amount
                (including fractions of a cent), an unknown branch, or a
                duplicate budget for the same branch, period and category.
            AuthorizationError: If the actor may not manage the branch.
        """
        period, budget_category, allocated_value = validate_budget_request(
            year,
            quarter,
            month,
            category,
            allocated,
        )
        branch = await self._branch_directory.get_branch(branch_id)
        if branch is None:
            raise ValidationError(f"Branch not found: {branch_id}")
        if not await self._authorization.can_manage_budgets(actor, branch_id):
            raise AuthorizationError(
                "Not allowed to manage this branch's budgets"
            )

        budget = BranchBudget(
            id=self._id_factory(),
            branch_id=branch_id,
            year=year,
            quarter=period.quarter,
            month=period.month,
            category=budget_category,
            allocated=allocated_value,
            spent=Decimal("0"),
            remaining=allocated_value,
            currency=branch.currency,
            status=ACTIVE_BUDGET_STATUS,
            updated_at=self._time_source.now(),
            description=description,
            created_by=actor.id,
        )
        async with self._uow_factory() as uow:
            duplicate = await uow.budgets.find_duplicate(
                branch_id,
                period,
                budget_category.value,
            )
            if duplicate is not None:
                raise ValidationError(
                    "A budget already exists for this branch, period "
                    "and category"
                )
            await uow.budgets.add(budget)
        self._logger.info(
            f"Budget {budget.id} created for {branch_id} {period.label} "
            f"{budget_category.value}: {allocated_value}"
        )
        return budget


__all__ = ["CreateBudgetUseCase"]
