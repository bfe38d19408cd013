"""Use case recomputing budget spend from the ledger."""

from collections.abc import Sequence
from dataclasses import replace
from decimal import Decimal

from branch_finance.application.ports.directories import TimeSourcePort
from branch_finance.application.ports.ledger_repository import (
    LedgerRepositoryPort,
)
from branch_finance.application.ports.unit_of_work import UnitOfWorkFactory
from branch_finance.application.use_cases.authorization import (
    AuthorizationResolver,
)
from branch_finance.application.use_cases.bulk_batch import BulkBatchProcessor
from branch_finance.application.use_cases.optimistic import retry_on_conflict
from branch_finance.domain.constants import BUDGET_LEDGER_CATEGORIES
from branch_finance.domain.errors import (
    AuthorizationError,
    ConcurrentUpdateError,
    NotFoundError,
    ValidationError,
)
from branch_finance.domain.models import (
    Actor,
    BatchOutcome,
    BranchBudget,
    BudgetCategory,
    BudgetPeriod,
    LedgerEntryType,
)
from branch_finance.domain.services import is_future_period, period_bounds
from branch_finance.infrastructure.logging.logger import get_app_logger
from branch_finance.utils.decimal_utils import coerce_decimal, quantize_money


def ledger_filter_for(category: str) -> tuple[LedgerEntryType, tuple[str, ...]]:
    """Map a budget category to the ledger type and categories it sums.

    Raises:
        ValidationError: If the category is unknown.
    """
    try:
        budget_category = BudgetCategory(category)
    except ValueError as exc:
        raise ValidationError(f"Unknown budget category: {category}") from exc
    entry_type = (
        LedgerEntryType.INCOME
        if budget_category is BudgetCategory.INCOME
        else LedgerEntryType.EXPENSE
    )
    return entry_type, BUDGET_LEDGER_CATEGORIES[budget_category.value]


class BudgetAggregator:
    """Recompute ``spent`` and ``remaining`` for budgets.

    This is the only writer of those two fields.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        time_source: TimeSourcePort,
        processor: BulkBatchProcessor | None = None,
        authorization: AuthorizationResolver | None = None,
        logger=None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            uow_factory: Callable opening a new unit of work.
            time_source: Port providing the current time.
            processor: Bulk processor used by :meth:`recompute_many`.
            authorization: Resolver checking budget management rights in
                :meth:`recompute_many`.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._uow_factory = uow_factory
        self._time_source = time_source
        self._logger = logger or get_app_logger()
        self._processor = processor or BulkBatchProcessor(logger=self._logger)
        self._authorization = authorization

    async def compute_actual_spending(
        self,
        branch_id: str | None,
        category: str,
        year: int,
        quarter: int | None = None,
        month: int | None = None,
        ledger: LedgerRepositoryPort | None = None,
    ) -> Decimal:
        """Sum the ledger rows counted against a budget category.

        Args:
            branch_id: Branch to sum, or None for every branch.
            category: Budget category (INCOME, EXPENSE or INVESTMENT).
            year: Period year.
            quarter: Optional period quarter.
            month: Optional period month; wins over quarter.
            ledger: Ledger repository to read from; a fresh unit of work is
                opened when omitted.

        Returns:
            Decimal: Total amount over the resolved ``[start, end)`` range.
        """
        entry_type, categories = ledger_filter_for(category)
        start, end = period_bounds(
            BudgetPeriod(year=year, quarter=quarter, month=month)
        )
        if ledger is None:
            async with self._uow_factory() as uow:
                entries = await uow.ledger.fetch_entries(
                    entry_type,
                    categories,
                    start,
                    end,
                    branch_id=branch_id,
                )
        else:
            entries = await ledger.fetch_entries(
                entry_type,
                categories,
                start,
                end,
                branch_id=branch_id,
            )
        total = sum(
            (coerce_decimal(entry.amount) for entry in entries),
            Decimal("0"),
        )
        return quantize_money(total)

    async def recompute(
        self,
        budget_id: str,
        actor_id: str | None = None,
    ) -> BranchBudget | None:
        """Recompute one budget from the ledger.

        The write is guarded by the budget revision; when another writer
        commits in between, the recompute starts over from the new state.

        Returns:
            BranchBudget | None: Updated budget, or None when its period has
            not started yet.

        Raises:
            NotFoundError: If the budget id is unknown.
            ConcurrentUpdateError: If every attempt lost its race.
        """
        return await retry_on_conflict(
            lambda: self._recompute_once(budget_id, actor_id),
            self._logger,
        )

    async def _recompute_once(
        self,
        budget_id: str,
        actor_id: str | None,
    ) -> BranchBudget | None:
        async with self._uow_factory() as uow:
            budget = await uow.budgets.get(budget_id)
            if budget is None:
                raise NotFoundError(f"Budget not found: {budget_id}")
            if is_future_period(budget.period, self._time_source.today()):
                self._logger.info(
                    f"Skipping budget {budget_id}: period {budget.period.label} "
                    "has not started"
                )
                return None

            spent = await self.compute_actual_spending(
                budget.branch_id,
                budget.category.value,
                budget.year,
                budget.quarter,
                budget.month,
                ledger=uow.ledger,
            )
            remaining = max(Decimal("0"), budget.allocated - spent)
            now = self._time_source.now()
            metadata = replace(
                budget.metadata,
                last_spending_update=now,
                updated_by=actor_id,
            )
            written = await uow.budgets.update_spending(
                budget_id,
                spent,
                remaining,
                metadata,
                now,
                budget.revision,
            )
            if not written:
                raise ConcurrentUpdateError(
                    f"Budget {budget_id} changed during recompute"
                )
        self._logger.info(
            f"Budget {budget_id} recomputed: spent={spent}, remaining={remaining}"
        )
        return replace(
            budget,
            spent=spent,
            remaining=remaining,
            metadata=metadata,
            updated_at=now,
            revision=budget.revision + 1,
        )

    async def recompute_many(
        self,
        budget_ids: Sequence[str],
        actor: Actor,
    ) -> BatchOutcome:
        """Recompute several budgets with independent outcomes."""

        async def handle(budget_id: str):
            if self._authorization is not None:
                await self._require_manage(actor, budget_id)
            return await self.recompute(budget_id, actor.id)

        return await self._processor.run(
            list(budget_ids),
            handle,
            label="budget recompute",
        )

    async def _require_manage(self, actor: Actor, budget_id: str) -> None:
        async with self._uow_factory() as uow:
            budget = await uow.budgets.get(budget_id)
        if budget is None:
            raise NotFoundError(f"Budget not found: {budget_id}")
        if not await self._authorization.can_manage_budgets(
            actor,
            budget.branch_id,
        ):
            raise AuthorizationError("Not allowed to manage this budget")


__all__ = ["BudgetAggregator", "ledger_filter_for"]
