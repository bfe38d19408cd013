"""Use case summarizing budgeted versus spent over trailing periods."""

import asyncio
from decimal import Decimal

from branch_finance.application.ports.directories import TimeSourcePort
from branch_finance.application.ports.unit_of_work import UnitOfWorkFactory
from branch_finance.application.use_cases.budget_aggregator import (
    BudgetAggregator,
)
from branch_finance.domain.constants import DEFAULT_TREND_PERIODS
from branch_finance.domain.errors import ValidationError
from branch_finance.domain.models import (
    BudgetCategory,
    BudgetPeriod,
    PeriodGranularity,
    TrendPoint,
)
from branch_finance.domain.services import trailing_periods
from branch_finance.infrastructure.logging.logger import get_app_logger
from branch_finance.utils.decimal_utils import coerce_decimal


class TrendReporter:
    """Compute per-period budget totals against ledger expense.

    Periods share no state, so they are computed concurrently.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        aggregator: BudgetAggregator,
        time_source: TimeSourcePort,
        logger=None,
    ) -> None:
        """Initialize the reporter.

        Args:
            uow_factory: Callable opening a new unit of work.
            aggregator: Aggregator used to sum ledger expense per period.
            time_source: Port providing the current date.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._uow_factory = uow_factory
        self._aggregator = aggregator
        self._time_source = time_source
        self._logger = logger or get_app_logger()

    async def report(
        self,
        branch_id: str | None = None,
        periods: int = DEFAULT_TREND_PERIODS,
        granularity: PeriodGranularity = PeriodGranularity.MONTH,
    ) -> list[TrendPoint]:
        """Return trend points for the trailing periods, oldest first.

        Args:
            branch_id: Branch to report on, or None for every branch.
            periods: Number of periods ending at the current one.
            granularity: Month, quarter or year.

        Returns:
            list[TrendPoint]: One point per period.
        """
        if periods < 1:
            raise ValidationError("Trend period count must be at least 1")
        targets = trailing_periods(
            self._time_source.today(),
            periods,
            granularity,
        )
        points = await asyncio.gather(
            *(self._period_point(period, branch_id) for period in targets)
        )
        self._logger.info(
            f"Computed {len(points)} {granularity.value} trend points "
            f"for branch={branch_id or 'all'}"
        )
        return list(points)

    async def _period_point(
        self,
        period: BudgetPeriod,
        branch_id: str | None,
    ) -> TrendPoint:
        async with self._uow_factory() as uow:
            budgets = await uow.budgets.list_for_period(
                period,
                branch_id=branch_id,
            )
            spent = await self._aggregator.compute_actual_spending(
                branch_id,
                BudgetCategory.EXPENSE.value,
                period.year,
                period.quarter,
                period.month,
                ledger=uow.ledger,
            )
        budgeted = sum(
            (coerce_decimal(budget.allocated) for budget in budgets),
            Decimal("0"),
        )
        return TrendPoint(
            period_label=period.label,
            year=period.year,
            quarter=period.quarter,
            month=period.month,
            total_budgeted=budgeted,
            total_spent=spent,
            budget_count=len(budgets),
        )


__all__ = ["TrendReporter"]
