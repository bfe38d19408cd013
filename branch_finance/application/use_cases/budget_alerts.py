"""Use cases for budget threshold alerts and their rules."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, replace

from branch_finance.application.ports.directories import (
    BranchDirectoryPort,
    TimeSourcePort,
)
from branch_finance.application.ports.unit_of_work import UnitOfWorkFactory
from branch_finance.application.use_cases.authorization import (
    AuthorizationResolver,
)
from branch_finance.application.use_cases.optimistic import retry_on_conflict
from branch_finance.application.use_cases.trend_reporter import TrendReporter
from branch_finance.domain.constants import (
    DEFAULT_CRITICAL_THRESHOLD,
    DEFAULT_TREND_PERIODS,
    DEFAULT_WARNING_THRESHOLD,
)
from branch_finance.domain.errors import (
    AuthorizationError,
    ConcurrentUpdateError,
)
from branch_finance.domain.models import (
    Actor,
    AlertRules,
    AlertThresholds,
    BranchBudget,
    BudgetAlert,
    BudgetAlertsReport,
)
from branch_finance.domain.services import (
    classify_usage,
    is_future_period,
    resolve_thresholds,
    summarize_alerts,
    validate_thresholds,
)
from branch_finance.infrastructure.logging.logger import get_app_logger


class ListBudgetAlertsUseCase:
    """Classify active budgets and attach the trailing trend."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        branch_directory: BranchDirectoryPort,
        time_source: TimeSourcePort,
        trend_reporter: TrendReporter,
        trend_periods: int = DEFAULT_TREND_PERIODS,
        logger=None,
    ) -> None:
        self._uow_factory = uow_factory
        self._branch_directory = branch_directory
        self._time_source = time_source
        self._trend_reporter = trend_reporter
        self._trend_periods = trend_periods
        self._logger = logger or get_app_logger()

    async def execute(
        self,
        branch_id: str | None = None,
        warning_threshold=DEFAULT_WARNING_THRESHOLD,
        critical_threshold=DEFAULT_CRITICAL_THRESHOLD,
    ) -> BudgetAlertsReport:
        """Return alerts for ACTIVE budgets whose period has started.

        Budget alert rules override the caller thresholds; disabled rules
        silence the budget. Budgets whose branch cannot be resolved are
        left out.

        Args:
            branch_id: Optional branch filter.
            warning_threshold: Default warning usage percentage.
            critical_threshold: Default critical usage percentage.

        Returns:
            BudgetAlertsReport: Alerts, summary, trends and thresholds.
        """
        defaults = validate_thresholds(warning_threshold, critical_threshold)
        async with self._uow_factory() as uow:
            budgets = await uow.budgets.list_active(branch_id=branch_id)

        today = self._time_source.today()
        current = [
            budget
            for budget in budgets
            if not is_future_period(budget.period, today)
        ]
        branch_ids = sorted({budget.branch_id for budget in current})
        branches = await asyncio.gather(
            *(self._branch_directory.get_branch(bid) for bid in branch_ids)
        )
        branch_map = dict(zip(branch_ids, branches))

        alerts: list[BudgetAlert] = []
        for budget in current:
            branch = branch_map.get(budget.branch_id)
            thresholds = resolve_thresholds(budget, defaults)
            if branch is None or thresholds is None:
                continue
            classification = classify_usage(
                budget.allocated,
                budget.spent,
                budget.category.value,
                thresholds,
            )
            if classification is None:
                continue
            alerts.append(
                BudgetAlert(
                    id=f"alert-{budget.id}",
                    budget_id=budget.id,
                    branch_id=budget.branch_id,
                    branch_name=branch.name,
                    branch_code=branch.code,
                    year=budget.year,
                    quarter=budget.quarter,
                    month=budget.month,
                    category=budget.category.value,
                    allocated=budget.allocated,
                    spent=budget.spent,
                    remaining=budget.remaining,
                    usage_percentage=classification.usage_percentage,
                    severity=classification.severity,
                    message=classification.message,
                    currency=budget.currency,
                    last_updated=budget.updated_at,
                )
            )

        trends = await self._trend_reporter.report(
            branch_id=branch_id,
            periods=self._trend_periods,
        )
        summary = summarize_alerts(alerts)
        self._logger.info(
            f"Budget alerts: {summary.total_alerts} alerts across "
            f"{summary.branches_with_alerts} branches"
        )
        return BudgetAlertsReport(
            alerts=alerts,
            summary=summary,
            trends=trends,
            thresholds=defaults,
        )


@dataclass(frozen=True)
class AlertRuleRequest:
    """Requested alert rule for one budget.

    Missing thresholds fall back to the configured defaults.
    """

    budget_id: str
    warning_threshold: object = None
    critical_threshold: object = None
    notifications: tuple[str, ...] = ()
    enabled: bool = True


class SetAlertRulesUseCase:
    """Store per-budget alert rule overrides in budget metadata."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        authorization: AuthorizationResolver,
        time_source: TimeSourcePort,
        default_warning=DEFAULT_WARNING_THRESHOLD,
        default_critical=DEFAULT_CRITICAL_THRESHOLD,
        logger=None,
    ) -> None:
        self._uow_factory = uow_factory
        self._authorization = authorization
        self._time_source = time_source
        self._default_warning = default_warning
        self._default_critical = default_critical
        self._logger = logger or get_app_logger()

    async def execute(
        self,
        actor: Actor,
        rules: Sequence[AlertRuleRequest],
    ) -> int:
        """Validate then write every rule in a single unit of work.

        Rules naming unknown budgets are skipped. Each write is guarded by
        the budget revision; if any budget changed meanwhile the whole
        unit of work rolls back and starts over.

        Returns:
            int: Number of rules written.

        Raises:
            ValidationError: If any rule has invalid thresholds.
            AuthorizationError: If the actor may not manage a budget's
                branch.
            ConcurrentUpdateError: If every attempt lost its race.
        """
        parsed = [
            (
                rule,
                validate_thresholds(
                    self._default_warning
                    if rule.warning_threshold is None
                    else rule.warning_threshold,
                    self._default_critical
                    if rule.critical_threshold is None
                    else rule.critical_threshold,
                ),
            )
            for rule in rules
        ]
        written = await retry_on_conflict(
            lambda: self._write_rules(actor, parsed),
            self._logger,
        )
        self._logger.info(f"Stored {written} alert rules for {actor.id}")
        return written

    async def _write_rules(
        self,
        actor: Actor,
        parsed: list[tuple[AlertRuleRequest, AlertThresholds]],
    ) -> int:
        written = 0
        async with self._uow_factory() as uow:
            targets: list[tuple[BranchBudget, AlertRules]] = []
            for rule, thresholds in parsed:
                budget = await uow.budgets.get(rule.budget_id)
                if budget is None:
                    self._logger.warning(
                        f"Skipping alert rule for unknown budget {rule.budget_id}"
                    )
                    continue
                if not await self._authorization.can_manage_budgets(
                    actor,
                    budget.branch_id,
                ):
                    raise AuthorizationError(
                        "Not allowed to manage this branch's budgets"
                    )
                targets.append(
                    (
                        budget,
                        AlertRules(
                            warning_threshold=thresholds.warning,
                            critical_threshold=thresholds.critical,
                            notifications=tuple(rule.notifications),
                            enabled=rule.enabled,
                        ),
                    )
                )
            now = self._time_source.now()
            for budget, alert_rules in targets:
                stored = await uow.budgets.update_metadata(
                    budget.id,
                    replace(budget.metadata, alert_rules=alert_rules),
                    now,
                    budget.revision,
                )
                if not stored:
                    raise ConcurrentUpdateError(
                        f"Budget {budget.id} changed while storing alert rules"
                    )
                written += 1
        return written


__all__ = [
    "ListBudgetAlertsUseCase",
    "AlertRuleRequest",
    "SetAlertRulesUseCase",
]
