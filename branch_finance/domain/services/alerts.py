"""Budget usage classification and alert rollups."""

from collections.abc import Iterable
from decimal import Decimal

from branch_finance.domain.constants import CATEGORY_LABELS
from branch_finance.domain.models import (
    AlertClassification,
    AlertSeverity,
    AlertSummary,
    AlertThresholds,
    BranchBudget,
    BudgetAlert,
)
from branch_finance.utils.decimal_utils import coerce_decimal, percentage

HUNDRED = Decimal("100")


def category_label(category: str) -> str:
    """Return the display label for a budget category."""
    return CATEGORY_LABELS.get(category, category.lower())


def classify_usage(
    allocated,
    spent,
    category: str,
    thresholds: AlertThresholds,
) -> AlertClassification | None:
    """Classify spend against allocation.

    Args:
        allocated: Allocated amount.
        spent: Spent amount.
        category: Budget category used for the message label.
        thresholds: Warning and critical usage percentages.

    Returns:
        AlertClassification | None: Severity and message, or None when
        usage is below the warning threshold.
    """
    usage = percentage(spent, allocated)
    label = category_label(category)
    if usage >= HUNDRED:
        return AlertClassification(
            severity=AlertSeverity.EXCEEDED,
            usage_percentage=usage,
            message=(
                f"{label.capitalize()} budget exceeded by "
                f"{usage - HUNDRED:.1f}%"
            ),
        )
    if usage >= thresholds.critical:
        return AlertClassification(
            severity=AlertSeverity.CRITICAL,
            usage_percentage=usage,
            message=(
                f"{label.capitalize()} budget nearly exhausted ({usage:.1f}%)"
            ),
        )
    if usage >= thresholds.warning:
        return AlertClassification(
            severity=AlertSeverity.WARNING,
            usage_percentage=usage,
            message=f"{usage:.1f}% of {label} budget used",
        )
    return None


def resolve_thresholds(
    budget: BranchBudget,
    defaults: AlertThresholds,
) -> AlertThresholds | None:
    """Return the thresholds for a budget, honoring its alert rules.

    Returns None when the budget's rules disable alerting.
    """
    rules = budget.metadata.alert_rules
    if rules is None:
        return defaults
    if not rules.enabled:
        return None
    return AlertThresholds(
        warning=rules.warning_threshold,
        critical=rules.critical_threshold,
    )


def summarize_alerts(alerts: Iterable[BudgetAlert]) -> AlertSummary:
    """Count alerts by severity and total the overage of exceeded ones."""
    alerts = list(alerts)
    counts = {severity: 0 for severity in AlertSeverity}
    over_budget = Decimal("0")
    for alert in alerts:
        counts[alert.severity] += 1
        if alert.severity is AlertSeverity.EXCEEDED:
            over_budget += coerce_decimal(alert.spent) - coerce_decimal(
                alert.allocated
            )
    return AlertSummary(
        total_alerts=len(alerts),
        warning_alerts=counts[AlertSeverity.WARNING],
        critical_alerts=counts[AlertSeverity.CRITICAL],
        exceeded_alerts=counts[AlertSeverity.EXCEEDED],
        branches_with_alerts=len({alert.branch_id for alert in alerts}),
        total_over_budget=over_budget,
    )


__all__ = [
    "category_label",
    "classify_usage",
    "resolve_thresholds",
    "summarize_alerts",
]
