"""Domain models for budget alerts and trends."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class AlertSeverity(str, Enum):
    """Closeness of spend to allocation."""

    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    EXCEEDED = "EXCEEDED"


@dataclass(frozen=True)
class AlertThresholds:
    """Usage percentages at which warnings and critical alerts start."""

    warning: Decimal
    critical: Decimal


@dataclass(frozen=True)
class AlertClassification:
    """Severity and message computed for a usage percentage."""

    severity: AlertSeverity
    usage_percentage: Decimal
    message: str


@dataclass(frozen=True)
class BudgetAlert:
    """Alert view joining a budget with its branch and thresholds."""

    id: str
    budget_id: str
    branch_id: str
    branch_name: str
    branch_code: str
    year: int
    quarter: int | None
    month: int | None
    category: str
    allocated: Decimal
    spent: Decimal
    remaining: Decimal
    usage_percentage: Decimal
    severity: AlertSeverity
    message: str
    currency: str
    last_updated: datetime


@dataclass(frozen=True)
class AlertSummary:
    """Rollup of alerts by severity."""

    total_alerts: int
    warning_alerts: int
    critical_alerts: int
    exceeded_alerts: int
    branches_with_alerts: int
    total_over_budget: Decimal


@dataclass(frozen=True)
class TrendPoint:
    """Budgeted versus spent totals for one period."""

    period_label: str
    year: int
    quarter: int | None
    month: int | None
    total_budgeted: Decimal
    total_spent: Decimal
    budget_count: int

    @property
    def variance(self) -> Decimal:
        """Return total_budgeted minus total_spent."""
        return self.total_budgeted - self.total_spent


@dataclass(frozen=True)
class BudgetAlertsReport:
    """Alerts, their summary, trends and the thresholds applied."""

    alerts: list[BudgetAlert]
    summary: AlertSummary
    trends: list[TrendPoint]
    thresholds: AlertThresholds


__all__ = [
    "AlertSeverity",
    "AlertThresholds",
    "AlertClassification",
    "BudgetAlert",
    "AlertSummary",
    "TrendPoint",
    "BudgetAlertsReport",
]
