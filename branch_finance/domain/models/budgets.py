"""Domain models for branch budgets."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from branch_finance.domain.models.transfers import Branch
from branch_finance.utils.decimal_utils import coerce_decimal


class BudgetCategory(str, Enum):
    """Budget categories tracked per branch and period."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    INVESTMENT = "INVESTMENT"


class PeriodGranularity(str, Enum):
    """Granularity of a budget period."""

    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


@dataclass(frozen=True)
class BudgetPeriod:
    """Budget period; the most specific populated field wins.

    Attributes:
        year: Calendar year.
        quarter: Optional quarter (1-4).
        month: Optional month (1-12).
    """

    year: int
    quarter: int | None = None
    month: int | None = None

    @property
    def granularity(self) -> PeriodGranularity:
        if self.month is not None:
            return PeriodGranularity.MONTH
        if self.quarter is not None:
            return PeriodGranularity.QUARTER
        return PeriodGranularity.YEAR

    @property
    def label(self) -> str:
        if self.month is not None:
            return f"{self.year}-{self.month:02d}"
        if self.quarter is not None:
            return f"{self.year}-Q{self.quarter}"
        return str(self.year)


@dataclass(frozen=True)
class AlertRules:
    """Per-budget alert overrides set by administrators."""

    warning_threshold: Decimal
    critical_threshold: Decimal
    notifications: tuple[str, ...] = ()
    enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "warningThreshold": str(self.warning_threshold),
            "criticalThreshold": str(self.critical_threshold),
            "notifications": list(self.notifications),
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "AlertRules":
        return cls(
            warning_threshold=coerce_decimal(raw.get("warningThreshold")),
            critical_threshold=coerce_decimal(raw.get("criticalThreshold")),
            notifications=tuple(raw.get("notifications") or ()),
            enabled=raw.get("enabled", True) is not False,
        )


@dataclass(frozen=True)
class BudgetMetadata:
    """Versioned side-record attached to a budget."""

    version: int = 1
    alert_rules: AlertRules | None = None
    last_spending_update: datetime | None = None
    updated_by: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "alertRules": (
                self.alert_rules.to_dict() if self.alert_rules else None
            ),
            "lastSpendingUpdate": (
                self.last_spending_update.isoformat()
                if self.last_spending_update
                else None
            ),
            "updatedBy": self.updated_by,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "BudgetMetadata":
        raw = raw or {}
        rules = raw.get("alertRules")
        stamp = raw.get("lastSpendingUpdate")
        return cls(
            version=int(raw.get("version", 1)),
            alert_rules=AlertRules.from_dict(rules) if rules else None,
            last_spending_update=(
                datetime.fromisoformat(stamp) if stamp else None
            ),
            updated_by=raw.get("updatedBy"),
        )


@dataclass(frozen=True)
class BranchBudget:
    """Per-branch, per-period allocation measured against the ledger.

    ``spent`` and ``remaining`` are derived; only the budget aggregator
    writes them. ``revision`` grows by one on every stored write and is
    the compare-and-set token for the next one.
    """

    id: str
    branch_id: str
    year: int
    category: BudgetCategory
    allocated: Decimal
    spent: Decimal
    remaining: Decimal
    currency: str
    status: str
    updated_at: datetime
    quarter: int | None = None
    month: int | None = None
    description: str | None = None
    created_by: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    metadata: BudgetMetadata = field(default_factory=BudgetMetadata)
    revision: int = 0

    @property
    def period(self) -> BudgetPeriod:
        return BudgetPeriod(
            year=self.year,
            quarter=self.quarter,
            month=self.month,
        )


@dataclass(frozen=True)
class BudgetView:
    """Budget joined with its resolved branch for listings."""

    budget: BranchBudget
    branch: Branch | None


__all__ = [
    "BudgetCategory",
    "PeriodGranularity",
    "BudgetPeriod",
    "AlertRules",
    "BudgetMetadata",
    "BranchBudget",
    "BudgetView",
]
