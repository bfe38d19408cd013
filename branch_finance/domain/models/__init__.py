"""Domain models package."""

from .alerts import (
    AlertClassification,
    AlertSeverity,
    AlertSummary,
    AlertThresholds,
    BudgetAlert,
    BudgetAlertsReport,
    TrendPoint,
)
from .batch import BatchItemError, BatchItemResult, BatchOutcome, BatchSummary
from .budgets import (
    AlertRules,
    BranchBudget,
    BudgetCategory,
    BudgetMetadata,
    BudgetPeriod,
    BudgetView,
    PeriodGranularity,
)
from .ledger import LedgerEntryType, LedgerMetadata, LedgerTransaction
from .permissions import Actor, BranchPermission
from .transfers import (
    Branch,
    BranchTransfer,
    TransferAction,
    TransferListing,
    TransferMetadata,
    TransferStats,
    TransferStatus,
    TransferView,
)

__all__ = [
    "AlertClassification",
    "AlertSeverity",
    "AlertSummary",
    "AlertThresholds",
    "BudgetAlert",
    "BudgetAlertsReport",
    "TrendPoint",
    "BatchItemError",
    "BatchItemResult",
    "BatchOutcome",
    "BatchSummary",
    "AlertRules",
    "BranchBudget",
    "BudgetCategory",
    "BudgetMetadata",
    "BudgetPeriod",
    "BudgetView",
    "PeriodGranularity",
    "LedgerEntryType",
    "LedgerMetadata",
    "LedgerTransaction",
    "Actor",
    "BranchPermission",
    "Branch",
    "BranchTransfer",
    "TransferAction",
    "TransferListing",
    "TransferMetadata",
    "TransferStats",
    "TransferStatus",
    "TransferView",
]
