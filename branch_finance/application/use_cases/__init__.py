"""Application use cases package."""

from .authorization import AuthorizationResolver
from .batch_transfers import BatchProcessTransfersUseCase
from .budget_aggregator import BudgetAggregator
from .budget_alerts import (
    AlertRuleRequest,
    ListBudgetAlertsUseCase,
    SetAlertRulesUseCase,
)
from .bulk_batch import BulkBatchProcessor
from .create_budget import CreateBudgetUseCase
from .ledger_journal import LedgerJournal
from .list_transfers import ListTransfersUseCase
from .manage_budgets import (
    DeleteBudgetUseCase,
    GetBudgetUseCase,
    ListBudgetsUseCase,
    UpdateBudgetUseCase,
)
from .transfer_workflow import TransferStateMachine
from .trend_reporter import TrendReporter

__all__ = [
    "AuthorizationResolver",
    "BatchProcessTransfersUseCase",
    "BudgetAggregator",
    "AlertRuleRequest",
    "ListBudgetAlertsUseCase",
    "SetAlertRulesUseCase",
    "BulkBatchProcessor",
    "CreateBudgetUseCase",
    "LedgerJournal",
    "ListTransfersUseCase",
    "ListBudgetsUseCase",
    "GetBudgetUseCase",
    "UpdateBudgetUseCase",
    "DeleteBudgetUseCase",
    "TransferStateMachine",
    "TrendReporter",
]
