"""Application ports package."""

from .budget_repository import BudgetRepositoryPort
from .database import DatabaseEnginePort
from .directories import (
    BranchDirectoryPort,
    PermissionStorePort,
    TimeSourcePort,
)
from .ledger_repository import LedgerRepositoryPort
from .transfer_repository import TransferRepositoryPort
from .unit_of_work import UnitOfWorkFactory, UnitOfWorkPort

__all__ = [
    "BudgetRepositoryPort",
    "DatabaseEnginePort",
    "BranchDirectoryPort",
    "PermissionStorePort",
    "TimeSourcePort",
    "LedgerRepositoryPort",
    "TransferRepositoryPort",
    "UnitOfWorkFactory",
    "UnitOfWorkPort",
]
