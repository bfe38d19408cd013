"""Composition root for wiring infrastructure adapters."""

from branch_finance.application.ports.database import DatabaseEnginePort
from branch_finance.application.ports.directories import (
    BranchDirectoryPort,
    PermissionStorePort,
    TimeSourcePort,
)
from branch_finance.application.ports.unit_of_work import UnitOfWorkFactory
from branch_finance.application.use_cases import (
    AuthorizationResolver,
    BatchProcessTransfersUseCase,
    BudgetAggregator,
    BulkBatchProcessor,
    CreateBudgetUseCase,
    DeleteBudgetUseCase,
    GetBudgetUseCase,
    LedgerJournal,
    ListBudgetAlertsUseCase,
    ListBudgetsUseCase,
    ListTransfersUseCase,
    SetAlertRulesUseCase,
    TransferStateMachine,
    TrendReporter,
    UpdateBudgetUseCase,
)
from branch_finance.infrastructure.clock import SystemTimeSource
from branch_finance.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from branch_finance.infrastructure.directories import (
    SqlAlchemyBranchDirectory,
    SqlAlchemyPermissionStore,
)
from branch_finance.infrastructure.logging.logger import get_app_logger
from branch_finance.infrastructure.settings import BranchFinanceSettings
from branch_finance.infrastructure.unit_of_work import SqlAlchemyUnitOfWork


def build_database_adapter() -> DatabaseEnginePort:
    """Return the database adapter instance."""
    return SqlAlchemyDatabaseEngineAdapter()


def build_unit_of_work_factory(
    db_port: DatabaseEnginePort | None = None,
) -> UnitOfWorkFactory:
    """Return a callable opening a new SQLAlchemy unit of work."""
    resolved_db = db_port or build_database_adapter()
    return lambda: SqlAlchemyUnitOfWork(resolved_db)


def build_branch_directory(
    db_port: DatabaseEnginePort | None = None,
) -> BranchDirectoryPort:
    """Return the branch directory adapter."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyBranchDirectory(resolved_db)


def build_permission_store(
    db_port: DatabaseEnginePort | None = None,
) -> PermissionStorePort:
    """Return the permission store adapter."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyPermissionStore(resolved_db)


class ServiceContainer:
    """Wire every use case against one database and one settings object.

    Args:
        db_port: Database adapter; defaults to the environment engine.
        settings: Runtime settings; defaults to ``from_env()``.
        time_source: Clock; defaults to the system clock.
    """

    def __init__(
        self,
        db_port: DatabaseEnginePort | None = None,
        settings: BranchFinanceSettings | None = None,
        time_source: TimeSourcePort | None = None,
    ) -> None:
        self.db_port = db_port or build_database_adapter()
        self.settings = settings or BranchFinanceSettings.from_env()
        self.time_source = time_source or SystemTimeSource()
        self.logger = get_app_logger()

        self.uow_factory = build_unit_of_work_factory(self.db_port)
        self.branch_directory = build_branch_directory(self.db_port)
        self.permission_store = build_permission_store(self.db_port)

        self.authorization = AuthorizationResolver(
            self.permission_store,
            admin_roles=self.settings.admin_roles,
            logger=self.logger,
        )
        self.processor = BulkBatchProcessor(
            concurrency=self.settings.batch_concurrency,
            item_timeout=self.settings.batch_item_timeout,
            logger=self.logger,
        )
        self.journal = LedgerJournal(
            branch_directory=self.branch_directory,
            logger=self.logger,
        )
        self.state_machine = TransferStateMachine(
            self.uow_factory,
            self.authorization,
            self.journal,
            self.branch_directory,
            self.time_source,
            default_currency=self.settings.default_currency,
            logger=self.logger,
        )
        self.aggregator = BudgetAggregator(
            self.uow_factory,
            self.time_source,
            processor=self.processor,
            authorization=self.authorization,
            logger=self.logger,
        )
        self.trend_reporter = TrendReporter(
            self.uow_factory,
            self.aggregator,
            self.time_source,
            logger=self.logger,
        )

    def batch_transfers(self) -> BatchProcessTransfersUseCase:
        return BatchProcessTransfersUseCase(self.state_machine, self.processor)

    def list_transfers(self) -> ListTransfersUseCase:
        return ListTransfersUseCase(
            self.uow_factory,
            self.authorization,
            self.branch_directory,
            logger=self.logger,
        )

    def list_budget_alerts(self) -> ListBudgetAlertsUseCase:
        return ListBudgetAlertsUseCase(
            self.uow_factory,
            self.branch_directory,
            self.time_source,
            self.trend_reporter,
            trend_periods=self.settings.trend_periods,
            logger=self.logger,
        )

    def set_alert_rules(self) -> SetAlertRulesUseCase:
        return SetAlertRulesUseCase(
            self.uow_factory,
            self.authorization,
            self.time_source,
            default_warning=self.settings.warning_threshold,
            default_critical=self.settings.critical_threshold,
            logger=self.logger,
        )

    def create_budget(self) -> CreateBudgetUseCase:
        return CreateBudgetUseCase(
            self.uow_factory,
            self.authorization,
            self.branch_directory,
            self.time_source,
            logger=self.logger,
        )

    def list_budgets(self) -> ListBudgetsUseCase:
        return ListBudgetsUseCase(
            self.uow_factory,
            self.branch_directory,
            self.time_source,
            logger=self.logger,
        )

    def get_budget(self) -> GetBudgetUseCase:
        return GetBudgetUseCase(self.uow_factory, self.branch_directory)

    def update_budget(self) -> UpdateBudgetUseCase:
        return UpdateBudgetUseCase(
            self.uow_factory,
            self.authorization,
            self.time_source,
            logger=self.logger,
        )

    def delete_budget(self) -> DeleteBudgetUseCase:
        return DeleteBudgetUseCase(
            self.uow_factory,
            self.authorization,
            logger=self.logger,
        )


def build_container(
    db_port: DatabaseEnginePort | None = None,
) -> ServiceContainer:
    """Return a container configured from the environment."""
    return ServiceContainer(db_port=db_port)


__all__ = [
    "build_database_adapter",
    "build_unit_of_work_factory",
    "build_branch_directory",
    "build_permission_store",
    "ServiceContainer",
    "build_container",
]
