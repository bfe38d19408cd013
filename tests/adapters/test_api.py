"""Tests for the BranchFinanceApi envelopes."""

import asyncio
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from branch_finance.adapters.api import BranchFinanceApi, to_jsonable
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
from branch_finance.domain.errors import StorageError
from branch_finance.domain.models import Actor
from tests.fakes import (
    FakeBranchDirectory,
    FakePermissionStore,
    FixedTimeSource,
    InMemoryStore,
    make_branch,
    make_budget,
    make_transfer,
    uow_factory_for,
)

ADMIN = Actor(id="admin", role="ADMIN")
STAFF = Actor(id="u1", role="STAFF", home_branch_id="a")
NOW = datetime(2024, 3, 20, 8, 0)


def _container(store):
    logger = MagicMock()
    uow_factory = uow_factory_for(store)
    clock = FixedTimeSource(NOW)
    directory = FakeBranchDirectory(make_branch("a"), make_branch("b"))
    authorization = AuthorizationResolver(FakePermissionStore(), logger=logger)
    processor = BulkBatchProcessor(logger=logger)
    machine = TransferStateMachine(
        uow_factory,
        authorization,
        LedgerJournal(branch_directory=directory, logger=logger),
        directory,
        clock,
        logger=logger,
    )
    aggregator = BudgetAggregator(
        uow_factory,
        clock,
        processor=processor,
        authorization=authorization,
        logger=logger,
    )
    reporter = TrendReporter(uow_factory, aggregator, clock, logger=logger)
    return SimpleNamespace(
        state_machine=machine,
        aggregator=aggregator,
        batch_transfers=lambda: BatchProcessTransfersUseCase(
            machine,
            processor,
        ),
        list_transfers=lambda: ListTransfersUseCase(
            uow_factory,
            authorization,
            directory,
            logger=logger,
        ),
        list_budget_alerts=lambda: ListBudgetAlertsUseCase(
            uow_factory,
            directory,
            clock,
            reporter,
            trend_periods=2,
            logger=logger,
        ),
        set_alert_rules=lambda: SetAlertRulesUseCase(
            uow_factory,
            authorization,
            clock,
            logger=logger,
        ),
        create_budget=lambda: CreateBudgetUseCase(
            uow_factory,
            authorization,
            directory,
            clock,
            logger=logger,
        ),
        list_budgets=lambda: ListBudgetsUseCase(
            uow_factory,
            directory,
            clock,
            logger=logger,
        ),
        get_budget=lambda: GetBudgetUseCase(uow_factory, directory),
        update_budget=lambda: UpdateBudgetUseCase(
            uow_factory,
            authorization,
            clock,
            logger=logger,
        ),
        delete_budget=lambda: DeleteBudgetUseCase(
            uow_factory,
            authorization,
            logger=logger,
        ),
    )


def _api(store, logger=None):
    return BranchFinanceApi(_container(store), logger=logger or MagicMock())


def test_missing_actor_is_unauthenticated():
    """Every endpoint answers 401 without an actor."""
    api = _api(InMemoryStore())

    response = asyncio.run(api.list_transfers(None, "pending"))

    assert response.status_code == 401
    assert response.body == {"error": "Authentication required"}


def test_request_then_approve_serializes_values():
    """Decimals become strings and datetimes ISO strings."""
    store = InMemoryStore()
    api = _api(store)

    created = asyncio.run(
        api.request_transfer(STAFF, "a", "b", "150.25", description="Float")
    )
    transfer_id = created.body["transfer"]["id"]
    approved = asyncio.run(api.update_transfer(ADMIN, transfer_id, "approve"))

    assert created.status_code == 201
    assert created.body["transfer"]["amount"] == "150.25"
    assert created.body["transfer"]["status"] == "PENDING"
    assert approved.status_code == 200
    assert approved.body["transfer"]["approved_at"] == "2024-03-20T08:00:00"
    assert approved.body["transfer"]["metadata"]["batchApproval"] is False
    assert len(store.ledger) == 2


@pytest.mark.parametrize(
    "call, status",
    [
        (lambda api: api.request_transfer(ADMIN, "a", "a", "10"), 400),
        (lambda api: api.get_transfer(ADMIN, "missing"), 404),
        (lambda api: api.update_transfer(STAFF, "t1", "approve"), 403),
        (lambda api: api.update_transfer(ADMIN, "t1", "complete"), 400),
        (lambda api: api.update_transfer(ADMIN, "t1", "cancel"), 400),
        (lambda api: api.delete_transfer(STAFF, "t1"), 403),
        (lambda api: api.list_transfers(ADMIN, "everything"), 400),
    ],
)
def test_errors_map_to_status_codes(call, status):
    """Domain errors map to their status code with an error envelope."""
    store = InMemoryStore()
    store.transfers["t1"] = make_transfer("t1")

    response = asyncio.run(call(_api(store)))

    assert response.status_code == status
    assert set(response.body) == {"error"}


def test_unexpected_errors_are_masked_and_logged():
    """Unknown failures answer 500 and log the traceback."""
    logger = MagicMock()
    api = _api(InMemoryStore(), logger=logger)
    api._container.state_machine.get = AsyncMock(side_effect=KeyError("x"))

    response = asyncio.run(api.get_transfer(ADMIN, "t1"))

    assert response.status_code == 500
    assert response.body == {"error": "Internal server error"}
    logger.exception.assert_called_once()


def test_storage_errors_answer_500_with_message():
    """StorageError keeps its message."""
    api = _api(InMemoryStore())
    api._container.state_machine.get = AsyncMock(
        side_effect=StorageError("Storage failure while running get")
    )

    response = asyncio.run(api.get_transfer(ADMIN, "t1"))

    assert response.status_code == 500
    assert response.body["error"] == "Storage failure while running get"


def test_batch_endpoint_returns_results_errors_summary():
    """Batch responses carry per-item outcomes and a summary."""
    store = InMemoryStore()
    store.transfers["t1"] = make_transfer("t1")
    api = _api(store)

    response = asyncio.run(
        api.batch_process_transfers(ADMIN, "approve", ["t1", "t9"])
    )

    assert response.status_code == 200
    assert response.body["results"][0]["id"] == "t1"
    assert response.body["results"][0]["status"] == "success"
    assert response.body["results"][0]["entity"]["status"] == "APPROVED"
    assert response.body["errors"] == [
        {"id": "t9", "error": "Transfer not found: t9"}
    ]
    assert response.body["summary"] == {
        "total": 2,
        "successful": 1,
        "failed": 1,
        "skipped": 0,
    }


def test_listing_includes_branches_and_stats():
    """Listings attach branch details and per-status counts."""
    store = InMemoryStore()
    store.transfers["t1"] = make_transfer("t1")
    api = _api(store)

    response = asyncio.run(api.list_transfers(ADMIN, "pending"))

    transfer = response.body["transfers"][0]
    assert transfer["from_branch"]["name"] == "Branch a"
    assert transfer["to_branch"]["code"] == "B"
    assert response.body["stats"]["pending"] == 1


def test_budget_endpoints():
    """Budgets can be created, recomputed, ruled and alerted on."""
    store = InMemoryStore()
    store.budgets["b1"] = make_budget("b1", spent="9000")
    api = _api(store)

    created = asyncio.run(
        api.create_budget(STAFF, "a", 2024, "INCOME", "500", month=3)
    )
    rules = asyncio.run(
        api.set_alert_rules(
            ADMIN,
            [
                {"budget_id": "b1", "warning_threshold": "50"},
                {"budget_id": "ghost"},
            ],
        )
    )
    bad_rules = asyncio.run(api.set_alert_rules(ADMIN, [{"enabled": False}]))
    recomputed = asyncio.run(api.recompute_budgets(ADMIN, ["b1"]))
    bad_ids = asyncio.run(api.recompute_budgets(ADMIN, "b1"))
    alerts = asyncio.run(api.list_budget_alerts(ADMIN, branch_id="a"))

    assert created.status_code == 201
    assert created.body["budget"]["allocated"] == "500"
    assert created.body["budget"]["metadata"]["version"] == 1
    assert rules.body == {"success": True, "rules_created": 1}
    assert bad_rules.status_code == 400
    assert recomputed.body["summary"]["successful"] == 1
    assert recomputed.body["results"][0]["entity"]["spent"] == "0.00"
    assert bad_ids.status_code == 400
    assert alerts.status_code == 200
    assert alerts.body["alerts"] == []
    assert alerts.body["thresholds"] == {"warning": "80", "critical": "95"}
    assert [t["period_label"] for t in alerts.body["trends"]] == [
        "2024-02",
        "2024-03",
    ]
    assert alerts.body["trends"][1]["variance"] == "10500.00"


def test_budget_management_endpoints():
    """Budgets can be listed, read, edited, approved and deleted."""
    store = InMemoryStore()
    store.budgets["b1"] = make_budget("b1", spent="9600")
    store.budgets["b2"] = make_budget("b2", branch_id="b", month=4)
    api = _api(store)

    listed = asyncio.run(api.list_budgets(ADMIN, branch_id="a"))
    fetched = asyncio.run(api.get_budget(ADMIN, "b2"))
    missing = asyncio.run(api.get_budget(ADMIN, "ghost"))
    edited = asyncio.run(api.update_budget(ADMIN, "b1", allocated="9000"))
    approved = asyncio.run(api.update_budget(ADMIN, "b2", action="approve"))
    unknown_action = asyncio.run(
        api.update_budget(ADMIN, "b2", action="archive")
    )
    refused = asyncio.run(api.delete_budget(ADMIN, "b1"))
    forbidden = asyncio.run(api.delete_budget(STAFF, "b2"))
    deleted = asyncio.run(api.delete_budget(ADMIN, "b2"))

    assert [b["id"] for b in listed.body["budgets"]] == ["b1"]
    assert listed.body["budgets"][0]["branch"]["name"] == "Branch a"
    assert fetched.body["budget"]["category"] == "EXPENSE"
    assert fetched.body["budget"]["metadata"]["version"] == 1
    assert missing.status_code == 404
    assert edited.body["budget"]["allocated"] == "9000"
    assert edited.body["budget"]["remaining"] == "0"
    assert approved.body["budget"]["approved_by"] == "admin"
    assert approved.body["budget"]["status"] == "ACTIVE"
    assert unknown_action.status_code == 400
    assert refused.status_code == 400
    assert forbidden.status_code == 403
    assert deleted.status_code == 200
    assert deleted.body == {"success": True}
    assert set(store.budgets) == {"b1"}


def test_to_jsonable_handles_nested_values():
    """Nested containers are converted recursively."""
    value = {"when": datetime(2024, 1, 2), "items": ({"n": 1},)}

    assert to_jsonable(value) == {
        "when": "2024-01-02T00:00:00",
        "items": [{"n": 1}],
    }
