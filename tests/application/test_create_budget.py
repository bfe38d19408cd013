"""Tests for the CreateBudgetUseCase."""

import asyncio
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from branch_finance.application.use_cases import (
    AuthorizationResolver,
    CreateBudgetUseCase,
)
from branch_finance.domain.errors import AuthorizationError, ValidationError
from branch_finance.domain.models import Actor, BudgetCategory
from tests.fakes import (
    FakeBranchDirectory,
    FakePermissionStore,
    FixedTimeSource,
    InMemoryStore,
    make_branch,
    uow_factory_for,
)

NOW = datetime(2024, 3, 20, 8, 0)


def _use_case(store):
    return CreateBudgetUseCase(
        uow_factory_for(store),
        AuthorizationResolver(FakePermissionStore(), logger=MagicMock()),
        FakeBranchDirectory(make_branch("a", currency="USD")),
        FixedTimeSource(NOW),
        logger=MagicMock(),
        id_factory=lambda: "budget-1",
    )


def test_create_budget_starts_unspent():
    """New budgets are ACTIVE with nothing spent."""
    store = InMemoryStore()
    actor = Actor(id="u1", role="STAFF", home_branch_id="a")

    budget = asyncio.run(
        _use_case(store).execute(actor, "a", 2024, "EXPENSE", "5000", month=4)
    )

    assert budget.id == "budget-1"
    assert budget.category is BudgetCategory.EXPENSE
    assert budget.allocated == Decimal("5000")
    assert budget.spent == Decimal("0")
    assert budget.remaining == Decimal("5000")
    assert budget.currency == "USD"
    assert budget.status == "ACTIVE"
    assert budget.created_by == "u1"
    assert store.budgets["budget-1"] == budget


def test_duplicate_budget_is_rejected():
    """Only one budget per branch, period and category."""
    store = InMemoryStore()
    admin = Actor(id="admin", role="ADMIN")
    use_case = _use_case(store)
    asyncio.run(use_case.execute(admin, "a", 2024, "INCOME", "10", quarter=2))

    with pytest.raises(ValidationError, match="already exists"):
        asyncio.run(
            use_case.execute(admin, "a", 2024, "INCOME", "20", quarter=2)
        )


def test_unknown_branch_and_missing_rights():
    """Unknown branches and foreign branches are refused."""
    store = InMemoryStore()
    use_case = _use_case(store)

    with pytest.raises(ValidationError):
        asyncio.run(
            use_case.execute(
                Actor(id="admin", role="ADMIN"),
                "zz",
                2024,
                "EXPENSE",
                "10",
            )
        )
    with pytest.raises(AuthorizationError):
        asyncio.run(
            use_case.execute(
                Actor(id="u2", role="STAFF", home_branch_id="b"),
                "a",
                2024,
                "EXPENSE",
                "10",
            )
        )
    assert store.budgets == {}


def test_monthly_budget_stores_its_quarter_and_blocks_restatements():
    """The same month cannot be budgeted twice under another quarter."""
    store = InMemoryStore()
    admin = Actor(id="admin", role="ADMIN")
    use_case = _use_case(store)

    budget = asyncio.run(
        use_case.execute(admin, "a", 2024, "EXPENSE", "10", month=3)
    )

    assert (budget.quarter, budget.month) == (1, 3)
    with pytest.raises(ValidationError, match="already exists"):
        asyncio.run(
            use_case.execute(
                admin,
                "a",
                2024,
                "EXPENSE",
                "20",
                quarter=1,
                month=3,
            )
        )
    with pytest.raises(ValidationError, match="does not belong"):
        asyncio.run(
            use_case.execute(
                admin,
                "a",
                2024,
                "INCOME",
                "20",
                quarter=2,
                month=3,
            )
        )
    assert list(store.budgets) == ["budget-1"]


def test_allocation_with_fractions_of_a_cent_is_rejected():
    """Allocations must be stored exactly by the money columns."""
    store = InMemoryStore()

    with pytest.raises(ValidationError, match="two decimal places"):
        asyncio.run(
            _use_case(store).execute(
                Actor(id="admin", role="ADMIN"),
                "a",
                2024,
                "EXPENSE",
                "100.005",
                month=3,
            )
        )
    assert store.budgets == {}
