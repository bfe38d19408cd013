"""Tests for budget usage classification."""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest

from branch_finance.domain.models import (
    AlertRules,
    AlertSeverity,
    AlertThresholds,
    BudgetAlert,
    BudgetMetadata,
)
from branch_finance.domain.services import (
    classify_usage,
    resolve_thresholds,
    summarize_alerts,
)
from tests.fakes import make_budget

DEFAULTS = AlertThresholds(warning=Decimal("80"), critical=Decimal("95"))


@pytest.mark.parametrize(
    "spent, severity",
    [
        ("79", None),
        ("80", AlertSeverity.WARNING),
        ("94.99", AlertSeverity.WARNING),
        ("95", AlertSeverity.CRITICAL),
        ("100", AlertSeverity.EXCEEDED),
        ("120", AlertSeverity.EXCEEDED),
    ],
)
def test_classify_usage_boundaries(spent, severity):
    """Boundaries are inclusive at 80, 95 and 100 percent."""
    result = classify_usage(
        Decimal("100"),
        Decimal(spent),
        "EXPENSE",
        DEFAULTS,
    )

    if severity is None:
        assert result is None
    else:
        assert result.severity is severity


def test_exceeded_message_reports_overage():
    """Exceeded alerts report the overage above 100 percent."""
    at_limit = classify_usage(100, 100, "EXPENSE", DEFAULTS)
    over = classify_usage(100, 120, "INCOME", DEFAULTS)

    assert at_limit.message == "Expense budget exceeded by 0.0%"
    assert over.message == "Income budget exceeded by 20.0%"
    assert over.usage_percentage == Decimal("120")


def test_warning_and_critical_messages():
    """Warning and critical messages carry the usage percentage."""
    warning = classify_usage(200, 170, "INVESTMENT", DEFAULTS)
    critical = classify_usage(10000, 9600, "EXPENSE", DEFAULTS)

    assert warning.message == "85.0% of investment budget used"
    assert critical.message == "Expense budget nearly exhausted (96.0%)"


def test_zero_allocation_never_alerts():
    """A zero allocation yields zero usage."""
    assert classify_usage(0, 50, "EXPENSE", DEFAULTS) is None


def test_resolve_thresholds_honors_rules():
    """Budget rules override defaults and can silence the budget."""
    plain = make_budget("b1")
    rules = AlertRules(
        warning_threshold=Decimal("50"),
        critical_threshold=Decimal("60"),
    )
    custom = replace(plain, metadata=BudgetMetadata(alert_rules=rules))
    silenced = replace(
        plain,
        metadata=BudgetMetadata(alert_rules=replace(rules, enabled=False)),
    )

    assert resolve_thresholds(plain, DEFAULTS) is DEFAULTS
    assert resolve_thresholds(custom, DEFAULTS) == AlertThresholds(
        warning=Decimal("50"),
        critical=Decimal("60"),
    )
    assert resolve_thresholds(silenced, DEFAULTS) is None


def _alert(branch_id, severity, allocated, spent):
    return BudgetAlert(
        id=f"alert-{branch_id}-{severity.value}",
        budget_id="b",
        branch_id=branch_id,
        branch_name=branch_id,
        branch_code=branch_id,
        year=2024,
        quarter=None,
        month=3,
        category="EXPENSE",
        allocated=Decimal(allocated),
        spent=Decimal(spent),
        remaining=Decimal("0"),
        usage_percentage=Decimal("0"),
        severity=severity,
        message="",
        currency="EGP",
        last_updated=datetime(2024, 3, 1),
    )


def test_summarize_alerts_counts_and_overage():
    """The summary totals the overage of exceeded alerts only."""
    summary = summarize_alerts(
        [
            _alert("a", AlertSeverity.WARNING, "100", "85"),
            _alert("a", AlertSeverity.EXCEEDED, "100", "130"),
            _alert("b", AlertSeverity.EXCEEDED, "50", "55"),
            _alert("c", AlertSeverity.CRITICAL, "100", "97"),
        ]
    )

    assert summary.total_alerts == 4
    assert summary.warning_alerts == 1
    assert summary.critical_alerts == 1
    assert summary.exceeded_alerts == 2
    assert summary.branches_with_alerts == 3
    assert summary.total_over_budget == Decimal("35")
