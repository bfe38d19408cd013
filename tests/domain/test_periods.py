"""Tests for period arithmetic."""

from datetime import date, datetime

from branch_finance.domain.models import BudgetPeriod, PeriodGranularity
from branch_finance.domain.services import (
    is_future_period,
    matches_period,
    period_bounds,
    trailing_periods,
)


def test_period_bounds_prefers_month_over_quarter():
    """Month wins over quarter when both are populated."""
    start, end = period_bounds(BudgetPeriod(year=2024, quarter=4, month=3))

    assert start == datetime(2024, 3, 1)
    assert end == datetime(2024, 4, 1)


def test_period_bounds_for_quarter_and_year():
    """Quarter and year bounds are half-open."""
    assert period_bounds(BudgetPeriod(year=2024, quarter=4)) == (
        datetime(2024, 10, 1),
        datetime(2025, 1, 1),
    )
    assert period_bounds(BudgetPeriod(year=2023)) == (
        datetime(2023, 1, 1),
        datetime(2024, 1, 1),
    )


def test_december_rolls_into_next_year():
    """December ends on January 1st of the next year."""
    _, end = period_bounds(BudgetPeriod(year=2024, month=12))

    assert end == datetime(2025, 1, 1)


def test_is_future_period_compares_start_date():
    """A period is future only when it starts after today."""
    today = date(2024, 3, 15)

    assert is_future_period(BudgetPeriod(year=2024, month=4), today)
    assert not is_future_period(BudgetPeriod(year=2024, month=3), today)
    assert not is_future_period(BudgetPeriod(year=2024, quarter=1), today)
    assert is_future_period(BudgetPeriod(year=2025), today)


def test_trailing_months_cross_year_boundary():
    """Trailing months are returned oldest first across years."""
    periods = trailing_periods(date(2024, 2, 10), 3, PeriodGranularity.MONTH)

    assert [p.label for p in periods] == ["2023-12", "2024-01", "2024-02"]


def test_trailing_quarters_and_years():
    """Quarter and year granularities step back one period at a time."""
    quarters = trailing_periods(
        date(2024, 5, 1),
        3,
        PeriodGranularity.QUARTER,
    )
    years = trailing_periods(date(2024, 5, 1), 2, PeriodGranularity.YEAR)

    assert [p.label for p in quarters] == ["2023-Q4", "2024-Q1", "2024-Q2"]
    assert [p.label for p in years] == ["2023", "2024"]


def test_matches_period_keeps_granularities_apart():
    """Quarterly and yearly trend periods only pick matching budgets."""
    quarter = BudgetPeriod(year=2024, quarter=1)
    year = BudgetPeriod(year=2024)

    assert matches_period(BudgetPeriod(year=2024, month=3), BudgetPeriod(
        year=2024,
        month=3,
    ))
    assert matches_period(BudgetPeriod(year=2024, quarter=1), quarter)
    assert not matches_period(BudgetPeriod(year=2024, month=2), quarter)
    assert matches_period(BudgetPeriod(year=2024), year)
    assert not matches_period(BudgetPeriod(year=2024, quarter=1), year)
    assert not matches_period(BudgetPeriod(year=2023), year)
