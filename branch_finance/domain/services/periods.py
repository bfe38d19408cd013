"""Period arithmetic for budgets and trends."""

from datetime import date, datetime

from branch_finance.domain.models import BudgetPeriod, PeriodGranularity


def period_bounds(period: BudgetPeriod) -> tuple[datetime, datetime]:
    """Return the half-open ``[start, end)`` range covered by a period.

    Args:
        period: Budget period; month beats quarter beats year.

    Returns:
        tuple[datetime, datetime]: Inclusive start and exclusive end.
    """
    if period.month is not None:
        start = datetime(period.year, period.month, 1)
        end = _add_months(period.year, period.month, 1)
    elif period.quarter is not None:
        first_month = (period.quarter - 1) * 3 + 1
        start = datetime(period.year, first_month, 1)
        end = _add_months(period.year, first_month, 3)
    else:
        start = datetime(period.year, 1, 1)
        end = datetime(period.year + 1, 1, 1)
    return start, end


def is_future_period(period: BudgetPeriod, today: date) -> bool:
    """Return True when the period starts strictly after ``today``."""
    start, _ = period_bounds(period)
    return start.date() > today


def trailing_periods(
    today: date,
    count: int,
    granularity: PeriodGranularity,
) -> list[BudgetPeriod]:
    """Return ``count`` periods ending at the current one, oldest first."""
    periods = []
    for offset in range(count - 1, -1, -1):
        if granularity is PeriodGranularity.MONTH:
            index = today.year * 12 + (today.month - 1) - offset
            periods.append(
                BudgetPeriod(year=index // 12, month=index % 12 + 1)
            )
        elif granularity is PeriodGranularity.QUARTER:
            index = today.year * 4 + (quarter_of(today.month) - 1) - offset
            periods.append(
                BudgetPeriod(year=index // 4, quarter=index % 4 + 1)
            )
        else:
            periods.append(BudgetPeriod(year=today.year - offset))
    return periods


def matches_period(budget_period: BudgetPeriod, period: BudgetPeriod) -> bool:
    """Return whether a budget of ``budget_period`` belongs to ``period``.

    Monthly periods match on year and month; quarterly periods match
    quarterly budgets only; yearly periods match yearly budgets only.
    """
    if budget_period.year != period.year:
        return False
    if period.month is not None:
        return budget_period.month == period.month
    if period.quarter is not None:
        return (
            budget_period.month is None
            and budget_period.quarter == period.quarter
        )
    return budget_period.month is None and budget_period.quarter is None


def quarter_of(month: int) -> int:
    return (month - 1) // 3 + 1


def _add_months(year: int, month: int, months: int) -> datetime:
    index = year * 12 + (month - 1) + months
    return datetime(index // 12, index % 12 + 1, 1)


__all__ = [
    "period_bounds",
    "is_future_period",
    "trailing_periods",
    "matches_period",
    "quarter_of",
]
