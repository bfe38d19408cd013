"""Domain validation helpers."""

from decimal import Decimal, InvalidOperation

from branch_finance.domain.constants import BUDGET_STATUSES, MAX_MONEY_DIGITS
from branch_finance.domain.errors import ValidationError
from branch_finance.domain.models import (
    AlertThresholds,
    BudgetCategory,
    BudgetPeriod,
    TransferAction,
)
from branch_finance.domain.services.periods import quarter_of
from branch_finance.utils.decimal_utils import MONEY_QUANTUM


def validate_transfer_request(
    from_branch_id: str,
    to_branch_id: str,
    amount,
) -> Decimal:
    """Validate a transfer request and return the normalized amount.

    Raises:
        ValidationError: If the amount is not a positive number of whole
            cents or both branches are the same.
    """
    amount_value = validate_money(amount, "amount")
    if amount_value <= 0:
        raise ValidationError("Transfer amount must be greater than zero")
    if not from_branch_id or not to_branch_id:
        raise ValidationError("Both source and destination branches are required")
    if from_branch_id == to_branch_id:
        raise ValidationError("Cannot transfer from a branch to itself")
    return amount_value


def validate_budget_period(
    year: int,
    quarter: int | None,
    month: int | None,
) -> BudgetPeriod:
    """Validate a budget period and fill the quarter of monthly periods.

    A monthly period always carries the quarter containing its month, so
    the same month cannot be stored twice under different quarters.

    Raises:
        ValidationError: If a field is out of range or the quarter does
            not contain the month.
    """
    if year < 1:
        raise ValidationError(f"Invalid budget year: {year}")
    if quarter is not None and not 1 <= quarter <= 4:
        raise ValidationError(f"Quarter must be between 1 and 4: {quarter}")
    if month is not None and not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12: {month}")
    if month is not None:
        if quarter is not None and quarter != quarter_of(month):
            raise ValidationError(
                f"Month {month} does not belong to quarter {quarter}"
            )
        quarter = quarter_of(month)
    return BudgetPeriod(year=year, quarter=quarter, month=month)


def validate_budget_request(
    year: int,
    quarter: int | None,
    month: int | None,
    category: str,
    allocated,
) -> tuple[BudgetPeriod, BudgetCategory, Decimal]:
    """Validate budget creation input.

    Returns:
        tuple[BudgetPeriod, BudgetCategory, Decimal]: Normalized period,
        parsed category and allocation.
    """
    period = validate_budget_period(year, quarter, month)
    return period, parse_budget_category(category), validate_allocation(
        allocated
    )


def parse_budget_category(raw) -> BudgetCategory:
    try:
        return BudgetCategory(raw)
    except ValueError as exc:
        raise ValidationError(f"Unknown budget category: {raw}") from exc


def validate_allocation(allocated) -> Decimal:
    allocated_value = validate_money(allocated, "allocated")
    if allocated_value < 0:
        raise ValidationError("Allocated amount cannot be negative")
    return allocated_value


def validate_budget_status(raw) -> str:
    status = str(raw).strip().upper() if raw is not None else ""
    if status not in BUDGET_STATUSES:
        raise ValidationError(f"Unknown budget status: {raw}")
    return status


def validate_money(value, name: str) -> Decimal:
    """Parse a monetary value that the money columns store exactly.

    Raises:
        ValidationError: If the value is not a number, has fractions of a
            cent, or has more integer digits than the columns hold.
    """
    parsed = _parse_decimal(value, name)
    if parsed and parsed.adjusted() >= MAX_MONEY_DIGITS:
        raise ValidationError(f"Invalid {name}: {value!r} is too large")
    if parsed != parsed.quantize(MONEY_QUANTUM):
        raise ValidationError(
            f"Invalid {name}: {value!r} has more than two decimal places"
        )
    return parsed


def validate_thresholds(warning, critical) -> AlertThresholds:
    """Validate and normalize alert thresholds."""
    warning_value = _parse_decimal(warning, "warning threshold")
    critical_value = _parse_decimal(critical, "critical threshold")
    if warning_value <= 0 or critical_value <= 0:
        raise ValidationError("Alert thresholds must be positive")
    if warning_value > critical_value:
        raise ValidationError(
            "Warning threshold cannot exceed the critical threshold"
        )
    return AlertThresholds(warning=warning_value, critical=critical_value)


def parse_transfer_action(raw) -> TransferAction:
    """Parse an action name such as ``approve``."""
    try:
        return TransferAction(raw)
    except ValueError as exc:
        raise ValidationError(f"Unknown transfer action: {raw}") from exc


def _parse_decimal(value, name: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Invalid {name}: {value!r}")
    try:
        parsed = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid {name}: {value!r}") from exc
    if not parsed.is_finite():
        raise ValidationError(f"Invalid {name}: {value!r}")
    return parsed


__all__ = [
    "parse_budget_category",
    "parse_transfer_action",
    "validate_allocation",
    "validate_budget_period",
    "validate_budget_request",
    "validate_budget_status",
    "validate_money",
    "validate_thresholds",
    "validate_transfer_request",
]
