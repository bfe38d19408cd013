"""Domain services package."""

from .alerts import (
    category_label,
    classify_usage,
    resolve_thresholds,
    summarize_alerts,
)
from .periods import (
    is_future_period,
    matches_period,
    period_bounds,
    quarter_of,
    trailing_periods,
)
from .transitions import ensure_transition, target_status
from .validation import (
    parse_budget_category,
    parse_transfer_action,
    validate_allocation,
    validate_budget_period,
    validate_budget_request,
    validate_budget_status,
    validate_money,
    validate_thresholds,
    validate_transfer_request,
)

__all__ = [
    "category_label",
    "classify_usage",
    "resolve_thresholds",
    "summarize_alerts",
    "is_future_period",
    "matches_period",
    "period_bounds",
    "quarter_of",
    "trailing_periods",
    "ensure_transition",
    "parse_budget_category",
    "parse_transfer_action",
    "validate_allocation",
    "validate_budget_period",
    "validate_budget_status",
    "validate_money",
    "target_status",
    "validate_budget_request",
    "validate_thresholds",
    "validate_transfer_request",
]
