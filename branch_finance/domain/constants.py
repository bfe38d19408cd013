"""Domain constants for branch transfers and budgets."""

from decimal import Decimal

DEFAULT_ADMIN_ROLES = ("ADMIN", "SUPER_ADMIN")

APPROVE_TRANSFERS = "APPROVE_TRANSFERS"
REJECT_TRANSFERS = "REJECT_TRANSFERS"
COMPLETE_TRANSFERS = "COMPLETE_TRANSFERS"
MANAGE_BUDGETS = "MANAGE_BUDGETS"

TRANSFER_TYPE = "BRANCH_TRANSFER"
TRANSFER_PAYMENT_METHOD = "BANK_TRANSFER"
TRANSFER_OUT_CATEGORY = "TRANSFER_OUT"
TRANSFER_IN_CATEGORY = "TRANSFER_IN"

# EXPENSE budgets also pick up TRANSFER_OUT rows, as the original ledger did.
BUDGET_LEDGER_CATEGORIES = {
    "INCOME": ("SALES", "TRANSFER_IN", "OTHER_INCOME"),
    "EXPENSE": (
        "OPERATIONAL",
        "SALARIES",
        "RENT",
        "TRANSFER_OUT",
        "OTHER_EXPENSE",
    ),
    "INVESTMENT": ("EQUIPMENT", "VEHICLES", "PROPERTY"),
}

CATEGORY_LABELS = {
    "INCOME": "income",
    "EXPENSE": "expense",
    "INVESTMENT": "investment",
}

ACTIVE_BUDGET_STATUS = "ACTIVE"
BUDGET_STATUSES = ("DRAFT", "ACTIVE", "SUSPENDED", "CLOSED")
BUDGET_WRITE_ATTEMPTS = 3
# Integer digits that fit the Numeric(18, 2) money columns.
MAX_MONEY_DIGITS = 16

DEFAULT_WARNING_THRESHOLD = Decimal("80")
DEFAULT_CRITICAL_THRESHOLD = Decimal("95")
DEFAULT_TREND_PERIODS = 6
DEFAULT_CURRENCY = "EGP"
TRANSFER_LIST_LIMIT = 50


__all__ = [
    "DEFAULT_ADMIN_ROLES",
    "APPROVE_TRANSFERS",
    "REJECT_TRANSFERS",
    "COMPLETE_TRANSFERS",
    "MANAGE_BUDGETS",
    "TRANSFER_TYPE",
    "TRANSFER_PAYMENT_METHOD",
    "TRANSFER_OUT_CATEGORY",
    "TRANSFER_IN_CATEGORY",
    "BUDGET_LEDGER_CATEGORIES",
    "CATEGORY_LABELS",
    "ACTIVE_BUDGET_STATUS",
    "BUDGET_STATUSES",
    "BUDGET_WRITE_ATTEMPTS",
    "MAX_MONEY_DIGITS",
    "DEFAULT_WARNING_THRESHOLD",
    "DEFAULT_CRITICAL_THRESHOLD",
    "DEFAULT_TREND_PERIODS",
    "DEFAULT_CURRENCY",
    "TRANSFER_LIST_LIMIT",
]
