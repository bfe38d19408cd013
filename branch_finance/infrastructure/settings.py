"""Settings for the branch finance services."""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

import dotenv

from branch_finance.domain.constants import (
    DEFAULT_ADMIN_ROLES,
    DEFAULT_CRITICAL_THRESHOLD,
    DEFAULT_CURRENCY,
    DEFAULT_TREND_PERIODS,
    DEFAULT_WARNING_THRESHOLD,
)
from branch_finance.infrastructure.logging.logger import get_app_logger


@dataclass(frozen=True)
class BranchFinanceSettings:
    """Runtime settings sourced from the environment.

    Attributes:
        admin_roles: Global roles allowed every transfer and budget action.
        default_currency: Currency used when a transfer omits one.
        warning_threshold: Default warning usage percentage.
        critical_threshold: Default critical usage percentage.
        trend_periods: Trailing periods included in budget trends.
        batch_item_timeout: Optional per-item timeout in seconds.
        batch_concurrency: Maximum batch items handled at once.
    """

    admin_roles: tuple[str, ...] = DEFAULT_ADMIN_ROLES
    default_currency: str = DEFAULT_CURRENCY
    warning_threshold: Decimal = DEFAULT_WARNING_THRESHOLD
    critical_threshold: Decimal = DEFAULT_CRITICAL_THRESHOLD
    trend_periods: int = DEFAULT_TREND_PERIODS
    batch_item_timeout: float | None = None
    batch_concurrency: int = 10

    @classmethod
    def from_env(cls) -> "BranchFinanceSettings":
        """Build settings from environment variables.

        Returns:
            BranchFinanceSettings: Settings sourced from environment
            variables, with defaults for anything unset or malformed.
        """
        dotenv.load_dotenv()
        logger = get_app_logger()
        raw_roles = os.getenv("BRANCH_FINANCE_ADMIN_ROLES", "")
        roles = tuple(
            role.strip().upper() for role in raw_roles.split(",") if role.strip()
        )
        return cls(
            admin_roles=roles or DEFAULT_ADMIN_ROLES,
            default_currency=(
                os.getenv("BRANCH_FINANCE_DEFAULT_CURRENCY", "").strip().upper()
                or DEFAULT_CURRENCY
            ),
            warning_threshold=cls._decimal_env(
                "BUDGET_WARNING_THRESHOLD",
                DEFAULT_WARNING_THRESHOLD,
                logger,
            ),
            critical_threshold=cls._decimal_env(
                "BUDGET_CRITICAL_THRESHOLD",
                DEFAULT_CRITICAL_THRESHOLD,
                logger,
            ),
            trend_periods=cls._int_env(
                "BUDGET_TREND_PERIODS",
                DEFAULT_TREND_PERIODS,
                logger,
            ),
            batch_item_timeout=cls._timeout_env(logger),
            batch_concurrency=cls._int_env("BATCH_CONCURRENCY", 10, logger),
        )

    @staticmethod
    def _decimal_env(name: str, default: Decimal, logger) -> Decimal:
        raw = os.getenv(name)
        if not raw:
            return default
        try:
            return Decimal(raw.strip())
        except InvalidOperation:
            logger.warning(f"Ignoring invalid {name}={raw!r}")
            return default

    @staticmethod
    def _int_env(name: str, default: int, logger) -> int:
        raw = os.getenv(name)
        if not raw:
            return default
        try:
            value = int(raw.strip())
        except ValueError:
            logger.warning(f"Ignoring invalid {name}={raw!r}")
            return default
        if value < 1:
            logger.warning(f"Ignoring non-positive {name}={raw!r}")
            return default
        return value

    @staticmethod
    def _timeout_env(logger) -> float | None:
        raw = os.getenv("BATCH_ITEM_TIMEOUT")
        if not raw:
            return None
        try:
            value = float(raw.strip())
        except ValueError:
            logger.warning(f"Ignoring invalid BATCH_ITEM_TIMEOUT={raw!r}")
            return None
        return value if value > 0 else None


__all__ = ["BranchFinanceSettings"]
