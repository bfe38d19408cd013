"""Helpers for Decimal normalization."""

from decimal import ROUND_HALF_UP, Decimal

MONEY_QUANTUM = Decimal("0.01")


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value from SQL, JSON payloads or adapters.

    Returns:
        Decimal: Normalized numeric value.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value) -> Decimal:
    """Round a monetary value to two decimal places."""
    return coerce_decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def percentage(part, whole) -> Decimal:
    """Return ``part / whole * 100`` or zero when ``whole`` is not positive.

    Args:
        part: Numerator, typically the spent amount.
        whole: Denominator, typically the allocated amount.

    Returns:
        Decimal: Percentage value, unrounded.
    """
    whole_value = coerce_decimal(whole)
    if whole_value <= 0:
        return Decimal("0")
    return coerce_decimal(part) / whole_value * Decimal("100")


__all__ = ["MONEY_QUANTUM", "coerce_decimal", "quantize_money", "percentage"]
