"""
Money Helpers

Percent/dollar conversion and currency formatting. Inputs are coerced
through LenientNumber, so these never raise on missing or malformed values.
"""

from decimal import ROUND_HALF_UP, Decimal

from ..lenient import ZERO, lenient
from ..models import AmountMode

HUNDRED = Decimal("100")


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places (ROUND_HALF_UP)."""
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def to_money(value: Decimal) -> float:
    """Convert Decimal to float with 2 decimal places."""
    return round(float(value), 2)


def format_money(value) -> str:
    """Whole-dollar USD, e.g. ``$450,000``."""
    amount = lenient(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def clamp(n, low, high):
    return min(high, max(low, n))


def to_dollar(mode: AmountMode | str, value, base) -> Decimal:
    """A percent-or-dollar amount expressed in dollars."""
    value = lenient(value)
    if mode == AmountMode.PERCENT:
        return lenient(base) * value / HUNDRED
    return value


def to_percent(mode: AmountMode | str, value, base) -> Decimal:
    """A percent-or-dollar amount expressed as a percent of ``base``.

    Zero base gives zero.
    """
    base = lenient(base)
    if not base:
        return ZERO
    value = lenient(value)
    if mode == AmountMode.PERCENT:
        return value
    return HUNDRED * value / base
