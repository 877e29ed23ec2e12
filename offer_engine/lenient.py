"""
Lenient numeric input.

Form fields arrive as whatever the user typed: blanks, stray text, NaN from a
half-edited number box. Offer figures must never fail on those, so every raw
numeric field passes through LenientNumber, which turns anything unusable into
zero and remembers that it did.
"""

from decimal import Decimal, InvalidOperation

ZERO = Decimal("0")
# nonzero input outside this magnitude band counts as unusable
MAX_MAGNITUDE = Decimal("1e15")
MIN_MAGNITUDE = Decimal("1e-12")


class LenientNumber:
    """A raw field value coerced to a finite Decimal (zero when unusable)."""

    __slots__ = ("raw", "value", "coerced")

    def __init__(self, raw):
        self.raw = raw
        self.value, self.coerced = self._coerce(raw)

    @staticmethod
    def _coerce(raw) -> tuple[Decimal, bool]:
        # bool is an int subclass; a checkbox value is not a number
        if raw is None or isinstance(raw, bool):
            return ZERO, True
        if isinstance(raw, Decimal):
            return LenientNumber._bounded(raw)
        if isinstance(raw, (int, float)):
            value = Decimal(str(raw))
            return LenientNumber._bounded(value)
        if isinstance(raw, str):
            text = raw.strip().replace(",", "").replace("$", "")
            if not text:
                return ZERO, True
            try:
                value = Decimal(text)
            except InvalidOperation:
                return ZERO, True
            return LenientNumber._bounded(value)
        return ZERO, True

    @staticmethod
    def _bounded(value: Decimal) -> tuple[Decimal, bool]:
        if not value.is_finite():
            return ZERO, True
        if value and not MIN_MAGNITUDE <= abs(value) <= MAX_MAGNITUDE:
            return ZERO, True
        return value, False

    def __repr__(self) -> str:
        return f"LenientNumber({self.raw!r} -> {self.value})"


def lenient(raw) -> Decimal:
    """Shorthand for LenientNumber(raw).value."""
    return LenientNumber(raw).value


def lenient_int(raw) -> int:
    """Whole-number fields (days, years, step index)."""
    return int(LenientNumber(raw).value.to_integral_value())
