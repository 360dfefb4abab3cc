"""Integer minor-unit (cents) utilities.

All stored amounts and balances are int cents. Major units only exist at the
input boundary (to_minor_units) and in display strings (format_money).
Rounding rule: half away from zero (decimal.ROUND_HALF_UP).
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.pf_common.errors import ValidationError

MINOR_PER_MAJOR = 100

_CURRENCY_SYMBOLS: dict[str, str] = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "CN¥",
    "AUD": "A$",
    "CAD": "CA$",
}


def to_minor_units(major: int | float | str | Decimal) -> int:
    """Convert a major-unit amount to cents: 19.99 -> 1999, 0.005 -> 1, -0.005 -> -1.

    Floats go through str() first so binary representation error never leaks
    into the rounding decision.
    """
    if isinstance(major, bool):
        raise TypeError("Amount must be numeric, got bool")
    try:
        value = Decimal(str(major)) if isinstance(major, float) else Decimal(major)
    except InvalidOperation:
        raise ValueError(f"Not a number: {major!r}") from None
    if not value.is_finite():
        raise ValueError(f"Amount must be finite, got {major!r}")
    return int((value * MINOR_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_major_units(minor: int) -> Decimal:
    """Convert cents to major units exactly, always two places.

    1999 -> Decimal('19.99'), 500 -> Decimal('5.00')
    """
    return (Decimal(minor) / MINOR_PER_MAJOR).quantize(Decimal("0.01"))


def is_valid_amount(value: object) -> bool:
    """True for finite, non-negative numbers. NaN, Infinity, negatives and bools are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    if isinstance(value, Decimal) and not value.is_finite():
        return False
    return value >= 0


def is_positive_cents(value: object) -> bool:
    """True for an int amount of at least one cent."""
    return isinstance(value, int) and is_valid_amount(value) and value >= 1


def _group_indian(n: int) -> str:
    """12345678 -> '1,23,45,678' (lakh/crore grouping)."""
    digits = str(n)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join([*groups, tail])


def format_money(cents: int, currency: str = "INR") -> str:
    """Display string for a cents amount. Never used for stored values.

    format_money(10000000, "INR") -> '₹1,00,000.00'
    format_money(150000, "USD")   -> '$1,500.00'
    format_money(-1200, "EUR")    -> '-€12.00'
    format_money(500, "CHF")      -> 'CHF 5.00'
    """
    code = currency.upper()
    sign = "-" if cents < 0 else ""
    major, minor = divmod(abs(cents), MINOR_PER_MAJOR)
    grouped = _group_indian(major) if code == "INR" else f"{major:,}"
    body = f"{grouped}.{minor:02d}"
    symbol = _CURRENCY_SYMBOLS.get(code)
    if symbol is None:
        return f"{sign}{code} {body}"
    return f"{sign}{symbol}{body}"


def normalize_currency(code: str) -> str:
    """Upper-case a 3-letter currency code; anything else is a ValidationError."""
    normalized = code.strip().upper()
    if len(normalized) != 3 or not normalized.isalpha():
        raise ValidationError(f"Currency must be a 3-letter code, got {code!r}", 9005)
    return normalized
