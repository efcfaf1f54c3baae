"""
Numeric field parsing for free-text grid input.

Grid cells hold whatever the user typed, including half-finished values like
"12." or "-". Parsing never raises: anything that isn't a plain decimal
number reads as zero so running totals keep working while the user types.

All arithmetic is done in Decimal. Rounding is ROUND_HALF_UP, which for
Decimal means half away from zero (2.345 -> 2.35, -2.345 -> -2.35).
Products and rounding run with precision sized to the operands, so an
over-long value typed into a cell still totals instead of raising.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext, localcontext

ZERO = Decimal("0")
CENTS = Decimal("0.01")

# Optional sign, digits, optional single decimal point. No separators or exponents.
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def parse_numeric_input(raw: str | None) -> Decimal:
    """
    Parse a user-entered decimal string.

    Args:
        raw: Raw cell text (may be None, empty or malformed)

    Returns:
        Parsed value, or Decimal 0 for anything that isn't a plain decimal.
    """
    if raw is None:
        return ZERO

    text = raw.strip()
    if not _DECIMAL_PATTERN.fullmatch(text):
        return ZERO

    try:
        return Decimal(text)
    except InvalidOperation:
        return ZERO


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce an already-numeric value to Decimal (floats go through str to avoid binary noise)."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, str):
        return parse_numeric_input(value)
    return Decimal(str(value))


def _digits(value: Decimal) -> int:
    """Significant digits needed to hold value exactly."""
    sign, digits, exponent = value.as_tuple()
    return len(digits) + max(exponent, 0)


def multiply(left: Decimal, right: Decimal) -> Decimal:
    """Exact product, however many digits the operands carry."""
    with localcontext() as ctx:
        ctx.prec = max(getcontext().prec, _digits(left) + _digits(right))
        return left * right


def add(left: Decimal, right: Decimal) -> Decimal:
    """Exact sum, however many digits the operands carry."""
    with localcontext() as ctx:
        spread = abs(left.adjusted() - right.adjusted())
        ctx.prec = max(getcontext().prec, max(_digits(left), _digits(right)) + spread + 1)
        return left + right


def round_to_decimal(value: Decimal, decimals: int = 2) -> Decimal:
    """Round half away from zero to the given number of decimal places."""
    exponent = Decimal(1).scaleb(-decimals)
    with localcontext() as ctx:
        ctx.prec = max(getcontext().prec, max(value.adjusted(), 0) + decimals + 2)
        return value.quantize(exponent, rounding=ROUND_HALF_UP)


def round2(value: Decimal) -> Decimal:
    """Round to cents."""
    return round_to_decimal(value, 2)


def format_grid_number(value: Decimal, decimals: int = 2) -> str:
    """Fixed-point rendering for grid cells, e.g. Decimal("2.5") -> "2.50"."""
    return f"{round_to_decimal(to_decimal(value), decimals):.{decimals}f}"
