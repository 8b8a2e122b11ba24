"""
decimal_engine.py - Exact decimal arithmetic on canonical numeric strings

Every sum the tape shows is computed here. Values travel as canonical
strings (NumericValue) and are converted to Decimal only inside a private
context, so binary floating point never touches a displayed or compared value:

    add("1.0", "1.0") == "2.0"        # never "1.9999999999999998"

add, sub, mul and percentages are exact: each call gets a context with
enough digits for the full result. Only true quotients (div) are rounded,
to DECIMAL_PRECISION significant digits.

The context is local to each call; the process-wide Decimal context is left
alone.
"""

from __future__ import annotations
from decimal import (
    Decimal, Context, InvalidOperation, Overflow, ROUND_HALF_EVEN, ROUND_HALF_UP, localcontext,
)

from .core import (
    NumericValue, CANONICAL_EXPONENT, ZERO,
    DivisionByZero, MalformedNumber, NumberOutOfRange,
)


# ============================================================================
# CONTEXT
# ============================================================================
#
# prec=34 matches IEEE decimal128: quotients such as 1/3 print with more
# digits than anyone reads. Exact operations size their own precision and
# refuse results longer than EXACT_DIGITS_LIMIT digits.
# Traps stay on for InvalidOperation so garbage never becomes NaN silently.
#
DECIMAL_PRECISION = 34
EXACT_DIGITS_LIMIT = 10_000
EXPONENT_LIMIT = 999999

_HUNDRED = Decimal(100)


def _context(prec: int) -> Context:
    if prec > EXACT_DIGITS_LIMIT:
        raise NumberOutOfRange(f"Result needs {prec} digits, the limit is {EXACT_DIGITS_LIMIT}")
    return Context(
        prec=max(prec, 1),
        rounding=ROUND_HALF_EVEN,
        Emin=-EXPONENT_LIMIT,
        Emax=EXPONENT_LIMIT,
        traps=[InvalidOperation, Overflow],
    )


def _digits(d: Decimal) -> int:
    return len(d.as_tuple().digits)


def _sum_precision(x: Decimal, y: Decimal) -> int:
    # From the highest digit either operand has (plus one for a carry) down
    # to the lowest exponent either operand has.
    top = max(x.adjusted(), y.adjusted()) + 2
    bottom = min(x.as_tuple().exponent, y.as_tuple().exponent)
    return top - bottom


def _product_precision(x: Decimal, y: Decimal) -> int:
    return _digits(x) + _digits(y)


# ============================================================================
# CONVERSION
# ============================================================================

def to_decimal(value: NumericValue) -> Decimal:
    """
    Parse a canonical string into a finite Decimal.

    Raises:
        MalformedNumber: If value is not a finite decimal literal.
    """
    if not isinstance(value, str) or not value or not value.isascii():
        raise MalformedNumber(f"Not a canonical number: {value!r}")
    # Decimal() would also accept padding and digit-grouping underscores
    if value != value.strip() or "_" in value:
        raise MalformedNumber(f"Not a canonical number: {value!r}")
    try:
        d = Decimal(value)
    except InvalidOperation:
        raise MalformedNumber(f"Not a canonical number: {value!r}") from None
    if not d.is_finite():
        raise MalformedNumber(f"Number must be finite: {value!r}")
    return d


def canonical(d: Decimal) -> NumericValue:
    """
    Render a Decimal as a canonical string.

    The exponent marker is lower-cased and negative zero becomes "0", so equal
    results never differ only by a sign on zero.
    """
    if d.is_zero() and d.is_signed():
        d = d.copy_abs()
    return str(d).replace("E", CANONICAL_EXPONENT)


def _evaluate(op, x: Decimal, y: Decimal, prec: int) -> NumericValue:
    try:
        with localcontext(_context(prec)):
            return canonical(op(x, y))
    except Overflow:
        raise NumberOutOfRange(f"Result exponent is beyond {EXPONENT_LIMIT}") from None


# ============================================================================
# ARITHMETIC
# ============================================================================

def add(a: NumericValue, b: NumericValue) -> NumericValue:
    """
    Return a + b, exactly.

    Raises:
        NumberOutOfRange: If the exact result is too long to hold.
    """
    x, y = to_decimal(a), to_decimal(b)
    return _evaluate(lambda p, q: p + q, x, y, _sum_precision(x, y))


def sub(a: NumericValue, b: NumericValue) -> NumericValue:
    """Return a - b, exactly."""
    x, y = to_decimal(a), to_decimal(b)
    return _evaluate(lambda p, q: p - q, x, y, _sum_precision(x, y))


def mul(a: NumericValue, b: NumericValue) -> NumericValue:
    """Return a * b, exactly."""
    x, y = to_decimal(a), to_decimal(b)
    return _evaluate(lambda p, q: p * q, x, y, _product_precision(x, y))


def div(a: NumericValue, b: NumericValue) -> NumericValue:
    """
    Return a / b to DECIMAL_PRECISION significant digits.

    Raises:
        DivisionByZero: If b is zero.
        NumberOutOfRange: If the quotient overflows.
    """
    x, y = to_decimal(a), to_decimal(b)
    if y.is_zero():
        raise DivisionByZero(f"Cannot divide {a} by zero")
    return _evaluate(lambda p, q: p / q, x, y, DECIMAL_PRECISION)


def percent_of(a: NumericValue, b: NumericValue) -> NumericValue:
    """Return a * b / 100, exactly."""
    x, y = to_decimal(a), to_decimal(b)
    return _evaluate(lambda p, q: p * q / _HUNDRED, x, y, _product_precision(x, y))


def round_half_up(a: NumericValue, places: int) -> NumericValue:
    """
    Round a to a fixed number of fraction digits, halves away from zero.

    round_half_up("8.875", 2) == "8.88"

    Raises:
        NumberOutOfRange: If a has too many integer digits to hold exactly.
    """
    if places < 0:
        raise ValueError(f"places must be non-negative, got {places}")
    x = to_decimal(a)
    quantizer = Decimal(1).scaleb(-places)
    # integer digits, fraction digits and one more for a carry out of rounding
    prec = max(x.adjusted(), 0) + 1 + places + 1
    return _evaluate(lambda p, q: p.quantize(q, rounding=ROUND_HALF_UP), x, quantizer, prec)


def negate(a: NumericValue) -> NumericValue:
    """Return -a."""
    return canonical(to_decimal(a).copy_negate())


def is_zero(a: NumericValue) -> bool:
    return to_decimal(a).is_zero()


def compare(a: NumericValue, b: NumericValue) -> int:
    """Return -1, 0 or 1 as a is less than, equal to or greater than b."""
    return int(to_decimal(a).compare(to_decimal(b)))


def normalize(a: NumericValue) -> NumericValue:
    """Re-render a canonical string, e.g. "-0" -> "0", "1E+3" -> "1e+3"."""
    return canonical(to_decimal(a))


def as_percent(rate: NumericValue) -> NumericValue:
    """Express a fraction as a percentage: "0.08875" -> "8.875"."""
    x = to_decimal(rate)
    with localcontext(_context(_digits(x) + 3)):
        pct = (x * _HUNDRED).normalize()
    # normalize() turns 10.0 into 1E+1; print integral percentages plainly
    if pct == pct.to_integral_value():
        return str(int(pct))
    return format(pct, "f")


__all__ = [
    "DECIMAL_PRECISION", "EXACT_DIGITS_LIMIT", "ZERO",
    "to_decimal", "canonical",
    "add", "sub", "mul", "div", "percent_of", "round_half_up",
    "negate", "is_zero", "compare", "normalize", "as_percent",
]
