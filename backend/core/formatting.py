"""
formatting.py — pt-PT number display used in reports and the API config.
"""

from decimal import ROUND_HALF_UP, Decimal
from numbers import Real
from typing import Union

from core.normalizer import LEADING_NUMBER

DECIMAL_SEPARATOR = ","
GROUP_SEPARATOR = "\u00a0"
# pt-PT only groups thousands once the integer part has five digits ("1234" vs "12 345").
MIN_GROUPING_DIGITS = 5


def _group_thousands(digits: str) -> str:
    if len(digits) < MIN_GROUPING_DIGITS:
        return digits
    groups = []
    while digits:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    return GROUP_SEPARATOR.join(groups)


def _quantize(num: float) -> Decimal:
    # Exact binary value, ties away from zero: 10.25 -> 10.3, 0.15 -> 0.1.
    return Decimal(num).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def round_half_up(num: float) -> float:
    """Round to one decimal, sending exact ties up (10.25 -> 10.3)."""
    # + 0.0 folds -0.0 into 0.0
    return float(_quantize(num)) + 0.0


def format_decimal(value: Union[Real, str]) -> str:
    """
    Render a number with at most one decimal digit, pt-PT style.

    >>> format_decimal(12.25)
    '12,3'
    >>> format_decimal("14,0")
    '14'
    """
    if isinstance(value, str):
        sanitized = value.strip().replace(",", ".", 1)
        match = LEADING_NUMBER.match(sanitized)
        if not match:
            return value
        num = float(match.group(0))
    elif isinstance(value, Real) and not isinstance(value, bool):
        num = float(value)
    else:
        return str(value)

    if num != num or num in (float("inf"), float("-inf")):
        return str(value)

    quantized = _quantize(num)
    sign = "-" if quantized < 0 else ""
    integer_part, _, fraction = f"{abs(quantized):.1f}".partition(".")
    text = _group_thousands(integer_part)
    if fraction.strip("0"):
        text = f"{text}{DECIMAL_SEPARATOR}{fraction}"
    return f"{sign}{text}"
