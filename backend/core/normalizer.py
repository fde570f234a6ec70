"""
normalizer.py — Turn loosely typed spreadsheet/AI values into grades.

Every function here is total: unparseable input becomes 0, never NaN,
never an exception.
"""

import re
from numbers import Real
from typing import Any

import numpy as np


# Longest leading float literal: "14 val" reads as 14.
LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _finite_or_zero(value: float) -> float:
    return value if np.isfinite(value) else 0.0


def parse_locale_number(text: str) -> float:
    """Parse a pt-PT style numeric string ("12,5", " 14 ") or return 0."""
    sanitized = text.strip().replace(",", ".", 1)
    match = LEADING_NUMBER.match(sanitized)
    if not match:
        return 0.0
    try:
        return _finite_or_zero(float(match.group(0)))
    except (OverflowError, ValueError):
        return 0.0


def safe_parse_number(value: Any) -> float:
    """
    Convert any value into a numeric grade.

    - Numbers pass through untouched (no range clamping).
    - Text is trimmed, a decimal comma becomes a period, then parsed.
    - Everything else (None, booleans, containers) is 0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, Real):
        try:
            return _finite_or_zero(float(value))
        except OverflowError:
            return 0.0
    if isinstance(value, str):
        return parse_locale_number(value)
    return 0.0
