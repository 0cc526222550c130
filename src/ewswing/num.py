"""Numeric helpers.

Prices and scores are plain floats. NaN is the invalid/undefined sentinel: it
compares as neither greater nor less than anything, so callers that must not
silently skip a comparison check `is_valid` explicitly.
"""

from __future__ import annotations

import math
from typing import Any, Callable

NaN = float("nan")

NumFactory = Callable[[Any], float]


def is_valid(x: Any) -> bool:
    """True for a finite real number."""
    if x is None or isinstance(x, bool):
        return False
    try:
        return math.isfinite(float(x))
    except (TypeError, ValueError):
        return False


def num_of(x: Any) -> float:
    """Default numeric factory: coerce to float, NaN when not coercible."""
    if x is None:
        return NaN
    try:
        return float(x)
    except (TypeError, ValueError):
        return NaN


def clamp01(x: float) -> float:
    if not is_valid(x):
        return NaN
    return min(1.0, max(0.0, float(x)))


def safe_ratio(numerator: float, denominator: float) -> float:
    """|numerator / denominator|, NaN when undefined."""
    if not is_valid(numerator) or not is_valid(denominator) or denominator == 0:
        return NaN
    return abs(float(numerator) / float(denominator))
