"""Fractal (window) pivot confirmation.

A bar is a fractal high when the `preceding` bars before it and the `following`
bars after it are all strictly lower. Flat tops are tolerated: up to
`allowed_equal` bars equal to the candidate on each side form a plateau and the
dominance windows are measured from the plateau edges instead.

Only values up to `max_index` are read, so confirmation lags by `following`
bars and never peeks further.
"""

from __future__ import annotations

from typing import Callable, List, Sequence

from ewswing.ew.core.model import SwingType
from ewswing.num import is_valid


def _dominates(kind: SwingType) -> Callable[[float, float], bool]:
    if kind is SwingType.HIGH:
        return lambda cand, other: cand > other
    if kind is SwingType.LOW:
        return lambda cand, other: cand < other
    raise ValueError(f"unknown swing type: {kind!r}")


def _plateau_start(values: Sequence[float], index: int, value: float, allowed_equal: int) -> int:
    used = 0
    i = index
    while i > 0 and used < allowed_equal:
        prev = values[i - 1]
        if not is_valid(prev):
            return -1
        if prev != value:
            break
        used += 1
        i -= 1
    if i > 0 and values[i - 1] == value:
        return -1  # plateau wider than tolerated
    return i


def _plateau_end(values: Sequence[float], index: int, max_index: int, value: float, allowed_equal: int) -> int:
    used = 0
    i = index
    while i < max_index and used < allowed_equal:
        nxt = values[i + 1]
        if not is_valid(nxt):
            return -1
        if nxt != value:
            break
        used += 1
        i += 1
    if i < max_index and values[i + 1] == value:
        return -1
    return i


def is_confirmed_fractal(
    values: Sequence[float],
    index: int,
    preceding: int,
    following: int,
    allowed_equal: int,
    kind: SwingType,
    max_index: int,
) -> bool:
    if preceding < 0 or following < 0 or allowed_equal < 0:
        return False
    if index < 0 or index > max_index or max_index >= len(values):
        return False
    value = values[index]
    if not is_valid(value):
        return False

    start = _plateau_start(values, index, value, allowed_equal)
    if start < 0:
        return False
    end = _plateau_end(values, index, max_index, value, allowed_equal)
    if end < 0:
        return False

    dom = _dominates(kind)
    if start - preceding < 0:
        return False
    for i in range(start - preceding, start):
        if not is_valid(values[i]) or not dom(value, values[i]):
            return False
    if max_index - end < following:
        return False
    for i in range(end + 1, end + following + 1):
        if not is_valid(values[i]) or not dom(value, values[i]):
            return False
    return True


def confirmed_fractal_indexes(
    values: Sequence[float],
    preceding: int,
    following: int,
    allowed_equal: int,
    kind: SwingType,
    max_index: int,
) -> List[int]:
    """All confirmed fractal indexes visible at `max_index`, ascending."""
    if max_index < 0 or max_index >= len(values):
        return []
    last = max_index - following
    out: List[int] = []
    for i in range(preceding, last + 1):
        if is_confirmed_fractal(values, i, preceding, following, allowed_equal, kind, max_index):
            out.append(i)
    return out
