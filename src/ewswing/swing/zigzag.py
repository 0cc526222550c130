"""ZigZag state machine.

The machine is a fold over bars: each state depends only on the previous state,
the current price and the current reversal threshold, so it can run over an
unbounded stream at O(1) per bar.

- UNDEFINED: waits for the first move away from the seed bar.
- UP: extends while price makes new highs; once price falls `threshold` or more
  below the extreme, the extreme is confirmed as a swing HIGH and the trend
  flips DOWN with the extreme reseeded at the current bar.
- DOWN: mirror image, confirming swing LOWs.

Thresholds are in price units and may change every bar (fixed, ATR-based,
percent of price...).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from numbers import Real
from typing import Iterable, Iterator, List, Union

from ewswing.ew.core.model import SwingPivot, SwingType
from ewswing.num import NaN, is_valid


class ZigZagTrend(str, Enum):
    UP = "up"
    DOWN = "down"
    UNDEFINED = "undefined"


@dataclass(frozen=True)
class ZigZagState:
    last_high_index: int = -1
    last_high_price: float = NaN
    last_low_index: int = -1
    last_low_price: float = NaN
    trend: ZigZagTrend = ZigZagTrend.UNDEFINED
    last_extreme_index: int = -1
    last_extreme_price: float = NaN

    @property
    def has_high(self) -> bool:
        return self.last_high_index >= 0

    @property
    def has_low(self) -> bool:
        return self.last_low_index >= 0


def initial_state(index: int, price: float) -> ZigZagState:
    """State at the first bar: no pivots, trend undefined, extreme at this bar."""
    return ZigZagState(last_extreme_index=index, last_extreme_price=price)


def next_state(prev: ZigZagState, index: int, price: float, threshold: float) -> ZigZagState:
    if not is_valid(price):
        return prev
    if not is_valid(prev.last_extreme_price):
        # seed bar had no usable price; seed here instead
        return replace(prev, last_extreme_index=index, last_extreme_price=price)

    extreme = prev.last_extreme_price
    can_reverse = is_valid(threshold) and threshold >= 0

    if prev.trend is ZigZagTrend.UNDEFINED:
        if price > extreme:
            return replace(prev, trend=ZigZagTrend.UP, last_extreme_index=index, last_extreme_price=price)
        if price < extreme:
            return replace(prev, trend=ZigZagTrend.DOWN, last_extreme_index=index, last_extreme_price=price)
        return prev

    if prev.trend is ZigZagTrend.UP:
        if price > extreme:
            return replace(prev, last_extreme_index=index, last_extreme_price=price)
        if can_reverse and extreme - price >= threshold:
            return replace(
                prev,
                last_high_index=prev.last_extreme_index,
                last_high_price=extreme,
                trend=ZigZagTrend.DOWN,
                last_extreme_index=index,
                last_extreme_price=price,
            )
        return prev

    if prev.trend is ZigZagTrend.DOWN:
        if price < extreme:
            return replace(prev, last_extreme_index=index, last_extreme_price=price)
        if can_reverse and price - extreme >= threshold:
            return replace(
                prev,
                last_low_index=prev.last_extreme_index,
                last_low_price=extreme,
                trend=ZigZagTrend.UP,
                last_extreme_index=index,
                last_extreme_price=price,
            )
        return prev

    raise ValueError(f"unknown zigzag trend: {prev.trend!r}")


Thresholds = Union[float, Iterable[float]]


def zigzag_states(prices: Iterable[float], thresholds: Thresholds, start_index: int = 0) -> Iterator[ZigZagState]:
    """Yield one state per price (iterative scan, safe for long series)."""
    if isinstance(thresholds, Real):
        fixed = float(thresholds)
        thr_iter: Iterator[float] = iter(lambda: fixed, object())
    else:
        thr_iter = iter(thresholds)

    state = None
    for offset, price in enumerate(prices):
        index = start_index + offset
        threshold = next(thr_iter, NaN)
        if state is None:
            state = initial_state(index, float(price) if is_valid(price) else NaN)
        else:
            state = next_state(state, index, price, threshold)
        yield state


def zigzag_pivots(states: Iterable[ZigZagState]) -> List[SwingPivot]:
    """Pivots in confirmation order (which is also index order)."""
    out: List[SwingPivot] = []
    prev = None
    for st in states:
        if prev is None:
            prev = st
            continue
        if st.last_high_index != prev.last_high_index and st.has_high:
            out.append(SwingPivot(st.last_high_index, st.last_high_price, SwingType.HIGH))
        if st.last_low_index != prev.last_low_index and st.has_low:
            out.append(SwingPivot(st.last_low_index, st.last_low_price, SwingType.LOW))
        prev = st
    return out
