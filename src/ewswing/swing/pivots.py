"""Pivot normalization shared by every multi-source detector.

normalize_pivots() guarantees the alternation invariant: after it runs no two
consecutive pivots share a kind.
"""

from __future__ import annotations

from itertools import groupby
from typing import Iterable, List, Sequence

from ewswing.ew.core.degree import ElliottDegree
from ewswing.ew.core.model import ElliottSwing, SwingPivot, SwingType
from ewswing.num import is_valid


def _absorb(out: List[SwingPivot], pivot: SwingPivot) -> None:
    if not out:
        out.append(pivot)
        return
    last = out[-1]
    if last.kind is pivot.kind:
        # ties keep the later pivot
        if pivot.is_more_extreme_than(last):
            out[-1] = pivot
        return
    out.append(pivot)


def _pick_at_same_index(out: List[SwingPivot], group: Sequence[SwingPivot]) -> List[SwingPivot]:
    highs = [p for p in group if p.kind is SwingType.HIGH]
    lows = [p for p in group if p.kind is SwingType.LOW]
    if not highs or not lows:
        return list(group)
    if out:
        wanted = out[-1].kind.opposite()
    else:
        top = max(p.price for p in highs)
        bottom = min(p.price for p in lows)
        wanted = SwingType.HIGH if top >= bottom else SwingType.LOW
    return highs if wanted is SwingType.HIGH else lows


def normalize_pivots(candidates: Iterable[SwingPivot]) -> List[SwingPivot]:
    """Sort by index and collapse same-kind runs into their most extreme pivot.

    Candidates with an invalid price are dropped. When one bar carries both a
    high and a low, the kind opposite the previous pivot wins (or, at the very
    start, the high unless it sits below the low).
    """
    valid = [p for p in candidates if p is not None and is_valid(p.price)]
    valid.sort(key=lambda p: p.index)

    out: List[SwingPivot] = []
    for _, grp in groupby(valid, key=lambda p: p.index):
        for pivot in _pick_at_same_index(out, list(grp)):
            _absorb(out, pivot)
    return out


def swings_from_pivots(pivots: Sequence[SwingPivot], degree: ElliottDegree) -> List[ElliottSwing]:
    return [ElliottSwing.between(a, b, degree) for a, b in zip(pivots, pivots[1:])]


def pivots_from_swings(swings: Sequence[ElliottSwing]) -> List[SwingPivot]:
    """Inverse of swings_from_pivots for a contiguous leg sequence."""
    if not swings:
        return []
    out: List[SwingPivot] = []
    first = swings[0]
    first_kind = SwingType.LOW if first.is_rising else SwingType.HIGH
    out.append(SwingPivot(first.from_index, first.from_price, first_kind))
    for sw in swings:
        out.append(SwingPivot(sw.to_index, sw.to_price, SwingType.HIGH if sw.is_rising else SwingType.LOW))
    return out
