"""N-way composite detector.

Children run on the same series/index/degree. A pivot is identified by
(index, kind):
- AND keeps a pivot only when every child reports it
- OR keeps a pivot reported by at least one child
The merged price is the most extreme valid price among the reporting children
and the result is renormalized so highs and lows alternate again.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple

from ewswing.ew.core.degree import ElliottDegree
from ewswing.ew.core.model import SwingDetectorResult, SwingPivot, SwingType
from ewswing.ew.detectors.base import SwingDetector, prepare
from ewswing.logging import get_logger
from ewswing.num import is_valid
from ewswing.swing.pivots import normalize_pivots

log = get_logger("ewswing.detectors.composite")

Key = Tuple[int, SwingType]


class CompositePolicy(str, Enum):
    AND = "and"
    OR = "or"


def _more_extreme(kind: SwingType, a: float, b: float) -> float:
    if not is_valid(a):
        return b
    if not is_valid(b):
        return a
    if kind is SwingType.HIGH:
        return max(a, b)
    if kind is SwingType.LOW:
        return min(a, b)
    raise ValueError(f"unknown swing type: {kind!r}")


@dataclass(frozen=True, init=False)
class CompositeSwingDetector:
    detectors: Tuple[SwingDetector, ...]
    policy: CompositePolicy = CompositePolicy.AND

    def __init__(self, detectors: Sequence[SwingDetector], policy: CompositePolicy = CompositePolicy.AND):
        if detectors is None or len(detectors) == 0:
            raise ValueError("composite detector needs at least one child detector")
        for d in detectors:
            if d is None or not callable(getattr(d, "detect", None)):
                raise ValueError(f"not a swing detector: {d!r}")
        object.__setattr__(self, "detectors", tuple(detectors))
        object.__setattr__(self, "policy", CompositePolicy(policy))

    def detect(self, series: Any, index: int, degree: ElliottDegree) -> SwingDetectorResult:
        _, at, degree = prepare(series, index, degree)
        if at < 0:
            return SwingDetectorResult.empty()

        prices: Dict[Key, float] = {}
        votes: Dict[Key, int] = {}
        for child in self.detectors:
            seen = set()
            for p in child.detect(series, at, degree).pivots:
                key = (p.index, p.kind)
                if key in seen:
                    continue
                seen.add(key)
                votes[key] = votes.get(key, 0) + 1
                prices[key] = _more_extreme(p.kind, prices.get(key, float("nan")), p.price)

        needed = len(self.detectors) if self.policy is CompositePolicy.AND else 1
        merged: List[SwingPivot] = [
            SwingPivot(i, prices[(i, kind)], kind)
            for (i, kind), n in votes.items()
            if n >= needed and is_valid(prices[(i, kind)])
        ]
        pivots = normalize_pivots(merged)
        log.debug(
            "composite detect",
            extra={
                "index": at,
                "children": len(self.detectors),
                "policy": self.policy.value,
                "merged": len(merged),
                "pivots": len(pivots),
            },
        )
        return SwingDetectorResult.from_pivots(pivots, degree)
