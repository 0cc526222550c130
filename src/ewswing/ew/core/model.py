"""Canonical swing models.

Pivots are confirmed local extremes; swings (legs) join two consecutive pivots.
Both are frozen so results can be shared freely between readers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ewswing.ew.core.degree import ElliottDegree
from ewswing.num import NaN, is_valid


class SwingType(str, Enum):
    HIGH = "high"
    LOW = "low"

    def opposite(self) -> "SwingType":
        return SwingType.LOW if self is SwingType.HIGH else SwingType.HIGH


@dataclass(frozen=True)
class SwingPivot:
    """A confirmed swing high or low."""
    index: int
    price: float
    kind: SwingType

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"pivot index must be >= 0, got {self.index}")

    def is_more_extreme_than(self, other: "SwingPivot") -> bool:
        """At least as extreme as `other` (same kind assumed)."""
        if self.kind is SwingType.HIGH:
            return not self.price < other.price
        return not self.price > other.price


@dataclass(frozen=True)
class ElliottSwing:
    """A single leg between two pivots (index + price)."""
    from_index: int
    to_index: int
    from_price: float
    to_price: float
    degree: ElliottDegree

    def __post_init__(self) -> None:
        if self.to_index <= self.from_index:
            raise ValueError(
                f"swing must move forward in time: from={self.from_index} to={self.to_index}"
            )

    @staticmethod
    def between(start: SwingPivot, end: SwingPivot, degree: ElliottDegree) -> "ElliottSwing":
        return ElliottSwing(start.index, end.index, start.price, end.price, degree)

    @property
    def is_rising(self) -> bool:
        return self.to_price > self.from_price

    @property
    def amplitude(self) -> float:
        if not (is_valid(self.from_price) and is_valid(self.to_price)):
            return NaN
        return abs(self.to_price - self.from_price)

    @property
    def length(self) -> int:
        return self.to_index - self.from_index


@dataclass(frozen=True)
class SwingDetectorResult:
    pivots: Tuple[SwingPivot, ...] = ()
    swings: Tuple[ElliottSwing, ...] = field(default=())

    @staticmethod
    def empty() -> "SwingDetectorResult":
        return SwingDetectorResult()

    @staticmethod
    def from_pivots(pivots: Sequence[SwingPivot], degree: ElliottDegree) -> "SwingDetectorResult":
        """Build the result from already-normalized pivots."""
        pts = tuple(pivots)
        legs = tuple(ElliottSwing.between(a, b, degree) for a, b in zip(pts, pts[1:]))
        return SwingDetectorResult(pivots=pts, swings=legs)

    def __len__(self) -> int:
        return len(self.swings)

    @property
    def latest_pivot(self) -> Optional[SwingPivot]:
        return self.pivots[-1] if self.pivots else None

    @property
    def pivot_indexes(self) -> List[int]:
        return [p.index for p in self.pivots]

    def pivots_of(self, kind: SwingType) -> List[SwingPivot]:
        return [p for p in self.pivots if p.kind is kind]
