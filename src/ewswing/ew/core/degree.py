"""Elliott wave degrees (largest to smallest)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import List


class ElliottDegree(str, Enum):
    GRAND_SUPERCYCLE = "grand_supercycle"
    SUPER_CYCLE = "super_cycle"
    CYCLE = "cycle"
    PRIMARY = "primary"
    INTERMEDIATE = "intermediate"
    MINOR = "minor"
    MINUTE = "minute"
    MINUETTE = "minuette"
    SUB_MINUETTE = "sub_minuette"

    @property
    def rank(self) -> int:
        """0 for the largest degree."""
        return _ORDER.index(self)

    def higher_degree(self) -> "ElliottDegree":
        r = self.rank
        return self if r == 0 else _ORDER[r - 1]

    def lower_degree(self) -> "ElliottDegree":
        r = self.rank
        return self if r == len(_ORDER) - 1 else _ORDER[r + 1]

    def is_higher_or_equal(self, other: "ElliottDegree") -> bool:
        return self.rank <= other.rank

    def is_lower_or_equal(self, other: "ElliottDegree") -> bool:
        return self.rank >= other.rank


_ORDER: List[ElliottDegree] = list(ElliottDegree)


@dataclass(frozen=True)
class _DegreeRange:
    min_days: float
    max_days: float  # 0 = open ended

    def score(self, days: float) -> float:
        if days < self.min_days:
            return days / self.min_days
        if self.max_days > 0 and days > self.max_days:
            return self.max_days / days
        return 1.0

    def midpoint_distance(self, days: float) -> float:
        if days < self.min_days:
            return self.min_days - days
        if self.max_days <= 0:
            return 0.0
        if days > self.max_days:
            return days - self.max_days
        return abs(days - (self.min_days + self.max_days) / 2.0)


# Typical span (in days) covered by one complete structure of each degree.
_RECOMMENDED_DAYS = {
    ElliottDegree.GRAND_SUPERCYCLE: _DegreeRange(20000.0, 0.0),
    ElliottDegree.SUPER_CYCLE: _DegreeRange(7000.0, 20000.0),
    ElliottDegree.CYCLE: _DegreeRange(1000.0, 7000.0),
    ElliottDegree.PRIMARY: _DegreeRange(400.0, 1000.0),
    ElliottDegree.INTERMEDIATE: _DegreeRange(180.0, 400.0),
    ElliottDegree.MINOR: _DegreeRange(60.0, 180.0),
    ElliottDegree.MINUTE: _DegreeRange(30.0, 90.0),
    ElliottDegree.MINUETTE: _DegreeRange(7.0, 30.0),
    ElliottDegree.SUB_MINUETTE: _DegreeRange(2.0, 7.0),
}

MIN_RECOMMENDATION_SCORE = 0.5


def _minimum_degree(bar_duration: timedelta) -> ElliottDegree:
    if bar_duration >= timedelta(days=7):
        return ElliottDegree.INTERMEDIATE
    if bar_duration >= timedelta(days=1):
        return ElliottDegree.MINUTE
    if bar_duration > timedelta(minutes=15):
        return ElliottDegree.MINUETTE
    return ElliottDegree.SUB_MINUETTE


def recommended_degrees(bar_duration: timedelta, bar_count: int) -> List[ElliottDegree]:
    """Degrees that fit the time span covered by `bar_count` bars, best first.

    Degrees finer than the bar size supports are never suggested. When no
    degree reaches MIN_RECOMMENDATION_SCORE the single best candidate is
    returned.
    """
    if bar_duration is None:
        raise ValueError("bar_duration is required")
    if bar_count <= 0:
        raise ValueError("bar_count must be positive")
    if bar_duration <= timedelta(0):
        raise ValueError("bar_duration must be positive")

    days = bar_duration / timedelta(days=1) * bar_count
    minimum = _minimum_degree(bar_duration)

    ranked = []
    for degree in _ORDER:
        if not degree.is_higher_or_equal(minimum):
            continue
        rng = _RECOMMENDED_DAYS[degree]
        ranked.append((degree, rng.score(days), rng.midpoint_distance(days)))

    ranked.sort(key=lambda r: (-r[1], r[2], r[0].rank))
    good = [d for d, s, _ in ranked if s >= MIN_RECOMMENDATION_SCORE]
    if good:
        return good
    return [ranked[0][0]] if ranked else []
