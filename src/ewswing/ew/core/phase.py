"""Elliott phases, scenario classifications and price channels."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from ewswing.ew.core.model import ElliottSwing
from ewswing.num import NaN, is_valid


class ElliottPhase(str, Enum):
    NONE = "none"
    WAVE1 = "wave1"
    WAVE2 = "wave2"
    WAVE3 = "wave3"
    WAVE4 = "wave4"
    WAVE5 = "wave5"
    CORRECTIVE_A = "corrective_a"
    CORRECTIVE_B = "corrective_b"
    CORRECTIVE_C = "corrective_c"

    @property
    def is_impulse(self) -> bool:
        return self in _IMPULSE

    @property
    def is_corrective(self) -> bool:
        return self in _CORRECTIVE

    @property
    def completes_structure(self) -> bool:
        return self in (ElliottPhase.WAVE5, ElliottPhase.CORRECTIVE_C)

    @property
    def wave_number(self) -> int:
        """1-5 for impulse waves, 1-3 for A-C, 0 for NONE."""
        if self.is_impulse:
            return _IMPULSE.index(self) + 1
        if self.is_corrective:
            return _CORRECTIVE.index(self) + 1
        return 0


_IMPULSE = (
    ElliottPhase.WAVE1,
    ElliottPhase.WAVE2,
    ElliottPhase.WAVE3,
    ElliottPhase.WAVE4,
    ElliottPhase.WAVE5,
)
_CORRECTIVE = (ElliottPhase.CORRECTIVE_A, ElliottPhase.CORRECTIVE_B, ElliottPhase.CORRECTIVE_C)


class ScenarioType(str, Enum):
    IMPULSE = "impulse"
    CORRECTIVE_ZIGZAG = "corrective_zigzag"
    CORRECTIVE_FLAT = "corrective_flat"
    CORRECTIVE_TRIANGLE = "corrective_triangle"
    CORRECTIVE_COMPLEX = "corrective_complex"
    UNKNOWN = "unknown"

    @property
    def is_impulse(self) -> bool:
        return self is ScenarioType.IMPULSE

    @property
    def is_corrective(self) -> bool:
        return self.value.startswith("corrective_")


@dataclass(frozen=True)
class ElliottChannel:
    """Upper/lower price bounds projected to one bar."""
    upper: float
    lower: float
    median: float

    @staticmethod
    def invalid() -> "ElliottChannel":
        return ElliottChannel(NaN, NaN, NaN)

    @property
    def is_valid(self) -> bool:
        return (
            is_valid(self.upper)
            and is_valid(self.lower)
            and is_valid(self.median)
            and self.upper >= self.lower
        )

    def contains(self, price: float, tolerance: float = 0.0) -> bool:
        if not self.is_valid or not is_valid(price):
            return False
        tol = tolerance if is_valid(tolerance) and tolerance > 0 else 0.0
        return self.lower - tol <= price <= self.upper + tol

    @staticmethod
    def from_swings(swings: Sequence[ElliottSwing], index: Optional[int] = None) -> "ElliottChannel":
        """Project lines through the latest two rising and two falling swing ends.

        Rising swings end at highs (upper line), falling swings end at lows
        (lower line). Needs at least four swings.
        """
        if not swings or len(swings) < 4:
            return ElliottChannel.invalid()
        at = swings[-1].to_index if index is None else index

        rising = _latest_by_direction(swings, True)
        falling = _latest_by_direction(swings, False)
        if len(rising) < 2 or len(falling) < 2:
            return ElliottChannel.invalid()

        upper = _project(rising[0], rising[1], at)
        lower = _project(falling[0], falling[1], at)
        if not (is_valid(upper) and is_valid(lower)):
            return ElliottChannel.invalid()
        return ElliottChannel(upper=upper, lower=lower, median=(upper + lower) / 2.0)


def _latest_by_direction(swings: Sequence[ElliottSwing], rising: bool):
    picked = []
    for sw in reversed(swings):
        if sw.is_rising == rising:
            picked.append(sw)
            if len(picked) == 2:
                break
    picked.reverse()
    return picked


def _project(older: ElliottSwing, newer: ElliottSwing, index: int) -> float:
    span = newer.to_index - older.to_index
    if span == 0 or not (is_valid(older.to_price) and is_valid(newer.to_price)):
        return NaN
    slope = (newer.to_price - older.to_price) / span
    return newer.to_price + slope * (index - newer.to_index)
