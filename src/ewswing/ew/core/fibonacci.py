"""Fibonacci ratio checks between Elliott swings.

Every check compares the amplitude ratio of two swings against a canonical
range widened by `tolerance` on both sides. Inside the widened range the
proximity score is `1 - 0.5 * |ratio - ideal| / half_range`, clamped to [0, 1],
so it is 1.0 at the ideal ratio. Outside the widened range it is 0.0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ewswing.ew.core.model import ElliottSwing
from ewswing.num import is_valid, safe_ratio

Range = Tuple[float, float]


@dataclass(frozen=True)
class FibonacciConfig:
    tolerance: float = 0.05
    wave2_retracement: Range = (0.382, 0.786)
    wave3_extension: Range = (1.0, 2.618)
    wave4_retracement: Range = (0.236, 0.786)
    wave5_projection: Range = (0.618, 1.618)
    waveb_retracement: Range = (0.382, 0.886)
    waveb_flat_min: float = 0.786
    wavec_extension: Range = (1.0, 1.618)

    wave2_ideal: float = 0.618
    wave3_ideal: float = 1.618
    wave4_ideal: float = 0.382
    wave5_ideal: float = 1.0
    waveb_ideal: float = 0.618
    wavec_ideal: float = 1.0


class ElliottFibonacciValidator:
    def __init__(self, cfg: FibonacciConfig = FibonacciConfig()):
        if not is_valid(cfg.tolerance) or cfg.tolerance < 0:
            raise ValueError("tolerance must be a non-negative number")
        self.cfg = cfg

    @property
    def tolerance(self) -> float:
        return self.cfg.tolerance

    # --- range checks -------------------------------------------------

    def is_wave_two_retracement_valid(self, wave1: ElliottSwing, wave2: ElliottSwing) -> bool:
        return self._between(wave2.amplitude, wave1.amplitude, self.cfg.wave2_retracement)

    def is_wave_three_extension_valid(self, wave1: ElliottSwing, wave3: ElliottSwing) -> bool:
        return self._between(wave3.amplitude, wave1.amplitude, self.cfg.wave3_extension)

    def is_wave_four_retracement_valid(self, wave3: ElliottSwing, wave4: ElliottSwing) -> bool:
        return self._between(wave4.amplitude, wave3.amplitude, self.cfg.wave4_retracement)

    def is_wave_five_projection_valid(self, wave1: ElliottSwing, wave5: ElliottSwing) -> bool:
        return self._between(wave5.amplitude, wave1.amplitude, self.cfg.wave5_projection)

    def is_wave_b_retracement_valid(self, wave_a: ElliottSwing, wave_b: ElliottSwing) -> bool:
        return self._between(wave_b.amplitude, wave_a.amplitude, self.cfg.waveb_retracement)

    def is_wave_b_flat_retracement_valid(self, wave_a: ElliottSwing, wave_b: ElliottSwing) -> bool:
        rng = (self.cfg.waveb_flat_min, self.cfg.waveb_retracement[1])
        return self._between(wave_b.amplitude, wave_a.amplitude, rng)

    def is_wave_c_extension_valid(self, wave_a: ElliottSwing, wave_c: ElliottSwing) -> bool:
        return self._between(wave_c.amplitude, wave_a.amplitude, self.cfg.wavec_extension)

    # --- proximity scores ---------------------------------------------

    def wave_two_proximity(self, wave1: ElliottSwing, wave2: ElliottSwing) -> float:
        return self.ratio_proximity_score(
            wave2.amplitude, wave1.amplitude, self.cfg.wave2_retracement, self.cfg.wave2_ideal
        )

    def wave_three_proximity(self, wave1: ElliottSwing, wave3: ElliottSwing) -> float:
        return self.ratio_proximity_score(
            wave3.amplitude, wave1.amplitude, self.cfg.wave3_extension, self.cfg.wave3_ideal
        )

    def wave_four_proximity(self, wave3: ElliottSwing, wave4: ElliottSwing) -> float:
        return self.ratio_proximity_score(
            wave4.amplitude, wave3.amplitude, self.cfg.wave4_retracement, self.cfg.wave4_ideal
        )

    def wave_five_proximity(self, wave1: ElliottSwing, wave5: ElliottSwing) -> float:
        return self.ratio_proximity_score(
            wave5.amplitude, wave1.amplitude, self.cfg.wave5_projection, self.cfg.wave5_ideal
        )

    def wave_b_proximity(self, wave_a: ElliottSwing, wave_b: ElliottSwing) -> float:
        return self.ratio_proximity_score(
            wave_b.amplitude, wave_a.amplitude, self.cfg.waveb_retracement, self.cfg.waveb_ideal
        )

    def wave_c_proximity(self, wave_a: ElliottSwing, wave_c: ElliottSwing) -> float:
        return self.ratio_proximity_score(
            wave_c.amplitude, wave_a.amplitude, self.cfg.wavec_extension, self.cfg.wavec_ideal
        )

    def ratio_proximity_score(self, numerator: float, denominator: float, rng: Range, ideal: float) -> float:
        ratio = safe_ratio(numerator, denominator)
        if not is_valid(ratio):
            return 0.0
        lower, upper = rng
        if ratio < lower - self.tolerance or ratio > upper + self.tolerance:
            return 0.0
        half = (upper - lower) / 2.0
        if half == 0:
            return 1.0
        score = 1.0 - (abs(ratio - ideal) / half) * 0.5
        return min(1.0, max(0.0, score))

    def _between(self, numerator: float, denominator: float, rng: Range) -> bool:
        ratio = safe_ratio(numerator, denominator)
        if not is_valid(ratio):
            return False
        lower, upper = rng
        return lower - self.tolerance <= ratio <= upper + self.tolerance
