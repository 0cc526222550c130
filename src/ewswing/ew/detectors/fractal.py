"""Fixed-window fractal swing detector."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ewswing.data.bars import PriceSource, price_series
from ewswing.ew.core.degree import ElliottDegree
from ewswing.ew.core.model import SwingDetectorResult, SwingPivot, SwingType
from ewswing.ew.detectors.base import check_window, prepare
from ewswing.logging import get_logger
from ewswing.swing.fractal import confirmed_fractal_indexes
from ewswing.swing.pivots import normalize_pivots

log = get_logger("ewswing.detectors.fractal")


@dataclass(frozen=True)
class FractalSwingDetector:
    """Highs from the `high` column, lows from the `low` column.

    A pivot at bar i is visible once bar i + lookforward (plus any plateau) is
    available, so results at `index` never read later bars.
    """

    lookback: int = 2
    lookforward: int = 2
    allowed_equal_bars: int = 0
    high_source: PriceSource = PriceSource.HIGH
    low_source: PriceSource = PriceSource.LOW

    def __post_init__(self) -> None:
        check_window("lookback", self.lookback, 1)
        check_window("lookforward", self.lookforward, 1)
        check_window("allowed_equal_bars", self.allowed_equal_bars, 0)
        object.__setattr__(self, "high_source", PriceSource(self.high_source))
        object.__setattr__(self, "low_source", PriceSource(self.low_source))

    @staticmethod
    def symmetric(window: int, allowed_equal_bars: int = 0) -> "FractalSwingDetector":
        return FractalSwingDetector(window, window, allowed_equal_bars)

    @property
    def unstable_bars(self) -> int:
        return self.lookforward

    def detect(self, series: Any, index: int, degree: ElliottDegree) -> SwingDetectorResult:
        frame, at, degree = prepare(series, index, degree)
        if at < 0:
            return SwingDetectorResult.empty()

        highs = price_series(frame, self.high_source).tolist()
        lows = price_series(frame, self.low_source).tolist()

        candidates = []
        for i in confirmed_fractal_indexes(
            highs, self.lookback, self.lookforward, self.allowed_equal_bars, SwingType.HIGH, at
        ):
            candidates.append(SwingPivot(i, highs[i], SwingType.HIGH))
        for i in confirmed_fractal_indexes(
            lows, self.lookback, self.lookforward, self.allowed_equal_bars, SwingType.LOW, at
        ):
            candidates.append(SwingPivot(i, lows[i], SwingType.LOW))

        pivots = normalize_pivots(candidates)
        log.debug(
            "fractal detect",
            extra={"index": at, "candidates": len(candidates), "pivots": len(pivots), "degree": degree.value},
        )
        return SwingDetectorResult.from_pivots(pivots, degree)
