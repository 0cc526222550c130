"""ZigZag-based swing detectors.

The reversal threshold is a per-bar series computed from the bar frame:
- a fixed amount (float)
- a percent of the current price (`ZigZagSwingDetector.percent`)
- ATR(period) * multiplier
- any callable `frame -> pandas.Series`
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import Any, Callable, List, Optional, Union

import pandas as pd

from ewswing.data.bars import PriceSource, price_series
from ewswing.data.volatility import atr
from ewswing.ew.core.degree import ElliottDegree
from ewswing.ew.core.model import SwingDetectorResult
from ewswing.ew.detectors.base import check_window, prepare
from ewswing.logging import get_logger
from ewswing.num import is_valid
from ewswing.swing.pivots import normalize_pivots
from ewswing.swing.zigzag import ZigZagState, zigzag_pivots, zigzag_states

log = get_logger("ewswing.detectors.zigzag")

ThresholdFn = Callable[[pd.DataFrame], pd.Series]
Threshold = Union[float, ThresholdFn]


@dataclass(frozen=True)
class PercentThreshold:
    pct: float

    def __post_init__(self) -> None:
        if not is_valid(self.pct) or self.pct < 0:
            raise ValueError(f"pct must be >= 0, got {self.pct!r}")

    def __call__(self, frame: pd.DataFrame) -> pd.Series:
        return price_series(frame, PriceSource.CLOSE).abs() * (self.pct / 100.0)


@dataclass(frozen=True)
class AtrThreshold:
    period: int = 14
    multiplier: float = 1.0

    def __post_init__(self) -> None:
        check_window("period", self.period, 1)
        if not is_valid(self.multiplier) or self.multiplier <= 0:
            raise ValueError(f"multiplier must be > 0, got {self.multiplier!r}")

    def __call__(self, frame: pd.DataFrame) -> pd.Series:
        return atr(frame, self.period) * self.multiplier


@dataclass(frozen=True)
class ZigZagSwingDetector:
    price: PriceSource = PriceSource.CLOSE
    threshold: Threshold = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "price", PriceSource(self.price))
        t = self.threshold
        if isinstance(t, Real):
            if not is_valid(t) or t < 0:
                raise ValueError(f"threshold must be a non-negative number, got {t!r}")
        elif not callable(t):
            raise ValueError(f"threshold must be a number or a callable, got {type(t).__name__}")

    @staticmethod
    def atr(period: int = 14, multiplier: float = 1.0, price: PriceSource = PriceSource.CLOSE) -> "ZigZagSwingDetector":
        return ZigZagSwingDetector(price=price, threshold=AtrThreshold(period, multiplier))

    @staticmethod
    def percent(pct: float, price: PriceSource = PriceSource.CLOSE) -> "ZigZagSwingDetector":
        return ZigZagSwingDetector(price=price, threshold=PercentThreshold(pct))

    def thresholds(self, frame: pd.DataFrame) -> pd.Series:
        t = self.threshold
        if isinstance(t, Real):
            return pd.Series([float(t)] * len(frame), dtype=float)
        out = t(frame)
        if not isinstance(out, pd.Series):
            out = pd.Series(list(out), dtype=float)
        return pd.to_numeric(out, errors="coerce").astype(float).reset_index(drop=True)

    def states(self, series: Any, index: Optional[int] = None) -> List[ZigZagState]:
        """Per-bar machine states for bars 0..index."""
        frame, at, _ = prepare(series, index, ElliottDegree.MINOR)
        if at < 0:
            return []
        prices = price_series(frame, self.price).iloc[: at + 1].tolist()
        thr = self.thresholds(frame).iloc[: at + 1].tolist()
        return list(zigzag_states(prices, thr))

    def detect(self, series: Any, index: int, degree: ElliottDegree) -> SwingDetectorResult:
        frame, at, degree = prepare(series, index, degree)
        if at < 0:
            return SwingDetectorResult.empty()
        prices = price_series(frame, self.price).iloc[: at + 1].tolist()
        thr = self.thresholds(frame).iloc[: at + 1].tolist()

        confirmed = zigzag_pivots(zigzag_states(prices, thr))
        pivots = normalize_pivots(confirmed)
        log.debug(
            "zigzag detect",
            extra={"index": at, "confirmed": len(confirmed), "pivots": len(pivots), "degree": degree.value},
        )
        return SwingDetectorResult.from_pivots(pivots, degree)
