"""Volatility-adaptive ZigZag.

threshold[i] = ATR(period)[i] * multiplier, optionally smoothed with an SMA and
clamped to [min_threshold, max_threshold]. Bars where the threshold is
undefined never confirm a reversal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from ewswing.data.bars import PriceSource
from ewswing.data.volatility import atr, sma
from ewswing.ew.core.degree import ElliottDegree
from ewswing.ew.core.model import SwingDetectorResult
from ewswing.ew.detectors.base import check_window
from ewswing.ew.detectors.zigzag import ZigZagSwingDetector
from ewswing.num import is_valid


@dataclass(frozen=True)
class AdaptiveZigZagConfig:
    period: int = 14
    multiplier: float = 2.0
    smoothing: Optional[int] = None
    min_threshold: Optional[float] = None
    max_threshold: Optional[float] = None
    price: PriceSource = PriceSource.CLOSE

    def __post_init__(self) -> None:
        object.__setattr__(self, "price", PriceSource(self.price))
        check_window("period", self.period, 1)
        if not is_valid(self.multiplier) or self.multiplier <= 0:
            raise ValueError(f"multiplier must be > 0, got {self.multiplier!r}")
        if self.smoothing is not None:
            check_window("smoothing", self.smoothing, 1)
        for name in ("min_threshold", "max_threshold"):
            v = getattr(self, name)
            if v is not None and (not is_valid(v) or v < 0):
                raise ValueError(f"{name} must be a non-negative number, got {v!r}")
        if (
            self.min_threshold is not None
            and self.max_threshold is not None
            and self.max_threshold < self.min_threshold
        ):
            raise ValueError(
                f"max_threshold ({self.max_threshold}) must be >= min_threshold ({self.min_threshold})"
            )

    def thresholds(self, frame: pd.DataFrame) -> pd.Series:
        out = atr(frame, self.period) * self.multiplier
        if self.smoothing is not None and self.smoothing > 1:
            out = sma(out, self.smoothing)
        if self.min_threshold is not None or self.max_threshold is not None:
            out = out.clip(lower=self.min_threshold, upper=self.max_threshold)
        return out


@dataclass(frozen=True)
class AdaptiveZigZagSwingDetector:
    config: AdaptiveZigZagConfig = field(default_factory=AdaptiveZigZagConfig)

    @property
    def delegate(self) -> ZigZagSwingDetector:
        return ZigZagSwingDetector(price=self.config.price, threshold=self.config.thresholds)

    def detect(self, series: Any, index: int, degree: ElliottDegree) -> SwingDetectorResult:
        return self.delegate.detect(series, index, degree)
