"""Swing detector contract.

Every strategy exposes `detect(series, index, degree)` and returns a
SwingDetectorResult built from pivots confirmed using bars up to `index`.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Tuple, runtime_checkable

import pandas as pd

from ewswing.data.bars import as_frame
from ewswing.ew.core.degree import ElliottDegree
from ewswing.ew.core.model import SwingDetectorResult


@runtime_checkable
class SwingDetector(Protocol):
    def detect(self, series: Any, index: int, degree: ElliottDegree) -> SwingDetectorResult:
        ...


def prepare(
    series: Any, index: Optional[int], degree: ElliottDegree
) -> Tuple[pd.DataFrame, int, ElliottDegree]:
    """Validate detect() arguments.

    Returns (frame, clamped index, degree); the index is -1 for an empty series.
    """
    if degree is None:
        raise ValueError("degree is required")
    if not isinstance(degree, ElliottDegree):
        degree = ElliottDegree(degree)
    frame = as_frame(series)
    n = len(frame)
    if n == 0:
        return frame, -1, degree
    if index is None:
        return frame, n - 1, degree
    return frame, min(max(int(index), 0), n - 1), degree


def check_window(name: str, value: int, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value
