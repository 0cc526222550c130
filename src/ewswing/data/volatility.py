"""Volatility series used as reversal thresholds."""

from __future__ import annotations

import pandas as pd


def true_range(frame: pd.DataFrame) -> pd.Series:
    """max(high-low, |high-prev_close|, |low-prev_close|); first bar is high-low."""
    high = pd.to_numeric(frame["high"], errors="coerce").astype(float)
    low = pd.to_numeric(frame["low"], errors="coerce").astype(float)
    close = pd.to_numeric(frame["close"], errors="coerce").astype(float)
    prev_close = close.shift()
    tr = pd.DataFrame(
        {
            "hl": (high - low).abs(),
            "hc": (high - prev_close).abs(),
            "lc": (low - prev_close).abs(),
        }
    ).max(axis=1, skipna=True)
    # a bar with no valid high/low has no range at all
    tr[high.isna() | low.isna()] = float("nan")
    return tr.reset_index(drop=True)


def atr(frame: pd.DataFrame, period: int = 14) -> pd.Series:
    """Wilder's average true range (modified moving average, alpha = 1/period)."""
    if period < 1:
        raise ValueError("ATR period must be positive")
    tr = true_range(frame)
    return tr.ewm(alpha=1.0 / period, adjust=False).mean()


def sma(values: pd.Series, window: int) -> pd.Series:
    """Simple moving average that is defined from the first bar (partial windows)."""
    if window < 1:
        raise ValueError("smoothing window must be >= 1")
    return values.rolling(window=window, min_periods=1).mean()
