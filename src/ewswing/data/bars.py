"""Minimal OHLCV bar models (stable surface).

Detectors accept anything `as_frame` understands:
- BarSeries (list of Bar + lazily built DataFrame)
- pandas DataFrame with open/high/low/close[/volume] columns (any case), or a
  single numeric price column
- pandas Series of prices
- plain sequence of prices, or of bar-like objects with OHLC attributes

Bar storage itself lives outside this package; this module only provides the
read-only indexed view the swing code needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, List, Optional

import pandas as pd

from ewswing.num import NaN

OHLC = ("open", "high", "low", "close")


@dataclass(frozen=True)
class Bar:
    ts: int  # milliseconds since epoch (UTC)
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


class BarSeries:
    def __init__(self, bars: List[Bar]):
        self.bars: List[Bar] = list(bars)
        self._df: Optional[pd.DataFrame] = None

    @staticmethod
    def from_bars(bars: List[Bar]) -> "BarSeries":
        return BarSeries(bars)

    @staticmethod
    def from_prices(prices: List[float], start_ts: int = 0, step_ms: int = 60_000) -> "BarSeries":
        """Flat bars where open/high/low/close all equal the given price."""
        return BarSeries(
            [Bar(ts=start_ts + i * step_ms, open=p, high=p, low=p, close=p) for i, p in enumerate(prices)]
        )

    def __len__(self) -> int:
        return len(self.bars)

    def __iter__(self) -> Iterator[Bar]:
        return iter(self.bars)

    @property
    def is_empty(self) -> bool:
        return not self.bars

    @property
    def end_index(self) -> int:
        return len(self.bars) - 1

    def price(self, index: int, source: Optional["PriceSource"] = None) -> float:
        src = source or PriceSource.CLOSE
        if index < 0 or index >= len(self.bars):
            return NaN
        return float(getattr(self.bars[index], src.value))

    @property
    def df(self) -> pd.DataFrame:
        if self._df is None:
            self._df = pd.DataFrame(
                {
                    "ts": [int(b.ts) for b in self.bars],
                    "open": [float(b.open) for b in self.bars],
                    "high": [float(b.high) for b in self.bars],
                    "low": [float(b.low) for b in self.bars],
                    "close": [float(b.close) for b in self.bars],
                    "volume": [float(b.volume) for b in self.bars],
                },
            )
        return self._df


class PriceSource(str, Enum):
    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"


def as_frame(series: Any) -> pd.DataFrame:
    """Convert a bar-series-like object to a DataFrame with a RangeIndex.

    Single-price inputs produce a frame whose OHLC columns all carry that price,
    so every detector can read the column it prefers.
    """
    if series is None:
        return _price_frame([])
    if isinstance(series, BarSeries):
        return series.df
    if isinstance(series, pd.DataFrame):
        df = series.rename(columns=lambda c: c.lower() if isinstance(c, str) else c)
        if "close" in df.columns or "high" in df.columns:
            return _fill_ohlc(df.reset_index(drop=True))
        numeric = [c for c in df.columns if pd.api.types.is_numeric_dtype(df[c])]
        if not numeric:
            return _price_frame([])
        if len(numeric) > 1:
            raise ValueError(f"no close/high column and several numeric columns to choose from: {numeric}")
        return _price_frame(df[numeric[0]].tolist())
    if isinstance(series, pd.Series):
        return _price_frame(series.tolist())
    if hasattr(series, "df") and isinstance(getattr(series, "df"), pd.DataFrame):
        return as_frame(series.df)

    seq = getattr(series, "bars", series)
    items = list(seq)
    if items and all(hasattr(b, "close") for b in items):
        return pd.DataFrame(
            {k: [float(getattr(b, k, getattr(b, "close"))) for b in items] for k in OHLC}
        )
    return _price_frame(items)


def price_series(frame: pd.DataFrame, source: PriceSource = PriceSource.CLOSE) -> pd.Series:
    """Pick one price column as float Series; non-numeric entries become NaN."""
    col = source.value if source.value in frame.columns else "close"
    return pd.to_numeric(frame[col], errors="coerce").astype(float).reset_index(drop=True)


def _price_frame(prices: List[Any]) -> pd.DataFrame:
    values = pd.to_numeric(pd.Series(prices, dtype=object), errors="coerce").astype(float)
    return pd.DataFrame({k: values for k in OHLC})


def _fill_ohlc(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    base = "close" if "close" in out.columns else "high"
    for k in OHLC:
        if k not in out.columns:
            out[k] = out[base]
    return out
