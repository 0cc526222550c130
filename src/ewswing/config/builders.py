"""Build detectors, filters and confidence models from config dicts.

Example:
  {"kind": "composite", "policy": "or", "detectors": [
      {"kind": "fractal", "window": 3},
      {"kind": "zigzag", "atr_period": 14, "atr_multiplier": 2.0},
  ]}
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ewswing.data.bars import PriceSource
from ewswing.ew.core.confidence import (
    ConfidenceModel,
    ConfidenceProfile,
    default_profile,
    weighted_profile,
)
from ewswing.ew.core.fibonacci import ElliottFibonacciValidator, FibonacciConfig
from ewswing.ew.core.phase import ScenarioType
from ewswing.ew.detectors.adaptive import AdaptiveZigZagConfig, AdaptiveZigZagSwingDetector
from ewswing.ew.detectors.base import SwingDetector
from ewswing.ew.detectors.composite import CompositePolicy, CompositeSwingDetector
from ewswing.ew.detectors.fractal import FractalSwingDetector
from ewswing.ew.detectors.zigzag import ZigZagSwingDetector
from ewswing.swing.filters import MinMagnitudeSwingFilter, SwingFilter, chain_filters

_WEIGHT_KEYS = ("fibonacci", "time", "alternation", "channel", "completeness")


def _kind(cfg: Mapping[str, Any], what: str) -> str:
    if not isinstance(cfg, Mapping):
        raise ValueError(f"{what} config must be a mapping, got {type(cfg).__name__}")
    kind = cfg.get("kind")
    if not kind:
        raise ValueError(f"{what} config needs a 'kind'")
    return str(kind).strip().lower()


def build_detector(cfg: Mapping[str, Any]) -> SwingDetector:
    kind = _kind(cfg, "detector")

    if kind == "fractal":
        if "window" in cfg:
            return FractalSwingDetector.symmetric(
                int(cfg["window"]), int(cfg.get("allowed_equal_bars", 0))
            )
        return FractalSwingDetector(
            lookback=int(cfg.get("lookback", 2)),
            lookforward=int(cfg.get("lookforward", 2)),
            allowed_equal_bars=int(cfg.get("allowed_equal_bars", 0)),
            high_source=PriceSource(cfg.get("high_source", PriceSource.HIGH)),
            low_source=PriceSource(cfg.get("low_source", PriceSource.LOW)),
        )

    if kind == "zigzag":
        price = PriceSource(cfg.get("price", PriceSource.CLOSE))
        if "atr_period" in cfg:
            return ZigZagSwingDetector.atr(
                int(cfg["atr_period"]), float(cfg.get("atr_multiplier", 1.0)), price
            )
        if "pct" in cfg:
            return ZigZagSwingDetector.percent(float(cfg["pct"]), price)
        return ZigZagSwingDetector(price=price, threshold=float(cfg.get("threshold", 1.0)))

    if kind == "adaptive_zigzag":
        smoothing = cfg.get("smoothing")
        lo = cfg.get("min_threshold")
        hi = cfg.get("max_threshold")
        return AdaptiveZigZagSwingDetector(
            AdaptiveZigZagConfig(
                period=int(cfg.get("period", 14)),
                multiplier=float(cfg.get("multiplier", 2.0)),
                smoothing=None if smoothing is None else int(smoothing),
                min_threshold=None if lo is None else float(lo),
                max_threshold=None if hi is None else float(hi),
                price=PriceSource(cfg.get("price", PriceSource.CLOSE)),
            )
        )

    if kind == "composite":
        children = cfg.get("detectors") or []
        return CompositeSwingDetector(
            [build_detector(c) for c in children],
            CompositePolicy(str(cfg.get("policy", "and")).lower()),
        )

    raise ValueError(f"unknown detector kind: {kind!r}")


def build_filter(cfg: Any) -> SwingFilter:
    """A mapping builds one filter, a list builds a chain."""
    if isinstance(cfg, (list, tuple)):
        return chain_filters(*[build_filter(c) for c in cfg])
    kind = _kind(cfg, "filter")
    if kind == "magnitude":
        return MinMagnitudeSwingFilter(float(cfg.get("relative_threshold", 0.5)))
    raise ValueError(f"unknown filter kind: {kind!r}")


def build_profile(cfg: Optional[Mapping[str, Any]], name: str = "custom") -> ConfidenceProfile:
    """{"weights": {...}, "channel_tolerance": 0.0}; missing weights use the default profile."""
    if not cfg:
        return default_profile()
    base = {f.category.value: w for f, w in default_profile().entries}
    weights: Dict[str, Any] = dict(cfg.get("weights") or {})
    unknown = set(weights) - set(_WEIGHT_KEYS)
    if unknown:
        raise ValueError(f"unknown weight keys: {sorted(unknown)}")
    merged = {k: float(weights.get(k, base[k])) for k in _WEIGHT_KEYS}
    return weighted_profile(
        channel_tolerance=float(cfg.get("channel_tolerance", 0.0)),
        name=str(cfg.get("name", name)),
        **merged,
    )


def build_model(cfg: Optional[Mapping[str, Any]]) -> ConfidenceModel:
    """{"default": {...profile...}, "overrides": {"impulse": {...}}, "fibonacci": {"tolerance": 0.05}}"""
    if not cfg:
        return ConfidenceModel.default()
    fib_cfg = dict(cfg.get("fibonacci") or {})
    fibonacci = ElliottFibonacciValidator(FibonacciConfig(tolerance=float(fib_cfg.get("tolerance", 0.05))))

    if cfg.get("default") is None and cfg.get("overrides") is None:
        stock = ConfidenceModel.default()
        return ConfidenceModel(stock.default_profile, stock.overrides, fibonacci=fibonacci)

    overrides = {}
    for key, profile_cfg in dict(cfg.get("overrides") or {}).items():
        scenario = ScenarioType(str(key).lower())
        overrides[scenario] = build_profile(profile_cfg, name=scenario.value)
    return ConfidenceModel(
        build_profile(cfg.get("default"), name="default"),
        overrides,
        fibonacci=fibonacci,
    )
