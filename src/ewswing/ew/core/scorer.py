"""Confidence factors for Elliott swing sequences.

Each factor scores one structural property of a swing sequence and returns a
ConfidenceFactorResult in [0, 1] with diagnostics. Factors never raise on thin
data: time, alternation and channel fall back to a neutral 0.5, Fibonacci and
completeness to 0.0, and the summary says why.

Waves are read positionally: swings[0] is wave 1 (or A), swings[1] wave 2 (or
B) and so on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Protocol, Tuple, runtime_checkable

from ewswing.ew.core.fibonacci import ElliottFibonacciValidator
from ewswing.ew.core.model import ElliottSwing
from ewswing.ew.core.phase import ElliottChannel, ElliottPhase
from ewswing.num import NaN, NumFactory, is_valid, num_of

NEUTRAL = 0.5


class ConfidenceCategory(str, Enum):
    FIBONACCI = "fibonacci"
    TIME = "time"
    ALTERNATION = "alternation"
    CHANNEL = "channel"
    COMPLETENESS = "completeness"


@dataclass(frozen=True)
class FactorContext:
    swings: Tuple[ElliottSwing, ...] = ()
    phase: ElliottPhase = ElliottPhase.NONE
    channel: ElliottChannel = field(default_factory=ElliottChannel.invalid)
    fibonacci: ElliottFibonacciValidator = field(default_factory=ElliottFibonacciValidator)
    num: NumFactory = num_of


@dataclass(frozen=True)
class ConfidenceFactorResult:
    name: str
    category: ConfidenceCategory
    score: float
    weight: float = 0.0
    diagnostics: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    summary: str = ""

    @property
    def weighted_contribution(self) -> float:
        if not is_valid(self.score) or not is_valid(self.weight):
            return 0.0
        return self.score * self.weight


@runtime_checkable
class ConfidenceFactor(Protocol):
    name: str
    category: ConfidenceCategory

    def score(self, context: FactorContext) -> ConfidenceFactorResult:
        ...


def _result(
    factor: ConfidenceFactor,
    score: float,
    summary: str,
    diagnostics: Optional[Dict[str, float]] = None,
) -> ConfidenceFactorResult:
    return ConfidenceFactorResult(
        name=factor.name,
        category=factor.category,
        score=score,
        diagnostics=MappingProxyType(dict(diagnostics or {})),
        summary=summary,
    )


def _grade(score: float) -> str:
    if score >= 0.7:
        return "Strong"
    if score >= 0.4:
        return "Moderate"
    return "Weak"


@dataclass(frozen=True)
class FibonacciRelationshipFactor:
    name: str = "fibonacci_relationships"
    category: ConfidenceCategory = ConfidenceCategory.FIBONACCI

    def score(self, context: FactorContext) -> ConfidenceFactorResult:
        sw = context.swings
        fib = context.fibonacci
        phase = context.phase
        subs: Dict[str, float] = {}

        if phase.is_impulse:
            if len(sw) >= 2:
                subs["wave2_retracement"] = fib.wave_two_proximity(sw[0], sw[1])
            if len(sw) >= 3:
                subs["wave3_extension"] = fib.wave_three_proximity(sw[0], sw[2])
            if len(sw) >= 4:
                subs["wave4_retracement"] = fib.wave_four_proximity(sw[2], sw[3])
            if len(sw) >= 5:
                subs["wave5_projection"] = fib.wave_five_proximity(sw[0], sw[4])
        elif phase.is_corrective:
            if len(sw) >= 2:
                subs["waveb_retracement"] = fib.wave_b_proximity(sw[0], sw[1])
            if len(sw) >= 3:
                subs["wavec_extension"] = fib.wave_c_proximity(sw[0], sw[2])
        else:
            return _result(self, 0.0, "No Elliott phase for Fibonacci scoring", {"computed": 0.0})

        diagnostics = dict(subs)
        diagnostics["computed"] = float(len(subs))
        if not subs:
            return _result(self, 0.0, "Insufficient swings for Fibonacci scoring", diagnostics)
        score = sum(subs.values()) / len(subs)
        return _result(self, score, f"{_grade(score)} Fibonacci conformance", diagnostics)


@dataclass(frozen=True)
class TimeProportionFactor:
    """Impulse: wave 3 should not be shorter in time than wave 1 and wave 5
    should last 0.5x-1.5x of wave 1. Corrective: wave C should last 0.5x-1.5x of
    wave A."""

    name: str = "time_proportions"
    category: ConfidenceCategory = ConfidenceCategory.TIME
    min_ratio: float = 0.5
    max_ratio: float = 1.5

    def score(self, context: FactorContext) -> ConfidenceFactorResult:
        sw = context.swings
        phase = context.phase
        if not (phase.is_impulse or phase.is_corrective):
            return _result(self, NEUTRAL, "No Elliott phase for time proportions")
        if len(sw) < 3:
            return _result(
                self, NEUTRAL, "Insufficient swings for time proportions", {"swings": float(len(sw))}
            )

        if phase.is_corrective:
            a_bars, c_bars = sw[0].length, sw[2].length
            ratio = c_bars / a_bars if a_bars > 0 else NaN
            score = NEUTRAL
            if is_valid(ratio) and self.min_ratio <= ratio <= self.max_ratio:
                score += 0.5
            diagnostics = {"waveA_bars": float(a_bars), "waveC_bars": float(c_bars), "waveC_to_waveA": ratio}
            return _result(self, score, f"{_grade(score)} time proportions", diagnostics)

        w1, w3 = sw[0].length, sw[2].length
        diagnostics = {"wave1_bars": float(w1), "wave3_bars": float(w3)}
        score = NEUTRAL
        if w3 >= w1:
            score += 0.25
        if len(sw) >= 5:
            w5 = sw[4].length
            ratio = w5 / w1 if w1 > 0 else NaN
            diagnostics["wave5_bars"] = float(w5)
            diagnostics["wave5_to_wave1"] = ratio
            if is_valid(ratio) and self.min_ratio <= ratio <= self.max_ratio:
                score += 0.25
        score = min(1.0, score)
        return _result(self, score, f"{_grade(score)} time proportions", diagnostics)


@dataclass(frozen=True)
class TimeAlternationFactor:
    """Waves 2 and 4 should differ in depth and duration."""

    name: str = "time_alternation"
    category: ConfidenceCategory = ConfidenceCategory.ALTERNATION

    def score(self, context: FactorContext) -> ConfidenceFactorResult:
        sw = context.swings
        phase = context.phase
        if not phase.is_impulse or len(sw) < 4:
            return _result(
                self,
                NEUTRAL,
                "Alternation needs waves 2 and 4 of an impulse",
                {"wave2_bars": 0.0, "wave4_bars": 0.0, "duration_ratio": NaN,
                 "depth_difference": 0.0, "time_difference": 0.0},
            )

        wave2, wave4 = sw[1], sw[3]
        depth2 = _depth(wave2, sw[0])
        depth4 = _depth(wave4, sw[2])
        depth_diff = abs(depth2 - depth4)

        bars2, bars4 = wave2.length, wave4.length
        time_diff = abs(bars2 - bars4) / max(bars2, bars4) if max(bars2, bars4) > 0 else 0.0
        duration_ratio = bars4 / bars2 if bars2 > 0 else NaN

        score = (min(1.0, depth_diff * 2.0) + min(1.0, time_diff)) / 2.0
        diagnostics = {
            "wave2_bars": float(bars2),
            "wave4_bars": float(bars4),
            "duration_ratio": duration_ratio,
            "depth_difference": depth_diff,
            "time_difference": time_diff,
        }
        return _result(self, score, f"{_grade(score)} wave alternation", diagnostics)


def _depth(correction: ElliottSwing, impulse: ElliottSwing) -> float:
    amp = impulse.amplitude
    corr = correction.amplitude
    if not (is_valid(amp) and is_valid(corr)) or amp <= 0:
        return 0.0
    return corr / amp


@dataclass(frozen=True)
class ChannelAdherenceFactor:
    """Share of swing endpoints that sit inside the channel."""

    name: str = "channel_adherence"
    category: ConfidenceCategory = ConfidenceCategory.CHANNEL
    tolerance: float = 0.0

    def __post_init__(self) -> None:
        if not is_valid(self.tolerance) or self.tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {self.tolerance!r}")

    def score(self, context: FactorContext) -> ConfidenceFactorResult:
        sw = context.swings
        channel = context.channel
        if not sw or channel is None or not channel.is_valid:
            return _result(self, NEUTRAL, "No valid channel", {"points_inside": 0.0, "total_points": 0.0})

        inside = 0
        total = 0
        for s in sw:
            for price in (s.from_price, s.to_price):
                total += 1
                if channel.contains(price, self.tolerance):
                    inside += 1
        score = inside / total
        diagnostics = {
            "points_inside": float(inside),
            "total_points": float(total),
            "upper": channel.upper,
            "lower": channel.lower,
        }
        return _result(self, score, f"{_grade(score)} channel adherence", diagnostics)


@dataclass(frozen=True)
class StructureCompletenessFactor:
    name: str = "structure_completeness"
    category: ConfidenceCategory = ConfidenceCategory.COMPLETENESS
    completion_bonus: float = 0.1

    def score(self, context: FactorContext) -> ConfidenceFactorResult:
        phase = context.phase
        actual = len(context.swings)
        if phase.is_impulse:
            expected = 5
        elif phase.is_corrective:
            expected = 3
        else:
            expected = 0
        diagnostics = {"actual_waves": float(actual), "expected_waves": float(expected)}
        if expected == 0:
            return _result(self, 0.0, "No Elliott structure expected", diagnostics)
        if actual == 0:
            return _result(self, 0.0, "No swings to complete a structure", diagnostics)

        score = min(1.0, actual / expected)
        if phase.completes_structure:
            score = min(1.0, score + self.completion_bonus)
        label = "Complete structure" if score >= 1.0 else f"Partial structure ({actual}/{expected} waves)"
        return _result(self, score, label, diagnostics)
