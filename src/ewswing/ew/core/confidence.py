"""Weighted aggregation of confidence factors.

A ConfidenceProfile is an ordered list of (factor, weight) pairs. Scoring runs
every factor once, clamps each score to [0, 1] and reduces them into an
overall weighted average plus one sub-score per category. ConfidenceModel
picks a profile per scenario type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ewswing.ew.core.fibonacci import ElliottFibonacciValidator
from ewswing.ew.core.model import ElliottSwing
from ewswing.ew.core.phase import ElliottChannel, ElliottPhase, ScenarioType
from ewswing.ew.core.scorer import (
    ChannelAdherenceFactor,
    ConfidenceCategory,
    ConfidenceFactor,
    ConfidenceFactorResult,
    FactorContext,
    FibonacciRelationshipFactor,
    StructureCompletenessFactor,
    TimeAlternationFactor,
    TimeProportionFactor,
)
from ewswing.logging import get_logger
from ewswing.num import NumFactory, clamp01, is_valid, num_of

log = get_logger("ewswing.confidence")

INSUFFICIENT_DATA = "Insufficient data"


@dataclass(frozen=True)
class ElliottConfidenceBreakdown:
    overall: float
    fibonacci: float
    time: float
    alternation: float
    channel: float
    completeness: float
    reason: str
    factors: Tuple[ConfidenceFactorResult, ...] = ()

    @staticmethod
    def zero(reason: str = INSUFFICIENT_DATA) -> "ElliottConfidenceBreakdown":
        return ElliottConfidenceBreakdown(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, reason, ())

    def category_score(self, category: ConfidenceCategory) -> float:
        return getattr(self, ConfidenceCategory(category).value)

    @property
    def top_factor(self) -> Optional[ConfidenceFactorResult]:
        top = None
        for r in self.factors:
            if not is_valid(r.score):
                continue
            if top is None or r.weighted_contribution > top.weighted_contribution:
                top = r
        return top

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall,
            "fibonacci": self.fibonacci,
            "time": self.time,
            "alternation": self.alternation,
            "channel": self.channel,
            "completeness": self.completeness,
            "reason": self.reason,
            "factors": [
                {
                    "name": r.name,
                    "category": r.category.value,
                    "score": r.score,
                    "weight": r.weight,
                    "summary": r.summary,
                    "diagnostics": dict(r.diagnostics),
                }
                for r in self.factors
            ],
        }


class ConfidenceProfile:
    def __init__(self, entries: Iterable[Tuple[ConfidenceFactor, float]], name: str = "custom"):
        checked: List[Tuple[ConfidenceFactor, float]] = []
        for factor, weight in entries:
            if factor is None or not callable(getattr(factor, "score", None)):
                raise ValueError(f"not a confidence factor: {factor!r}")
            if not is_valid(weight) or weight < 0:
                raise ValueError(f"weight for {factor.name!r} must be >= 0, got {weight!r}")
            checked.append((factor, float(weight)))
        self._entries = tuple(checked)
        self.name = name

    @property
    def entries(self) -> Tuple[Tuple[ConfidenceFactor, float], ...]:
        return self._entries

    @property
    def total_weight(self) -> float:
        return sum(w for _, w in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        parts = ", ".join(f"{f.name}={w:g}" for f, w in self._entries)
        return f"ConfidenceProfile({self.name}: {parts})"

    def score(self, context: FactorContext) -> ElliottConfidenceBreakdown:
        if not self._entries:
            return ElliottConfidenceBreakdown.zero()

        # category -> [weighted sum, total weight]
        acc: Dict[ConfidenceCategory, List[float]] = {c: [0.0, 0.0] for c in ConfidenceCategory}
        results: List[ConfidenceFactorResult] = []
        top: Optional[ConfidenceFactorResult] = None
        top_contribution = 0.0

        for factor, weight in self._entries:
            raw = factor.score(context)
            score = clamp01(raw.score) if is_valid(raw.score) else raw.score
            result = ConfidenceFactorResult(
                name=raw.name,
                category=raw.category,
                score=score,
                weight=weight,
                diagnostics=raw.diagnostics,
                summary=raw.summary,
            )
            results.append(result)
            if not is_valid(score):
                continue
            contribution = score * weight
            slot = acc[ConfidenceCategory(result.category)]
            slot[0] += contribution
            slot[1] += weight
            if top is None or contribution > top_contribution:
                top = result
                top_contribution = contribution

        total = sum(s for s, _ in acc.values())
        total_weight = sum(w for _, w in acc.values())
        overall = total / total_weight if total_weight > 0 else 0.0
        sub = {c: (s / w if w > 0 else 0.0) for c, (s, w) in acc.items()}

        if top is None:
            reason = INSUFFICIENT_DATA
        else:
            reason = top.summary.strip() or top.name

        return ElliottConfidenceBreakdown(
            overall=clamp01(overall),
            fibonacci=sub[ConfidenceCategory.FIBONACCI],
            time=sub[ConfidenceCategory.TIME],
            alternation=sub[ConfidenceCategory.ALTERNATION],
            channel=sub[ConfidenceCategory.CHANNEL],
            completeness=sub[ConfidenceCategory.COMPLETENESS],
            reason=reason,
            factors=tuple(results),
        )


def weighted_profile(
    fibonacci: float,
    time: float,
    alternation: float,
    channel: float,
    completeness: float,
    name: str = "custom",
    channel_tolerance: float = 0.0,
) -> ConfidenceProfile:
    """Profile over the five stock factors with the given weights."""
    return ConfidenceProfile(
        [
            (FibonacciRelationshipFactor(), fibonacci),
            (TimeProportionFactor(), time),
            (TimeAlternationFactor(), alternation),
            (ChannelAdherenceFactor(tolerance=channel_tolerance), channel),
            (StructureCompletenessFactor(), completeness),
        ],
        name=name,
    )


def default_profile() -> ConfidenceProfile:
    return weighted_profile(0.35, 0.20, 0.15, 0.15, 0.15, name="default")


def impulse_profile() -> ConfidenceProfile:
    return weighted_profile(0.35, 0.15, 0.20, 0.15, 0.15, name="impulse")


def corrective_profile() -> ConfidenceProfile:
    # alternation only applies to waves 2 and 4
    return weighted_profile(0.40, 0.20, 0.05, 0.10, 0.25, name="corrective")


def _as_phase(phase: Any) -> ElliottPhase:
    if isinstance(phase, ElliottPhase):
        return phase
    try:
        return ElliottPhase(phase)
    except ValueError:
        return ElliottPhase.NONE


def _as_scenario(scenario_type: Any) -> ScenarioType:
    if isinstance(scenario_type, ScenarioType):
        return scenario_type
    try:
        return ScenarioType(scenario_type)
    except ValueError:
        return ScenarioType.UNKNOWN


@dataclass
class ConfidenceModel:
    default_profile: ConfidenceProfile
    overrides: Mapping[ScenarioType, ConfidenceProfile] = field(default_factory=dict)
    fibonacci: ElliottFibonacciValidator = field(default_factory=ElliottFibonacciValidator)
    num: NumFactory = num_of

    def __post_init__(self) -> None:
        if self.default_profile is None:
            raise ValueError("default_profile is required")
        normalized: Dict[ScenarioType, ConfidenceProfile] = {}
        for key, profile in dict(self.overrides or {}).items():
            if profile is None:
                raise ValueError(f"override for {key!r} is None")
            normalized[ScenarioType(key)] = profile
        self.overrides = normalized

    @staticmethod
    def default() -> "ConfidenceModel":
        impulse = impulse_profile()
        corrective = corrective_profile()
        return ConfidenceModel(
            default_profile(),
            {
                ScenarioType.IMPULSE: impulse,
                ScenarioType.CORRECTIVE_ZIGZAG: corrective,
                ScenarioType.CORRECTIVE_FLAT: corrective,
                ScenarioType.CORRECTIVE_TRIANGLE: corrective,
                ScenarioType.CORRECTIVE_COMPLEX: corrective,
            },
        )

    def profile_for(self, scenario_type: Any) -> ConfidenceProfile:
        return self.overrides.get(_as_scenario(scenario_type), self.default_profile)

    def score(
        self,
        swings: Optional[Sequence[ElliottSwing]] = None,
        phase: Optional[ElliottPhase] = None,
        channel: Optional[ElliottChannel] = None,
        scenario_type: Optional[ScenarioType] = None,
    ) -> ElliottConfidenceBreakdown:
        scenario = _as_scenario(scenario_type)
        context = FactorContext(
            swings=tuple(s for s in (swings or ()) if s is not None),
            phase=_as_phase(phase),
            channel=channel if isinstance(channel, ElliottChannel) else ElliottChannel.invalid(),
            fibonacci=self.fibonacci,
            num=self.num,
        )
        profile = self.profile_for(scenario)
        breakdown = profile.score(context)
        log.debug(
            "confidence scored",
            extra={
                "scenario": scenario.value,
                "phase": context.phase.value,
                "swings": len(context.swings),
                "profile": profile.name,
                "overall": round(breakdown.overall, 4),
                "reason": breakdown.reason,
            },
        )
        return breakdown
