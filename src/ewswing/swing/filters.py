"""Post-detection swing cleanup.

Filters are pure: they return a new list and never invent swings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Sequence, runtime_checkable

from ewswing.ew.core.model import ElliottSwing
from ewswing.logging import get_logger
from ewswing.num import is_valid

log = get_logger("ewswing.filters")


@runtime_checkable
class SwingFilter(Protocol):
    def filter(self, swings: Sequence[ElliottSwing]) -> List[ElliottSwing]:
        ...


@dataclass(frozen=True)
class MinMagnitudeSwingFilter:
    """Drop swings smaller than a fraction of the largest swing present."""

    relative_threshold: float = 0.5

    def __post_init__(self) -> None:
        r = self.relative_threshold
        if not is_valid(r) or r <= 0 or r > 1:
            raise ValueError(f"relative_threshold must be in (0, 1], got {r!r}")

    def filter(self, swings: Sequence[ElliottSwing]) -> List[ElliottSwing]:
        if not swings:
            return []
        amps = [s.amplitude for s in swings if s is not None and is_valid(s.amplitude)]
        if not amps:
            log.debug("magnitude filter: no valid amplitudes", extra={"swings": len(swings)})
            return []
        cutoff = self.relative_threshold * max(amps)
        kept = [s for s in swings if s is not None and is_valid(s.amplitude) and s.amplitude >= cutoff]
        log.debug(
            "magnitude filter",
            extra={"swings": len(swings), "kept": len(kept), "cutoff": cutoff},
        )
        return kept


@dataclass(frozen=True)
class ChainedSwingFilter:
    filters: Sequence[SwingFilter]

    def filter(self, swings: Sequence[ElliottSwing]) -> List[ElliottSwing]:
        out = list(swings or [])
        for f in self.filters:
            out = f.filter(out)
        return out


def chain_filters(*filters: SwingFilter) -> ChainedSwingFilter:
    """Apply filters left to right."""
    return ChainedSwingFilter(filters=tuple(filters))
