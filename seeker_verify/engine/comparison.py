"""
Season 1 tier versus the current-season prediction.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from seeker_verify.engine.models import AirdropTier, ScoreResult


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"
    UNKNOWN = "unknown"


# Midpoint of each tier's Season 1 percentile band
TIER_PERCENTILE_MIDPOINTS: dict[AirdropTier, float] = {
    AirdropTier.SCOUT: 9.75,
    AirdropTier.PROSPECTOR: 51.6,
    AirdropTier.VANGUARD: 89.65,
    AirdropTier.LUMINARY: 97.6,
    AirdropTier.SOVEREIGN: 99.8,
}


@dataclass(frozen=True)
class SeasonComparison:
    season1_tier: AirdropTier | None
    season2_tier: AirdropTier | None
    season1_percentile: float
    season2_percentile: float
    trend: Trend
    percentile_shift: float
    tier_shift: int
    summary: str


def compare(season1_tier: AirdropTier | None, season2: ScoreResult | None) -> SeasonComparison:
    if season1_tier is None or season2 is None:
        return SeasonComparison(
            season1_tier=season1_tier,
            season2_tier=season2.predicted_tier if season2 else None,
            season1_percentile=0.0,
            season2_percentile=season2.percentile if season2 else 0.0,
            trend=Trend.UNKNOWN,
            percentile_shift=0.0,
            tier_shift=0,
            summary="Comparison unavailable",
        )

    s2_tier = season2.predicted_tier
    tier_shift = s2_tier.rank - season1_tier.rank
    s1_percentile = TIER_PERCENTILE_MIDPOINTS[season1_tier]

    if tier_shift > 0:
        trend = Trend.UP
        summary = f"Trending up: {season1_tier.value} -> {s2_tier.value}"
    elif tier_shift < 0:
        trend = Trend.DOWN
        summary = f"Trending down: {season1_tier.value} -> {s2_tier.value}"
    else:
        trend = Trend.STABLE
        summary = f"Holding steady at {season1_tier.value}"

    return SeasonComparison(
        season1_tier=season1_tier,
        season2_tier=s2_tier,
        season1_percentile=s1_percentile,
        season2_percentile=season2.percentile,
        trend=trend,
        percentile_shift=season2.percentile - s1_percentile,
        tier_shift=tier_shift,
        summary=summary,
    )
