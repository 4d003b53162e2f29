"""
Deterministic wallet scoring.

Two variants over the same ActivityMetrics:

- predict(): current-season context. Nine weighted sub-scores (0-100 each)
  form a composite in [0, 100], which is mapped to a fleet percentile through a
  piecewise-linear curve and then to a tier using the Season 1 population split.
- analyze_season1(): historical context. Staking and .skr domains did not exist
  during the Season 1 activity period, so only five activity metrics are scored;
  the result is placed inside the detected tier's percentile band and annotated
  with human-readable highlights.

No ML and no network access. Every sub-score is non-decreasing in its input,
so raising any single metric never lowers the composite.
"""

from __future__ import annotations

import math

from seeker_verify.engine.models import (
    ActivityHighlight,
    ActivityMetrics,
    AirdropTier,
    ScoreResult,
    Season1Analysis,
)
from seeker_verify.verify_logging import get_logger

logger = get_logger(__name__)

# Current-context weights (sum to 1.0)
WEIGHT_TRANSACTIONS = 0.15
WEIGHT_PROGRAMS = 0.12
WEIGHT_TOKEN_DIVERSITY = 0.08
WEIGHT_STAKING = 0.20
WEIGHT_DOMAIN = 0.05
WEIGHT_NFTS = 0.05
WEIGHT_WALLET_AGE = 0.10
WEIGHT_DAPP = 0.10
WEIGHT_SEASON1 = 0.15

# Historical-context weights (sum to 1.0)
S1_WEIGHT_TRANSACTIONS = 0.30
S1_WEIGHT_TOKEN_DIVERSITY = 0.15
S1_WEIGHT_NFTS = 0.10
S1_WEIGHT_WALLET_AGE = 0.20
S1_WEIGHT_DAPP = 0.25

# Normalization ceilings
MAX_TX = 5000
MAX_PROGRAMS = 30
MAX_TOKENS = 20
MAX_STAKE_DAYS = 365
MAX_NFTS = 50
MAX_WALLET_DAYS = 730
MAX_DAPP = 500

MIN_STAKING_SCORE = 50.0
MAX_PERCENTILE = 99.9

SEASON1_TIER_SCORE: dict[AirdropTier, float] = {
    AirdropTier.SOVEREIGN: 100.0,
    AirdropTier.LUMINARY: 85.0,
    AirdropTier.VANGUARD: 65.0,
    AirdropTier.PROSPECTOR: 40.0,
    AirdropTier.SCOUT: 20.0,
}

# Lower bound (inclusive) of each tier's percentile band, highest first
TIER_PERCENTILE_FLOORS: tuple[tuple[float, AirdropTier], ...] = (
    (99.6, AirdropTier.SOVEREIGN),
    (95.6, AirdropTier.LUMINARY),
    (83.7, AirdropTier.VANGUARD),
    (19.5, AirdropTier.PROSPECTOR),
    (0.0, AirdropTier.SCOUT),
)

# (floor, ceiling) of each tier's Season 1 percentile band
TIER_PERCENTILE_RANGES: dict[AirdropTier, tuple[float, float]] = {
    AirdropTier.SCOUT: (0.0, 19.5),
    AirdropTier.PROSPECTOR: (19.5, 83.7),
    AirdropTier.VANGUARD: (83.7, 95.6),
    AirdropTier.LUMINARY: (95.6, 99.6),
    AirdropTier.SOVEREIGN: (99.6, 100.0),
}

CONFIDENCE_HIGH = "High"
CONFIDENCE_MEDIUM = "Medium"
CONFIDENCE_LOW = "Low"


def log_normalize(value: float, max_value: float) -> float:
    """Log-scale 0-100 with diminishing returns above max_value."""
    if value <= 0:
        return 0.0
    return min(100.0, math.log(value + 1) / math.log(max_value + 1) * 100.0)


def linear_normalize(value: float, max_value: float) -> float:
    if max_value <= 0:
        return 0.0
    return max(0.0, min(100.0, value / max_value * 100.0))


def score_to_percentile(score: float) -> float:
    """
    Composite score -> fleet percentile.

    0-20 maps to the bottom 30%, 20-60 to the middle 50%, 60-100 to the top 20%.
    """
    if score <= 20:
        percentile = score * 1.5
    elif score <= 60:
        percentile = 30.0 + (score - 20) * 1.25
    else:
        percentile = 80.0 + (score - 60) * 0.5
    return max(0.0, min(MAX_PERCENTILE, percentile))


def percentile_to_tier(percentile: float) -> AirdropTier:
    for floor, tier in TIER_PERCENTILE_FLOORS:
        if percentile >= floor:
            return tier
    return AirdropTier.SCOUT


def _confidence(metrics: ActivityMetrics) -> str:
    if metrics.season1_tier is not None and metrics.total_transactions > 100:
        return CONFIDENCE_HIGH
    if metrics.total_transactions > 50 or metrics.skr_staked:
        return CONFIDENCE_MEDIUM
    return CONFIDENCE_LOW


def score_breakdown(metrics: ActivityMetrics) -> dict[str, float]:
    """Per-metric sub-scores (0-100), keyed by display label."""
    if metrics.skr_staked:
        staking = max(MIN_STAKING_SCORE, linear_normalize(metrics.staking_duration_days, MAX_STAKE_DAYS))
    else:
        staking = 0.0
    return {
        "Transactions": log_normalize(metrics.total_transactions, MAX_TX),
        "Programs Used": linear_normalize(metrics.unique_programs, MAX_PROGRAMS),
        "Token Diversity": linear_normalize(metrics.token_diversity, MAX_TOKENS),
        "SKR Staking": staking,
        ".skr Domain": 100.0 if metrics.has_skr_domain else 0.0,
        "NFTs": log_normalize(metrics.nft_count, MAX_NFTS),
        "Wallet Age": linear_normalize(metrics.wallet_age_days, MAX_WALLET_DAYS),
        "dApp Usage": log_normalize(metrics.dapp_interactions, MAX_DAPP),
        "Season 1 Tier": SEASON1_TIER_SCORE.get(metrics.season1_tier, 0.0),
    }


_BREAKDOWN_WEIGHTS: dict[str, float] = {
    "Transactions": WEIGHT_TRANSACTIONS,
    "Programs Used": WEIGHT_PROGRAMS,
    "Token Diversity": WEIGHT_TOKEN_DIVERSITY,
    "SKR Staking": WEIGHT_STAKING,
    ".skr Domain": WEIGHT_DOMAIN,
    "NFTs": WEIGHT_NFTS,
    "Wallet Age": WEIGHT_WALLET_AGE,
    "dApp Usage": WEIGHT_DAPP,
    "Season 1 Tier": WEIGHT_SEASON1,
}


def predict(metrics: ActivityMetrics) -> ScoreResult:
    """Current-context composite score, percentile, predicted tier and confidence."""
    breakdown = score_breakdown(metrics)
    composite = sum(breakdown[label] * weight for label, weight in _BREAKDOWN_WEIGHTS.items())
    composite = max(0.0, min(100.0, composite))
    percentile = score_to_percentile(composite)
    tier = percentile_to_tier(percentile)
    confidence = _confidence(metrics)

    logger.debug(
        "score_computed",
        composite=round(composite, 2),
        percentile=round(percentile, 2),
        tier=tier.value,
        confidence=confidence,
    )
    return ScoreResult(
        composite_score=composite,
        percentile=percentile,
        predicted_tier=tier,
        confidence=confidence,
        breakdown=breakdown,
    )


def season1_activity_score(metrics: ActivityMetrics) -> float:
    score = (
        log_normalize(metrics.total_transactions, MAX_TX) * S1_WEIGHT_TRANSACTIONS
        + linear_normalize(metrics.token_diversity, MAX_TOKENS) * S1_WEIGHT_TOKEN_DIVERSITY
        + log_normalize(metrics.nft_count, MAX_NFTS) * S1_WEIGHT_NFTS
        + linear_normalize(metrics.wallet_age_days, MAX_WALLET_DAYS) * S1_WEIGHT_WALLET_AGE
        + log_normalize(metrics.dapp_interactions, MAX_DAPP) * S1_WEIGHT_DAPP
    )
    return max(0.0, min(100.0, score))


def tier_percentile(tier: AirdropTier | None, score: float) -> float:
    """Place a 0-100 score inside the tier's percentile band; raw score when tier is unknown."""
    if tier is None:
        return score
    floor, ceiling = TIER_PERCENTILE_RANGES[tier]
    position = score / 100.0 * (ceiling - floor) + floor
    return max(floor, min(ceiling, position))


def build_highlights(metrics: ActivityMetrics) -> list[ActivityHighlight]:
    """Season 1 highlights. Staking and .skr domain are current-season only and never appear here."""
    out: list[ActivityHighlight] = []
    age = metrics.wallet_age_days
    tx = metrics.total_transactions
    tokens = metrics.token_diversity
    nfts = metrics.nft_count
    dapp = metrics.dapp_interactions

    if age >= 365:
        out.append(ActivityHighlight("Early Adopter", f"Wallet active for {age}+ days", True))
    elif age >= 180:
        out.append(ActivityHighlight("Established User", f"Active for {age} days since Seeker launch", True))
    elif 0 < age < 60:
        out.append(ActivityHighlight("Late Arrival", f"Wallet only {age} days old", False))

    if tx >= 1000:
        out.append(ActivityHighlight("Power User", f"{tx} on-chain transactions recorded", True))
    elif tx >= 200:
        out.append(ActivityHighlight("Active Participant", f"{tx} transactions on-chain", True))
    elif tx >= 50:
        out.append(ActivityHighlight("Regular User", f"{tx} transactions recorded", True))
    elif 0 < tx < 20:
        out.append(ActivityHighlight("Low Activity", f"Only {tx} transactions", False))

    if tokens >= 20:
        out.append(ActivityHighlight("DeFi Explorer", f"Interacted with {tokens} unique tokens", True))
    elif tokens >= 5:
        out.append(ActivityHighlight("Token Collector", f"Holds {tokens} different tokens", True))

    if nfts >= 10:
        out.append(ActivityHighlight("NFT Collector", f"Holds {nfts} NFTs", True))
    elif nfts >= 1:
        out.append(ActivityHighlight("NFT Holder", f"Owns {nfts} NFT{'s' if nfts > 1 else ''}", True))

    if dapp >= 500:
        out.append(
            ActivityHighlight("Protocol Pioneer", f"Engaged with {metrics.unique_programs}+ programs extensively", True)
        )
    elif dapp >= 50:
        out.append(ActivityHighlight("dApp Explorer", f"{dapp} successful program interactions", True))

    return out


def analyze_season1(metrics: ActivityMetrics, detected_tier: AirdropTier | None) -> Season1Analysis:
    """Historical-context score, in-tier percentile and highlights."""
    score = season1_activity_score(metrics)
    return Season1Analysis(
        detected_tier=detected_tier,
        tier_percentile=tier_percentile(detected_tier, score),
        highlights=tuple(build_highlights(metrics)),
        activity_score=score,
    )
