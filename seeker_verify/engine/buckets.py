"""
Coarse buckets for anonymous prediction payloads. No wallet address is included.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import Any

from seeker_verify.engine.models import ActivityMetrics, AirdropTier, ScoreResult

SCHEMA_VERSION = 1

WALLET_AGE_BUCKET_LIMITS = (30, 90, 180, 365)
TX_COUNT_BUCKET_LIMITS = (10, 50, 200, 1000)


def bucket_score(score: float) -> int:
    """Round down to a multiple of 5 in [0, 100]."""
    return max(0, min(100, int(score / 5.0) * 5))


def _bucket(value: int, limits: tuple[int, ...]) -> int:
    for i, limit in enumerate(limits):
        if value <= limit:
            return i
    return len(limits)


def bucket_wallet_age(days: int) -> int:
    return _bucket(days, WALLET_AGE_BUCKET_LIMITS)


def bucket_tx_count(count: int) -> int:
    return _bucket(count, TX_COUNT_BUCKET_LIMITS)


@dataclass(frozen=True)
class AnonymousPredictionPayload:
    season1_tier_ordinal: int | None
    season2_tier_ordinal: int | None
    composite_score_bucket: int
    is_staked: bool
    has_skr_domain: bool
    wallet_age_bucket: int
    tx_count_bucket: int
    submitted_at: int
    schema_version: int = SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_payload(
    metrics: ActivityMetrics,
    result: ScoreResult,
    *,
    season1_tier: AirdropTier | None = None,
    submitted_at: int | None = None,
) -> AnonymousPredictionPayload:
    s1 = season1_tier or metrics.season1_tier
    return AnonymousPredictionPayload(
        season1_tier_ordinal=s1.rank if s1 else None,
        season2_tier_ordinal=result.predicted_tier.rank,
        composite_score_bucket=bucket_score(result.composite_score),
        is_staked=metrics.skr_staked,
        has_skr_domain=metrics.has_skr_domain,
        wallet_age_bucket=bucket_wallet_age(metrics.wallet_age_days),
        tx_count_bucket=bucket_tx_count(metrics.total_transactions),
        submitted_at=int(time.time()) if submitted_at is None else submitted_at,
    )
