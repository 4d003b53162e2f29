"""
Season 1 vs current-season comparison and anonymous payload bucketing.
"""

from __future__ import annotations

import pytest

from seeker_verify.engine.buckets import (
    SCHEMA_VERSION,
    build_payload,
    bucket_score,
    bucket_tx_count,
    bucket_wallet_age,
)
from seeker_verify.engine.comparison import TIER_PERCENTILE_MIDPOINTS, Trend, compare
from seeker_verify.engine.models import ActivityMetrics, AirdropTier, ScoreResult
from seeker_verify.engine.scoring import TIER_PERCENTILE_RANGES


def _score(tier: AirdropTier, percentile: float = 50.0, composite: float = 47.9) -> ScoreResult:
    return ScoreResult(composite_score=composite, percentile=percentile, predicted_tier=tier, confidence="Medium")


def test_compare_trending_up():
    result = compare(AirdropTier.PROSPECTOR, _score(AirdropTier.LUMINARY, percentile=97.0))
    assert result.trend is Trend.UP
    assert result.tier_shift == 2
    assert result.summary == "Trending up: Prospector -> Luminary"
    assert result.percentile_shift == pytest.approx(97.0 - 51.6)


def test_compare_trending_down_and_stable():
    down = compare(AirdropTier.VANGUARD, _score(AirdropTier.SCOUT, percentile=10.0))
    assert down.trend is Trend.DOWN
    assert down.tier_shift == -2
    assert down.summary == "Trending down: Vanguard -> Scout"

    stable = compare(AirdropTier.VANGUARD, _score(AirdropTier.VANGUARD, percentile=90.0))
    assert stable.trend is Trend.STABLE
    assert stable.summary == "Holding steady at Vanguard"


def test_compare_without_season1_tier_is_unknown():
    result = compare(None, _score(AirdropTier.SCOUT, percentile=12.0))
    assert result.trend is Trend.UNKNOWN
    assert result.summary == "Comparison unavailable"
    assert result.season2_tier is AirdropTier.SCOUT
    assert result.season2_percentile == 12.0
    assert compare(AirdropTier.SCOUT, None).trend is Trend.UNKNOWN


def test_midpoints_lie_inside_tier_bands():
    for tier, midpoint in TIER_PERCENTILE_MIDPOINTS.items():
        floor, ceiling = TIER_PERCENTILE_RANGES[tier]
        assert floor < midpoint < ceiling


@pytest.mark.parametrize("score, bucket", [(0, 0), (4.99, 0), (47.9, 45), (50, 50), (100, 100), (130, 100), (-3, 0)])
def test_bucket_score(score, bucket):
    assert bucket_score(score) == bucket


@pytest.mark.parametrize("days, bucket", [(0, 0), (30, 0), (31, 1), (90, 1), (180, 2), (365, 3), (366, 4)])
def test_bucket_wallet_age(days, bucket):
    assert bucket_wallet_age(days) == bucket


@pytest.mark.parametrize("count, bucket", [(0, 0), (10, 0), (11, 1), (200, 2), (1000, 3), (5000, 4)])
def test_bucket_tx_count(count, bucket):
    assert bucket_tx_count(count) == bucket


def test_payload_carries_only_coarse_fields():
    metrics = ActivityMetrics(
        total_transactions=420,
        wallet_age_days=200,
        skr_staked=True,
        season1_tier=AirdropTier.PROSPECTOR,
    )
    payload = build_payload(metrics, _score(AirdropTier.VANGUARD), submitted_at=1_780_000_000).to_dict()
    assert payload == {
        "season1_tier_ordinal": 1,
        "season2_tier_ordinal": 2,
        "composite_score_bucket": 45,
        "is_staked": True,
        "has_skr_domain": False,
        "wallet_age_bucket": 3,
        "tx_count_bucket": 3,
        "submitted_at": 1_780_000_000,
        "schema_version": SCHEMA_VERSION,
    }


def test_payload_explicit_season1_tier_wins():
    payload = build_payload(ActivityMetrics(), _score(AirdropTier.SCOUT), season1_tier=AirdropTier.SOVEREIGN)
    assert payload.season1_tier_ordinal == 4
    assert payload.submitted_at > 0
    assert build_payload(ActivityMetrics(), _score(AirdropTier.SCOUT)).season1_tier_ordinal is None
