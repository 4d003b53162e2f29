"""
Scoring engine: sub-score normalization, percentile curve, tier bands, Season 1 analysis.
"""

from __future__ import annotations

from dataclasses import fields, replace

import pytest

from seeker_verify.engine.models import ActivityMetrics, AirdropTier
from seeker_verify.engine.scoring import (
    CONFIDENCE_HIGH,
    CONFIDENCE_LOW,
    CONFIDENCE_MEDIUM,
    TIER_PERCENTILE_RANGES,
    analyze_season1,
    build_highlights,
    log_normalize,
    percentile_to_tier,
    predict,
    score_breakdown,
    score_to_percentile,
    season1_activity_score,
)

ACTIVE = ActivityMetrics(
    total_transactions=420,
    unique_programs=20,
    token_diversity=8,
    nft_count=3,
    wallet_age_days=250,
    dapp_interactions=300,
    staking_duration_days=40,
    skr_staked=True,
    has_skr_domain=True,
    season1_tier=AirdropTier.PROSPECTOR,
)

MAXED = ActivityMetrics(
    total_transactions=10_000,
    unique_programs=50,
    token_diversity=40,
    nft_count=100,
    wallet_age_days=1_000,
    dapp_interactions=1_000,
    staking_duration_days=400,
    skr_staked=True,
    has_skr_domain=True,
    season1_tier=AirdropTier.SOVEREIGN,
)


def test_empty_wallet_scores_zero():
    result = predict(ActivityMetrics())
    assert result.composite_score == 0.0
    assert result.percentile == 0.0
    assert result.predicted_tier is AirdropTier.SCOUT
    assert result.confidence == CONFIDENCE_LOW
    assert set(result.breakdown.values()) == {0.0}


def test_maxed_wallet_is_sovereign():
    result = predict(MAXED)
    assert result.composite_score == pytest.approx(100.0)
    assert result.percentile == pytest.approx(99.9)
    assert result.predicted_tier is AirdropTier.SOVEREIGN


def test_breakdown_has_nine_labeled_scores_in_range():
    breakdown = score_breakdown(ACTIVE)
    assert list(breakdown) == [
        "Transactions",
        "Programs Used",
        "Token Diversity",
        "SKR Staking",
        ".skr Domain",
        "NFTs",
        "Wallet Age",
        "dApp Usage",
        "Season 1 Tier",
    ]
    assert all(0.0 <= v <= 100.0 for v in breakdown.values())
    assert breakdown["Season 1 Tier"] == 40.0
    assert breakdown[".skr Domain"] == 100.0


def test_staking_score_floor_when_staked():
    staked = replace(ActivityMetrics(), skr_staked=True, staking_duration_days=0)
    assert score_breakdown(staked)["SKR Staking"] == 50.0
    long_staked = replace(staked, staking_duration_days=365)
    assert score_breakdown(long_staked)["SKR Staking"] == 100.0
    assert score_breakdown(replace(staked, skr_staked=False))["SKR Staking"] == 0.0


_NUMERIC_FIELDS = [
    f.name for f in fields(ActivityMetrics) if f.name not in ("skr_staked", "has_skr_domain", "season1_tier")
]


@pytest.mark.parametrize("field_name", _NUMERIC_FIELDS)
def test_composite_is_monotone_in_each_metric(field_name):
    for base in (ActivityMetrics(), ACTIVE):
        previous = predict(base).composite_score
        for value in (1, 5, 20, 100, 365, 1_000, 10_000):
            current = predict(replace(base, **{field_name: getattr(base, field_name) + value})).composite_score
            assert current >= previous - 1e-9
            previous = current


def test_flags_and_tier_never_lower_the_composite():
    base = replace(ACTIVE, skr_staked=False, has_skr_domain=False, season1_tier=None)
    score = predict(base).composite_score
    assert predict(replace(base, skr_staked=True)).composite_score >= score
    assert predict(replace(base, has_skr_domain=True)).composite_score >= score
    previous = score
    for tier in AirdropTier:
        current = predict(replace(base, season1_tier=tier)).composite_score
        assert current >= previous
        previous = current


@pytest.mark.parametrize(
    "score, percentile",
    [(0, 0.0), (10, 15.0), (20, 30.0), (40, 55.0), (60, 80.0), (80, 90.0), (100, 99.9), (150, 99.9), (-5, 0.0)],
)
def test_score_to_percentile_curve(score, percentile):
    assert score_to_percentile(score) == pytest.approx(percentile)


@pytest.mark.parametrize(
    "percentile, tier",
    [
        (0.0, AirdropTier.SCOUT),
        (19.49, AirdropTier.SCOUT),
        (19.5, AirdropTier.PROSPECTOR),
        (83.69, AirdropTier.PROSPECTOR),
        (83.7, AirdropTier.VANGUARD),
        (95.6, AirdropTier.LUMINARY),
        (99.59, AirdropTier.LUMINARY),
        (99.6, AirdropTier.SOVEREIGN),
        (99.9, AirdropTier.SOVEREIGN),
    ],
)
def test_percentile_to_tier_bands(percentile, tier):
    assert percentile_to_tier(percentile) is tier


def test_tier_is_non_decreasing_in_percentile():
    ranks = [percentile_to_tier(p / 10).rank for p in range(0, 1000)]
    assert ranks == sorted(ranks)


def test_confidence_levels():
    assert predict(replace(ACTIVE, total_transactions=101)).confidence == CONFIDENCE_HIGH
    assert predict(replace(ACTIVE, season1_tier=None)).confidence == CONFIDENCE_MEDIUM
    assert predict(ActivityMetrics(skr_staked=True)).confidence == CONFIDENCE_MEDIUM
    assert predict(ActivityMetrics(total_transactions=51)).confidence == CONFIDENCE_MEDIUM
    assert predict(ActivityMetrics(total_transactions=50)).confidence == CONFIDENCE_LOW


def test_log_normalize_diminishing_returns():
    assert log_normalize(0, 5000) == 0.0
    assert log_normalize(5000, 5000) == pytest.approx(100.0)
    assert log_normalize(50_000, 5000) == 100.0
    assert log_normalize(100, 5000) - log_normalize(50, 5000) < log_normalize(50, 5000) - log_normalize(0, 5000)


def test_season1_score_ignores_staking_and_domain():
    base = replace(ACTIVE, skr_staked=False, has_skr_domain=False, staking_duration_days=0)
    assert season1_activity_score(base) == season1_activity_score(ACTIVE)


def test_season1_analysis_places_score_inside_tier_band():
    for tier in AirdropTier:
        analysis = analyze_season1(ACTIVE, tier)
        floor, ceiling = TIER_PERCENTILE_RANGES[tier]
        assert floor <= analysis.tier_percentile <= ceiling
        assert analysis.detected_tier is tier


def test_season1_analysis_without_tier_uses_raw_score():
    analysis = analyze_season1(ACTIVE, None)
    assert analysis.detected_tier is None
    assert analysis.tier_percentile == pytest.approx(analysis.activity_score)


def test_highlights_for_active_wallet():
    labels = {h.label for h in build_highlights(ACTIVE)}
    assert labels == {"Established User", "Active Participant", "Token Collector", "NFT Holder", "dApp Explorer"}
    assert all(h.is_strength for h in build_highlights(ACTIVE))


def test_highlights_flag_weak_new_wallet():
    weak = ActivityMetrics(total_transactions=5, wallet_age_days=10)
    highlights = {h.label: h for h in build_highlights(weak)}
    assert set(highlights) == {"Late Arrival", "Low Activity"}
    assert not any(h.is_strength for h in highlights.values())
    assert build_highlights(ActivityMetrics()) == []


def test_highlights_never_mention_current_season_features():
    labels = " ".join(h.label + h.description for h in build_highlights(MAXED))
    assert "Staking" not in labels
    assert ".skr" not in labels


def test_score_result_to_dict_rounds():
    data = predict(ACTIVE).to_dict()
    assert data["predicted_tier"] in {t.value for t in AirdropTier}
    assert set(data) == {"composite_score", "percentile", "predicted_tier", "confidence", "breakdown"}
    assert len(data["breakdown"]) == 9
