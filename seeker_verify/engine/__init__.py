"""
Pure scoring, season clock and projection. No network access.
"""

from seeker_verify.engine.models import (
    ActivityHighlight,
    ActivityMetrics,
    AirdropTier,
    ClaimResult,
    ScoreResult,
    Season1Analysis,
)
from seeker_verify.engine.projection import ProjectionResult, predict_with_projection, project
from seeker_verify.engine.scoring import analyze_season1, percentile_to_tier, predict, score_to_percentile
from seeker_verify.engine.season import Phase, SeasonProgress, calculate

__all__ = [
    "ActivityHighlight",
    "ActivityMetrics",
    "AirdropTier",
    "ClaimResult",
    "Phase",
    "ProjectionResult",
    "ScoreResult",
    "Season1Analysis",
    "SeasonProgress",
    "analyze_season1",
    "calculate",
    "percentile_to_tier",
    "predict",
    "predict_with_projection",
    "project",
    "score_to_percentile",
]
