"""
End-of-season projection of activity metrics.

Time-dependent metrics (transactions, dApp interactions, staking duration,
wallet age) are linearly extrapolated by scale = 1 / fraction_complete, capped
at MAX_SCALE_FACTOR. Snapshot metrics (token diversity, NFTs, staking flag,
domain flag, Season 1 tier) are held constant. Once the season is over the
current metrics are final and scale is 1.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from seeker_verify.engine.models import ActivityMetrics, ScoreResult
from seeker_verify.engine.scoring import predict
from seeker_verify.engine.season import Phase, SeasonProgress
from seeker_verify.verify_logging import get_logger

logger = get_logger(__name__)

MAX_SCALE_FACTOR = 10.0
MIN_RELIABLE_FRACTION = 0.10
MAX_ESTIMATED_PROGRAMS = 50


@dataclass(frozen=True)
class ProjectionResult:
    current_metrics: ActivityMetrics
    projected_metrics: ActivityMetrics
    scale_factor: float
    is_reliable: bool
    assumptions: tuple[str, ...]


@dataclass(frozen=True)
class ProjectedPrediction:
    """Scores for the current snapshot and for its end-of-season projection."""

    current: ScoreResult
    projected: ScoreResult
    season_fraction: float
    is_reliable: bool

    @property
    def tier_change(self) -> int:
        return self.projected.predicted_tier.rank - self.current.predicted_tier.rank


def estimate_unique_programs(total_transactions: int) -> int:
    """sqrt(tx) proxy for distinct programs, clamped to [0, 50]."""
    if total_transactions <= 0:
        return 0
    return max(0, min(MAX_ESTIMATED_PROGRAMS, int(math.sqrt(total_transactions))))


def scale_factor(progress: SeasonProgress) -> float:
    if progress.phase is Phase.AFTER:
        return 1.0
    fraction = progress.fraction_complete
    if fraction <= 0.0:
        return MAX_SCALE_FACTOR
    return max(1.0, min(1.0 / fraction, MAX_SCALE_FACTOR))


def is_reliable(progress: SeasonProgress) -> bool:
    """False before the season starts or while less than 10% of it has elapsed."""
    return progress.phase is not Phase.BEFORE and progress.fraction_complete >= MIN_RELIABLE_FRACTION


def _assumptions(progress: SeasonProgress, scale: float, reliable: bool) -> tuple[str, ...]:
    lines = [
        f"Season start: {progress.start_date.isoformat()} (assumed)",
        f"Season end: {progress.end_date.isoformat()} (assumed)",
        f"Season progress: {progress.percent_complete:.0f}%",
        "Projection method: Linear extrapolation of time-dependent metrics",
        f"Projection factor: {scale:.1f}x",
        "Projected metrics: Transactions, dApp interactions, staking duration, wallet age",
        "Static metrics (unchanged): Token diversity, NFTs, SKR staking status, .skr domain, Season 1 tier",
    ]
    if scale >= MAX_SCALE_FACTOR:
        lines.append(f"Scale factor capped at {int(MAX_SCALE_FACTOR)}x for early-season safety")
    if not reliable:
        lines.append("Warning: Less than 10% of season complete, projections may be unreliable")
    return tuple(lines)


def project(metrics: ActivityMetrics, progress: SeasonProgress) -> ProjectionResult:
    scale = scale_factor(progress)
    reliable = is_reliable(progress)
    projected_tx = int(metrics.total_transactions * scale)
    projected = replace(
        metrics,
        total_transactions=projected_tx,
        unique_programs=estimate_unique_programs(projected_tx),
        dapp_interactions=int(metrics.dapp_interactions * scale),
        staking_duration_days=int(metrics.staking_duration_days * scale),
        wallet_age_days=int(metrics.wallet_age_days * scale),
    )
    logger.debug(
        "metrics_projected",
        phase=progress.phase.value,
        fraction=round(progress.fraction_complete, 4),
        scale=round(scale, 3),
        reliable=reliable,
    )
    return ProjectionResult(
        current_metrics=metrics,
        projected_metrics=projected,
        scale_factor=scale,
        is_reliable=reliable,
        assumptions=_assumptions(progress, scale, reliable),
    )


def predict_with_projection(metrics: ActivityMetrics, progress: SeasonProgress) -> tuple[ProjectionResult, ProjectedPrediction]:
    projection = project(metrics, progress)
    prediction = ProjectedPrediction(
        current=predict(metrics),
        projected=predict(projection.projected_metrics),
        season_fraction=progress.fraction_complete,
        is_reliable=projection.is_reliable,
    )
    return projection, prediction
