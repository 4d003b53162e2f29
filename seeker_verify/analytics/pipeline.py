"""
Analysis pipeline: fetch -> aggregate -> score for one wallet.

Two entrypoints:

- run_season1_analysis(): claim scan, staking and domain lookups start
  concurrently; the lite activity sample starts once staking/domain facts are
  known; the Season 1 engine runs after everything has resolved. The claim
  result is cached for SEASON1_CACHE_HOURS. A scan that failed on RPC errors
  is never cached; the last cached claim (of any age) stands in for it.
- run_prediction(): staking and domain lookups in parallel, then the full
  activity sample, then current + projected scoring against the season clock.
  A cached Season 1 tier is injected when available.

A failed sub-fetch never aborts the run: its facts default to "absent" and a
short warning string is attached to the report instead.
"""

from __future__ import annotations

import asyncio
import math
import time
from dataclasses import dataclass, replace
from datetime import date
from typing import Any

from seeker_verify.analytics.activity import FULL_MAX_BATCHES, LITE_MAX_BATCHES, get_activity_metrics
from seeker_verify.analytics.claim_scanner import ClaimScanner
from seeker_verify.clients.domains import DomainInfo, get_skr_domains, has_active_domain
from seeker_verify.clients.staking import StakingInfo, get_staking_info
from seeker_verify.config.constants import SEASON1_CACHE_HOURS, SHARE_PRICE_PRECISION
from seeker_verify.engine.comparison import SeasonComparison, compare
from seeker_verify.engine.models import ActivityMetrics, AirdropTier, ClaimResult, Season1Analysis
from seeker_verify.engine.projection import ProjectedPrediction, ProjectionResult, predict_with_projection
from seeker_verify.engine.scoring import analyze_season1
from seeker_verify.engine.season import SeasonProgress, calculate
from seeker_verify.rpc.result import Err, Result
from seeker_verify.rpc.transport import RpcTransport
from seeker_verify.storage import InMemoryStore, KeyValueStore
from seeker_verify.verify_logging import bind_wallet, get_logger

logger = get_logger(__name__)

WARNING_STAKING = "Staking data unavailable"
WARNING_DOMAIN = "Domain data unavailable"
WARNING_SEASON1 = "Season 1 data unavailable"

# Annual staking yield used to back out stake age from share-price growth
STAKING_APY = 0.207
MIN_STAKE_DAYS = 1
MAX_STAKE_DAYS = 365
UNKNOWN_STAKE_DAYS = 30


def season1_cache_key(wallet: str) -> str:
    return f"season1_result:{wallet}"


def estimate_stake_duration_days(info: StakingInfo) -> int:
    """
    Days staked implied by share-price growth at STAKING_APY compounded daily.

    Returns 0 when not staked and UNKNOWN_STAKE_DAYS when the price has not
    grown above 1.0.
    """
    if not info.is_staked:
        return 0
    if info.share_price <= SHARE_PRICE_PRECISION:
        return UNKNOWN_STAKE_DAYS
    growth = info.share_price / SHARE_PRICE_PRECISION
    daily_rate = math.log(1.0 + STAKING_APY / 365.0)
    days = int(math.log(growth) / daily_rate)
    return max(MIN_STAKE_DAYS, min(MAX_STAKE_DAYS, days))


@dataclass(frozen=True)
class Season1Report:
    wallet: str
    claim: ClaimResult
    metrics: ActivityMetrics
    analysis: Season1Analysis
    warnings: tuple[str, ...] = ()
    from_cache: bool = False


@dataclass(frozen=True)
class PredictionReport:
    wallet: str
    metrics: ActivityMetrics
    progress: SeasonProgress
    projection: ProjectionResult
    prediction: ProjectedPrediction
    comparison: SeasonComparison
    warnings: tuple[str, ...] = ()


class WalletAnalyzer:
    """Runs both analyses for wallets against one transport and one cache."""

    def __init__(self, transport: RpcTransport, store: KeyValueStore | None = None) -> None:
        self._transport = transport
        self._store = store if store is not None else InMemoryStore()

    async def _staking_and_domains(
        self, wallet: str
    ) -> tuple[Result[StakingInfo], Result[list[DomainInfo]]]:
        staking, domains = await asyncio.gather(
            get_staking_info(self._transport, wallet),
            get_skr_domains(self._transport, wallet),
        )
        return staking, domains

    def cached_claim(self, wallet: str, *, allow_stale: bool = False) -> ClaimResult | None:
        key = season1_cache_key(wallet)
        if not allow_stale and self._store.is_stale(key, SEASON1_CACHE_HOURS):
            return None
        data = self._store.get(key)
        if not isinstance(data, dict):
            return None
        return ClaimResult.from_dict(data)

    def _cache_season1(self, wallet: str, claim: ClaimResult, analysis: Season1Analysis) -> None:
        payload: dict[str, Any] = claim.to_dict()
        payload["activity_score"] = analysis.activity_score
        payload["highlights"] = [h.label for h in analysis.highlights]
        payload["detected_at"] = int(time.time())
        self._store.set(season1_cache_key(wallet), payload)

    async def run_season1_analysis(self, wallet: str, *, refresh: bool = False) -> Season1Report:
        wallet = wallet.strip()
        log = bind_wallet(wallet, logger)
        log.info("season1_analysis_start", refresh=refresh)
        warnings: list[str] = []

        cached = None if refresh else self.cached_claim(wallet)
        claim_task: asyncio.Task[ClaimResult] | None = None
        if cached is None:
            claim_task = asyncio.create_task(ClaimScanner(self._transport, wallet).run())

        try:
            staking, domains = await self._staking_and_domains(wallet)
            is_staked = False
            if isinstance(staking, Err):
                warnings.append(WARNING_STAKING)
            else:
                is_staked = staking.value.is_staked
            has_domain = False
            if isinstance(domains, Err):
                warnings.append(WARNING_DOMAIN)
            else:
                has_domain = has_active_domain(domains.value)

            metrics = await get_activity_metrics(
                self._transport,
                wallet,
                is_staked=is_staked,
                has_skr_domain=has_domain,
                max_batches=LITE_MAX_BATCHES,
            )
            claim = cached if claim_task is None else await claim_task
        finally:
            if claim_task is not None and not claim_task.done():
                claim_task.cancel()

        if claim.failed:
            warnings.append(WARNING_SEASON1)
            previous = self.cached_claim(wallet, allow_stale=True)
            if previous is not None:
                log.warning("season1_scan_failed_using_cache")
                cached, claim = previous, previous

        metrics = replace(metrics, season1_tier=claim.tier)
        analysis = analyze_season1(metrics, claim.tier)
        if cached is None and not claim.failed:
            self._cache_season1(wallet, claim, analysis)

        log.info(
            "season1_analysis_done",
            tier=claim.tier.value if claim.tier else None,
            activity_score=round(analysis.activity_score, 2),
            warnings=warnings,
            from_cache=cached is not None,
        )
        return Season1Report(
            wallet=wallet,
            claim=claim,
            metrics=metrics,
            analysis=analysis,
            warnings=tuple(warnings),
            from_cache=cached is not None,
        )

    async def run_prediction(
        self,
        wallet: str,
        *,
        season1_tier: AirdropTier | None = None,
        today: date | None = None,
    ) -> PredictionReport:
        wallet = wallet.strip()
        log = bind_wallet(wallet, logger)
        log.info("prediction_start")
        warnings: list[str] = []

        staking, domains = await self._staking_and_domains(wallet)
        is_staked = False
        stake_days = 0
        if isinstance(staking, Err):
            warnings.append(WARNING_STAKING)
        else:
            is_staked = staking.value.is_staked
            stake_days = estimate_stake_duration_days(staking.value)
        has_domain = False
        if isinstance(domains, Err):
            warnings.append(WARNING_DOMAIN)
        else:
            has_domain = has_active_domain(domains.value)

        metrics = await get_activity_metrics(
            self._transport,
            wallet,
            is_staked=is_staked,
            has_skr_domain=has_domain,
            max_batches=FULL_MAX_BATCHES,
        )

        if season1_tier is None:
            cached = self.cached_claim(wallet)
            season1_tier = cached.tier if cached else None
        metrics = replace(metrics, season1_tier=season1_tier, staking_duration_days=stake_days)

        progress = calculate(today)
        projection, prediction = predict_with_projection(metrics, progress)
        comparison = compare(season1_tier, prediction.projected)

        log.info(
            "prediction_done",
            current_tier=prediction.current.predicted_tier.value,
            projected_tier=prediction.projected.predicted_tier.value,
            scale=round(projection.scale_factor, 2),
            reliable=projection.is_reliable,
            warnings=warnings,
        )
        return PredictionReport(
            wallet=wallet,
            metrics=metrics,
            progress=progress,
            projection=projection,
            prediction=prediction,
            comparison=comparison,
            warnings=tuple(warnings),
        )


async def run_season1_analysis(
    transport: RpcTransport,
    wallet: str,
    store: KeyValueStore | None = None,
) -> Season1Report:
    return await WalletAnalyzer(transport, store).run_season1_analysis(wallet)


async def run_prediction(
    transport: RpcTransport,
    wallet: str,
    store: KeyValueStore | None = None,
    *,
    today: date | None = None,
) -> PredictionReport:
    return await WalletAnalyzer(transport, store).run_prediction(wallet, today=today)
