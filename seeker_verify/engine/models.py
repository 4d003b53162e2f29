"""
Value types shared by the claim scanner, activity aggregator and scoring engine.

All records are immutable; derived copies are built with dataclasses.replace().
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from seeker_verify.config.constants import SKR_DECIMALS_DIVISOR


class AirdropTier(str, Enum):
    """Season 1 airdrop tiers, lowest first."""

    SCOUT = "Scout"
    PROSPECTOR = "Prospector"
    VANGUARD = "Vanguard"
    LUMINARY = "Luminary"
    SOVEREIGN = "Sovereign"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def amount(self) -> int:
        """Claim amount in raw units (6 decimals)."""
        return TIER_AMOUNTS[self]

    @property
    def skr_display(self) -> float:
        return self.amount / SKR_DECIMALS_DIVISOR

    @property
    def percent_of_wallets(self) -> float:
        return TIER_POPULATION_PERCENT[self]

    @property
    def rank(self) -> int:
        return list(AirdropTier).index(self)

    @classmethod
    def from_amount(cls, amount: int) -> "AirdropTier | None":
        """Exact match against the five claim amounts."""
        for tier, tier_amount in TIER_AMOUNTS.items():
            if tier_amount == amount:
                return tier
        return None

    @classmethod
    def from_name(cls, name: str | None) -> "AirdropTier | None":
        if not name:
            return None
        for tier in cls:
            if tier.value.lower() == name.strip().lower():
                return tier
        return None


TIER_AMOUNTS: dict[AirdropTier, int] = {
    AirdropTier.SCOUT: 5_000_000_000,
    AirdropTier.PROSPECTOR: 10_000_000_000,
    AirdropTier.VANGUARD: 40_000_000_000,
    AirdropTier.LUMINARY: 125_000_000_000,
    AirdropTier.SOVEREIGN: 750_000_000_000,
}

# Share of Season 1 wallets per tier (sums to 100)
TIER_POPULATION_PERCENT: dict[AirdropTier, float] = {
    AirdropTier.SCOUT: 19.5,
    AirdropTier.PROSPECTOR: 64.2,
    AirdropTier.VANGUARD: 11.9,
    AirdropTier.LUMINARY: 4.0,
    AirdropTier.SOVEREIGN: 0.4,
}


@dataclass(frozen=True)
class ActivityMetrics:
    """Behavioral snapshot of one wallet. Carries no wallet identity."""

    total_transactions: int = 0
    unique_programs: int = 0
    token_diversity: int = 0
    nft_count: int = 0
    wallet_age_days: int = 0
    dapp_interactions: int = 0
    staking_duration_days: int = 0
    skr_staked: bool = False
    has_skr_domain: bool = False
    season1_tier: AirdropTier | None = None

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["season1_tier"] = self.season1_tier.value if self.season1_tier else None
        return out


@dataclass(frozen=True)
class ClaimResult:
    """Outcome of Season 1 claim detection; every field is None when nothing matched."""

    tier: AirdropTier | None = None
    signature: str | None = None
    timestamp: int | None = None
    raw_amount: int | None = None
    source: str | None = None
    """"claim_tx" when read from a transaction, "balance" when inferred from holdings."""
    failed: bool = False
    """True when RPC failures kept the scan from reaching an answer; never cached."""

    @property
    def is_detected(self) -> bool:
        return self.tier is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tier": self.tier.value if self.tier else None,
            "signature": self.signature,
            "timestamp": self.timestamp,
            "raw_amount": self.raw_amount,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClaimResult":
        return cls(
            tier=AirdropTier.from_name(data.get("tier")),
            signature=data.get("signature"),
            timestamp=data.get("timestamp"),
            raw_amount=data.get("raw_amount"),
            source=data.get("source"),
        )


@dataclass(frozen=True)
class ScoreResult:
    composite_score: float
    percentile: float
    predicted_tier: AirdropTier
    confidence: str
    breakdown: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "composite_score": round(self.composite_score, 2),
            "percentile": round(self.percentile, 2),
            "predicted_tier": self.predicted_tier.value,
            "confidence": self.confidence,
            "breakdown": {k: round(v, 2) for k, v in self.breakdown.items()},
        }


@dataclass(frozen=True)
class ActivityHighlight:
    label: str
    description: str
    is_strength: bool


@dataclass(frozen=True)
class Season1Analysis:
    detected_tier: AirdropTier | None
    tier_percentile: float
    highlights: tuple[ActivityHighlight, ...]
    activity_score: float
