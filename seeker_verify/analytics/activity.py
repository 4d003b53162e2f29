"""
Activity aggregator: sample a wallet's on-chain history into ActivityMetrics.

Signatures are paged newest-first (limit 100 per page, 3 pages for the
historical "lite" context, 10 for the current-season "full" context). From
them: total sampled signatures, successful ones (dApp interactions) and wallet
age from the oldest block_time. Token holdings come from
getTokenAccountsByOwner (Token program, jsonParsed): decimals 0 with amount 1
counts as an NFT, any other non-empty account adds to token diversity.

Unique programs are estimated as sqrt(total) rather than parsed from every
transaction. Staking duration is a flat 90-day estimate when staked; callers
with a better estimate replace it. Failures degrade to zero counts with a
warning log; the aggregator never raises for RPC errors.
"""

from __future__ import annotations

import time
from typing import Any

from solders.pubkey import Pubkey

from seeker_verify.config.constants import TOKEN_PROGRAM_ID
from seeker_verify.engine.models import ActivityMetrics
from seeker_verify.engine.projection import estimate_unique_programs
from seeker_verify.rpc.result import Err
from seeker_verify.rpc.transport import RpcTransport
from seeker_verify.solana.models import SignatureInfo, TokenAccount
from seeker_verify.verify_logging import get_logger, short_address

logger = get_logger(__name__)

SIGNATURE_BATCH_SIZE = 100
LITE_MAX_BATCHES = 3
FULL_MAX_BATCHES = 10
STAKED_DURATION_ESTIMATE_DAYS = 90
SECONDS_PER_DAY = 86400


def wallet_age_days(oldest_block_time: int | None, now: float | None = None) -> int:
    if oldest_block_time is None:
        return 0
    now = time.time() if now is None else now
    return max(0, int((now - oldest_block_time) // SECONDS_PER_DAY))


async def sample_signatures(
    transport: RpcTransport,
    wallet: str,
    *,
    max_batches: int = FULL_MAX_BATCHES,
    batch_size: int = SIGNATURE_BATCH_SIZE,
) -> list[SignatureInfo]:
    """Up to max_batches pages of signatures; stops early on an empty/short page or RPC error."""
    out: list[SignatureInfo] = []
    before: str | None = None
    for batch in range(max_batches):
        opts: dict[str, Any] = {"limit": batch_size}
        if before is not None:
            opts["before"] = before
        page = await transport.call("getSignaturesForAddress", [wallet, opts])
        if isinstance(page, Err):
            logger.warning(
                "activity_signatures_failed",
                wallet_id=short_address(wallet),
                batch=batch,
                error=str(page.error),
            )
            break
        items = SignatureInfo.from_rpc_list(page.value if isinstance(page.value, list) else [])
        if not items:
            break
        out.extend(items)
        if len(items) < batch_size:
            break
        before = items[-1].signature
    return out


async def count_token_holdings(transport: RpcTransport, wallet: str) -> tuple[int, int]:
    """(token_diversity, nft_count) from the wallet's classic Token program accounts."""
    params = [wallet, {"programId": TOKEN_PROGRAM_ID}, {"encoding": "jsonParsed"}]
    result = await transport.call("getTokenAccountsByOwner", params)
    if isinstance(result, Err):
        logger.warning("activity_token_accounts_failed", wallet_id=short_address(wallet), error=str(result.error))
        return 0, 0
    diversity = 0
    nfts = 0
    for account in TokenAccount.from_rpc_value(result.value):
        if account.is_nft:
            nfts += 1
        elif account.amount > 0:
            diversity += 1
    return diversity, nfts


async def get_activity_metrics(
    transport: RpcTransport,
    wallet: str,
    *,
    is_staked: bool = False,
    has_skr_domain: bool = False,
    max_batches: int = FULL_MAX_BATCHES,
    now: float | None = None,
) -> ActivityMetrics:
    wallet = (wallet or "").strip()
    try:
        Pubkey.from_string(wallet)
    except ValueError as e:
        logger.warning("activity_invalid_wallet", wallet_id=short_address(wallet), error=str(e))
        return ActivityMetrics(skr_staked=is_staked, has_skr_domain=has_skr_domain)

    signatures = await sample_signatures(transport, wallet, max_batches=max_batches)
    total = len(signatures)
    succeeded = sum(1 for s in signatures if s.succeeded)
    block_times = [s.block_time for s in signatures if s.block_time is not None]
    age = wallet_age_days(min(block_times) if block_times else None, now)

    diversity, nfts = await count_token_holdings(transport, wallet)

    metrics = ActivityMetrics(
        total_transactions=total,
        unique_programs=estimate_unique_programs(total),
        token_diversity=diversity,
        nft_count=nfts,
        wallet_age_days=age,
        dapp_interactions=succeeded,
        staking_duration_days=STAKED_DURATION_ESTIMATE_DAYS if is_staked else 0,
        skr_staked=is_staked,
        has_skr_domain=has_skr_domain,
    )
    logger.info(
        "activity_metrics",
        wallet_id=short_address(wallet),
        tx_count=total,
        dapp_interactions=succeeded,
        wallet_age_days=age,
        token_diversity=diversity,
        nft_count=nfts,
        batches=max_batches,
    )
    return metrics
