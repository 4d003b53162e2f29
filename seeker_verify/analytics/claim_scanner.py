"""
Season 1 claim detection.

Walks the wallet's SKR token account history inside the claim window looking
for an incoming transfer of exactly one of the five tier amounts:

    FIND_TOKEN_ACCOUNT -> SCAN_WINDOW -> PARSE_CANDIDATES -> DONE
                                               |
                                               v
                                           FALLBACK -> DONE

Signature pages are read newest-first (limit 1000, at most 5 pages) and the
scan stops at the first signature older than the window, on a short page, or
on any RPC failure. Each candidate transaction is checked in order:
top-level spl-token transfers, inner-instruction transfers, then the SKR
pre/post token balance delta. When no candidate matches, the current holdings
(liquid + staked + cooldown) are matched against the tier amounts instead.

The result is marked failed when the token account lookup fails, or when
no claim was found and every holdings fetch failed too.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from seeker_verify.clients.staking import get_staking_info
from seeker_verify.clients.token import find_skr_token_account, get_skr_balance
from seeker_verify.config.constants import CLAIM_END_EPOCH, CLAIM_START_EPOCH, SKR_MINT
from seeker_verify.engine.models import TIER_AMOUNTS, AirdropTier, ClaimResult
from seeker_verify.rpc.result import Err, Ok
from seeker_verify.rpc.transport import RpcTransport
from seeker_verify.solana.models import SignatureInfo
from seeker_verify.verify_logging import bind_wallet, get_logger

logger = get_logger(__name__)

SIGNATURE_PAGE_SIZE = 1000
MAX_SIGNATURE_PAGES = 5
FALLBACK_TOLERANCE = 0.05
SPL_TOKEN_PROGRAM = "spl-token"
TRANSFER_TYPES = frozenset({"transfer", "transferChecked"})

SOURCE_CLAIM_TX = "claim_tx"
SOURCE_BALANCE = "balance"


class ScanState(str, Enum):
    FIND_TOKEN_ACCOUNT = "find_token_account"
    SCAN_WINDOW = "scan_window"
    PARSE_CANDIDATES = "parse_candidates"
    FALLBACK = "fallback"
    DONE = "done"


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def tier_from_exact_amount(amount: int | None) -> AirdropTier | None:
    if amount is None:
        return None
    return AirdropTier.from_amount(amount)


def tier_within_tolerance(total: int, tolerance: float = FALLBACK_TOLERANCE) -> AirdropTier | None:
    """First tier (ascending) with int(a * (1 - t)) <= total <= int(a * (1 + t))."""
    for tier, amount in sorted(TIER_AMOUNTS.items(), key=lambda kv: kv[1]):
        lower = int(amount * (1.0 - tolerance))
        upper = int(amount * (1.0 + tolerance))
        if lower <= total <= upper:
            return tier
    return None


def minimum_tier(total: int) -> AirdropTier | None:
    """Highest tier whose amount does not exceed total (a lower-bound estimate)."""
    for tier, amount in sorted(TIER_AMOUNTS.items(), key=lambda kv: kv[1], reverse=True):
        if total >= amount:
            return tier
    return None


def transfer_amount_to(instructions: Any, token_account: str) -> int | None:
    """Tier-sized spl-token transfer/transferChecked into token_account, if any."""
    for ix in instructions or []:
        if not isinstance(ix, dict) or ix.get("program") != SPL_TOKEN_PROGRAM:
            continue
        parsed = ix.get("parsed")
        if not isinstance(parsed, dict):
            continue
        ix_type = parsed.get("type")
        if ix_type not in TRANSFER_TYPES:
            continue
        info = parsed.get("info") or {}
        if info.get("destination") != token_account:
            continue
        if ix_type == "transfer":
            amount = _to_int(info.get("amount"))
        else:
            amount = _to_int((info.get("tokenAmount") or {}).get("amount"))
        if amount is not None and amount in TIER_AMOUNTS.values():
            return amount
    return None


def _skr_entries(balances: Any) -> list[dict[str, Any]]:
    return [b for b in balances or [] if isinstance(b, dict) and b.get("mint") == SKR_MINT]


def _entry_amount(entry: dict[str, Any]) -> int | None:
    return _to_int((entry.get("uiTokenAmount") or {}).get("amount"))


def balance_delta(pre: Any, post: Any, wallet: str | None = None) -> int | None:
    """
    Positive tier-sized change of the SKR balance between pre and post token balances.

    Entries owned by wallet are preferred when present; otherwise the first SKR
    entry is used. A missing pre entry counts as 0 (account created by the claim).
    """
    if pre is None or post is None:
        return None
    post_entries = _skr_entries(post)
    pre_entries = _skr_entries(pre)
    if wallet and any(e.get("owner") == wallet for e in post_entries):
        post_entries = [e for e in post_entries if e.get("owner") == wallet]
        pre_entries = [e for e in pre_entries if e.get("owner") == wallet]
    post_amount = next((a for a in map(_entry_amount, post_entries) if a is not None), None)
    if post_amount is None:
        return None
    pre_amount = (_entry_amount(pre_entries[0]) or 0) if pre_entries else 0
    change = post_amount - pre_amount
    if change > 0 and change in TIER_AMOUNTS.values():
        return change
    return None


def claim_from_transaction(
    tx: dict[str, Any],
    signature: str,
    token_account: str,
    wallet: str | None = None,
) -> ClaimResult | None:
    """Match one jsonParsed getTransaction result; first matching path wins."""
    block_time = _to_int(tx.get("blockTime"))
    message = (tx.get("transaction") or {}).get("message") or {}
    meta = tx.get("meta") or {}

    amount = transfer_amount_to(message.get("instructions"), token_account)
    if amount is None:
        for inner in meta.get("innerInstructions") or []:
            if isinstance(inner, dict):
                amount = transfer_amount_to(inner.get("instructions"), token_account)
                if amount is not None:
                    break
    if amount is None:
        amount = balance_delta(meta.get("preTokenBalances"), meta.get("postTokenBalances"), wallet)

    tier = tier_from_exact_amount(amount)
    if tier is None:
        return None
    return ClaimResult(tier=tier, signature=signature, timestamp=block_time, raw_amount=amount, source=SOURCE_CLAIM_TX)


class ClaimScanner:
    """
    One detection run for one wallet. Call run() once; state and intermediate
    results stay readable afterwards for logging and tests.
    """

    def __init__(
        self,
        transport: RpcTransport,
        wallet: str,
        *,
        window_start: int = CLAIM_START_EPOCH,
        window_end: int = CLAIM_END_EPOCH,
        page_size: int = SIGNATURE_PAGE_SIZE,
        max_pages: int = MAX_SIGNATURE_PAGES,
    ) -> None:
        self._transport = transport
        self.wallet = wallet
        self.window_start = window_start
        self.window_end = window_end
        self.page_size = page_size
        self.max_pages = max_pages
        self.state = ScanState.FIND_TOKEN_ACCOUNT
        self.token_account: str | None = None
        self.candidates: list[SignatureInfo] = []
        self.pages_read = 0
        self.result = ClaimResult()
        self._log = bind_wallet(wallet, logger)

    async def run(self) -> ClaimResult:
        handlers = {
            ScanState.FIND_TOKEN_ACCOUNT: self._find_token_account,
            ScanState.SCAN_WINDOW: self._scan_window,
            ScanState.PARSE_CANDIDATES: self._parse_candidates,
            ScanState.FALLBACK: self._fallback,
        }
        while self.state is not ScanState.DONE:
            self.state = await handlers[self.state]()
        self._log.info(
            "claim_scan_done",
            tier=self.result.tier.value if self.result.tier else None,
            source=self.result.source,
            failed=self.result.failed,
            candidates=len(self.candidates),
            pages=self.pages_read,
        )
        return self.result

    async def _find_token_account(self) -> ScanState:
        found = await find_skr_token_account(self._transport, self.wallet)
        if isinstance(found, Err):
            self._log.warning("claim_token_account_lookup_failed", error=str(found.error))
            self.result = ClaimResult(failed=True)
            return ScanState.DONE
        if not found.value:
            self._log.info("claim_token_account_missing")
            return ScanState.DONE
        self.token_account = found.value
        return ScanState.SCAN_WINDOW

    async def _scan_window(self) -> ScanState:
        before: str | None = None
        while self.pages_read < self.max_pages:
            opts: dict[str, Any] = {"limit": self.page_size}
            if before is not None:
                opts["before"] = before
            page = await self._transport.call("getSignaturesForAddress", [self.token_account, opts])
            self.pages_read += 1
            if isinstance(page, Err):
                self._log.warning("claim_signature_page_failed", page=self.pages_read, error=str(page.error))
                break
            raw = page.value if isinstance(page.value, list) else []
            if not raw:
                break

            reached_start = False
            for item in raw:
                if not isinstance(item, dict):
                    continue
                block_time = _to_int(item.get("blockTime"))
                if block_time is None:
                    continue
                if block_time < self.window_start:
                    reached_start = True
                    break
                if block_time <= self.window_end and item.get("err") is None and item.get("signature"):
                    self.candidates.append(SignatureInfo.from_rpc_item(item))

            self._log.debug(
                "claim_signature_page",
                page=self.pages_read,
                size=len(raw),
                candidates=len(self.candidates),
            )
            if reached_start or len(raw) < self.page_size:
                break
            last = raw[-1]
            before = last.get("signature") if isinstance(last, dict) else None
            if not before:
                break

        return ScanState.PARSE_CANDIDATES if self.candidates else ScanState.FALLBACK

    async def _parse_candidates(self) -> ScanState:
        params_opts = {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0}
        for candidate in self.candidates:
            tx = await self._transport.call("getTransaction", [candidate.signature, params_opts])
            if isinstance(tx, Err):
                self._log.debug("claim_transaction_fetch_failed", signature=candidate.signature[:16], error=str(tx.error))
                continue
            if not isinstance(tx.value, dict):
                continue
            match = claim_from_transaction(tx.value, candidate.signature, self.token_account or "", self.wallet)
            if match is not None:
                self.result = match
                self._log.info(
                    "claim_detected",
                    tier=match.tier.value if match.tier else None,
                    signature=candidate.signature[:16],
                    raw_amount=match.raw_amount,
                )
                return ScanState.DONE
        return ScanState.FALLBACK

    async def _fallback(self) -> ScanState:
        liquid = 0
        staked = 0
        cooldown = 0
        balance = await get_skr_balance(self._transport, self.wallet)
        if isinstance(balance, Ok):
            liquid = balance.value.raw_amount
        staking = await get_staking_info(self._transport, self.wallet)
        if isinstance(staking, Ok):
            staked = staking.value.staked_amount
            cooldown = staking.value.cooldown_amount

        total = liquid + staked + cooldown
        tier = tier_within_tolerance(total) or minimum_tier(total)
        self._log.info(
            "claim_balance_fallback",
            liquid=liquid,
            staked=staked,
            cooldown=cooldown,
            total=total,
            tier=tier.value if tier else None,
        )
        if tier is not None:
            self.result = ClaimResult(tier=tier, raw_amount=total, source=SOURCE_BALANCE)
        elif isinstance(balance, Err) and isinstance(staking, Err):
            self.result = ClaimResult(failed=True)
        return ScanState.DONE


async def detect_season1_tier(transport: RpcTransport, wallet: str) -> ClaimResult:
    return await ClaimScanner(transport, wallet).run()
