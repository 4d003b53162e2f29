"""
Season 1 claim detection: state machine, transaction matching paths, holdings fallback.
"""

from __future__ import annotations

import asyncio

import pytest

from rpc_fakes import (
    AFTER_WINDOW,
    BEFORE_WINDOW,
    IN_WINDOW,
    TOKEN_ACCOUNT,
    WALLET,
    FakeRpc,
    RpcFailure,
    account_info,
    make_transport,
    program_account,
    signature_item,
    stake_config_data,
    token_account_item,
    token_accounts,
    user_stake_data,
)
from seeker_verify.analytics.claim_scanner import (
    SOURCE_BALANCE,
    SOURCE_CLAIM_TX,
    ClaimScanner,
    ScanState,
    balance_delta,
    claim_from_transaction,
    detect_season1_tier,
    minimum_tier,
    tier_within_tolerance,
)
from seeker_verify.config.constants import SKR_MINT, SKR_STAKING_PROGRAM
from seeker_verify.engine.models import AirdropTier, ClaimResult

VANGUARD = 40_000_000_000
LUMINARY = 125_000_000_000
PROSPECTOR = 10_000_000_000
DISTRIBUTOR = "DistributorVau1t1111111111111111111111111111"


def _transfer_checked(destination: str, amount: int) -> dict:
    return {
        "program": "spl-token",
        "programId": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
        "parsed": {
            "type": "transferChecked",
            "info": {
                "source": DISTRIBUTOR,
                "destination": destination,
                "mint": SKR_MINT,
                "tokenAmount": {"amount": str(amount), "decimals": 6},
            },
        },
    }


def _transfer(destination: str, amount: int) -> dict:
    return {
        "program": "spl-token",
        "parsed": {"type": "transfer", "info": {"source": DISTRIBUTOR, "destination": destination, "amount": str(amount)}},
    }


def _tx(instructions=(), inner=(), pre=None, post=None, block_time: int = IN_WINDOW) -> dict:
    return {
        "blockTime": block_time,
        "slot": 1,
        "transaction": {"message": {"instructions": list(instructions)}},
        "meta": {
            "err": None,
            "innerInstructions": [{"index": 0, "instructions": list(inner)}] if inner else [],
            "preTokenBalances": pre if pre is not None else [],
            "postTokenBalances": post if post is not None else [],
        },
    }


def _balance(amount: int, owner: str = WALLET, mint: str = SKR_MINT, index: int = 1) -> dict:
    return {"accountIndex": index, "mint": mint, "owner": owner, "uiTokenAmount": {"amount": str(amount), "decimals": 6}}


def _skr_wallet(rpc: FakeRpc, amount: int = 0) -> None:
    rpc.on("getTokenAccountsByOwner", token_accounts(token_account_item(TOKEN_ACCOUNT, SKR_MINT, amount)))


def _no_staking(rpc: FakeRpc) -> None:
    rpc.on("getAccountInfo", account_info(stake_config_data(1_000_000_000)))
    rpc.on("getProgramAccounts", [])


def _run(rpc: FakeRpc, **kwargs) -> tuple[ClaimResult, ClaimScanner]:
    async def run():
        async with make_transport(rpc) as transport:
            scanner = ClaimScanner(transport, WALLET, **kwargs)
            return await scanner.run(), scanner

    return asyncio.run(run())


def test_transfer_checked_claim_detects_vanguard(rpc: FakeRpc):
    _skr_wallet(rpc, VANGUARD)
    rpc.on("getSignaturesForAddress", [signature_item("claimsig", IN_WINDOW)])
    rpc.on("getTransaction", _tx(instructions=[_transfer_checked(TOKEN_ACCOUNT, VANGUARD)]))

    result, scanner = _run(rpc)

    assert result.tier is AirdropTier.VANGUARD
    assert result.signature == "claimsig"
    assert result.timestamp == IN_WINDOW
    assert result.raw_amount == VANGUARD
    assert result.source == SOURCE_CLAIM_TX
    assert scanner.state is ScanState.DONE
    assert scanner.token_account == TOKEN_ACCOUNT
    sig_params = rpc.params_for("getSignaturesForAddress")[0]
    assert sig_params[0] == TOKEN_ACCOUNT
    assert sig_params[1]["limit"] == 1000
    tx_params = rpc.params_for("getTransaction")[0]
    assert tx_params[1] == {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0}


def test_inner_instruction_transfer_detects_luminary(rpc: FakeRpc):
    _skr_wallet(rpc)
    rpc.on("getSignaturesForAddress", [signature_item("claimsig", IN_WINDOW)])
    rpc.on("getTransaction", _tx(inner=[_transfer(TOKEN_ACCOUNT, LUMINARY)]))

    result, _ = _run(rpc)
    assert result.tier is AirdropTier.LUMINARY
    assert result.source == SOURCE_CLAIM_TX


def test_balance_delta_detects_prospector_when_account_created_by_claim(rpc: FakeRpc):
    _skr_wallet(rpc)
    rpc.on("getSignaturesForAddress", [signature_item("claimsig", IN_WINDOW)])
    rpc.on("getTransaction", _tx(pre=[], post=[_balance(PROSPECTOR)]))

    result, _ = _run(rpc)
    assert result.tier is AirdropTier.PROSPECTOR
    assert result.raw_amount == PROSPECTOR


def test_transfer_to_other_account_is_ignored():
    tx = _tx(instructions=[_transfer_checked("SomeOtherAccount", VANGUARD)])
    assert claim_from_transaction(tx, "sig", TOKEN_ACCOUNT, WALLET) is None


def test_non_tier_amounts_are_ignored():
    tx = _tx(instructions=[_transfer_checked(TOKEN_ACCOUNT, VANGUARD + 1)], pre=[_balance(5)], post=[_balance(12)])
    assert claim_from_transaction(tx, "sig", TOKEN_ACCOUNT, WALLET) is None


def test_window_scan_pages_and_stops_before_window(rpc: FakeRpc):
    """Failed and out-of-window signatures are skipped; paging stops at the window start."""
    _skr_wallet(rpc)
    pages = {
        None: [signature_item("late", AFTER_WINDOW), signature_item("failed", IN_WINDOW, err={"InstructionError": [0, "x"]})],
        "failed": [signature_item("claimsig", IN_WINDOW), signature_item("ancient", BEFORE_WINDOW)],
    }
    rpc.on("getSignaturesForAddress", lambda params: pages[params[1].get("before")])
    rpc.on("getTransaction", _tx(instructions=[_transfer_checked(TOKEN_ACCOUNT, PROSPECTOR)]))

    result, scanner = _run(rpc, page_size=2)

    assert [c.signature for c in scanner.candidates] == ["claimsig"]
    assert scanner.pages_read == 2
    assert rpc.params_for("getTransaction")[0][0] == "claimsig"
    assert result.tier is AirdropTier.PROSPECTOR


def test_window_scan_respects_max_pages(rpc: FakeRpc):
    _skr_wallet(rpc)
    counter = iter(range(100))

    def full_page(params):
        n = next(counter)
        return [signature_item(f"late-{n}-a", AFTER_WINDOW), signature_item(f"late-{n}-b", AFTER_WINDOW)]

    rpc.on("getSignaturesForAddress", full_page)
    _no_staking(rpc)

    result, scanner = _run(rpc, page_size=2, max_pages=3)
    assert scanner.pages_read == 3
    assert len(rpc.params_for("getSignaturesForAddress")) == 3
    assert scanner.candidates == []
    assert not result.is_detected


def test_fallback_matches_holdings_within_tolerance(rpc: FakeRpc):
    _skr_wallet(rpc, 9_500_000_000)
    rpc.on("getSignaturesForAddress", [])
    _no_staking(rpc)

    result, _ = _run(rpc)
    assert result.tier is AirdropTier.PROSPECTOR
    assert result.source == SOURCE_BALANCE
    assert result.raw_amount == 9_500_000_000
    assert result.signature is None


def test_fallback_counts_staked_and_cooldown_balances(rpc: FakeRpc):
    _skr_wallet(rpc, 0)
    rpc.on("getSignaturesForAddress", [])
    rpc.on("getAccountInfo", account_info(stake_config_data(1_000_000_000)))
    rpc.on(
        "getProgramAccounts",
        [program_account("StakeAcct", user_stake_data(WALLET, active_shares=30_000_000_000, cooldown_shares=10_000_000_000))],
    )

    result, _ = _run(rpc)
    assert result.tier is AirdropTier.VANGUARD
    assert result.raw_amount == VANGUARD
    filters = rpc.params_for("getProgramAccounts")[0][1]["filters"]
    assert rpc.params_for("getProgramAccounts")[0][0] == SKR_STAKING_PROGRAM
    assert {"dataSize": 169} in filters
    assert {"memcmp": {"offset": 41, "bytes": WALLET}} in filters


def test_fallback_below_every_tier_is_empty(rpc: FakeRpc):
    _skr_wallet(rpc, 4_000_000)
    rpc.on("getSignaturesForAddress", [])
    _no_staking(rpc)

    result, _ = _run(rpc)
    assert result == ClaimResult()
    assert not result.is_detected


def test_unmatched_candidates_fall_back_to_holdings(rpc: FakeRpc):
    _skr_wallet(rpc, 12_000_000_000)
    rpc.on("getSignaturesForAddress", [signature_item("swap", IN_WINDOW)])
    rpc.on("getTransaction", _tx(instructions=[_transfer_checked(TOKEN_ACCOUNT, 123)]))
    _no_staking(rpc)

    result, _ = _run(rpc)
    assert result.tier is AirdropTier.PROSPECTOR
    assert result.source == SOURCE_BALANCE


def test_token_account_lookup_failure_is_marked_failed(rpc: FakeRpc):
    rpc.on("getTokenAccountsByOwner", RpcFailure(-32005, "node unhealthy"))

    result, scanner = _run(rpc)
    assert result == ClaimResult(failed=True)
    assert not result.is_detected
    assert scanner.state is ScanState.DONE
    assert "getSignaturesForAddress" not in rpc.methods()


def test_wallet_without_skr_account_returns_empty_result(rpc: FakeRpc):
    rpc.on("getTokenAccountsByOwner", token_accounts())

    async def run():
        async with make_transport(rpc) as transport:
            return await detect_season1_tier(transport, WALLET)

    assert asyncio.run(run()) == ClaimResult()
    assert rpc.methods() == ["getTokenAccountsByOwner"]


@pytest.mark.parametrize(
    "total, expected",
    [
        (4_750_000_000, AirdropTier.SCOUT),
        (5_250_000_000, AirdropTier.SCOUT),
        (4_700_000_000, None),
        (10_500_000_000, AirdropTier.PROSPECTOR),
        (38_000_000_000, AirdropTier.VANGUARD),
        (787_500_000_000, AirdropTier.SOVEREIGN),
        (0, None),
    ],
)
def test_tier_within_tolerance(total, expected):
    assert tier_within_tolerance(total) is expected


@pytest.mark.parametrize(
    "total, expected",
    [
        (4_999_999_999, None),
        (5_000_000_000, AirdropTier.SCOUT),
        (39_999_999_999, AirdropTier.PROSPECTOR),
        (2_000_000_000_000, AirdropTier.SOVEREIGN),
    ],
)
def test_minimum_tier(total, expected):
    assert minimum_tier(total) is expected


def test_balance_delta_prefers_wallet_owned_entries():
    pre = [_balance(0, owner="SomeoneElse", index=2), _balance(1_000, index=1)]
    post = [_balance(5_000_000_000, owner="SomeoneElse", index=2), _balance(1_000 + PROSPECTOR, index=1)]
    assert balance_delta(pre, post, WALLET) == PROSPECTOR


def test_balance_delta_ignores_other_mints_and_decreases():
    assert balance_delta([], [_balance(VANGUARD, mint="OtherMint")], WALLET) is None
    assert balance_delta([_balance(VANGUARD)], [_balance(0)], WALLET) is None
    assert balance_delta(None, [_balance(VANGUARD)], WALLET) is None


def test_fallback_with_every_fetch_failing_is_marked_failed(rpc: FakeRpc):
    lookups = iter([token_accounts(token_account_item(TOKEN_ACCOUNT, SKR_MINT, 0))])

    def token_lookup(params):
        return next(lookups, RpcFailure(-32005, "node unhealthy"))

    rpc.on("getTokenAccountsByOwner", token_lookup)
    rpc.on("getSignaturesForAddress", RpcFailure(-32005, "node unhealthy"))
    rpc.on("getAccountInfo", RpcFailure(-32005, "node unhealthy"))
    rpc.on("getProgramAccounts", RpcFailure(-32005, "node unhealthy"))

    result, scanner = _run(rpc)
    assert result.failed
    assert result.tier is None
    assert scanner.state is ScanState.DONE


def test_empty_holdings_are_not_a_failure(rpc: FakeRpc):
    _skr_wallet(rpc, amount=0)
    rpc.on("getSignaturesForAddress", [])
    _no_staking(rpc)

    result, _ = _run(rpc)
    assert result == ClaimResult()
    assert not result.failed
