"""
SKR token balance via getTokenAccountsByOwner with a mint filter.
"""

from __future__ import annotations

from dataclasses import dataclass

from seeker_verify.config.constants import SKR_DECIMALS_DIVISOR, SKR_MINT
from seeker_verify.rpc.result import Err, Ok, Result
from seeker_verify.rpc.transport import RpcTransport
from seeker_verify.solana.models import TokenAccount
from seeker_verify.verify_logging import get_logger, short_address

logger = get_logger(__name__)


@dataclass(frozen=True)
class SkrBalance:
    raw_amount: int
    token_account: str | None

    @property
    def display_amount(self) -> float:
        return self.raw_amount / SKR_DECIMALS_DIVISOR


async def _skr_token_accounts(transport: RpcTransport, wallet: str) -> Result[list[TokenAccount]]:
    params = [wallet, {"mint": SKR_MINT}, {"encoding": "jsonParsed"}]
    result = await transport.call("getTokenAccountsByOwner", params)
    return result.map(TokenAccount.from_rpc_value)


async def get_skr_balance(transport: RpcTransport, wallet: str) -> Result[SkrBalance]:
    """Balance of the first SKR token account; zero when the wallet has none."""
    result = await _skr_token_accounts(transport, wallet)
    if isinstance(result, Err):
        logger.error("skr_balance_failed", wallet_id=short_address(wallet), error=str(result.error))
        return result
    accounts = result.value
    if not accounts:
        logger.debug("skr_token_account_missing", wallet_id=short_address(wallet))
        return Ok(SkrBalance(raw_amount=0, token_account=None))
    first = accounts[0]
    logger.debug("skr_balance", wallet_id=short_address(wallet), raw_amount=first.amount)
    return Ok(SkrBalance(raw_amount=first.amount, token_account=first.pubkey or None))


async def find_skr_token_account(transport: RpcTransport, wallet: str) -> Result[str | None]:
    """Address of the wallet's SKR token account (Ok(None) if it has none)."""
    result = await _skr_token_accounts(transport, wallet)
    return result.map(lambda accounts: (accounts[0].pubkey or None) if accounts else None)
