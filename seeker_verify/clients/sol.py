"""
SOL balance and native stake accounts (stake program, staker authority at offset 12).
"""

from __future__ import annotations

from dataclasses import dataclass

from seeker_verify.clients.base import fetch_program_accounts, memcmp
from seeker_verify.config.constants import LAMPORTS_PER_SOL, STAKE_AUTHORITY_OFFSET, STAKE_PROGRAM_ID
from seeker_verify.rpc.result import Err, Ok, Result
from seeker_verify.rpc.transport import RpcTransport
from seeker_verify.verify_logging import get_logger, short_address

logger = get_logger(__name__)


@dataclass(frozen=True)
class SolBalance:
    lamports: int
    staked_lamports: int = 0
    stake_accounts: int = 0

    @property
    def sol(self) -> float:
        return self.lamports / LAMPORTS_PER_SOL

    @property
    def staked_sol(self) -> float:
        return self.staked_lamports / LAMPORTS_PER_SOL


def _lamports_from_balance(result: object) -> int:
    value = result.get("value") if isinstance(result, dict) else result
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


async def get_sol_balance(transport: RpcTransport, wallet: str) -> Result[SolBalance]:
    """
    Liquid balance plus the sum of native stake accounts where wallet is staker.

    A failed stake-account query is reported as zero staked; a failed
    getBalance fails the whole call.
    """
    balance = await transport.call("getBalance", [wallet])
    if isinstance(balance, Err):
        logger.error("sol_balance_failed", wallet_id=short_address(wallet), error=str(balance.error))
        return balance
    lamports = _lamports_from_balance(balance.value)

    staked_lamports = 0
    stake_accounts = 0
    stakes = await fetch_program_accounts(transport, STAKE_PROGRAM_ID, [memcmp(STAKE_AUTHORITY_OFFSET, wallet)])
    if isinstance(stakes, Err):
        logger.warning("native_stake_fetch_failed", wallet_id=short_address(wallet), error=str(stakes.error))
    else:
        staked_lamports = sum(a.lamports for a in stakes.value)
        stake_accounts = len(stakes.value)

    info = SolBalance(lamports=lamports, staked_lamports=staked_lamports, stake_accounts=stake_accounts)
    logger.debug(
        "sol_balance",
        wallet_id=short_address(wallet),
        sol=info.sol,
        staked_sol=info.staked_sol,
        stake_accounts=stake_accounts,
    )
    return Ok(info)
