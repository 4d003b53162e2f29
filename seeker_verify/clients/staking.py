"""
SKR staking position.

The staking program uses a shares model: the UserStake account holds shares
and the global StakeConfig holds share_price (1e9 fixed point), so

    staked_raw = active_shares * share_price // 1_000_000_000

Rewards compound into the share price and are not reported separately.
"""

from __future__ import annotations

from dataclasses import dataclass

from seeker_verify.clients.base import data_size, fetch_account_data, fetch_program_accounts, memcmp
from seeker_verify.config.constants import (
    FALLBACK_SHARE_PRICE,
    SKR_DECIMALS_DIVISOR,
    SKR_STAKE_CONFIG,
    SKR_STAKING_PROGRAM,
    USER_STAKE_ACCOUNT_SIZE,
    USER_STAKE_OWNER_OFFSET,
)
from seeker_verify.decoders.accounts import decode_stake_config, decode_user_stake
from seeker_verify.rpc.result import Err, Ok, Result
from seeker_verify.rpc.transport import RpcTransport
from seeker_verify.verify_logging import get_logger, short_address

logger = get_logger(__name__)


@dataclass(frozen=True)
class StakingInfo:
    staked_amount: int
    cooldown_amount: int
    active_shares: int
    cooldown_shares: int
    share_price: int
    stake_account: str | None = None

    @property
    def is_staked(self) -> bool:
        return self.active_shares > 0

    @property
    def staked_display(self) -> float:
        return self.staked_amount / SKR_DECIMALS_DIVISOR

    @property
    def cooldown_display(self) -> float:
        return self.cooldown_amount / SKR_DECIMALS_DIVISOR

    @classmethod
    def empty(cls, share_price: int, stake_account: str | None = None) -> "StakingInfo":
        return cls(0, 0, 0, 0, share_price, stake_account)


async def fetch_share_price(transport: RpcTransport) -> int:
    """Current share price from StakeConfig; FALLBACK_SHARE_PRICE when unreadable."""
    result = await fetch_account_data(transport, SKR_STAKE_CONFIG)
    if isinstance(result, Err):
        logger.warning("stake_config_fetch_failed", error=str(result.error))
        return FALLBACK_SHARE_PRICE
    config = decode_stake_config(result.value)
    if config is None:
        logger.warning("stake_config_unreadable", size=len(result.value or b""))
        return FALLBACK_SHARE_PRICE
    return config.share_price


async def get_staking_info(transport: RpcTransport, wallet: str) -> Result[StakingInfo]:
    share_price = await fetch_share_price(transport)
    result = await fetch_program_accounts(
        transport,
        SKR_STAKING_PROGRAM,
        [data_size(USER_STAKE_ACCOUNT_SIZE), memcmp(USER_STAKE_OWNER_OFFSET, wallet)],
    )
    if isinstance(result, Err):
        logger.error("staking_fetch_failed", wallet_id=short_address(wallet), error=str(result.error))
        return result

    if not result.value:
        logger.debug("user_stake_missing", wallet_id=short_address(wallet))
        return Ok(StakingInfo.empty(share_price))

    account = result.value[0]
    stake = decode_user_stake(account.data)
    if stake is None:
        logger.warning(
            "user_stake_unreadable",
            wallet_id=short_address(wallet),
            size=len(account.data or b""),
        )
        return Ok(StakingInfo.empty(share_price, account.pubkey))

    info = StakingInfo(
        staked_amount=stake.staked_amount(share_price),
        cooldown_amount=stake.cooldown_amount(share_price),
        active_shares=stake.active_shares,
        cooldown_shares=stake.cooldown_shares,
        share_price=share_price,
        stake_account=account.pubkey,
    )
    logger.info(
        "staking_info",
        wallet_id=short_address(wallet),
        staked=info.staked_display,
        cooldown=info.cooldown_display,
        share_price=share_price,
    )
    return Ok(info)
