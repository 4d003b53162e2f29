"""
.skr domain resolution against the AllDomains name service.

Ownership lookup: getProgramAccounts on the ANS program filtered by owner
(offset 40) and the .skr parent name (offset 8). Each name account is then
resolved to its label through the reverse-lookup record, whose address is
PDA([hash(name_account), zeros, zeros], ANS). The wallet's primary domain lives
at PDA(["main_domain", wallet], TLD House).
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from seeker_verify.clients.base import fetch_account_data, fetch_program_accounts, memcmp
from seeker_verify.config.constants import (
    ANS_PROGRAM_ID,
    NAME_RECORD_OWNER_OFFSET,
    NAME_RECORD_PARENT_OFFSET,
    SKR_TLD,
    SKR_TLD_NAME,
    TLD_HOUSE_PROGRAM_ID,
)
from seeker_verify.decoders.accounts import (
    decode_main_domain,
    decode_name_record,
    decode_reverse_lookup,
)
from seeker_verify.rpc.result import Err, Ok, Result
from seeker_verify.rpc.transport import RpcTransport
from seeker_verify.solana.pda import (
    ProgramAddress,
    decode_address,
    find_program_address,
    get_hashed_name,
)
from seeker_verify.verify_logging import get_logger, short_address

logger = get_logger(__name__)

UNKNOWN_DOMAIN = "unknown"
_ZEROS = bytes(32)


@dataclass(frozen=True)
class DomainInfo:
    domain_name: str
    full_domain: str
    name_account: str
    expires_at: int | None
    is_expired: bool


def derive_tld_parent_name(tld_name: str = SKR_TLD_NAME) -> ProgramAddress | None:
    """Name account of the TLD itself: PDA([hash(tld), zeros, zeros], ANS)."""
    return find_program_address([get_hashed_name(tld_name), _ZEROS, _ZEROS], ANS_PROGRAM_ID)


def derive_reverse_lookup(name_account: str) -> ProgramAddress | None:
    return find_program_address([get_hashed_name(name_account), _ZEROS, _ZEROS], ANS_PROGRAM_ID)


def derive_main_domain(wallet: str) -> ProgramAddress | None:
    return find_program_address([b"main_domain", decode_address(wallet)], TLD_HOUSE_PROGRAM_ID)


async def reverse_lookup(transport: RpcTransport, name_account: str) -> str | None:
    """Human-readable label of a name account, or None if it cannot be resolved."""
    pda = derive_reverse_lookup(name_account)
    if pda is None:
        return None
    result = await fetch_account_data(transport, pda.to_base58())
    if isinstance(result, Err):
        logger.warning("reverse_lookup_failed", name_account=short_address(name_account), error=str(result.error))
        return None
    return decode_reverse_lookup(result.value)


async def get_skr_domains(
    transport: RpcTransport,
    wallet: str,
    *,
    now: int | None = None,
) -> Result[list[DomainInfo]]:
    """All .skr name records owned by wallet, expired ones included (flagged)."""
    parent = derive_tld_parent_name()
    if parent is None:
        return Ok([])

    result = await fetch_program_accounts(
        transport,
        ANS_PROGRAM_ID,
        [memcmp(NAME_RECORD_OWNER_OFFSET, wallet), memcmp(NAME_RECORD_PARENT_OFFSET, parent.to_base58())],
    )
    if isinstance(result, Err):
        logger.error("domain_lookup_failed", wallet_id=short_address(wallet), error=str(result.error))
        return result

    now = int(time.time()) if now is None else now
    domains: list[DomainInfo] = []
    for account in result.value:
        record = decode_name_record(account.data)
        if record is None:
            continue
        label = await reverse_lookup(transport, account.pubkey) or UNKNOWN_DOMAIN
        domains.append(
            DomainInfo(
                domain_name=label,
                full_domain=f"{label}{SKR_TLD}",
                name_account=account.pubkey,
                expires_at=record.expires_at or None,
                is_expired=record.is_expired(now),
            )
        )

    logger.info("skr_domains", wallet_id=short_address(wallet), count=len(domains))
    return Ok(domains)


async def get_main_domain(transport: RpcTransport, wallet: str) -> Result[DomainInfo | None]:
    """Primary domain set in TLD House; Ok(None) when unset or unreadable."""
    pda = derive_main_domain(wallet)
    if pda is None:
        return Ok(None)
    result = await fetch_account_data(transport, pda.to_base58())
    if isinstance(result, Err):
        logger.warning("main_domain_fetch_failed", wallet_id=short_address(wallet), error=str(result.error))
        return result
    record = decode_main_domain(result.value)
    if record is None:
        return Ok(None)
    return Ok(
        DomainInfo(
            domain_name=record.domain,
            full_domain=record.full_domain,
            name_account=record.name_account_address,
            expires_at=None,
            is_expired=False,
        )
    )


def has_active_domain(domains: list[DomainInfo]) -> bool:
    return any(not d.is_expired for d in domains)
