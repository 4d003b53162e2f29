"""
Shared request builders for the account-reading clients.
"""

from __future__ import annotations

from typing import Any

from seeker_verify.decoders.accounts import ProgramAccount, account_value_bytes
from seeker_verify.rpc.result import Result
from seeker_verify.rpc.transport import RpcTransport


def memcmp(offset: int, address: str) -> dict[str, Any]:
    return {"memcmp": {"offset": offset, "bytes": address}}


def data_size(size: int) -> dict[str, Any]:
    return {"dataSize": size}


async def fetch_account_data(transport: RpcTransport, address: str) -> Result[bytes | None]:
    """getAccountInfo (base64). Ok(None) when the account does not exist."""
    result = await transport.call("getAccountInfo", [address, {"encoding": "base64"}])
    return result.map(account_value_bytes)


async def fetch_program_accounts(
    transport: RpcTransport,
    program_id: str,
    filters: list[dict[str, Any]],
) -> Result[list[ProgramAccount]]:
    params = [program_id, {"encoding": "base64", "filters": filters}]
    result = await transport.call("getProgramAccounts", params)
    return result.map(ProgramAccount.from_rpc_list)
