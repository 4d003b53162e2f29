"""
Typed views over Solana RPC response items.

Built from the jsonParsed / json shapes returned by getSignaturesForAddress and
getTokenAccountsByOwner. Construction never raises on missing optional fields;
malformed items are skipped by the from_rpc_list helpers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SignatureInfo:
    """One getSignaturesForAddress result item."""

    signature: str
    slot: int
    err: Any  # None if success; dict from RPC if failed
    block_time: int | None  # Unix timestamp; None if not available
    memo: str | None = None
    confirmation_status: str | None = None  # processed | confirmed | finalized

    @property
    def succeeded(self) -> bool:
        return self.err is None

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "SignatureInfo":
        """Build from a single getSignaturesForAddress result item."""
        block_time = item.get("blockTime")
        return cls(
            signature=item["signature"],
            slot=int(item.get("slot") or 0),
            err=item.get("err"),
            block_time=int(block_time) if block_time is not None else None,
            memo=item.get("memo"),
            confirmation_status=item.get("confirmationStatus"),
        )

    @classmethod
    def from_rpc_list(cls, items: Any) -> list["SignatureInfo"]:
        out: list[SignatureInfo] = []
        for item in items or []:
            if not isinstance(item, dict) or not item.get("signature"):
                continue
            try:
                out.append(cls.from_rpc_item(item))
            except (TypeError, ValueError):
                continue
        return out


@dataclass(frozen=True)
class TokenAccount:
    """One jsonParsed getTokenAccountsByOwner entry."""

    pubkey: str
    mint: str | None
    owner: str | None
    amount: int
    decimals: int | None

    @property
    def is_nft(self) -> bool:
        return self.decimals == 0 and self.amount == 1

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "TokenAccount":
        info = (
            ((item.get("account") or {}).get("data") or {}).get("parsed") or {}
        ).get("info") or {}
        token_amount = info.get("tokenAmount") or {}
        try:
            amount = int(token_amount.get("amount") or 0)
        except (TypeError, ValueError):
            amount = 0
        decimals = token_amount.get("decimals")
        return cls(
            pubkey=str(item.get("pubkey") or ""),
            mint=info.get("mint"),
            owner=info.get("owner"),
            amount=amount,
            decimals=int(decimals) if isinstance(decimals, int) else None,
        )

    @classmethod
    def from_rpc_value(cls, result: Any) -> list["TokenAccount"]:
        """Parse the `result` of getTokenAccountsByOwner ({"context":..., "value": [...]})."""
        value = result.get("value") if isinstance(result, dict) else None
        out: list[TokenAccount] = []
        for item in value or []:
            if isinstance(item, dict):
                out.append(cls.from_rpc_item(item))
        return out
