"""
Fixed-offset decoders for on-chain account layouts.

All integers are little-endian. Every decoder checks the buffer length before
each read and returns None ("absent") instead of raising when the data is too
short or a length prefix is out of bounds.

Layouts (byte offsets):

NameRecordHeader (AllDomains ANS, 200-byte header):
    0   discriminator (8)
    8   parent_name (32)
    40  owner (32)
    72  nclass (32)
    104 expires_at (u64)
    112 created_at (u64)
    120 non_transferable (u8)
    200 variable data (reverse lookups store the domain string here)

MainDomain (TLD House):
    0   discriminator (8)
    8   name_account (32)
    40  tld_len (u32) + tld bytes
    ..  domain_len (u32) + domain bytes

StakeConfig (SKR staking, 193 bytes):
    41  mint (32)
    73  stake_vault (32)
    137 share_price (u64, 1e9 fixed point)

UserStake (SKR staking, 169 bytes):
    41  owner (32)
    105 active_shares (u64)
    121 cooldown_shares (u64)
"""

from __future__ import annotations

import base64
import binascii
import struct
import time
from dataclasses import dataclass
from typing import Any

from seeker_verify.config.constants import SHARE_PRICE_PRECISION
from seeker_verify.solana.pda import encode_address

NAME_RECORD_DISCRIMINATOR = bytes([68, 72, 88, 44, 15, 167, 103, 243])
NAME_RECORD_HEADER_SIZE = 200
NAME_RECORD_PARENT_OFFSET = 8
NAME_RECORD_OWNER_OFFSET = 40
NAME_RECORD_EXPIRES_OFFSET = 104

MAIN_DOMAIN_MIN_SIZE = 44
MAIN_DOMAIN_NAME_ACCOUNT_OFFSET = 8
MAIN_DOMAIN_TLD_LEN_OFFSET = 40
MAX_STRING_LEN = 64

STAKE_CONFIG_MIN_SIZE = 145
STAKE_CONFIG_MINT_OFFSET = 41
STAKE_CONFIG_VAULT_OFFSET = 73
STAKE_CONFIG_SHARE_PRICE_OFFSET = 137

USER_STAKE_MIN_SIZE = 137
USER_STAKE_OWNER_OFFSET = 41
USER_STAKE_ACTIVE_SHARES_OFFSET = 105
USER_STAKE_COOLDOWN_SHARES_OFFSET = 121

PUBKEY_LEN = 32
_U64 = struct.Struct("<Q")
_U32 = struct.Struct("<I")


def _read_u64(data: bytes, offset: int) -> int | None:
    if len(data) < offset + 8:
        return None
    return _U64.unpack_from(data, offset)[0]


def _read_u32(data: bytes, offset: int) -> int | None:
    if len(data) < offset + 4:
        return None
    return _U32.unpack_from(data, offset)[0]


def _read_pubkey(data: bytes, offset: int) -> bytes | None:
    if len(data) < offset + PUBKEY_LEN:
        return None
    return bytes(data[offset : offset + PUBKEY_LEN])


def _read_string(data: bytes, offset: int) -> tuple[str, int] | None:
    """Borsh string (u32 length + utf-8). Returns (value, next_offset) or None."""
    length = _read_u32(data, offset)
    if length is None or length <= 0 or length > MAX_STRING_LEN:
        return None
    start = offset + 4
    end = start + length
    if end > len(data):
        return None
    try:
        value = bytes(data[start:end]).decode("utf-8")
    except UnicodeDecodeError:
        return None
    return value, end


def shares_to_amount(shares: int, share_price: int) -> int:
    """shares * share_price / 1e9 with exact integer arithmetic."""
    if share_price <= 0 or shares <= 0:
        return 0
    return shares * share_price // SHARE_PRICE_PRECISION


@dataclass(frozen=True)
class NameRecord:
    parent_name: bytes
    owner: bytes
    expires_at: int
    discriminator: bytes = b""

    @property
    def has_valid_discriminator(self) -> bool:
        return self.discriminator == NAME_RECORD_DISCRIMINATOR

    @property
    def owner_address(self) -> str:
        return encode_address(self.owner)

    def is_expired(self, now: int | None = None) -> bool:
        """expires_at == 0 means the record never expires."""
        now = int(time.time()) if now is None else now
        return 0 < self.expires_at < now


@dataclass(frozen=True)
class MainDomainRecord:
    name_account: bytes
    tld: str
    domain: str

    @property
    def name_account_address(self) -> str:
        return encode_address(self.name_account)

    @property
    def full_domain(self) -> str:
        return f"{self.domain}.{self.tld.lstrip('.')}"


@dataclass(frozen=True)
class StakeConfig:
    mint: bytes
    vault: bytes
    share_price: int


@dataclass(frozen=True)
class UserStake:
    owner: bytes
    active_shares: int
    cooldown_shares: int

    @property
    def owner_address(self) -> str:
        return encode_address(self.owner)

    @property
    def is_staked(self) -> bool:
        return self.active_shares > 0

    def staked_amount(self, share_price: int) -> int:
        return shares_to_amount(self.active_shares, share_price)

    def cooldown_amount(self, share_price: int) -> int:
        return shares_to_amount(self.cooldown_shares, share_price)


def decode_name_record(data: bytes | None) -> NameRecord | None:
    if data is None or len(data) < NAME_RECORD_HEADER_SIZE:
        return None
    parent = _read_pubkey(data, NAME_RECORD_PARENT_OFFSET)
    owner = _read_pubkey(data, NAME_RECORD_OWNER_OFFSET)
    expires_at = _read_u64(data, NAME_RECORD_EXPIRES_OFFSET)
    if parent is None or owner is None or expires_at is None:
        return None
    return NameRecord(
        parent_name=parent,
        owner=owner,
        expires_at=expires_at,
        discriminator=bytes(data[: len(NAME_RECORD_DISCRIMINATOR)]),
    )


def decode_reverse_lookup(data: bytes | None) -> str | None:
    """Domain string stored after the name record header; NUL padding stripped."""
    if data is None or len(data) <= NAME_RECORD_HEADER_SIZE:
        return None
    raw = bytes(data[NAME_RECORD_HEADER_SIZE:])
    text = raw.decode("utf-8", errors="ignore").strip("\x00").strip()
    return text or None


def decode_main_domain(data: bytes | None) -> MainDomainRecord | None:
    if data is None or len(data) < MAIN_DOMAIN_MIN_SIZE:
        return None
    name_account = _read_pubkey(data, MAIN_DOMAIN_NAME_ACCOUNT_OFFSET)
    if name_account is None:
        return None
    tld = _read_string(data, MAIN_DOMAIN_TLD_LEN_OFFSET)
    if tld is None:
        return None
    tld_value, next_offset = tld
    domain = _read_string(data, next_offset)
    if domain is None:
        return None
    return MainDomainRecord(name_account=name_account, tld=tld_value, domain=domain[0])


def decode_stake_config(data: bytes | None) -> StakeConfig | None:
    if data is None or len(data) < STAKE_CONFIG_MIN_SIZE:
        return None
    mint = _read_pubkey(data, STAKE_CONFIG_MINT_OFFSET)
    vault = _read_pubkey(data, STAKE_CONFIG_VAULT_OFFSET)
    share_price = _read_u64(data, STAKE_CONFIG_SHARE_PRICE_OFFSET)
    if mint is None or vault is None or share_price is None:
        return None
    return StakeConfig(mint=mint, vault=vault, share_price=share_price)


def decode_user_stake(data: bytes | None) -> UserStake | None:
    if data is None or len(data) < USER_STAKE_MIN_SIZE:
        return None
    owner = _read_pubkey(data, USER_STAKE_OWNER_OFFSET)
    active = _read_u64(data, USER_STAKE_ACTIVE_SHARES_OFFSET)
    cooldown = _read_u64(data, USER_STAKE_COOLDOWN_SHARES_OFFSET)
    if owner is None or active is None:
        return None
    return UserStake(owner=owner, active_shares=active, cooldown_shares=cooldown or 0)


def raw_account_bytes(data: Any) -> bytes | None:
    """
    Normalize an RPC account `data` field to bytes.

    Handles ["<base64>", "base64"], a bare base64 string, bytes, and lists of ints.
    Returns None for anything else, including undecodable base64.
    """
    if data is None:
        return None
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str):
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError):
            return None
    if isinstance(data, (list, tuple)):
        if not data:
            return None
        first = data[0]
        if isinstance(first, str):
            encoding = data[1] if len(data) > 1 else "base64"
            if encoding != "base64":
                return None
            return raw_account_bytes(first)
        if all(isinstance(b, int) and 0 <= b <= 255 for b in data):
            return bytes(data)
    return None


def account_value_bytes(result: Any) -> bytes | None:
    """Bytes of a getAccountInfo result ({"context":..., "value": {...} | null})."""
    if not isinstance(result, dict):
        return None
    value = result.get("value")
    if not isinstance(value, dict):
        return None
    return raw_account_bytes(value.get("data"))


@dataclass(frozen=True)
class ProgramAccount:
    """One getProgramAccounts entry with its data decoded to bytes."""

    pubkey: str
    data: bytes | None
    lamports: int

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "ProgramAccount":
        account = item.get("account") or {}
        try:
            lamports = int(account.get("lamports") or 0)
        except (TypeError, ValueError):
            lamports = 0
        return cls(
            pubkey=str(item.get("pubkey") or ""),
            data=raw_account_bytes(account.get("data")),
            lamports=lamports,
        )

    @classmethod
    def from_rpc_list(cls, result: Any) -> list["ProgramAccount"]:
        """Accepts both the bare list and the {"context", "value"} wrapped form."""
        items = result.get("value") if isinstance(result, dict) else result
        return [cls.from_rpc_item(i) for i in items or [] if isinstance(i, dict) and i.get("pubkey")]
