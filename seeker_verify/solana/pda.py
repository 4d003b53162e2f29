"""
Program-derived addresses (PDA).

A PDA is SHA256(seed_1 || ... || seed_n || bump || program_id || "ProgramDerivedAddress")
for the highest bump in 255..0 whose hash is NOT a valid compressed ed25519
point. The curve test follows RFC 8032 point decoding: recover x² = u/v from y
and accept when (x²)^((p+3)/8) squares back to x² or, multiplied by sqrt(-1),
to x² (i.e. when x² is a quadratic residue mod p).
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Iterable, Sequence

import base58

from seeker_verify.config.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    HASH_PREFIX,
    TOKEN_PROGRAM_ID,
)
from seeker_verify.verify_logging import get_logger

logger = get_logger(__name__)

PDA_MARKER = b"ProgramDerivedAddress"
MAX_SEED_LEN = 32
MAX_SEEDS = 16

# ed25519 field and curve constants
P = 2**255 - 19
D = (-121665 * pow(121666, -1, P)) % P
SQRT_M1 = pow(2, (P - 1) // 4, P)
_SQRT_EXP = (P + 3) // 8


@dataclass(frozen=True)
class ProgramAddress:
    """A derived account address with the inputs that produced it."""

    address: bytes
    seeds: tuple[bytes, ...]
    program_id: bytes
    bump: int

    def to_base58(self) -> str:
        return base58.b58encode(self.address).decode("ascii")

    def __str__(self) -> str:
        return self.to_base58()


def decode_address(address: str | bytes) -> bytes:
    """Base58 address (or raw 32 bytes) -> 32 bytes. Raises ValueError on bad input."""
    if isinstance(address, (bytes, bytearray)):
        raw = bytes(address)
    else:
        raw = base58.b58decode(address.strip())
    if len(raw) != 32:
        raise ValueError(f"address must decode to 32 bytes, got {len(raw)}")
    return raw


def encode_address(raw: bytes) -> str:
    return base58.b58encode(raw).decode("ascii")


def is_on_curve(point: bytes) -> bool:
    """True when the 32 bytes decode to a point on the ed25519 curve."""
    if len(point) != 32:
        return False
    y = int.from_bytes(point, "little") & ((1 << 255) - 1)
    y %= P
    y2 = y * y % P
    u = (y2 - 1) % P
    v = (D * y2 + 1) % P
    x2 = u * pow(v, P - 2, P) % P
    if x2 == 0:
        return True
    x = pow(x2, _SQRT_EXP, P)
    check = x * x % P
    if check == x2:
        return True
    # second branch: x * sqrt(-1) is the root when x^2 == -x2
    x_alt = x * SQRT_M1 % P
    return x_alt * x_alt % P == x2


def create_program_address(seeds: Sequence[bytes], bump: int, program_id: bytes) -> bytes | None:
    """Hash for one bump; None when the hash lies on the curve."""
    h = hashlib.sha256()
    for seed in seeds:
        h.update(seed)
    h.update(bytes([bump]))
    h.update(program_id)
    h.update(PDA_MARKER)
    digest = h.digest()
    if is_on_curve(digest):
        return None
    return digest


def find_program_address(seeds: Iterable[bytes], program_id: str | bytes) -> ProgramAddress | None:
    """
    Search bumps 255..0 for the first off-curve address.

    Returns None only if every bump lands on the curve, which is
    cryptographically negligible; that case is logged as an error.
    """
    seed_list = tuple(bytes(s) for s in seeds)
    if len(seed_list) > MAX_SEEDS:
        raise ValueError(f"at most {MAX_SEEDS} seeds allowed")
    for seed in seed_list:
        if len(seed) > MAX_SEED_LEN:
            raise ValueError(f"seed longer than {MAX_SEED_LEN} bytes")
    program = decode_address(program_id)

    for bump in range(255, -1, -1):
        address = create_program_address(seed_list, bump, program)
        if address is not None:
            return ProgramAddress(address=address, seeds=seed_list, program_id=program, bump=bump)

    logger.error("pda_not_found", program_id=encode_address(program), seed_count=len(seed_list))
    return None


def get_hashed_name(name: str) -> bytes:
    """AllDomains name hash: SHA256("ALT Name Service" + name)."""
    return hashlib.sha256(f"{HASH_PREFIX}{name}".encode("utf-8")).digest()


def find_associated_token_address(owner: str | bytes, mint: str | bytes) -> ProgramAddress | None:
    """Associated token account of (owner, mint) under the classic Token program."""
    return find_program_address(
        [decode_address(owner), decode_address(TOKEN_PROGRAM_ID), decode_address(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
