"""
Solana primitives: program-derived addresses and typed RPC response items.
"""

from seeker_verify.solana.models import SignatureInfo, TokenAccount
from seeker_verify.solana.pda import (
    ProgramAddress,
    decode_address,
    encode_address,
    find_associated_token_address,
    find_program_address,
    get_hashed_name,
    is_on_curve,
)

__all__ = [
    "ProgramAddress",
    "SignatureInfo",
    "TokenAccount",
    "decode_address",
    "encode_address",
    "find_associated_token_address",
    "find_program_address",
    "get_hashed_name",
    "is_on_curve",
]
