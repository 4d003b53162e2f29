"""
On-chain constants and assumed calendar dates.

Program ids, mints and account addresses are mainnet values. Season dates and
the claim window are assumptions published alongside the tool; the Season 2
window in particular has not been announced and every projection derived from
it is speculative.
"""

from __future__ import annotations

# --- Tokens ---
SKR_MINT = "SKRbvo6Gf7GondiT3BbTfuRDPqLWei4j2Qy2NPGZhW3"
SKR_DECIMALS = 6
SKR_DECIMALS_DIVISOR = 1_000_000
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
LAMPORTS_PER_SOL = 1_000_000_000

# --- SKR staking ---
SKR_STAKING_PROGRAM = "SKRskrmtL83pcL4YqLWt6iPefDqwXQWHSw9S9vz94BZ"
SKR_STAKE_CONFIG = "4HQy82s9CHTv1GsYKnANHMiHfhcqesYkK6sB3RDSYyqw"
SHARE_PRICE_PRECISION = 1_000_000_000
FALLBACK_SHARE_PRICE = 1_015_000_000  # ~1.015, observed Feb 2026
USER_STAKE_ACCOUNT_SIZE = 169
USER_STAKE_OWNER_OFFSET = 41

# --- Native staking ---
STAKE_PROGRAM_ID = "Stake11111111111111111111111111111111111111"
STAKE_AUTHORITY_OFFSET = 12

# --- AllDomains (.skr) ---
ANS_PROGRAM_ID = "ALTNSZ46uaAUU7XUV6awvdorLGqAsPwa9shm7h4uP2FK"
TLD_HOUSE_PROGRAM_ID = "TLDHkysf5pCnKsVA4gXpNvmy7psXLPEu4LAdDJthT9S"
SKR_TLD = ".skr"
SKR_TLD_NAME = "skr"
HASH_PREFIX = "ALT Name Service"
NAME_RECORD_PARENT_OFFSET = 8
NAME_RECORD_OWNER_OFFSET = 40

# --- Season 1 claim window (epoch seconds, inclusive) ---
CLAIM_START_EPOCH = 1768953600  # 2026-01-21 00:00 UTC
CLAIM_END_EPOCH = 1776815999  # 2026-04-21 23:59:59 UTC

# --- Season 2 (assumed) ---
SEASON2_ASSUMED_START = "2025-05-15"
SEASON2_ASSUMED_END = "2026-10-15"

# --- Cache TTL (hours) ---
SEASON1_CACHE_HOURS = 168  # claim history is immutable
