"""
seeker_verify: read-only Solana wallet analyzer for Seeker SKR airdrop tiers.

Detects the Season 1 claim tier from chain history, aggregates wallet
activity, and predicts a Season 2 tier with an end-of-season projection.
"""

__version__ = "0.1.0"
