"""
Account-reading RPC clients: SKR balance, SKR staking, .skr domains, SOL balance.
"""

from seeker_verify.clients.domains import DomainInfo, get_main_domain, get_skr_domains, reverse_lookup
from seeker_verify.clients.sol import SolBalance, get_sol_balance
from seeker_verify.clients.staking import StakingInfo, fetch_share_price, get_staking_info
from seeker_verify.clients.token import SkrBalance, find_skr_token_account, get_skr_balance

__all__ = [
    "DomainInfo",
    "SkrBalance",
    "SolBalance",
    "StakingInfo",
    "fetch_share_price",
    "find_skr_token_account",
    "get_main_domain",
    "get_skr_balance",
    "get_skr_domains",
    "get_sol_balance",
    "get_staking_info",
    "reverse_lookup",
]
