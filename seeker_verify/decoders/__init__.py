"""
Binary account decoders (name record, main domain, stake config, user stake).
"""

from seeker_verify.decoders.accounts import (
    MainDomainRecord,
    NameRecord,
    ProgramAccount,
    StakeConfig,
    UserStake,
    account_value_bytes,
    decode_main_domain,
    decode_name_record,
    decode_reverse_lookup,
    decode_stake_config,
    decode_user_stake,
    raw_account_bytes,
    shares_to_amount,
)

__all__ = [
    "MainDomainRecord",
    "NameRecord",
    "ProgramAccount",
    "StakeConfig",
    "UserStake",
    "account_value_bytes",
    "decode_main_domain",
    "decode_name_record",
    "decode_reverse_lookup",
    "decode_stake_config",
    "decode_user_stake",
    "raw_account_bytes",
    "shares_to_amount",
]
