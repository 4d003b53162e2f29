"""
Structured logging for seeker_verify.

JSON logs with timestamp, wallet_id and event_type. Use get_logger() in every module.
"""

from seeker_verify.verify_logging.logger import bind_wallet, get_logger, short_address

__all__ = ["bind_wallet", "get_logger", "short_address"]
