"""
Application settings.

Responsibilities:
- Load configuration from environment variables and .env.
- Expose typed settings (RPC URL, rate-limit ceilings, retry policy, timeouts)
  for the transport and the RPC clients.
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass

from seeker_verify.config.env import get_rpc_url, load_env

DEFAULT_WINDOW_SEC = 10.0
DEFAULT_MAX_REQUESTS_PUBLIC = 5
DEFAULT_MAX_REQUESTS_HELIUS = 25
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY_SEC = 2.0
DEFAULT_CONNECT_TIMEOUT_SEC = 15.0
DEFAULT_READ_TIMEOUT_SEC = 30.0


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Typed runtime settings."""

    rpc_url: str
    rate_limit_window_sec: float = DEFAULT_WINDOW_SEC
    max_requests_public: int = DEFAULT_MAX_REQUESTS_PUBLIC
    max_requests_helius: int = DEFAULT_MAX_REQUESTS_HELIUS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay_sec: float = DEFAULT_RETRY_BASE_DELAY_SEC
    connect_timeout_sec: float = DEFAULT_CONNECT_TIMEOUT_SEC
    read_timeout_sec: float = DEFAULT_READ_TIMEOUT_SEC


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings.

    Env overrides: SOLANA_RPC_URL / HELIUS_API_KEY, RPC_RATE_WINDOW_SEC,
    RPC_MAX_REQUESTS_PUBLIC, RPC_MAX_REQUESTS_HELIUS, RPC_MAX_RETRIES,
    RPC_RETRY_BASE_DELAY_SEC, RPC_CONNECT_TIMEOUT_SEC, RPC_READ_TIMEOUT_SEC.
    """
    load_env()
    return Settings(
        rpc_url=get_rpc_url(),
        rate_limit_window_sec=_env_float("RPC_RATE_WINDOW_SEC", DEFAULT_WINDOW_SEC),
        max_requests_public=_env_int("RPC_MAX_REQUESTS_PUBLIC", DEFAULT_MAX_REQUESTS_PUBLIC),
        max_requests_helius=_env_int("RPC_MAX_REQUESTS_HELIUS", DEFAULT_MAX_REQUESTS_HELIUS),
        max_retries=_env_int("RPC_MAX_RETRIES", DEFAULT_MAX_RETRIES),
        retry_base_delay_sec=_env_float("RPC_RETRY_BASE_DELAY_SEC", DEFAULT_RETRY_BASE_DELAY_SEC),
        connect_timeout_sec=_env_float("RPC_CONNECT_TIMEOUT_SEC", DEFAULT_CONNECT_TIMEOUT_SEC),
        read_timeout_sec=_env_float("RPC_READ_TIMEOUT_SEC", DEFAULT_READ_TIMEOUT_SEC),
    )
