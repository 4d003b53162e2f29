"""
Pytest fixtures for seeker_verify tests. RPC is served by an in-process fake (see rpc_fakes).
"""

from __future__ import annotations

import pytest

from rpc_fakes import FakeRpc
from seeker_verify.config.settings import get_settings


@pytest.fixture
def rpc():
    """Fresh fake JSON-RPC endpoint; register results with rpc.on(method, result)."""
    return FakeRpc()


@pytest.fixture
def clean_rpc_env(monkeypatch):
    """Drop RPC env overrides and the cached Settings so each test resolves config from scratch."""
    for name in (
        "SOLANA_RPC_URL",
        "HELIUS_API_KEY",
        "RPC_RATE_WINDOW_SEC",
        "RPC_MAX_REQUESTS_PUBLIC",
        "RPC_MAX_REQUESTS_HELIUS",
        "RPC_MAX_RETRIES",
        "RPC_RETRY_BASE_DELAY_SEC",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()
