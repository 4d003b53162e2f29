"""
Collaborator contracts: cached key-value storage and wallet authentication.

The real implementations (encrypted on-device storage, wallet-connect flow)
live outside this package; InMemoryStore is the default store for library use
and tests.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Protocol, runtime_checkable

SECONDS_PER_HOUR = 3600


@runtime_checkable
class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def is_stale(self, key: str, max_age_hours: float) -> bool: ...


@runtime_checkable
class WalletConnector(Protocol):
    async def authenticate(self) -> bytes:
        """Run the sign-in round trip and return the 32-byte public key."""
        ...


class InMemoryStore:
    """Process-local store; each entry remembers when it was written."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._data: dict[str, tuple[Any, float]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._data.get(key)
        return entry[0] if entry else None

    def set(self, key: str, value: Any) -> None:
        self._data[key] = (value, self._clock())

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def stored_at(self, key: str) -> float | None:
        entry = self._data.get(key)
        return entry[1] if entry else None

    def is_stale(self, key: str, max_age_hours: float) -> bool:
        """Missing keys are stale."""
        stored = self.stored_at(key)
        if stored is None:
            return True
        return self._clock() - stored > max_age_hours * SECONDS_PER_HOUR
