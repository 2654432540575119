"""InMemoryLockStore implementation."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from .models import ExpireUnit
from .store import LockStore


def _ttl_seconds(ttl: int, unit: ExpireUnit) -> float:
    return ttl / 1000 if unit is ExpireUnit.MILLISECONDS else float(ttl)


class _Entry:
    __slots__ = ("value", "expires_at")

    def __init__(self, value: str, expires_at: float) -> None:
        self.value = value
        self.expires_at = expires_at


class InMemoryLockStore(LockStore):
    """Single-process lock store for tests and local runs.

    clock returns seconds and defaults to time.monotonic; tests pass a fake
    clock to let TTLs elapse without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, _Entry] = {}
        self._clock = clock
        self._lock = asyncio.Lock()

    def _live(self, key: str) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is not None and self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    async def set_if_absent(self, key: str, value: str, ttl: int, unit: ExpireUnit) -> bool:
        async with self._lock:
            if self._live(key) is not None:
                return False
            self._entries[key] = _Entry(value, self._clock() + _ttl_seconds(ttl, unit))
            return True

    async def compare_and_delete(self, key: str, expected: str) -> int:
        async with self._lock:
            entry = self._live(key)
            if entry is None or entry.value != expected:
                return 0
            del self._entries[key]
            return 1

    async def compare_and_expire(self, key: str, expected: str, ttl: int, unit: ExpireUnit) -> int:
        async with self._lock:
            entry = self._live(key)
            if entry is None or entry.value != expected:
                return 0
            entry.expires_at = self._clock() + _ttl_seconds(ttl, unit)
            return 1

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._live(key)
            return entry.value if entry is not None else None

    def ttl(self, key: str) -> float | None:
        """Remaining lifetime of key in seconds, None when absent."""
        entry = self._live(key)
        if entry is None:
            return None
        return entry.expires_at - self._clock()
