"""LockStore abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import ExpireUnit


class LockStore(ABC):
    """Atomic key-value primitives a LockManager depends on.

    Every method must act as one atomic step on the backing store.
    """

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl: int, unit: ExpireUnit) -> bool:
        """Set key to value with expiry ttl only if key does not exist. True when set."""
        ...

    @abstractmethod
    async def compare_and_delete(self, key: str, expected: str) -> int:
        """Delete key only if its value equals expected. Returns the number deleted (0 or 1)."""
        ...

    @abstractmethod
    async def compare_and_expire(self, key: str, expected: str, ttl: int, unit: ExpireUnit) -> int:
        """Reset the expiry of key only if its value equals expected. Returns 0 or 1."""
        ...

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Current value of key, None when absent."""
        ...
