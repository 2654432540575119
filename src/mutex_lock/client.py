"""LockManager: acquire, release, extend and verify token-owned locks."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from typing import Any

import structlog

from .config import LockConfig, LockSettings
from .exceptions import LockNotAcquiredError
from .logger import new_logger
from .metrics import (
    lock_acquire_attempts_total,
    lock_acquire_total,
    lock_extend_total,
    lock_release_total,
)
from .models import ExpireUnit, LockPayload, new_token, store_key
from .redis_store import RedisLockStore
from .store import LockStore

logger = structlog.stdlib.get_logger(__name__)

PayloadLike = LockPayload | Mapping[str, Any]


def _short(token: str) -> str:
    return token[:8]


class LockManager:
    """Distributed mutex over a LockStore.

    The manager holds no record of outstanding locks; the LockPayload returned
    by acquire is the only proof of ownership. Configuration is immutable and
    the set_* methods return a new manager sharing the same store.
    """

    def __init__(
        self,
        store: LockStore,
        config: LockConfig | None = None,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._config = config or LockConfig()
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: LockSettings) -> LockManager:
        """Configure logging from settings.log and build a manager over a fresh Redis pool."""
        new_logger(settings.log.level, settings.log.format)
        return cls(RedisLockStore.from_config(settings.redis), settings.lock)

    @property
    def config(self) -> LockConfig:
        return self._config

    @property
    def store(self) -> LockStore:
        return self._store

    def _replace(self, **changes: Any) -> LockManager:
        config = LockConfig(**{**self._config.model_dump(), **changes})
        return LockManager(self._store, config, sleep=self._sleep)

    def set_expire_unit(self, unit: ExpireUnit) -> LockManager:
        return self._replace(expire_unit=unit)

    def set_retry_delay(self, milliseconds: int) -> LockManager:
        return self._replace(retry_delay_ms=milliseconds)

    def set_retry_count(self, count: int) -> LockManager:
        return self._replace(retry_count=count)

    async def acquire(self, key: str, expire: int, retries: int | None = None) -> LockPayload | None:
        """Try to take the lock on key for expire units of the configured expire_unit.

        Makes up to `retries` (default: config.retry_count) atomic claim
        attempts, sleeping a jittered delay between them. Returns the payload
        on success and None once the budget is used up.
        """
        if not key:
            raise ValueError("key must not be empty")
        if expire <= 0:
            raise ValueError(f"expire must be positive, got {expire}")

        policy = self._config.retry_policy
        unit = self._config.expire_unit
        attempts = policy.attempts_for(retries)
        for attempt in range(1, attempts + 1):
            token = new_token()
            lock_acquire_attempts_total.add(1)
            if await self._store.set_if_absent(store_key(key), token, expire, unit):
                lock_acquire_total.add(1, {"result": "acquired"})
                logger.info(
                    "lock acquired",
                    key=key,
                    token=_short(token),
                    attempt=attempt,
                    expire=expire,
                    expire_unit=unit.value,
                )
                return LockPayload(key=key, token=token, expire=expire, expire_unit=unit)
            if attempt < attempts:
                delay = policy.compute_delay()
                logger.debug("lock busy, retrying", key=key, attempt=attempt, delay=delay)
                await self._sleep(delay)

        lock_acquire_total.add(1, {"result": "timeout"})
        logger.warning("lock not acquired", key=key, attempts=attempts)
        return None

    async def unlock(self, payload: PayloadLike) -> bool:
        """Release the lock if payload's token still owns it."""
        owner = LockPayload.ownership(payload)
        if owner is None:
            lock_release_total.add(1, {"result": "invalid"})
            return False

        key, token = owner
        released = await self._store.compare_and_delete(store_key(key), token) == 1
        lock_release_total.add(1, {"result": "released" if released else "lost"})
        if released:
            logger.info("lock released", key=key, token=_short(token))
        else:
            logger.info("lock not owned on release", key=key, token=_short(token))
        return released

    async def delay(self, payload: PayloadLike, expire: int) -> bool:
        """Reset the lifetime of a still-owned lock to expire units.

        The payload is left untouched; use LockPayload.with_expire to track
        the new lifetime.
        """
        if expire <= 0:
            raise ValueError(f"expire must be positive, got {expire}")
        owner = LockPayload.ownership(payload)
        if owner is None:
            lock_extend_total.add(1, {"result": "invalid"})
            return False

        key, token = owner
        extended = (
            await self._store.compare_and_expire(store_key(key), token, expire, self._config.expire_unit)
            == 1
        )
        lock_extend_total.add(1, {"result": "extended" if extended else "lost"})
        logger.debug("lock delay", key=key, token=_short(token), expire=expire, extended=extended)
        return extended

    async def verify(self, payload: PayloadLike) -> bool:
        """Whether payload's token currently holds the lock.

        Point-in-time only: the lock may expire right after this returns True.
        """
        owner = LockPayload.ownership(payload)
        if owner is None:
            return False
        key, token = owner
        return await self._store.get(store_key(key)) == token

    @asynccontextmanager
    async def hold(
        self, key: str, expire: int, retries: int | None = None
    ) -> AsyncIterator[LockPayload]:
        """Acquire key for the duration of an async with block.

        Raises:
            LockNotAcquiredError: the retry budget ran out
        """
        payload = await self.acquire(key, expire, retries)
        if payload is None:
            raise LockNotAcquiredError(key, self._config.retry_policy.attempts_for(retries))
        try:
            yield payload
        finally:
            if not await self.unlock(payload):
                logger.warning("lock expired before release", key=key, token=_short(payload.token))
