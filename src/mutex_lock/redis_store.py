"""Redis-backed LockStore using SET NX and token-checked Lua scripts."""

from __future__ import annotations

from redis.asyncio import Redis
from redis.exceptions import RedisError

from . import scripts
from .config import RedisConfig
from .exceptions import LockError, LockErrorCodes
from .models import ExpireUnit
from .store import LockStore


def _decode(value: bytes | str | None) -> str | None:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisLockStore(LockStore):
    """LockStore over a redis.asyncio client.

    The client is shared; close() only needs calling for stores built with
    from_config.
    """

    def __init__(self, redis: Redis) -> None:
        self._redis = redis
        self._delete = redis.register_script(scripts.COMPARE_AND_DELETE)
        self._expire = redis.register_script(scripts.COMPARE_AND_EXPIRE)
        self._pexpire = redis.register_script(scripts.COMPARE_AND_PEXPIRE)

    @classmethod
    def from_config(cls, config: RedisConfig) -> RedisLockStore:
        client = Redis.from_url(
            config.url(),
            max_connections=config.pool_size,
            socket_timeout=config.socket_timeout,
            decode_responses=True,
        )
        return cls(client)

    async def set_if_absent(self, key: str, value: str, ttl: int, unit: ExpireUnit) -> bool:
        if unit is ExpireUnit.MILLISECONDS:
            expiry = {"px": ttl}
        else:
            expiry = {"ex": ttl}
        try:
            result = await self._redis.set(key, value, nx=True, **expiry)
        except RedisError as e:
            raise _store_error("SET NX", key, e) from e
        return bool(result)

    async def compare_and_delete(self, key: str, expected: str) -> int:
        try:
            return int(await self._delete(keys=[key], args=[expected]))
        except RedisError as e:
            raise _store_error("compare-and-delete", key, e) from e

    async def compare_and_expire(self, key: str, expected: str, ttl: int, unit: ExpireUnit) -> int:
        script = self._pexpire if unit is ExpireUnit.MILLISECONDS else self._expire
        try:
            return int(await script(keys=[key], args=[expected, ttl]))
        except RedisError as e:
            raise _store_error("compare-and-expire", key, e) from e

    async def get(self, key: str) -> str | None:
        try:
            return _decode(await self._redis.get(key))
        except RedisError as e:
            raise _store_error("GET", key, e) from e

    async def close(self) -> None:
        await self._redis.aclose()


def _store_error(operation: str, key: str, cause: RedisError) -> LockError:
    return LockError(
        code=LockErrorCodes.STORE_ERROR,
        message=f"Redis {operation} failed for {key}: {cause}",
        cause=cause,
    )
