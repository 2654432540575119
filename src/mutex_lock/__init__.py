"""mutex_lock: token-based distributed mutex over Redis."""

from .client import LockManager
from .config import LockConfig, LockSettings, LogConfig, RedisConfig, load
from .exceptions import LockError, LockErrorCodes, LockNotAcquiredError
from .logger import new_logger
from .memory import InMemoryLockStore
from .models import KEY_PREFIX, ExpireUnit, LockPayload, RetryPolicy
from .redis_store import RedisLockStore
from .store import LockStore

__all__ = [
    "KEY_PREFIX",
    "ExpireUnit",
    "InMemoryLockStore",
    "LockConfig",
    "LockError",
    "LockErrorCodes",
    "LockManager",
    "LockNotAcquiredError",
    "LockPayload",
    "LockSettings",
    "LockStore",
    "LogConfig",
    "RedisConfig",
    "RedisLockStore",
    "RetryPolicy",
    "load",
    "new_logger",
]
