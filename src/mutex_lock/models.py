"""Lock data models."""

from __future__ import annotations

import random
import secrets
import time
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

KEY_PREFIX = "mutex-lock:"


class ExpireUnit(Enum):
    """Unit of a lock's lifetime."""

    SECONDS = "seconds"
    MILLISECONDS = "milliseconds"


def new_token() -> str:
    """Return a fresh ownership token.

    A 128-bit random part followed by the current time in nanoseconds, so two
    tokens never collide even if the random source repeats.
    """
    return f"{secrets.token_hex(16)}{time.time_ns():x}"


def store_key(key: str) -> str:
    """Namespace a logical resource name for the store."""
    return f"{KEY_PREFIX}{key}"


class LockPayload(BaseModel):
    """Proof of ownership returned by a successful acquire."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1)
    token: str = Field(min_length=1)
    expire: int = Field(gt=0)
    expire_unit: ExpireUnit = ExpireUnit.MILLISECONDS

    @classmethod
    def parse(cls, obj: LockPayload | Mapping[str, Any] | None) -> LockPayload | None:
        """Coerce obj into a payload, or None when it is malformed."""
        if isinstance(obj, cls):
            return obj
        if not isinstance(obj, Mapping):
            return None
        try:
            return cls.model_validate(dict(obj))
        except ValidationError:
            return None

    @classmethod
    def ownership(cls, obj: LockPayload | Mapping[str, Any] | None) -> tuple[str, str] | None:
        """(key, token) of obj, or None when either is missing or empty.

        Only key and token are needed to release, extend or verify a lock, so
        a mapping carrying just those two is accepted.
        """
        if isinstance(obj, cls):
            return obj.key, obj.token
        if not isinstance(obj, Mapping):
            return None
        key, token = obj.get("key"), obj.get("token")
        if not isinstance(key, str) or not isinstance(token, str) or not key or not token:
            return None
        return key, token

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LockPayload:
        return cls.model_validate(dict(data))

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def with_expire(self, expire: int) -> LockPayload:
        """Copy of this payload carrying a new lifetime (after a delay call)."""
        return self.model_copy(update={"expire": expire})


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded, jittered retry schedule for acquire."""

    max_attempts: int = 3
    delay_ms: int = 200

    def attempts_for(self, retries: int | None = None) -> int:
        """Number of claim attempts for an acquire call.

        retries overrides max_attempts. Anything below 1 still means one attempt.
        """
        budget = self.max_attempts if retries is None else retries
        return max(budget, 1)

    def compute_delay(self) -> float:
        """Pause before the next attempt, in seconds.

        Drawn uniformly from whole milliseconds in [delay_ms / 2, delay_ms].
        """
        if self.delay_ms <= 0:
            return 0.0
        return random.randint((self.delay_ms + 1) // 2, self.delay_ms) / 1000
