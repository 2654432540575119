"""Lock model unit tests."""

from __future__ import annotations

import pytest
from mutex_lock import ExpireUnit, LockPayload, RetryPolicy
from mutex_lock.models import KEY_PREFIX, new_token, store_key
from pydantic import ValidationError


def test_store_key_prefix() -> None:
    """Resource names get the fixed namespace."""
    assert KEY_PREFIX == "mutex-lock:"
    assert store_key("res") == "mutex-lock:res"


def test_new_token_unique() -> None:
    """Tokens do not repeat."""
    tokens = {new_token() for _ in range(1000)}
    assert len(tokens) == 1000


def test_payload_dict_preserves_fields() -> None:
    """to_dict keeps all four fields and from_dict restores them."""
    payload = LockPayload(key="res", token="abc", expire=10, expire_unit=ExpireUnit.SECONDS)
    data = payload.to_dict()
    assert data == {"key": "res", "token": "abc", "expire": 10, "expire_unit": "seconds"}
    assert LockPayload.from_dict(data) == payload


def test_payload_is_frozen() -> None:
    """Payloads cannot be mutated."""
    payload = LockPayload(key="res", token="abc", expire=10)
    with pytest.raises(ValidationError):
        payload.token = "other"  # type: ignore[misc]


def test_payload_requires_key_and_token() -> None:
    """Empty key or token is rejected at construction."""
    with pytest.raises(ValidationError):
        LockPayload(key="", token="abc", expire=10)
    with pytest.raises(ValidationError):
        LockPayload(key="res", token="", expire=10)


def test_parse_returns_none_for_malformed() -> None:
    """parse turns malformed input into None."""
    assert LockPayload.parse(None) is None
    assert LockPayload.parse({"key": "res"}) is None
    assert LockPayload.parse(["res", "abc"]) is None  # type: ignore[arg-type]


def test_parse_passes_payload_through() -> None:
    """A payload instance is returned as is."""
    payload = LockPayload(key="res", token="abc", expire=10)
    assert LockPayload.parse(payload) is payload


def test_with_expire_copies() -> None:
    """with_expire returns a new payload with the same token."""
    payload = LockPayload(key="res", token="abc", expire=10)
    longer = payload.with_expire(99)
    assert longer.expire == 99
    assert longer.token == "abc"
    assert payload.expire == 10


@pytest.mark.parametrize(
    ("max_attempts", "retries", "expected"),
    [
        (3, None, 3),
        (3, 5, 5),
        (3, 1, 1),
        (3, 0, 1),
        (3, -4, 1),
        (0, None, 1),
    ],
)
def test_attempts_for(max_attempts: int, retries: int | None, expected: int) -> None:
    """retries overrides the policy; anything below one means one attempt."""
    assert RetryPolicy(max_attempts=max_attempts).attempts_for(retries) == expected


@pytest.mark.parametrize("delay_ms", [1, 3, 200, 201, 1000])
def test_compute_delay_within_bounds(delay_ms: int) -> None:
    """Delays fall within [delay/2, delay] milliseconds."""
    policy = RetryPolicy(delay_ms=delay_ms)
    for _ in range(200):
        delay = policy.compute_delay()
        assert delay_ms / 2 / 1000 <= delay <= delay_ms / 1000


def test_compute_delay_zero() -> None:
    """No delay configured means no sleep."""
    assert RetryPolicy(delay_ms=0).compute_delay() == 0.0


def test_ownership_needs_only_key_and_token() -> None:
    """ownership reads key and token and ignores the other fields."""
    assert LockPayload.ownership({"key": "res", "token": "abc"}) == ("res", "abc")
    payload = LockPayload(key="res", token="abc", expire=10)
    assert LockPayload.ownership(payload) == ("res", "abc")


@pytest.mark.parametrize(
    "obj",
    [None, {}, {"key": "res"}, {"token": "abc"}, {"key": "", "token": "abc"}, {"key": "res", "token": 7}],
)
def test_ownership_rejects_missing_key_or_token(obj) -> None:
    """Missing, empty or non-string key/token yields None."""
    assert LockPayload.ownership(obj) is None
