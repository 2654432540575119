"""OpenTelemetry lock metrics."""

from __future__ import annotations

from opentelemetry import metrics

_meter = metrics.get_meter("mutex_lock", version="0.1.0")

lock_acquire_total = _meter.create_counter(
    name="lock_acquire_total",
    description="Acquire calls by result (acquired, timeout)",
    unit="1",
)

lock_acquire_attempts_total = _meter.create_counter(
    name="lock_acquire_attempts_total",
    description="Individual claim attempts against the store",
    unit="1",
)

lock_release_total = _meter.create_counter(
    name="lock_release_total",
    description="Unlock calls by result (released, lost, invalid)",
    unit="1",
)

lock_extend_total = _meter.create_counter(
    name="lock_extend_total",
    description="Delay calls by result (extended, lost, invalid)",
    unit="1",
)
