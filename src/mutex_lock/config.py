"""Lock configuration models and YAML loader."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal
from urllib.parse import quote

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import LockError, LockErrorCodes
from .models import ExpireUnit, RetryPolicy


class LockConfig(BaseModel):
    """Lock manager behaviour."""

    model_config = ConfigDict(frozen=True)

    expire_unit: ExpireUnit = ExpireUnit.MILLISECONDS
    retry_count: int = Field(default=3, ge=0)
    retry_delay_ms: int = Field(default=200, ge=0)

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.retry_count, delay_ms=self.retry_delay_ms)


class RedisConfig(BaseModel):
    """Redis connection settings."""

    host: str = "localhost"
    port: int = Field(default=6379, ge=1, le=65535)
    password: str = ""
    db: int = Field(default=0, ge=0)
    pool_size: int = 10
    socket_timeout: float | None = 5.0

    def url(self) -> str:
        auth = f":{quote(self.password, safe='')}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


class LogConfig(BaseModel):
    """Log settings."""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class LockSettings(BaseModel):
    """Top-level settings file."""

    lock: LockConfig = Field(default_factory=LockConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    log: LogConfig = Field(default_factory=LogConfig)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base. Nested mappings merge, lists are replaced."""
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LockError(
            code=LockErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise LockError(
            code=LockErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise LockError(
            code=LockErrorCodes.PARSE_YAML,
            message=f"Top level of {path} must be a mapping",
        )
    return data


def load(base_path: Path, env_path: Path | None = None) -> LockSettings:
    """Load LockSettings from base_path, overlaid with env_path when it exists."""
    data = _read_yaml(base_path)
    if env_path is not None and env_path.exists():
        data = deep_merge(data, _read_yaml(env_path))
    try:
        return LockSettings.model_validate(data)
    except ValidationError as e:
        raise LockError(
            code=LockErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
