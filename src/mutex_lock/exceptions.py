"""mutex_lock exception types."""

from __future__ import annotations


class LockError(Exception):
    """Base error of the mutex_lock library."""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class LockErrorCodes:
    """LockError code constants."""

    ACQUIRE_TIMEOUT: str = "ACQUIRE_TIMEOUT"
    STORE_ERROR: str = "STORE_ERROR"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"


class LockNotAcquiredError(LockError):
    """Raised by LockManager.hold when the retry budget runs out."""

    def __init__(self, key: str, attempts: int) -> None:
        self.key = key
        self.attempts = attempts
        super().__init__(
            code=LockErrorCodes.ACQUIRE_TIMEOUT,
            message=f"Could not acquire lock {key!r} after {attempts} attempts",
        )
