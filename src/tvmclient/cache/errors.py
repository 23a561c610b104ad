"""Cache layer errors.

These never reach callers of the client: the two-tier store recovers from
them by treating persisted state as empty or by skipping the write.
"""

from typing import Optional


class CacheError(Exception):
    """Base exception for cache-related errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class CacheBackendError(CacheError):
    """Error reading or writing the persisted store."""

    def __init__(
        self, message: str, backend_type: str = "unknown", cause: Optional[Exception] = None
    ):
        super().__init__(message, cause=cause)
        self.backend_type = backend_type

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.cause:
            return f"{base_msg} (caused by: {self.cause})"
        return base_msg


class CacheSerializationError(CacheError):
    """Persisted cache content could not be decoded or encoded."""

    pass


class CacheKeyError(CacheError):
    """Error with cache key derivation."""

    pass
