"""
redis-cache-module — Core Error Types

Defines the exception hierarchy used by the cache facade.
All exceptions inherit from RedisCacheModuleError for consistent handling.

Only lookups (get/mget) surface their errors to callers. Write failures are
logged and attached to the returned CacheResult instead of being raised.
"""

from enum import Enum
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

# Exceptions raised when the store itself is unreachable
CONNECTION_ERRORS: tuple[type[BaseException], ...] = (
    RedisConnectionError,
    RedisTimeoutError,
    ConnectionError,
    TimeoutError,
)


class ErrorCode(str, Enum):
    """Standard error codes attached to cache results."""

    # Configuration errors
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"

    # Cache errors
    CACHE_FAILURE = "CACHE_FAILURE"
    CACHE_CONNECTION = "CACHE_CONNECTION"
    CACHE_DISABLED = "CACHE_DISABLED"
    CACHE_READ_ONLY = "CACHE_READ_ONLY"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class RedisCacheModuleError(Exception):
    """Base exception for all redis-cache-module errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a plain dictionary (for logs and callers)."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(RedisCacheModuleError):
    """Raised when configuration is invalid or missing."""


class CacheError(RedisCacheModuleError):
    """Base exception for cache-related errors."""


class CacheConnectionError(CacheError):
    """Raised when the cache backend connection fails."""

    def __init__(self, backend: str, details: dict[str, Any] | None = None):
        message = f"Failed to connect to cache backend: {backend}"
        super().__init__(message, details)


class CacheOperationError(CacheError):
    """
    Raised when a cache operation fails.

    ``name`` mirrors the short error kind reported to callbacks
    (e.g. ``"GetException"``).
    """

    name = "CacheException"
    operation = "operation"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, details)
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["name"] = self.name
        payload["operation"] = self.operation
        return payload


class CacheGetError(CacheOperationError):
    """Raised when a lookup (get or mget) fails."""

    name = "GetException"
    operation = "get"


class CacheSetError(CacheOperationError):
    """Raised when a single write fails."""

    name = "SetException"
    operation = "set"


class CacheMultiSetError(CacheOperationError):
    """Raised when a batched write fails."""

    name = "MultiSetException"
    operation = "mset"


class CacheDeleteError(CacheOperationError):
    """Raised when deleting keys fails."""

    name = "DeleteException"
    operation = "delete"


class CacheFlushError(CacheOperationError):
    """Raised when flushing the store fails."""

    name = "FlushException"
    operation = "flush"


def extract_error_code(error: BaseException) -> ErrorCode:
    """
    Extract the appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        Appropriate ErrorCode for the exception
    """
    if isinstance(error, CacheConnectionError):
        return ErrorCode.CACHE_CONNECTION

    if isinstance(error, CacheOperationError) and isinstance(error.cause, CONNECTION_ERRORS):
        return ErrorCode.CACHE_CONNECTION

    if isinstance(error, CacheError):
        return ErrorCode.CACHE_FAILURE

    if isinstance(error, ConfigurationError):
        return ErrorCode.INVALID_CONFIGURATION

    return ErrorCode.INTERNAL_ERROR
