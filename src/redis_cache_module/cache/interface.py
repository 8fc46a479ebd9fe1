"""
redis-cache-module — Cache Interface

Defines the abstract interface of the cache facade, the result type every
operation returns, and the facade's operating states.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from ..errors import ErrorCode, extract_error_code

T = TypeVar("T")

# Callbacks may be plain functions or coroutine functions
Callback = Callable[..., Any]


class CacheState(str, Enum):
    """Operating state of a cache facade."""

    DISABLED = "disabled"
    ACTIVE = "active"


class SkipReason(str, Enum):
    """Why an operation completed without touching the store."""

    DISABLED = "disabled"
    READ_ONLY = "read_only"


@dataclass(frozen=True)
class CacheResult(Generic[T]):
    """
    Outcome of a cache operation.

    Write operations never raise; a failed write is reported here and may be
    ignored by the caller.
    """

    value: T | None = None
    error: BaseException | None = None
    skipped: SkipReason | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.skipped is None

    @property
    def error_code(self) -> ErrorCode | None:
        if self.error is not None:
            return extract_error_code(self.error)
        if self.skipped is SkipReason.DISABLED:
            return ErrorCode.CACHE_DISABLED
        if self.skipped is SkipReason.READ_ONLY:
            return ErrorCode.CACHE_READ_ONLY
        return None


class CacheInterface(ABC):
    """
    Abstract base class for cache facades.

    Every operation is a coroutine returning a CacheResult and also reports
    completion through an optional callback.
    """

    @abstractmethod
    async def get(
        self,
        key: str,
        callback: Callback | None = None,
        clean_key: str | None = None,
    ) -> CacheResult[Any]:
        """
        Retrieve a value from the cache.

        Args:
            key: Cache key
            callback: Called with ``(error, value)``
            clean_key: Key used for the lookup instead of ``key`` when given

        Returns:
            Result holding the decoded value, or None when the key is missing
        """

    @abstractmethod
    async def mget(
        self,
        keys: Iterable[str],
        callback: Callback | None = None,
        index: Any = None,
    ) -> CacheResult[dict[str, Any]]:
        """
        Retrieve multiple values in one round trip.

        Args:
            keys: Cache keys; a single string is one key
            callback: Called with ``(error, mapping, index)``
            index: Opaque value passed back to the callback unchanged

        Returns:
            Result holding a mapping of keys to values (missing keys are omitted)
        """

    @abstractmethod
    async def set(
        self,
        key: str,
        value: Any,
        expiration: int | None = None,
        callback: Callback | None = None,
    ) -> CacheResult[Any]:
        """
        Store a value with a TTL.

        Args:
            key: Cache key
            value: Value to cache
            expiration: TTL in seconds (None = use the default)
            callback: Called with ``(None, reply)``
        """

    @abstractmethod
    async def mset(
        self,
        entries: Mapping[str, Any],
        expiration: int | None = None,
        callback: Callback | None = None,
    ) -> CacheResult[list[Any]]:
        """
        Store multiple values atomically.

        Args:
            entries: Mapping of keys to values or to ``{"cacheValue": v, "expiration": s}`` wrappers
            expiration: TTL in seconds for entries without their own
            callback: Called with ``(error, replies)``
        """

    @abstractmethod
    async def delete(
        self,
        keys: Iterable[str],
        callback: Callback | None = None,
    ) -> CacheResult[int]:
        """
        Delete keys.

        Args:
            keys: Cache keys to delete; a single string is one key
            callback: Called with ``(None, deleted_count)``
        """

    @abstractmethod
    async def flush(self, callback: Callback | None = None) -> CacheResult[None]:
        """
        Remove every key from the store.

        Args:
            callback: Called once with no arguments
        """

    @abstractmethod
    async def close(self) -> None:
        """
        Close the cache and release resources.

        Should be called during graceful shutdown.
        """

    async def __aenter__(self) -> CacheInterface:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
