"""
redis-cache-module — Redis Cache Facade

Uniform get/mget/set/mset/delete/flush over an asynchronous Redis client:
- JSON serialization for values (best-effort in both directions)
- Default and per-key expirations (SETEX)
- Optional read-only mode that suppresses every write
- Batched writes in one MULTI/EXEC transaction, batched reads via MGET

Lookups report failures to their callback; writes log failures and report them
only through the returned CacheResult.

Example:
    cache = RedisCacheModule(redis_url="redis://:secret@localhost:6379/0", verbose=True)
    await cache.set("greeting", {"msg": "hello"}, 60)
    result = await cache.get("greeting")
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..config.loader import build_config
from ..config.schemas import CacheModuleConfig
from ..errors import (
    CONNECTION_ERRORS,
    CacheConnectionError,
    CacheDeleteError,
    CacheFlushError,
    CacheGetError,
    CacheMultiSetError,
    CacheSetError,
)
from ..logging_config import ensure_verbose_logging
from .connection import (
    ConnectionSource,
    ResolvedConnection,
    create_client,
    resolve_connection_source,
    shutdown_registry,
)
from .interface import Callback, CacheInterface, CacheResult, CacheState, SkipReason
from .serialization import decode_value, encode_value

logger = logging.getLogger(__name__)

LOG_IDENTIFIER = "redisCacheModule: "


@dataclass(frozen=True)
class CacheValue:
    """A value for mset() carrying its own expiration."""

    value: Any
    expiration: int | None = None


async def _notify(callback: Callback | None, *args: Any) -> None:
    """Invoke a plain or coroutine callback."""
    if callback is None:
        return
    outcome = callback(*args)
    if inspect.isawaitable(outcome):
        await outcome


class RedisCacheModule(CacheInterface):
    """
    Cache facade over a single Redis connection.

    The facade is Active when a client could be built at construction and
    Disabled otherwise; in the Disabled state every operation completes
    immediately, invokes its callback, and touches nothing.
    """

    def __init__(
        self,
        config: CacheModuleConfig | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> None:
        """
        Initialize the cache.

        Args:
            config: Validated configuration, or a mapping of its fields
            **overrides: Individual configuration fields (e.g. ``redis_url=...``)

        Raises:
            ConfigurationError: If the configuration values are invalid.
                Connection problems never raise; they leave the cache Disabled.
        """
        if isinstance(config, CacheModuleConfig):
            if overrides:
                # Re-validate so overrides get the same checks as every other field
                data = config.model_dump()
                data["client"] = config.client
                config = build_config(data, **overrides)
        else:
            config = build_config(config, **overrides)

        self.config = config
        if config.verbose:
            ensure_verbose_logging()

        self._client: Any = None
        self.init_error: CacheConnectionError | None = None
        self._connection = ResolvedConnection(ConnectionSource.NONE)
        self._init_client()

    # ------------ Properties ------------

    @property
    def cache_type(self) -> str:
        return self.config.cache_type

    @property
    def verbose(self) -> bool:
        return self.config.verbose

    @property
    def default_expiration(self) -> int:
        return self.config.default_expiration

    @property
    def read_only(self) -> bool:
        return self.config.read_only

    @property
    def check_on_previous_empty(self) -> bool:
        return self.config.check_on_previous_empty

    @property
    def state(self) -> CacheState:
        return CacheState.ACTIVE if self._client is not None else CacheState.DISABLED

    @property
    def is_active(self) -> bool:
        return self._client is not None

    @property
    def connection_source(self) -> ConnectionSource:
        return self._connection.source

    @property
    def client(self) -> Any:
        return self._client

    # ------------ Helpers ------------

    def _init_client(self) -> None:
        resolved = ResolvedConnection(ConnectionSource.NONE)
        try:
            resolved = resolve_connection_source(self.config)
            if not resolved.usable:
                self._log(False, "Redis client not created: no redis config provided")
                return

            self._client = create_client(resolved, self.config)
            self._connection = resolved

            # Injected clients are owned by whoever built them
            if resolved.source is not ConnectionSource.CLIENT and self.config.install_signal_handlers:
                shutdown_registry.register(self)

            self._log(
                False,
                "Redis client created with the following defaults:",
                expiration=self.default_expiration,
                verbose=self.verbose,
                read_only=self.read_only,
                **resolved.describe(),
            )
        except Exception as e:
            self._client = None
            self._connection = ResolvedConnection(ConnectionSource.NONE)
            self.init_error = CacheConnectionError(
                self.cache_type, details={"source": resolved.source.value, "error": str(e)}
            )
            self._log(True, f"Redis client not created: {self.init_error.message}", exc=e, **self.init_error.details)

    def _log(self, is_error: bool, message: str, exc: BaseException | None = None, **data: Any) -> None:
        """Log errors always; everything else only in verbose mode."""
        if not (self.verbose or is_error):
            return
        text = f"{LOG_IDENTIFIER}{message}"
        if data:
            text = f"{text} {data}"
        if is_error:
            logger.error(text, exc_info=exc)
        else:
            logger.info(text)

    def _log_failure(self, message: str, error: Exception, **data: Any) -> None:
        if isinstance(error, CONNECTION_ERRORS):
            message = f"Connection error: {message}"
        self._log(True, message, exc=error, error=str(error), **data)

    def _resolve_expiration(self, expiration: int | None) -> int:
        return int(expiration) if expiration else self.default_expiration

    def _unwrap_entry(self, value: Any, expiration: int) -> tuple[Any, int]:
        """Return the value to store and its TTL for one mset() entry."""
        if isinstance(value, CacheValue):
            return value.value, int(value.expiration or expiration)
        if isinstance(value, Mapping) and value.get("cacheValue") is not None:
            return value["cacheValue"], int(value.get("expiration") or expiration)
        return value, expiration

    # ------------ Core Interface ------------

    async def get(
        self,
        key: str,
        callback: Callback | None = None,
        clean_key: str | None = None,
    ) -> CacheResult[Any]:
        """Retrieve one value; ``clean_key`` replaces ``key`` for the lookup."""
        cache_key = clean_key or key
        self._log(False, "Attempting to get key:", key=cache_key)

        if self._client is None:
            await _notify(callback, None, None)
            return CacheResult(skipped=SkipReason.DISABLED)

        try:
            data = await self._client.get(cache_key)
        except Exception as e:
            error = CacheGetError(f"Failed to get key '{cache_key}': {e}", details={"key": cache_key}, cause=e)
            self._log_failure(f"Get failed for cache of type {self.cache_type}", e, key=cache_key)
            await _notify(callback, error, None)
            return CacheResult(error=error)

        value = decode_value(data).value
        await _notify(callback, None, value)
        return CacheResult(value=value)

    async def mget(
        self,
        keys: Iterable[str],
        callback: Callback | None = None,
        index: Any = None,
    ) -> CacheResult[dict[str, Any]]:
        """Retrieve several values with MGET; keys without a value are omitted."""
        keys = [keys] if isinstance(keys, str) else list(keys)
        self._log(False, "Attempting to mget keys:", keys=keys)

        if self._client is None:
            await _notify(callback, None, {}, index)
            return CacheResult(value={}, skipped=SkipReason.DISABLED)

        if not keys:
            await _notify(callback, None, {}, index)
            return CacheResult(value={})

        try:
            values = await self._client.mget(keys)
        except Exception as e:
            error = CacheGetError(f"Failed to get {len(keys)} keys: {e}", details={"keys": keys}, cause=e)
            self._log_failure(f"Mget failed for cache of type {self.cache_type}", e, key_count=len(keys))
            await _notify(callback, error, {}, index)
            return CacheResult(value={}, error=error)

        # MGET preserves order
        result: dict[str, Any] = {}
        for key, raw in zip(keys, values, strict=False):
            if raw is not None:
                result[key] = decode_value(raw).value

        await _notify(callback, None, result, index)
        return CacheResult(value=result)

    async def set(
        self,
        key: str,
        value: Any,
        expiration: int | None = None,
        callback: Callback | None = None,
    ) -> CacheResult[Any]:
        """Store one value with SETEX; failures are logged, never raised."""
        self._log(False, "Attempting to set key:", key=key, value=value)

        if self.read_only:
            await _notify(callback, None, None)
            return CacheResult(skipped=SkipReason.READ_ONLY)

        if self._client is None:
            await _notify(callback, None, None)
            return CacheResult(skipped=SkipReason.DISABLED)

        ttl = self._resolve_expiration(expiration)
        payload = encode_value(value, encode_strings=False).value

        try:
            reply = await self._client.setex(key, ttl, payload)
        except Exception as e:
            error = CacheSetError(f"Failed to set key '{key}': {e}", details={"key": key, "expiration": ttl}, cause=e)
            self._log_failure(
                f"Set failed for cache of type {self.cache_type}",
                e,
                key=key,
                value_type=type(value).__name__,
            )
            await _notify(callback, None, None)
            return CacheResult(error=error)

        await _notify(callback, None, reply)
        return CacheResult(value=reply)

    async def mset(
        self,
        entries: Mapping[str, Any],
        expiration: int | None = None,
        callback: Callback | None = None,
    ) -> CacheResult[list[Any]]:
        """
        Store several values in one MULTI/EXEC transaction.

        A value may be wrapped as ``{"cacheValue": v, "expiration": s}`` or
        ``CacheValue(v, s)`` to give that key its own TTL. Per-key TTL wins over
        ``expiration``, which wins over the default.
        """
        self._log(False, "Attempting to msetex data:", data=dict(entries))

        if self.read_only:
            await _notify(callback, None, [])
            return CacheResult(value=[], skipped=SkipReason.READ_ONLY)

        if self._client is None:
            await _notify(callback, None, [])
            return CacheResult(value=[], skipped=SkipReason.DISABLED)

        if not entries:
            await _notify(callback, None, [])
            return CacheResult(value=[])

        call_ttl = self._resolve_expiration(expiration)
        try:
            pipe = self._client.pipeline(transaction=True)
            for key, raw in entries.items():
                value, ttl = self._unwrap_entry(raw, call_ttl)
                pipe.setex(key, ttl, encode_value(value).value)
            replies = list(await pipe.execute())
        except Exception as e:
            error = CacheMultiSetError(
                f"Failed to set {len(entries)} keys: {e}",
                details={"keys": list(entries)},
                cause=e,
            )
            self._log_failure(f"Mset failed for cache of type {self.cache_type}", e, key_count=len(entries))
            await _notify(callback, error, [])
            return CacheResult(value=[], error=error)

        await _notify(callback, None, replies)
        return CacheResult(value=replies)

    async def delete(
        self,
        keys: Iterable[str],
        callback: Callback | None = None,
    ) -> CacheResult[int]:
        """Delete keys with one DEL; failures are logged, never raised."""
        keys = [keys] if isinstance(keys, str) else list(keys)
        self._log(False, "Attempting to delete keys:", keys=keys)

        if self.read_only:
            await _notify(callback, None, 0)
            return CacheResult(value=0, skipped=SkipReason.READ_ONLY)

        if self._client is None:
            await _notify(callback, None, 0)
            return CacheResult(value=0, skipped=SkipReason.DISABLED)

        if not keys:
            await _notify(callback, None, 0)
            return CacheResult(value=0)

        try:
            count = int(await self._client.delete(*keys))
        except Exception as e:
            error = CacheDeleteError(f"Failed to delete {len(keys)} keys: {e}", details={"keys": keys}, cause=e)
            self._log_failure(f"Delete failed for cache of type {self.cache_type}", e, key_count=len(keys))
            await _notify(callback, None, 0)
            return CacheResult(value=0, error=error)

        await _notify(callback, None, count)
        return CacheResult(value=count)

    async def flush(self, callback: Callback | None = None) -> CacheResult[None]:
        """Remove every key in the store (FLUSHALL, not scoped to a prefix)."""
        self._log(False, "Attempting to flush all data.")

        if self.read_only:
            result: CacheResult[None] = CacheResult(skipped=SkipReason.READ_ONLY)
        elif self._client is None:
            result = CacheResult(skipped=SkipReason.DISABLED)
        else:
            try:
                await self._client.flushall()
                self._log(False, f"Flushing all data from cache of type {self.cache_type}")
                result = CacheResult()
            except Exception as e:
                self._log_failure(f"Flush failed for cache of type {self.cache_type}", e)
                result = CacheResult(error=CacheFlushError(f"Failed to flush cache: {e}", cause=e))

        await _notify(callback)
        return result

    async def close(self) -> None:
        """Close the client (idempotent); the cache is Disabled afterwards."""
        client = self._client
        if client is None:
            return

        self._client = None
        shutdown_registry.unregister(self)
        if self._connection.source is ConnectionSource.CLIENT:
            # Injected clients are closed by their owner
            return

        try:
            await client.aclose()
            self._log(False, f"Closed Redis client for cache of type {self.cache_type}")
        except Exception as e:
            self._log_failure("Error closing Redis client", e)
