"""
redis-cache-module — Connection Handling

Resolves which connection source a configuration points at, builds the
asynchronous Redis client for it, and closes registered caches on SIGTERM.

Source precedence: injected client > URL > environment variable > inline data.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import signal
import weakref
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol
from urllib.parse import urlsplit

from redis.asyncio import Redis

from ..config.schemas import DEFAULT_REDIS_PORT, CacheModuleConfig, RedisConnectionData

logger = logging.getLogger(__name__)


class ConnectionSource(str, Enum):
    """Where the connection parameters came from."""

    CLIENT = "client"
    URL = "url"
    ENV = "env"
    DATA = "data"
    NONE = "none"


@dataclass(frozen=True)
class ResolvedConnection:
    source: ConnectionSource
    url: str | None = None
    data: RedisConnectionData | None = None
    client: Any = None

    @property
    def usable(self) -> bool:
        return self.source is not ConnectionSource.NONE

    def describe(self) -> dict[str, Any]:
        """Connection details safe to log (never includes the password)."""
        if self.url is not None:
            data = parse_redis_url(self.url)
        elif self.data is not None:
            data = self.data
        else:
            return {"source": self.source.value}
        return {"source": self.source.value, "host": data.host, "port": data.port, "db": data.db}


def parse_redis_url(url: str) -> RedisConnectionData:
    """
    Split a redis:// URL into host, port, password and database.

    The password is the password component of the userinfo
    (``redis://:secret@host:6379/0``); a bare ``redis://secret@host`` is
    treated as a password as well, the way AUTH with one argument works.
    """
    parts = urlsplit(url)
    if parts.scheme == "unix":
        return RedisConnectionData(host=parts.path or "localhost", port=DEFAULT_REDIS_PORT)
    auth = parts.password if parts.password is not None else parts.username
    path = parts.path.lstrip("/")
    db = int(path) if path.isdigit() else 0
    return RedisConnectionData(
        host=parts.hostname or "localhost",
        port=parts.port or DEFAULT_REDIS_PORT,
        auth=auth or None,
        db=db,
    )


def _from_env_value(value: str) -> ResolvedConnection:
    """An environment variable may hold a URL or a JSON object of inline data."""
    stripped = value.strip()
    if stripped.startswith("{"):
        return ResolvedConnection(ConnectionSource.ENV, data=RedisConnectionData(**json.loads(stripped)))
    return ResolvedConnection(ConnectionSource.ENV, url=stripped)


def resolve_connection_source(
    config: CacheModuleConfig,
    environ: Mapping[str, str] | None = None,
) -> ResolvedConnection:
    """
    Pick the connection source for a configuration.

    A configured environment variable that is unset or empty resolves to no
    source at all; inline data is not consulted in that case.
    """
    if config.client is not None:
        return ResolvedConnection(ConnectionSource.CLIENT, client=config.client)

    if config.redis_url:
        return ResolvedConnection(ConnectionSource.URL, url=config.redis_url)

    if config.redis_env:
        env = os.environ if environ is None else environ
        value = env.get(config.redis_env)
        if not value or not value.strip():
            logger.debug(f"Environment variable '{config.redis_env}' is not set")
            return ResolvedConnection(ConnectionSource.NONE)
        return _from_env_value(value)

    if config.redis_data is not None:
        return ResolvedConnection(ConnectionSource.DATA, data=config.redis_data)

    return ResolvedConnection(ConnectionSource.NONE)


def create_client(resolved: ResolvedConnection, config: CacheModuleConfig) -> Any:
    """
    Build the async client for a resolved source.

    The client connects lazily, on its first command.

    Raises:
        ValueError: If the source is NONE or the URL is malformed
    """
    if resolved.source is ConnectionSource.CLIENT:
        return resolved.client

    if resolved.url is not None:
        return Redis.from_url(  # type: ignore[call-overload]
            url=resolved.url,
            decode_responses=True,
            max_connections=config.max_connections,
            socket_timeout=config.socket_timeout,
        )

    if resolved.data is not None:
        return Redis(
            host=resolved.data.host,
            port=resolved.data.port,
            password=resolved.data.auth,
            db=resolved.data.db,
            decode_responses=True,
            max_connections=config.max_connections,
            socket_timeout=config.socket_timeout,
        )

    raise ValueError("No connection source configured")


class Closeable(Protocol):
    def close(self) -> Awaitable[None]: ...


class ShutdownRegistry:
    """
    Closes registered caches when the running event loop receives SIGTERM.

    One handler is installed per event loop. The SIGTERM disposition in place
    before installation is remembered; once every registered cache is closed
    it is restored and honored: a Python handler is called, SIG_IGN keeps the
    process running, and only SIG_DFL re-raises SIGTERM so the process exits.
    """

    def __init__(self) -> None:
        self._targets: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, weakref.WeakSet[Any]] = (
            weakref.WeakKeyDictionary()
        )
        self._previous: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, Any] = weakref.WeakKeyDictionary()
        self._tasks: set[asyncio.Task[None]] = set()

    def register(self, target: Closeable) -> bool:
        """
        Register a cache to be closed on SIGTERM.

        Returns:
            True if the hook is in place, False when no event loop is running
            or signal handlers are unsupported here (non-main thread, Windows)
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; SIGTERM hook not installed, call close() on shutdown")
            return False

        targets = self._targets.get(loop)
        if targets is None:
            previous = signal.getsignal(signal.SIGTERM)
            try:
                loop.add_signal_handler(signal.SIGTERM, self._on_sigterm, loop)
            except (NotImplementedError, RuntimeError, ValueError) as e:
                logger.debug(f"SIGTERM hook not installed: {e}")
                return False
            targets = weakref.WeakSet()
            self._targets[loop] = targets
            self._previous[loop] = previous

        targets.add(target)
        return True

    def unregister(self, target: Closeable) -> None:
        for targets in self._targets.values():
            targets.discard(target)

    def _on_sigterm(self, loop: asyncio.AbstractEventLoop) -> None:
        targets = list(self._targets.pop(loop, ()))
        previous = self._previous.pop(loop, signal.SIG_DFL)
        loop.remove_signal_handler(signal.SIGTERM)
        logger.info(f"SIGTERM received, closing {len(targets)} cache connection(s)")
        task = loop.create_task(self._close_all(targets, previous))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @staticmethod
    async def _close_all(targets: list[Any], previous: Any) -> None:
        results = await asyncio.gather(*(target.close() for target in targets), return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error(f"Error closing cache on SIGTERM: {result}", exc_info=result)

        # None means the handler was not installed from Python; treat it as the default
        if previous is None or previous == signal.SIG_DFL:
            signal.raise_signal(signal.SIGTERM)
            return

        signal.signal(signal.SIGTERM, previous)
        if callable(previous):
            previous(signal.SIGTERM, None)


shutdown_registry = ShutdownRegistry()
