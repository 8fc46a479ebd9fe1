"""
redis-cache-module — Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
Unit tests run against an in-memory stand-in for the async Redis client;
integration tests need a Redis server and are skipped without one.
"""

import os
import socket
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from redis.asyncio import Redis
from redis.exceptions import DataError

from redis_cache_module import RedisCacheModule


# Redis availability checker
def is_redis_available() -> bool:
    """Check if Redis server is available for testing."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex(("localhost", 6379))
        sock.close()
        return result == 0
    except Exception:
        return False


# Skip marker for Redis tests
redis_available = pytest.mark.skipif(not is_redis_available(), reason="Redis server not available")


def _to_wire(value: Any) -> str:
    """Mimic how Redis stores values sent by redis-py (decode_responses=True)."""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise DataError(f"Invalid input of type: '{type(value).__name__}'. Convert to a bytes, string, int or float first.")
    return str(value)


class InMemoryPipeline:
    """Transactional pipeline: commands are queued and applied together on execute()."""

    def __init__(self, client: "InMemoryRedis", transaction: bool = True) -> None:
        self._client = client
        self.transaction = transaction
        self._queued: list[tuple[str, int, Any]] = []

    def setex(self, name: str, time: int, value: Any) -> "InMemoryPipeline":
        self._queued.append((name, time, value))
        return self

    async def execute(self) -> list[Any]:
        # Validate everything before applying anything, so the batch lands as a unit
        prepared = [(name, time, _to_wire(value)) for name, time, value in self._queued]
        for name, time, value in prepared:
            self._client.store[name] = value
            self._client.ttls[name] = time
        self._client.executed_pipelines += 1
        self._queued = []
        return [True] * len(prepared)


class InMemoryRedis:
    """Minimal async stand-in for redis.asyncio.Redis used by the cache facade."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.executed_pipelines = 0
        self.closed = False

    async def get(self, name: str) -> str | None:
        return self.store.get(name)

    async def mget(self, keys: list[str]) -> list[str | None]:
        return [self.store.get(k) for k in keys]

    async def setex(self, name: str, time: int, value: Any) -> bool:
        self.store[name] = _to_wire(value)
        self.ttls[name] = time
        return True

    def pipeline(self, transaction: bool = True) -> InMemoryPipeline:
        return InMemoryPipeline(self, transaction=transaction)

    async def delete(self, *names: str) -> int:
        count = 0
        for name in names:
            if self.store.pop(name, None) is not None:
                self.ttls.pop(name, None)
                count += 1
        return count

    async def flushall(self) -> bool:
        self.store.clear()
        self.ttls.clear()
        return True

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    """A fresh in-memory Redis stand-in."""
    return InMemoryRedis()


@pytest.fixture
def cache(fake_redis: InMemoryRedis) -> RedisCacheModule:
    """An Active cache backed by the in-memory client."""
    return RedisCacheModule(client=fake_redis)


@pytest.fixture
def test_redis_url() -> str:
    """Get Redis URL for testing (database 15 for isolation)."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest_asyncio.fixture
async def redis_client(test_redis_url: str) -> AsyncGenerator[Redis, None]:
    """
    Create a Redis client for testing.

    Automatically skips tests if Redis is not available.
    Clears the test database before and after each test.
    """
    client: Redis = Redis.from_url(test_redis_url, decode_responses=True)

    try:
        await client.ping()
    except Exception as e:
        await client.aclose()
        pytest.skip(f"Redis not available for testing: {e}")

    await client.flushdb()

    yield client

    try:
        await client.flushdb()
    finally:
        await client.aclose()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every environment variable the config loader reads."""
    for name in (
        "CACHE_TYPE",
        "CACHE_VERBOSE",
        "CACHE_DEFAULT_EXPIRATION",
        "CACHE_READ_ONLY",
        "CACHE_CHECK_ON_PREVIOUS_EMPTY",
        "REDIS_URL",
        "REDIS_ENV",
        "REDIS_HOST",
        "REDIS_PORT",
        "REDIS_AUTH",
        "REDIS_DB",
        "REDIS_SOCKET_TIMEOUT",
        "REDIS_MAX_CONNECTIONS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_cache_data() -> dict[str, Any]:
    """Sample data for cache testing."""
    return {
        "simple_string": "hello",
        "simple_int": 42,
        "simple_float": 3.14,
        "simple_bool": True,
        "simple_none": None,
        "complex_dict": {
            "nested": {
                "key": "value",
                "number": 123,
                "list": [1, 2, 3],
            }
        },
        "complex_list": [
            {"id": 1, "name": "Alice"},
            {"id": 2, "name": "Bob"},
        ],
    }
