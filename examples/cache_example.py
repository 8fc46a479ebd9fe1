"""
Cache Usage Example

Demonstrates how to use RedisCacheModule.

This example shows:
- Configuring the cache from a URL or the environment
- Single and batched reads and writes, with callbacks
- Per-key expirations
- Read-only mode

Run with a local Redis server:
    REDIS_URL=redis://localhost:6379/0 python examples/cache_example.py
"""

import asyncio
import logging
import os

from redis_cache_module import RedisCacheModule
from redis_cache_module.logging_config import LOG_FORMAT

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
)
logger = logging.getLogger(__name__)


async def example_basic_usage(cache: RedisCacheModule) -> None:
    """Example: set, get and callbacks."""
    await cache.set("user:1", {"id": 1, "name": "Alice"}, 60)

    result = await cache.get("user:1")
    logger.info(f"user:1 -> {result.value}")

    def on_result(error: Exception | None, value: object) -> None:
        logger.info(f"callback got error={error!r} value={value!r}")

    await cache.get("display:user:1", on_result, clean_key="user:1")


async def example_batches(cache: RedisCacheModule) -> None:
    """Example: mset with a per-key expiration, then mget."""
    await cache.mset(
        {
            "config:theme": "dark",
            "session:abc": {"cacheValue": {"user": 1}, "expiration": 30},
        }
    )
    result = await cache.mget(["config:theme", "session:abc", "missing"])
    logger.info(f"mget -> {result.value}")

    deleted = await cache.delete(["config:theme", "session:abc"])
    logger.info(f"deleted {deleted.value} keys")


async def example_read_only(url: str) -> None:
    """Example: writes are suppressed in read-only mode."""
    async with RedisCacheModule(redis_url=url, read_only=True, verbose=True) as replica:
        result = await replica.set("ignored", "value")
        logger.info(f"read-only write skipped: {result.skipped}")


async def main() -> None:
    url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    async with RedisCacheModule(redis_url=url, verbose=True) as cache:
        await example_basic_usage(cache)
        await example_batches(cache)
    await example_read_only(url)


if __name__ == "__main__":
    asyncio.run(main())
