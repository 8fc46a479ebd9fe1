"""
redis-cache-module — Cache Module

Provides the Redis cache facade and its supporting pieces.

- interface.py: Abstract cache interface, result type and states
- facade.py: RedisCacheModule, the Redis-backed implementation
- connection.py: Connection source resolution and client construction
- serialization.py: Best-effort JSON encoding/decoding

Usage:
    from redis_cache_module.cache import RedisCacheModule

    cache = RedisCacheModule(redis_url="redis://localhost:6379/0")
    await cache.set("key", "value", 3600)
    result = await cache.get("key")
"""

from .connection import ConnectionSource, parse_redis_url, resolve_connection_source
from .facade import CacheValue, RedisCacheModule
from .interface import CacheInterface, CacheResult, CacheState, SkipReason
from .serialization import OutcomeKind, SerializationOutcome, decode_value, encode_value

__all__ = [
    # Facade
    "RedisCacheModule",
    "CacheValue",
    # Interface
    "CacheInterface",
    "CacheResult",
    "CacheState",
    "SkipReason",
    # Connection
    "ConnectionSource",
    "parse_redis_url",
    "resolve_connection_source",
    # Serialization
    "OutcomeKind",
    "SerializationOutcome",
    "decode_value",
    "encode_value",
]
