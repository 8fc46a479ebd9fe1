"""
redis-cache-module

A thin asynchronous cache facade over Redis: get/mget/set/mset/delete/flush
with JSON serialization, default expirations and an optional read-only mode.
"""

from .cache import CacheResult, CacheState, CacheValue, RedisCacheModule
from .config import CacheModuleConfig, RedisConnectionData, load_config
from .errors import (
    CacheError,
    CacheGetError,
    CacheOperationError,
    ConfigurationError,
    RedisCacheModuleError,
)
from .logging_config import configure_logging

__version__ = "1.0.0"

__all__ = [
    "RedisCacheModule",
    "CacheValue",
    "CacheResult",
    "CacheState",
    "CacheModuleConfig",
    "RedisConnectionData",
    "load_config",
    "configure_logging",
    "RedisCacheModuleError",
    "ConfigurationError",
    "CacheError",
    "CacheOperationError",
    "CacheGetError",
]
