"""
redis-cache-module — Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import build_config, load_config
from .schemas import DEFAULT_EXPIRATION, CacheModuleConfig, RedisConnectionData

__all__ = [
    # Loader functions
    "build_config",
    "load_config",
    # Models
    "CacheModuleConfig",
    "RedisConnectionData",
    "DEFAULT_EXPIRATION",
]
