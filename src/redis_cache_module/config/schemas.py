"""
redis-cache-module — Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
Configuration is validated once, when the model is built, and is immutable afterwards.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_EXPIRATION = 900
DEFAULT_REDIS_PORT = 6379


class RedisConnectionData(BaseModel):
    """Inline connection parameters for a Redis server."""

    host: str = Field(
        default="localhost",
        validation_alias=AliasChoices("host", "hostname"),
        description="Redis server hostname",
    )
    port: int = Field(default=DEFAULT_REDIS_PORT, ge=1, le=65535, description="Redis server port")
    auth: str | None = Field(default=None, description="Password sent with AUTH")
    db: int = Field(default=0, ge=0, description="Database index")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CacheModuleConfig(BaseModel):
    """
    Configuration for a RedisCacheModule.

    Exactly one connection source is used, chosen by precedence:
    ``client`` > ``redis_url`` > ``redis_env`` > ``redis_data``.
    With none of them set the cache starts disabled.
    """

    cache_type: str = Field(
        default="redis",
        validation_alias=AliasChoices("type", "cache_type"),
        description="Cache kind label (informational only)",
    )
    verbose: bool = Field(default=False, description="Log every operation, not only errors")
    default_expiration: int = Field(
        default=DEFAULT_EXPIRATION,
        ge=1,
        validation_alias=AliasChoices("default_expiration", "defaultExpiration", "expiration"),
        description="Default TTL in seconds for writes",
    )
    read_only: bool = Field(
        default=False,
        validation_alias=AliasChoices("read_only", "readOnly"),
        description="Suppress every write operation",
    )
    # Reserved: accepted for compatibility, not consumed by any operation.
    check_on_previous_empty: bool = Field(
        default=True,
        validation_alias=AliasChoices("check_on_previous_empty", "checkOnPreviousEmpty"),
        description="Reserved flag (no-op)",
    )

    # Connection sources
    client: Any | None = Field(
        default=None,
        validation_alias=AliasChoices("client", "redis_mock", "redisMock"),
        exclude=True,
        repr=False,
        description="Pre-built async Redis client (tests, custom setups)",
    )
    redis_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("redis_url", "redisUrl"),
        description="Connection URL, e.g. redis://:password@host:6379/0",
    )
    redis_env: str | None = Field(
        default=None,
        validation_alias=AliasChoices("redis_env", "redisEnv"),
        description="Name of an environment variable holding the connection URL",
    )
    redis_data: RedisConnectionData | None = Field(
        default=None,
        validation_alias=AliasChoices("redis_data", "redisData"),
        description="Inline connection parameters",
    )

    # Client options (passed through to redis-py)
    socket_timeout: float = Field(default=5, gt=0, description="Redis socket timeout in seconds")
    max_connections: int = Field(default=10, ge=1, description="Redis connection pool size")
    install_signal_handlers: bool = Field(
        default=True,
        description="Close the connection on SIGTERM when an event loop is running",
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    @field_validator("redis_url", "redis_env")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat empty strings as an absent connection source."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str | None) -> str | None:
        """Only redis:// , rediss:// and unix:// URLs are understood by the client."""
        if v is not None and not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("redis_url must use the redis://, rediss:// or unix:// scheme")
        return v

    @property
    def has_connection_source(self) -> bool:
        """Whether any connection source is configured."""
        return any(
            source is not None for source in (self.client, self.redis_url, self.redis_env, self.redis_data)
        )
