"""
redis-cache-module — Configuration Loader

Builds a validated CacheModuleConfig from environment variables and an
optional .env file. Every call returns a fresh configuration; callers pass
it explicitly to the cache they construct.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import CacheModuleConfig

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _flag(value: str | None, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUE_VALUES


def build_config(data: Mapping[str, Any] | None = None, **overrides: Any) -> CacheModuleConfig:
    """
    Validate a mapping (and keyword overrides) into a CacheModuleConfig.

    Raises:
        ConfigurationError: If any field is invalid
    """
    config_dict = {**(data or {}), **overrides}
    try:
        return CacheModuleConfig(**config_dict)
    except ValidationError as e:
        logger.error(
            f"Cache configuration validation failed: {e}",
            extra={"validation_errors": e.errors(include_context=False), "config_keys": sorted(config_dict)},
        )
        raise ConfigurationError(
            "Cache configuration validation failed. Check the provided options.",
            details={"validation_errors": e.errors(include_context=False)},
        ) from e


def load_config(
    env_file: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> CacheModuleConfig:
    """
    Load configuration from environment variables and a .env file.

    Values from the .env file fill in variables that are not already set in
    the environment.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        environ: Environment mapping to read (default: os.environ)

    Returns:
        Validated CacheModuleConfig instance

    Raises:
        ConfigurationError: If configuration is invalid or the .env file is unreadable
    """
    env: dict[str, str] = {}

    env_path = Path(env_file) if env_file else Path.cwd() / ".env"
    if env_path.exists():
        logger.info(f"Loading environment from {env_path}")
        try:
            env.update({k: v for k, v in dotenv_values(env_path).items() if v is not None})
        except Exception as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    env.update(os.environ if environ is None else environ)

    config_dict: dict[str, Any] = {
        "type": env.get("CACHE_TYPE", "redis"),
        "verbose": _flag(env.get("CACHE_VERBOSE"), False),
        "default_expiration": env.get("CACHE_DEFAULT_EXPIRATION") or 900,
        "read_only": _flag(env.get("CACHE_READ_ONLY"), False),
        "check_on_previous_empty": _flag(env.get("CACHE_CHECK_ON_PREVIOUS_EMPTY"), True),
        "redis_url": env.get("REDIS_URL"),
        "redis_env": env.get("REDIS_ENV"),
        "socket_timeout": env.get("REDIS_SOCKET_TIMEOUT") or 5,
        "max_connections": env.get("REDIS_MAX_CONNECTIONS") or 10,
    }
    if env.get("REDIS_HOST"):
        config_dict["redis_data"] = {
            "host": env["REDIS_HOST"],
            "port": env.get("REDIS_PORT") or 6379,
            "auth": env.get("REDIS_AUTH") or None,
            "db": env.get("REDIS_DB") or 0,
        }

    config = build_config(config_dict)
    logger.info(
        f"Cache configuration loaded (type: {config.cache_type}, read_only: {config.read_only})",
        extra={"cache_type": config.cache_type, "read_only": config.read_only},
    )
    return config
