"""
redis-cache-module — Logging Setup

The library logs through ``logging.getLogger(__name__)``. A verbose cache
attaches a stderr handler when the application has configured no logging;
applications can also call configure_logging() themselves.
"""

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: int | str = logging.INFO, stream: TextIO | None = None) -> logging.Handler:
    """
    Attach a stream handler to the package logger.

    Calling it again replaces the handler installed by the previous call.

    Returns:
        The installed handler
    """
    package_logger = logging.getLogger("redis_cache_module")
    for handler in list(package_logger.handlers):
        if getattr(handler, "_redis_cache_module", False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._redis_cache_module = True  # type: ignore[attr-defined]
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler


def ensure_verbose_logging() -> logging.Handler | None:
    """
    Make verbose lines visible when the application configured no logging.

    Installs the configure_logging() stderr handler only if neither the package
    logger nor any of its ancestors has a handler.

    Returns:
        The installed handler, or None when logging was already configured
    """
    if logging.getLogger("redis_cache_module").hasHandlers():
        return None
    return configure_logging(logging.INFO)
