"""
redis-cache-module — Value Serialization

Values travel to Redis as JSON text. Both directions are best-effort:
- encoding a value that JSON cannot represent (cycles, arbitrary objects)
  leaves the value as-is and lets the client decide whether to accept it
- decoding text that is not JSON returns the raw text unchanged

Each step returns a SerializationOutcome so callers can tell which path was taken.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    """How a value came through a serialization step."""

    ENCODED = "encoded"
    DECODED = "decoded"
    RAW = "raw"


@dataclass(frozen=True)
class SerializationOutcome:
    value: Any
    kind: OutcomeKind
    error: Exception | None = None

    @property
    def is_raw(self) -> bool:
        return self.kind is OutcomeKind.RAW


def to_json(value: Any) -> str:
    """Serialize value to a compact JSON string (raises on unsupported values)."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def encode_value(value: Any, *, encode_strings: bool = True) -> SerializationOutcome:
    """
    Encode a value for storage.

    Args:
        value: Value to encode
        encode_strings: When False, str values are stored verbatim instead of
            being JSON-quoted (single-key writes keep plain strings readable)

    Returns:
        ENCODED outcome with JSON text, or RAW outcome carrying the original value
    """
    if isinstance(value, str) and not encode_strings:
        return SerializationOutcome(value, OutcomeKind.RAW)
    try:
        return SerializationOutcome(to_json(value), OutcomeKind.ENCODED)
    except (TypeError, ValueError) as e:
        logger.debug(f"Value of type {type(value).__name__} is not JSON serializable, storing as-is: {e}")
        return SerializationOutcome(value, OutcomeKind.RAW, e)


def decode_value(data: str | bytes | None) -> SerializationOutcome:
    """
    Decode stored text.

    None stays None (RAW). bytes are decoded as UTF-8 first; if that fails the
    bytes are returned untouched.
    """
    if data is None:
        return SerializationOutcome(None, OutcomeKind.RAW)
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            return SerializationOutcome(data, OutcomeKind.RAW, e)
    try:
        return SerializationOutcome(json.loads(data), OutcomeKind.DECODED)
    except ValueError as e:
        # Plain strings written by set() are not JSON
        return SerializationOutcome(data, OutcomeKind.RAW, e)
