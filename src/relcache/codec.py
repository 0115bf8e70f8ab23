"""
Record serialization.

Every value the cache writes is encoded as orjson text, whatever the backend.
Reads therefore accept text (``str`` or UTF-8 ``bytes``) and nothing else, so
no backend ever needs its raw values inspected for shape.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

import orjson

from relcache.exceptions import MalformedValueError, SerializationError


def encode(key: str, value: Any) -> str:
    """Serialize a value for storage under ``key``.

    Raises:
        SerializationError: If the value is None, contains a NaN or infinite
            float, or is not JSON-serializable.
    """
    if value is None:
        raise SerializationError(
            "Cannot store None as a value", context={"key": key}
        )
    path = _non_finite_path(value, "$")
    if path is not None:
        raise SerializationError(
            "Cannot store a NaN or infinite float",
            context={"key": key, "path": path},
        )
    try:
        return orjson.dumps(value).decode("utf-8")
    except TypeError as e:
        raise SerializationError(
            f"Value is not JSON-serializable: {e}",
            context={"key": key, "value_type": type(value).__name__},
        ) from e


def decode(key: str, raw: Any) -> Any:
    """Deserialize a raw stored value.

    Returns:
        The decoded value, or None when ``raw`` is None (absent key).

    Raises:
        MalformedValueError: If the stored value is not valid JSON text.
    """
    if raw is None:
        return None
    if not isinstance(raw, (str, bytes, bytearray)):
        raise MalformedValueError(
            "Stored value is not text",
            context={"key": key, "raw_type": type(raw).__name__},
        )
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise MalformedValueError(
            f"Stored value is not valid JSON: {e}",
            context={"key": key, "raw_type": type(raw).__name__},
        ) from e


def _non_finite_path(value: Any, path: str) -> str | None:
    """Locate the first NaN or infinite float, which orjson writes as null."""
    if isinstance(value, float):
        return None if math.isfinite(value) else path
    if isinstance(value, Mapping):
        for k, v in value.items():
            found = _non_finite_path(v, f"{path}.{k}")
            if found is not None:
                return found
    elif isinstance(value, (list, tuple)):
        for i, v in enumerate(value):
            found = _non_finite_path(v, f"{path}[{i}]")
            if found is not None:
                return found
    return None
