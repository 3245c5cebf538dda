"""Deterministic key hashing shared by both table backends."""

from __future__ import annotations

from typing import Any

_INT32_MASK: int = 0xFFFFFFFF
_INT32_SIGN: int = 0x80000000


def _to_int32(value: int) -> int:
    value &= _INT32_MASK
    return value - (1 << 32) if value & _INT32_SIGN else value


def string_hash(text: str) -> int:
    """31-polynomial string hash folded to a signed 32-bit integer."""

    h = 0
    for ch in text:
        h = (31 * h + ord(ch)) & _INT32_MASK
    return _to_int32(h)


def stable_hash(key: Any) -> int:
    """Return a hash that does not depend on ``PYTHONHASHSEED``.

    Only ``str`` is salted per process, so strings get the fixed 32-bit
    polynomial hash. Everything else uses ``hash()``, which keeps equal keys
    of different types (``1``, ``1.0``, ``True``) in the same bucket.
    """

    if isinstance(key, str):
        return string_hash(key)
    return hash(key)


def bucket_index(key: Any, capacity: int) -> int:
    """Map ``key`` onto ``[0, capacity)``."""

    # Truncating remainder then negation: |h| % capacity.
    return abs(stable_hash(key)) % capacity


__all__ = ["bucket_index", "stable_hash", "string_hash"]
