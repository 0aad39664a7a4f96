"""Stable string hashing for per-subject determinism."""

from __future__ import annotations


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    if value & 0x80000000:
        return value - 0x100000000
    return value


def stable_hash(text: str) -> int:
    """Signed 32-bit rolling hash (h * 31 + UTF-16 code unit), identical across processes."""
    value = 0
    data = text.encode("utf-16-le")
    for index in range(0, len(data), 2):
        unit = data[index] | (data[index + 1] << 8)
        value = _to_int32((value << 5) - value + unit)
    return value


def percentile_bucket(value: int, multiplier: int = 1) -> int:
    return abs(value * multiplier) % 100
