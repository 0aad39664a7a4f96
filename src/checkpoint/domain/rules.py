"""Invariant checks for catalog lookups and clock input."""

from __future__ import annotations

from typing import Sequence


def ensure_index_in_range(index: int, items: Sequence[object], label: str) -> None:
    if index < 0 or index >= len(items):
        raise IndexError(f"Unknown {label} index: {index}")


def validate_tick_delta(delta_ms: int) -> None:
    if delta_ms < 0:
        raise ValueError("tick delta must be >= 0")
