"""Identity scan quality from how long the operator held the scan."""

from __future__ import annotations

from checkpoint.domain.enums import ScanQuality

MAX_SCAN_HOLD_MS = 3000

_QUALITY_FLOORS = [
    (ScanQuality.COMPLETE, 0.9),
    (ScanQuality.DEEP, 0.66),
    (ScanQuality.STANDARD, 0.33),
    (ScanQuality.PARTIAL, 0.0),
]


def determine_scan_quality(pressure: float) -> ScanQuality:
    for quality, floor in _QUALITY_FLOORS:
        if pressure >= floor:
            return quality
    return ScanQuality.PARTIAL


def scan_quality_from_duration(duration_ms: int, max_duration_ms: int = MAX_SCAN_HOLD_MS) -> ScanQuality:
    pressure = min(1.0, max(0, duration_ms) / max_duration_ms)
    return determine_scan_quality(pressure)


def min_duration_for_quality(quality: ScanQuality, max_duration_ms: int = MAX_SCAN_HOLD_MS) -> int:
    floors = dict(_QUALITY_FLOORS)
    return int(max_duration_ms * floors[quality])
