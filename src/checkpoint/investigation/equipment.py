"""Per-subject equipment failures, derived from the subject id."""

from __future__ import annotations

from typing import Iterable

from checkpoint.domain.enums import EquipmentType
from checkpoint.util.hashing import percentile_bucket, stable_hash

BPM_MONITOR_FAILURE_RATE = 30
BIOMETRIC_SCANNER_FAILURE_RATE = 25


def determine_equipment_failures(subject_id: str) -> list[EquipmentType]:
    """Same id, same failures: no clock or RNG is consulted."""
    failures: list[EquipmentType] = []
    value = stable_hash(subject_id)
    if percentile_bucket(value) < BPM_MONITOR_FAILURE_RATE:
        failures.append(EquipmentType.BPM_MONITOR)
    if percentile_bucket(value, multiplier=2) < BIOMETRIC_SCANNER_FAILURE_RATE:
        failures.append(EquipmentType.BIOMETRIC_SCANNER)
    return failures


def is_bpm_data_available(failures: Iterable[EquipmentType]) -> bool:
    return EquipmentType.BPM_MONITOR not in set(failures)


def is_biometric_scanner_working(failures: Iterable[EquipmentType]) -> bool:
    return EquipmentType.BIOMETRIC_SCANNER not in set(failures)
