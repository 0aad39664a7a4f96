"""Dossier fields hidden by a low-quality identity scan, derived from the subject id."""

from __future__ import annotations

from checkpoint.domain.enums import ScanQuality
from checkpoint.domain.models import Dossier
from checkpoint.util.hashing import stable_hash

DOSSIER_FIELDS = ("name", "date_of_birth", "address", "occupation")
REDACTED = "[REDACTED]"

_BASE_GAPS = {
    ScanQuality.COMPLETE: 0,
    ScanQuality.DEEP: 1,
    ScanQuality.STANDARD: 2,
    ScanQuality.PARTIAL: 3,
}


def _unit_interval(text: str) -> float:
    return abs(stable_hash(text)) / 2147483647


def dossier_gaps(subject_id: str, quality: ScanQuality | None = None) -> frozenset[str]:
    """Each tier hides its base count plus zero or one more field.

    No scan yet counts as COMPLETE. The extra field and the order fields are
    hidden in both come from the subject id, so a subject always loses the
    same fields at a given quality.
    """
    base = _BASE_GAPS[ScanQuality(quality) if quality else ScanQuality.COMPLETE]
    count = min(base + int(_unit_interval(subject_id) * 2), len(DOSSIER_FIELDS))
    ordered = sorted(DOSSIER_FIELDS, key=lambda field: stable_hash(f"{subject_id}:{field}"))
    return frozenset(ordered[:count])


def redact_dossier(dossier: Dossier, gaps: frozenset[str]) -> dict[str, str]:
    return {
        field: REDACTED if field in gaps else getattr(dossier, field)
        for field in DOSSIER_FIELDS
    }
