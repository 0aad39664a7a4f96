"""Read-only subject and shift catalog backed by a YAML file."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any

import yaml

from checkpoint import config
from checkpoint.domain.models import Shift, Subject
from checkpoint.domain.rules import ensure_index_in_range

logger = logging.getLogger(__name__)

_CATALOG_CACHE: dict[Path, "Catalog"] = {}


@dataclass(frozen=True)
class Catalog:
    subjects: tuple[Subject, ...]
    shifts: tuple[Shift, ...]
    subjects_per_shift: int = config.SUBJECTS_PER_SHIFT

    @property
    def subject_count(self) -> int:
        return len(self.subjects)

    @property
    def shift_count(self) -> int:
        return len(self.shifts)

    def get_subject(self, index: int) -> Subject:
        ensure_index_in_range(index, self.subjects, "subject")
        return self.subjects[index]

    def shift_index_for(self, subject_index: int) -> int:
        """Shift position for a subject; past the last shift, the last shift applies."""
        if subject_index < 0:
            raise IndexError(f"subject index out of range: {subject_index}")
        return min(subject_index // self.subjects_per_shift, len(self.shifts) - 1)

    def get_shift(self, subject_index: int) -> Shift:
        return self.shifts[self.shift_index_for(subject_index)]

    def position_in_shift(self, subject_index: int) -> int:
        return subject_index % self.subjects_per_shift

    def is_end_of_shift(self, subject_index: int) -> bool:
        if subject_index == self.subject_count - 1:
            return True
        return self.position_in_shift(subject_index) == self.subjects_per_shift - 1

    def is_last_shift(self, subject_index: int) -> bool:
        return self.shift_index_for(subject_index) == len(self.shifts) - 1

    def is_last_subject(self, subject_index: int) -> bool:
        return subject_index >= self.subject_count - 1


def catalog_from_dict(data: dict[str, Any]) -> Catalog:
    subjects = tuple(Subject.model_validate(item) for item in data.get("subjects", []) or [])
    shifts = tuple(Shift.model_validate(item) for item in data.get("shifts", []) or [])
    if not subjects:
        raise ValueError("Catalog must define at least one subject.")
    if not shifts:
        raise ValueError("Catalog must define at least one shift.")
    ids = [subject.id for subject in subjects]
    if len(set(ids)) != len(ids):
        raise ValueError("Catalog subject ids must be unique.")
    per_shift = int(data.get("subjects_per_shift", config.SUBJECTS_PER_SHIFT))
    if per_shift <= 0:
        raise ValueError("subjects_per_shift must be positive.")
    return Catalog(subjects=subjects, shifts=shifts, subjects_per_shift=per_shift)


def load_catalog(path: Path | None = None) -> Catalog:
    """Load a catalog from YAML once per path and cache it."""
    catalog_path = Path(path or config.DEFAULT_CATALOG_PATH).resolve()
    cached = _CATALOG_CACHE.get(catalog_path)
    if cached is not None:
        return cached
    data = yaml.safe_load(catalog_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Catalog file must contain a mapping: {catalog_path}")
    catalog = catalog_from_dict(data)
    logger.debug(
        "Loaded catalog %s: %d subjects, %d shifts",
        catalog_path,
        catalog.subject_count,
        catalog.shift_count,
    )
    _CATALOG_CACHE[catalog_path] = catalog
    return catalog
