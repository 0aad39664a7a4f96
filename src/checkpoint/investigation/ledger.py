"""Per-subject information ledger and its patch semantics."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

from checkpoint.domain.enums import EquipmentType, QueryCategory, ScanQuality
from checkpoint.investigation.costs import MAX_QUESTIONS
from checkpoint.investigation.equipment import (
    is_biometric_scanner_working,
    is_bpm_data_available,
)

LEDGER_FLAGS = {
    QueryCategory.IDENTITY: "identity_scan",
    QueryCategory.HEALTH: "health_scan",
    QueryCategory.WARRANT: "warrant_check",
    QueryCategory.TRANSIT: "transit_log",
    QueryCategory.INCIDENT: "incident_history",
}


@dataclass(frozen=True)
class ExtractSnapshot:
    lines: tuple[str, ...]
    timestamp: int


@dataclass(frozen=True)
class InterrogationRecord:
    questions_asked: int = 0
    question_ids: tuple[str, ...] = ()
    responses: tuple[str, ...] = ()
    bpm_readings: tuple[int | None, ...] = ()
    asked_at: tuple[int, ...] = ()


@dataclass(frozen=True)
class InformationLedger:
    identity_scan: bool = False
    identity_scan_quality: ScanQuality | None = None
    health_scan: bool = False
    warrant_check: bool = False
    transit_log: bool = False
    incident_history: bool = False
    interrogation: InterrogationRecord = field(default_factory=InterrogationRecord)
    equipment_failures: tuple[EquipmentType, ...] = ()
    bpm_data_available: bool = True
    biometric_scanner_working: bool = True
    active_services: frozenset[QueryCategory] = frozenset()
    last_extracted: Mapping[QueryCategory, ExtractSnapshot] = field(default_factory=dict)
    timestamps: Mapping[str, int] = field(default_factory=dict)

    def is_gathered(self, category: QueryCategory) -> bool:
        return bool(getattr(self, LEDGER_FLAGS[category]))

    def gathered_categories(self) -> list[QueryCategory]:
        return [category for category in LEDGER_FLAGS if self.is_gathered(category)]

    @property
    def has_equipment_failure(self) -> bool:
        return bool(self.equipment_failures)


def create_empty_ledger(equipment_failures: Iterable[EquipmentType] = ()) -> InformationLedger:
    failures = tuple(equipment_failures)
    return InformationLedger(
        equipment_failures=failures,
        bpm_data_available=is_bpm_data_available(failures),
        biometric_scanner_working=is_biometric_scanner_working(failures),
    )


# Merge strategy per patchable field:
#   sticky       - boolean evidence flag; a patch can set it, never clear it
#   replace      - the patch value replaces the current one
#   merge        - merge by key; patch keys overwrite, other keys are kept
#   merge_first  - merge by key; keys already present keep their first value
_PATCH_STRATEGY = {
    "identity_scan": "sticky",
    "health_scan": "sticky",
    "warrant_check": "sticky",
    "transit_log": "sticky",
    "incident_history": "sticky",
    "identity_scan_quality": "replace",
    "interrogation": "replace",
    "active_services": "replace",
    "last_extracted": "merge",
    "timestamps": "merge_first",
}


def apply_ledger_patch(ledger: InformationLedger, **patch: Any) -> InformationLedger:
    """Return a new ledger with ``patch`` merged in.

    Equipment fields are fixed at creation and cannot be patched; an unknown or
    fixed field raises ``KeyError``.
    """
    changes: dict[str, Any] = {}
    for name, value in patch.items():
        strategy = _PATCH_STRATEGY.get(name)
        if strategy is None:
            raise KeyError(f"Ledger field cannot be patched: {name}")
        current = getattr(ledger, name)
        if strategy == "sticky":
            changes[name] = bool(current) or bool(value)
        elif strategy == "replace":
            changes[name] = frozenset(value) if name == "active_services" else value
        elif strategy == "merge":
            merged = dict(current)
            merged.update(value or {})
            changes[name] = merged
        else:
            merged = dict(current)
            for key, stamp in (value or {}).items():
                merged.setdefault(key, stamp)
            changes[name] = merged
    if not changes:
        return ledger
    return replace(ledger, **changes)


def can_ask_question(ledger: InformationLedger) -> bool:
    return ledger.interrogation.questions_asked < MAX_QUESTIONS


def record_interrogation_answer(
    ledger: InformationLedger,
    question_id: str,
    response: str,
    bpm_value: int | None,
    asked_at: int = 0,
) -> InformationLedger:
    """Append one answer; once the question cap is reached the ledger is returned as-is."""
    if not can_ask_question(ledger):
        return ledger
    record = ledger.interrogation
    reading = bpm_value if ledger.bpm_data_available else None
    updated = InterrogationRecord(
        questions_asked=record.questions_asked + 1,
        question_ids=record.question_ids + (question_id,),
        responses=record.responses + (response,),
        bpm_readings=record.bpm_readings + (reading,),
        asked_at=record.asked_at + (asked_at,),
    )
    return apply_ledger_patch(ledger, interrogation=updated)


def has_all_information(ledger: InformationLedger) -> bool:
    return all(ledger.is_gathered(category) for category in LEDGER_FLAGS)


def has_some_information(ledger: InformationLedger) -> bool:
    return any(ledger.is_gathered(category) for category in LEDGER_FLAGS)
