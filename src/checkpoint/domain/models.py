"""Catalog models for subjects and shifts (read-only during a session)."""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from checkpoint.domain.enums import Decision, QueryCategory, RequiredCheck, SubjectType


class CatalogRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class TravelEntry(CatalogRecord):
    origin: str
    destination: str
    date: str
    flagged: bool = False
    flag_note: str | None = None


class Dossier(CatalogRecord):
    name: str
    date_of_birth: str
    address: str = ""
    occupation: str = ""


class Subject(CatalogRecord):
    id: str
    name: str
    subject_type: SubjectType = SubjectType.HUMAN
    origin_planet: str = "EARTH"
    reason_for_visit: str = ""
    warrants: str = "NONE"
    incidents: int = 0
    travel_history: List[TravelEntry] = Field(default_factory=list)
    discrepancies: List[str] = Field(default_factory=list)
    dossier: Dossier | None = None
    required_checks: List[RequiredCheck] = Field(default_factory=list)
    evidence_outputs: Dict[QueryCategory, List[str]] = Field(default_factory=dict)
    intended_outcome: Decision | None = None

    @property
    def has_warrant(self) -> bool:
        return bool(self.warrants) and self.warrants.upper() != "NONE"

    @property
    def flagged_travel(self) -> List[TravelEntry]:
        return [entry for entry in self.travel_history if entry.flagged]


class DirectiveRule(CatalogRecord):
    id: str
    base: str
    exceptions: List[str] = Field(default_factory=list)
    hidden_exceptions: List[str] = Field(default_factory=list)
    required_checks: List[RequiredCheck] = Field(default_factory=list)
    text: List[str] = Field(default_factory=list)


class Shift(CatalogRecord):
    id: int
    time_block: str = ""
    chapter: str = ""
    briefing: str = ""
    directive: str = ""
    unlocked_checks: List[str] = Field(default_factory=list)
    active_rules: List[str] = Field(default_factory=list)
    directive_model: DirectiveRule | None = None
