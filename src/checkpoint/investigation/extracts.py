"""Terminal output rendered when a tape query completes."""

from __future__ import annotations

from typing import Iterable

from checkpoint.directives.resolver import is_category_required
from checkpoint.domain.enums import QueryCategory, RequiredCheck
from checkpoint.domain.models import Subject
from checkpoint.investigation.ledger import ExtractSnapshot

SNAPSHOT_LINES = 2
PREVIEW_ENTRIES = 3

_TITLES = {
    QueryCategory.WARRANT: "WARRANT CHECK",
    QueryCategory.TRANSIT: "TRANSIT LOG",
    QueryCategory.INCIDENT: "INCIDENT LOG",
}

RISK_NOTICE = "RISK WARNING: APPROVAL MAY AFFECT OUTCOME"


def _warrant_lines(subject: Subject) -> list[str]:
    lines = [f"STATUS: {'ACTIVE' if subject.has_warrant else 'CLEAR'}"]
    if subject.has_warrant:
        lines.append(f"OFFENSE: {subject.warrants}")
    return lines


def _transit_lines(subject: Subject) -> list[str]:
    travel = subject.travel_history
    flagged = subject.flagged_travel
    lines = [
        f"RECORDS: {len(travel)}",
        f"STATUS: {f'{len(flagged)} FLAGGED' if flagged else 'CLEAR'}",
        "",
    ]
    for entry in travel[:PREVIEW_ENTRIES]:
        marker = " [FLAGGED]" if entry.flagged else ""
        lines.append(entry.date)
        lines.append(f"  {entry.origin} -> {entry.destination}{marker}")
        if entry.flagged:
            lines.append(f"  REASON: {entry.flag_note or 'UNSPECIFIED'}")
    if len(travel) > PREVIEW_ENTRIES:
        lines.append(f"... {len(travel) - PREVIEW_ENTRIES} more entries")
    return lines


def _incident_lines(subject: Subject) -> list[str]:
    discrepancies = subject.discrepancies
    has_issues = subject.incidents > 0 or bool(discrepancies)
    lines = [
        f"ON FILE: {subject.incidents}",
        f"STATUS: {'RECORDS FOUND' if has_issues else 'CLEAR'}",
        "",
    ]
    for index, entry in enumerate(discrepancies[:PREVIEW_ENTRIES], start=1):
        lines.append(f"{index}. {entry}")
    if len(discrepancies) > PREVIEW_ENTRIES:
        lines.append(f"... {len(discrepancies) - PREVIEW_ENTRIES} more entries")
    return lines


def _has_findings(subject: Subject, category: QueryCategory) -> bool:
    if category == QueryCategory.WARRANT:
        return subject.has_warrant
    if category == QueryCategory.TRANSIT:
        return bool(subject.flagged_travel)
    return subject.incidents > 0 or bool(subject.discrepancies)


def build_extract_lines(
    subject: Subject,
    category: QueryCategory,
    required: Iterable[RequiredCheck],
) -> list[str]:
    canned = subject.evidence_outputs.get(category)
    if canned:
        return list(canned)
    required_flag = is_category_required(category, required)
    label = "[REQUIRED]" if required_flag else "[OPTIONAL]"
    lines = [f"-- {_TITLES[category]} {label} --", ""]
    if category == QueryCategory.WARRANT:
        lines.extend(_warrant_lines(subject))
    elif category == QueryCategory.TRANSIT:
        lines.extend(_transit_lines(subject))
    else:
        lines.extend(_incident_lines(subject))
    lines.append("")
    if category != QueryCategory.WARRANT and not required_flag and _has_findings(subject, category):
        lines.append(RISK_NOTICE)
    lines.append("-- END --")
    return lines


def snapshot_from_lines(lines: list[str], timestamp: int) -> ExtractSnapshot:
    kept = [line for line in lines if line.strip()][:SNAPSHOT_LINES]
    return ExtractSnapshot(lines=tuple(kept), timestamp=timestamp)
