"""Resolve a shift's directive into the evidence checks it requires."""

from __future__ import annotations

from typing import Iterable

from checkpoint.domain.enums import QueryCategory, RequiredCheck
from checkpoint.domain.models import Shift, Subject
from checkpoint.investigation.ledger import InformationLedger

RULE_CHECK_MAP: dict[str, list[RequiredCheck]] = {
    "CHECK_WARRANTS": [RequiredCheck.WARRANT],
    "CHECK_CREDENTIALS": [RequiredCheck.INCIDENT],
    "CHECK_TRANSIT": [RequiredCheck.TRANSIT],
    "CHECK_INCIDENTS": [RequiredCheck.INCIDENT],
}

QUERY_TO_CHECK = {
    QueryCategory.WARRANT: RequiredCheck.WARRANT,
    QueryCategory.TRANSIT: RequiredCheck.TRANSIT,
    QueryCategory.INCIDENT: RequiredCheck.INCIDENT,
}

DATABASE_CAPABILITY = "DATABASE"


def _unique(checks: Iterable[RequiredCheck]) -> list[RequiredCheck]:
    return list(dict.fromkeys(checks))


def resolve_required_checks(shift: Shift | None) -> list[RequiredCheck]:
    """First match wins: structured directive, rule tags, database capability, nothing."""
    if shift is None:
        return []
    if shift.directive_model and shift.directive_model.required_checks:
        return _unique(shift.directive_model.required_checks)
    checks = [check for rule in shift.active_rules for check in RULE_CHECK_MAP.get(rule, [])]
    if checks:
        return _unique(checks)
    if DATABASE_CAPABILITY in shift.unlocked_checks:
        return [RequiredCheck.DATABASE]
    return []


def required_checks_for(subject: Subject, shift: Shift | None) -> list[RequiredCheck]:
    if subject.required_checks:
        return _unique(subject.required_checks)
    return resolve_required_checks(shift)


def is_check_complete(ledger: InformationLedger, check: RequiredCheck) -> bool:
    if check == RequiredCheck.WARRANT:
        return ledger.warrant_check
    if check == RequiredCheck.TRANSIT:
        return ledger.transit_log
    if check == RequiredCheck.INCIDENT:
        return ledger.incident_history
    if check == RequiredCheck.DATABASE:
        return ledger.warrant_check or ledger.transit_log or ledger.incident_history
    return False


def missing_required_checks(
    ledger: InformationLedger, required: Iterable[RequiredCheck]
) -> list[RequiredCheck]:
    return [check for check in required if not is_check_complete(ledger, check)]


def is_category_required(category: QueryCategory, required: Iterable[RequiredCheck]) -> bool:
    checks = set(required)
    if RequiredCheck.DATABASE in checks:
        return category in QUERY_TO_CHECK
    return QUERY_TO_CHECK.get(category) in checks


def format_required_checks(required: Iterable[RequiredCheck]) -> str:
    checks = [check.value for check in required]
    if not checks:
        return "NONE"
    return ", ".join(checks)
