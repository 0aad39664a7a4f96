"""Score a decision into a graded consequence."""

from __future__ import annotations

from dataclasses import dataclass, field

from checkpoint.directives.resolver import missing_required_checks, required_checks_for
from checkpoint.domain.enums import ConsequenceTier, Decision, RequiredCheck
from checkpoint.domain.models import Shift, Subject
from checkpoint.investigation.ledger import InformationLedger

MISSED_CHECK_WEIGHT = 25
DIRECTIVE_VIOLATION_WEIGHT = 45
ESCALATION_FACTOR = 5
CITATION_THRESHOLD = 30
SERIOUS_THRESHOLD = 60

MISSED_CHECK_CREDITS = 1
DIRECTIVE_VIOLATION_CREDITS = 4

DIRECTIVE_CATEGORY = "DIRECTIVE"

_STOCK_MESSAGES = {
    ConsequenceTier.NONE: "Decision processed. No issues detected.",
    ConsequenceTier.WARNING: "Warning: Some information was not verified before decision.",
    ConsequenceTier.CITATION: "Citation issued: Decision made without sufficient verification.",
    ConsequenceTier.SERIOUS_INFRACTION: (
        "Serious infraction: Critical information missed or directive violated."
    ),
}

_VIOLATION_MESSAGES = {
    Decision.APPROVE: "Directive violation: Approved a subject the active directive required to be denied.",
    Decision.DENY: "Directive violation: Denied a subject the active directive required to be approved.",
}


@dataclass(frozen=True)
class MissedInformation:
    category: str
    description: str
    reveal: str
    impact: str


@dataclass(frozen=True)
class Consequence:
    tier: ConsequenceTier
    severity: int
    message: str
    missed_information: tuple[MissedInformation, ...] = field(default_factory=tuple)
    infraction_count: int = 0
    base_severity: int = 0
    credits_penalty: int = 0

    @property
    def directive_violated(self) -> bool:
        return any(item.category == DIRECTIVE_CATEGORY for item in self.missed_information)


def tier_for_severity(total: int) -> ConsequenceTier:
    if total <= 0:
        return ConsequenceTier.NONE
    if total < CITATION_THRESHOLD:
        return ConsequenceTier.WARNING
    if total < SERIOUS_THRESHOLD:
        return ConsequenceTier.CITATION
    return ConsequenceTier.SERIOUS_INFRACTION


def _warrant_item(subject: Subject, decision: Decision) -> MissedInformation:
    if subject.has_warrant:
        reveal = f"Warrant check would have revealed: {subject.warrants}."
        if decision == Decision.APPROVE:
            impact = "Subject entered with an active warrant. Should have been denied."
        else:
            impact = "Warrant information would have confirmed the denial."
    else:
        reveal = "Warrant check would have confirmed no active warrant."
        impact = "Directive requires warrant verification before any decision."
    return MissedInformation(
        category=RequiredCheck.WARRANT.value,
        description="Warrant check not performed.",
        reveal=reveal,
        impact=impact,
    )


def _transit_item(subject: Subject, decision: Decision) -> MissedInformation:
    flagged = subject.flagged_travel
    if flagged:
        reveal = f"Transit log would have revealed {len(flagged)} flagged travel entr{'y' if len(flagged) == 1 else 'ies'}."
        impact = (
            "Subject with flagged travel history was approved."
            if decision == Decision.APPROVE
            else "Flagged travel would have supported the denial."
        )
    else:
        reveal = "Transit log would have shown no flagged travel."
        impact = "Directive requires transit review before any decision."
    return MissedInformation(
        category=RequiredCheck.TRANSIT.value,
        description="Transit log not checked.",
        reveal=reveal,
        impact=impact,
    )


def _incident_item(subject: Subject, decision: Decision) -> MissedInformation:
    if subject.incidents > 0:
        reveal = f"Incident history would have revealed: {subject.incidents} prior incident(s)."
        impact = (
            "Subject with incident history was approved without review."
            if decision == Decision.APPROVE
            else "Incident records would have supported the denial."
        )
    else:
        reveal = "Incident history would have shown a clean record."
        impact = "Directive requires incident review before any decision."
    return MissedInformation(
        category=RequiredCheck.INCIDENT.value,
        description="Incident history not checked.",
        reveal=reveal,
        impact=impact,
    )


def _database_item(subject: Subject, decision: Decision) -> MissedInformation:
    if subject.has_warrant:
        reveal = f"Database query would have revealed: {subject.warrants}."
    elif subject.flagged_travel:
        reveal = "Database query would have revealed flagged travel entries."
    elif subject.incidents > 0:
        reveal = f"Database query would have revealed {subject.incidents} prior incident(s)."
    else:
        reveal = "Database query would have returned a clean record."
    return MissedInformation(
        category=RequiredCheck.DATABASE.value,
        description="No database query performed.",
        reveal=reveal,
        impact=f"Subject {'approved' if decision == Decision.APPROVE else 'denied'} without database verification.",
    )


_MISSED_BUILDERS = {
    RequiredCheck.WARRANT: _warrant_item,
    RequiredCheck.TRANSIT: _transit_item,
    RequiredCheck.INCIDENT: _incident_item,
    RequiredCheck.DATABASE: _database_item,
}


def _directive_item(subject: Subject, decision: Decision) -> MissedInformation:
    intended = subject.intended_outcome.value if subject.intended_outcome else "UNKNOWN"
    return MissedInformation(
        category=DIRECTIVE_CATEGORY,
        description="Decision contradicts the active directive.",
        reveal=f"Directive review would have called for {intended}.",
        impact=f"Subject was {'approved' if decision == Decision.APPROVE else 'denied'} against policy.",
    )


def evaluate_consequence(
    subject: Subject,
    decision: Decision,
    ledger: InformationLedger,
    shift: Shift | None,
    cumulative_infractions: int = 0,
) -> Consequence:
    """Pure and deterministic: identical inputs give an identical consequence."""
    decision = Decision(decision)
    required = required_checks_for(subject, shift)
    missed: list[MissedInformation] = []
    base_severity = 0
    credits_penalty = 0
    message = ""

    for check in missing_required_checks(ledger, required):
        missed.append(_MISSED_BUILDERS[check](subject, decision))
        base_severity += MISSED_CHECK_WEIGHT
        credits_penalty += MISSED_CHECK_CREDITS

    if subject.intended_outcome is not None and subject.intended_outcome != decision:
        missed.append(_directive_item(subject, decision))
        base_severity += DIRECTIVE_VIOLATION_WEIGHT
        credits_penalty += DIRECTIVE_VIOLATION_CREDITS
        message = _VIOLATION_MESSAGES[decision]

    total = base_severity + max(0, cumulative_infractions) * ESCALATION_FACTOR
    tier = tier_for_severity(total)

    if not message:
        message = _STOCK_MESSAGES[tier]
        if missed and "would have" not in message:
            message = f"{message} {missed[0].reveal}"

    return Consequence(
        tier=tier,
        severity=total,
        message=message,
        missed_information=tuple(missed),
        infraction_count=cumulative_infractions + (1 if base_severity > 0 else 0),
        base_severity=base_severity,
        credits_penalty=credits_penalty,
    )
