"""Per-shift supervisor warnings for repeated risky approvals."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping

from checkpoint.domain.enums import Decision, WarningType
from checkpoint.investigation.ledger import InformationLedger, has_some_information

PATTERN_THRESHOLD = 2

# Counter evaluation order is also warning precedence.
TRACKED_PATTERNS = (
    WarningType.NO_VERIFICATION,
    WarningType.NO_WARRANT_CHECK,
    WarningType.NO_HEALTH_SCAN,
)

EQUIPMENT_WARNING_MESSAGE = (
    "Operator, equipment malfunction detected. Proceed with caution. "
    "Some data may be unreliable."
)


@dataclass(frozen=True)
class SupervisorWarning:
    type: WarningType
    count: int
    message: str


@dataclass(frozen=True)
class PatternTracker:
    counters: Mapping[WarningType, int] = field(
        default_factory=lambda: {pattern: 0 for pattern in TRACKED_PATTERNS}
    )
    equipment_failure_noted: bool = False

    def count(self, pattern: WarningType) -> int:
        return self.counters.get(pattern, 0)

    def to_dict(self) -> dict:
        return {
            "counters": {str(key): value for key, value in self.counters.items()},
            "equipment_failure_noted": self.equipment_failure_noted,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PatternTracker":
        counters = {pattern: 0 for pattern in TRACKED_PATTERNS}
        for key, value in (data.get("counters") or {}).items():
            counters[WarningType(key)] = int(value)
        return cls(
            counters=counters,
            equipment_failure_noted=bool(data.get("equipment_failure_noted", False)),
        )


def create_pattern_tracker() -> PatternTracker:
    return PatternTracker()


def reset_pattern_tracker(_tracker: PatternTracker | None = None) -> PatternTracker:
    return create_pattern_tracker()


def _qualifies(pattern: WarningType, ledger: InformationLedger) -> bool:
    if pattern == WarningType.NO_VERIFICATION:
        return not has_some_information(ledger)
    if pattern == WarningType.NO_WARRANT_CHECK:
        return not ledger.warrant_check
    if pattern == WarningType.NO_HEALTH_SCAN:
        return not ledger.health_scan
    return False


def _message(pattern: WarningType, count: int) -> str:
    if pattern == WarningType.NO_VERIFICATION:
        return (
            f"Operator, you've approved {count} subjects without database verification "
            "this shift. This is a violation of protocol."
        )
    if pattern == WarningType.NO_WARRANT_CHECK:
        return (
            f"Operator, you've approved {count} subjects without warrant verification. "
            "Active warrants must be checked before approval."
        )
    return (
        f"Operator, you've approved {count} subjects without health verification. "
        "Synthetic entity detection requires health scan."
    )


def check_warning_patterns(
    tracker: PatternTracker,
    decision: Decision,
    ledger: InformationLedger,
) -> tuple[PatternTracker, SupervisorWarning | None]:
    """Fold one decision into the tracker and return the warning it raises, if any.

    Only approvals are counted. Every qualifying counter is incremented before
    the first counter at or past the threshold is reported. Counters are never
    reset by a warning, so later qualifying approvals keep firing. The
    equipment warning fires once per shift, on an approval that raised no
    counter warning.
    """
    if Decision(decision) != Decision.APPROVE:
        return tracker, None

    counters = dict(tracker.counters)
    for pattern in TRACKED_PATTERNS:
        if _qualifies(pattern, ledger):
            counters[pattern] = counters.get(pattern, 0) + 1
    updated = replace(tracker, counters=counters)

    for pattern in TRACKED_PATTERNS:
        if _qualifies(pattern, ledger) and counters[pattern] >= PATTERN_THRESHOLD:
            count = counters[pattern]
            return updated, SupervisorWarning(
                type=pattern, count=count, message=_message(pattern, count)
            )

    if ledger.has_equipment_failure and not updated.equipment_failure_noted:
        updated = replace(updated, equipment_failure_noted=True)
        return updated, SupervisorWarning(
            type=WarningType.EQUIPMENT_FAILURE, count=1, message=EQUIPMENT_WARNING_MESSAGE
        )
    return updated, None
