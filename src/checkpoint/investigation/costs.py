"""Investigation limits: memory slots, resources, tape durations."""

from __future__ import annotations

from enum import StrEnum
from typing import AbstractSet

from checkpoint.domain.enums import QueryCategory


class ActionType(StrEnum):
    PROCEED = "proceed"
    START_QUERY = "start_query"
    ABORT_QUERY = "abort_query"
    COMPLETE_SCAN = "complete_scan"
    INTERROGATE = "interrogate"
    COMMIT_DECISION = "commit_decision"
    ADVANCE_SUBJECT = "advance_subject"


MEMORY_SLOT_CAPACITY = 3
INVESTIGATION_RESOURCES = 2
TICK_INTERVAL_MS = 250
MAX_QUESTIONS = 3

TAPE_DURATIONS_MS = {
    QueryCategory.WARRANT: 4000,
    QueryCategory.TRANSIT: 6000,
    QueryCategory.INCIDENT: 5000,
}


def would_exceed_slots(active: AbstractSet[QueryCategory]) -> tuple[bool, str]:
    if len(active) >= MEMORY_SLOT_CAPACITY:
        return True, "Memory slots are full. Abort a running query first."
    return False, ""


def would_exceed_resources(
    remaining: int, consumed: AbstractSet[QueryCategory], category: QueryCategory
) -> tuple[bool, str]:
    if category in consumed:
        return False, ""
    if remaining <= 0:
        return True, "No investigation resources left for this subject."
    return False, ""
