"""Shared enums for the screening engine."""

from __future__ import annotations

from enum import StrEnum


class Decision(StrEnum):
    APPROVE = "APPROVE"
    DENY = "DENY"


class SubjectType(StrEnum):
    HUMAN = "HUMAN"
    HUMAN_CYBORG = "HUMAN_CYBORG"
    ROBOT_CYBORG = "ROBOT_CYBORG"
    REPLICANT = "REPLICANT"
    PLASTIC_SURGERY = "PLASTIC_SURGERY"
    AMPUTEE = "AMPUTEE"


class QueryCategory(StrEnum):
    IDENTITY = "IDENTITY"
    HEALTH = "HEALTH"
    WARRANT = "WARRANT"
    TRANSIT = "TRANSIT"
    INCIDENT = "INCIDENT"


TAPE_CATEGORIES = (QueryCategory.WARRANT, QueryCategory.TRANSIT, QueryCategory.INCIDENT)
SCAN_CATEGORIES = (QueryCategory.IDENTITY, QueryCategory.HEALTH)


class RequiredCheck(StrEnum):
    DATABASE = "DATABASE"
    WARRANT = "WARRANT"
    TRANSIT = "TRANSIT"
    INCIDENT = "INCIDENT"


class EquipmentType(StrEnum):
    BIOMETRIC_SCANNER = "BIOMETRIC_SCANNER"
    BPM_MONITOR = "BPM_MONITOR"


class ScanQuality(StrEnum):
    PARTIAL = "PARTIAL"
    STANDARD = "STANDARD"
    DEEP = "DEEP"
    COMPLETE = "COMPLETE"


class TapeStatus(StrEnum):
    IDLE = "IDLE"
    PLAYING = "PLAYING"
    BUFFERED = "BUFFERED"
    COMPLETE = "COMPLETE"


class ConsequenceTier(StrEnum):
    NONE = "NONE"
    WARNING = "WARNING"
    CITATION = "CITATION"
    SERIOUS_INFRACTION = "SERIOUS_INFRACTION"


class InteractionPhase(StrEnum):
    GREETING = "GREETING"
    CREDENTIALS = "CREDENTIALS"
    INVESTIGATION = "INVESTIGATION"
    DECIDED = "DECIDED"
    RUN_COMPLETE = "RUN_COMPLETE"


class WarningType(StrEnum):
    NO_VERIFICATION = "NO_VERIFICATION"
    NO_WARRANT_CHECK = "NO_WARRANT_CHECK"
    NO_HEALTH_SCAN = "NO_HEALTH_SCAN"
    EQUIPMENT_FAILURE = "EQUIPMENT_FAILURE"
