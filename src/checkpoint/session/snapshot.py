"""Serializable session-level state handed to the save store."""

from __future__ import annotations

from dataclasses import dataclass, field

SAVE_VERSION = 3


@dataclass
class ShiftStats:
    approved: int = 0
    denied: int = 0
    correct: int = 0

    @property
    def processed(self) -> int:
        return self.approved + self.denied

    def to_dict(self) -> dict:
        return {"approved": self.approved, "denied": self.denied, "correct": self.correct}

    @classmethod
    def from_dict(cls, payload: dict) -> "ShiftStats":
        return cls(
            approved=int(payload.get("approved", 0)),
            denied=int(payload.get("denied", 0)),
            correct=int(payload.get("correct", 0)),
        )


@dataclass(frozen=True)
class DecisionRecord:
    subject_id: str
    subject_name: str
    decision: str
    correct: bool
    tier: str
    warrants: str = "NONE"
    severity: int = 0

    def to_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "decision": self.decision,
            "correct": self.correct,
            "tier": self.tier,
            "warrants": self.warrants,
            "severity": self.severity,
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "DecisionRecord":
        return cls(
            subject_id=str(payload["subject_id"]),
            subject_name=str(payload.get("subject_name", "")),
            decision=str(payload["decision"]),
            correct=bool(payload.get("correct", False)),
            tier=str(payload.get("tier", "NONE")),
            warrants=str(payload.get("warrants", "NONE")),
            severity=int(payload.get("severity", 0)),
        )


@dataclass(frozen=True)
class AlertRecord:
    subject_id: str
    warning_type: str
    count: int
    message: str

    def to_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "warning_type": self.warning_type,
            "count": self.count,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "AlertRecord":
        return cls(
            subject_id=str(payload["subject_id"]),
            warning_type=str(payload["warning_type"]),
            count=int(payload.get("count", 0)),
            message=str(payload.get("message", "")),
        )


@dataclass
class SessionSnapshot:
    current_subject_index: int = 0
    total_decisions: int = 0
    total_correct: int = 0
    accuracy: float = 1.0
    infractions: int = 0
    credits: int = 0
    shift_stats: ShiftStats = field(default_factory=ShiftStats)
    shift_decisions: list[DecisionRecord] = field(default_factory=list)
    decision_history: dict[str, str] = field(default_factory=dict)
    decision_log: list[DecisionRecord] = field(default_factory=list)
    alert_log: list[AlertRecord] = field(default_factory=list)
    pattern_tracker: dict = field(default_factory=dict)
    run_complete: bool = False
    version: int = SAVE_VERSION

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "current_subject_index": self.current_subject_index,
            "total_decisions": self.total_decisions,
            "total_correct": self.total_correct,
            "accuracy": self.accuracy,
            "infractions": self.infractions,
            "credits": self.credits,
            "shift_stats": self.shift_stats.to_dict(),
            "shift_decisions": [record.to_dict() for record in self.shift_decisions],
            "decision_history": dict(self.decision_history),
            "decision_log": [record.to_dict() for record in self.decision_log],
            "alert_log": [record.to_dict() for record in self.alert_log],
            "pattern_tracker": dict(self.pattern_tracker),
            "run_complete": self.run_complete,
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "SessionSnapshot":
        return cls(
            current_subject_index=int(payload.get("current_subject_index", 0)),
            total_decisions=int(payload.get("total_decisions", 0)),
            total_correct=int(payload.get("total_correct", 0)),
            accuracy=float(payload.get("accuracy", 1.0)),
            infractions=int(payload.get("infractions", 0)),
            credits=int(payload.get("credits", 0)),
            shift_stats=ShiftStats.from_dict(payload.get("shift_stats", {}) or {}),
            shift_decisions=[
                DecisionRecord.from_dict(item) for item in payload.get("shift_decisions", []) or []
            ],
            decision_history={
                str(key): str(value)
                for key, value in (payload.get("decision_history", {}) or {}).items()
            },
            decision_log=[
                DecisionRecord.from_dict(item) for item in payload.get("decision_log", []) or []
            ],
            alert_log=[AlertRecord.from_dict(item) for item in payload.get("alert_log", []) or []],
            pattern_tracker=dict(payload.get("pattern_tracker", {}) or {}),
            run_complete=bool(payload.get("run_complete", False)),
            version=int(payload.get("version", SAVE_VERSION)),
        )
