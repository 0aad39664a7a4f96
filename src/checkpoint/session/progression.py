"""Subject and shift progression for one operator session.

The controller owns every piece of mutable state in a run: the current
subject's investigation session (and its ledger), the shift's pattern
tracker, and the session totals. The investigation, scoring and monitoring
modules are pure functions that it calls in order and whose results it
stores back.
"""

from __future__ import annotations

import logging
from typing import Callable

from checkpoint import config
from checkpoint.catalog.loader import Catalog
from checkpoint.directives.resolver import required_checks_for
from checkpoint.domain.enums import (
    ConsequenceTier,
    Decision,
    InteractionPhase,
    QueryCategory,
    RequiredCheck,
    TapeStatus,
)
from checkpoint.domain.models import Shift, Subject
from checkpoint.investigation import service
from checkpoint.investigation.costs import ActionType
from checkpoint.investigation.dossier_gaps import dossier_gaps
from checkpoint.investigation.equipment import determine_equipment_failures
from checkpoint.investigation.ledger import (
    InformationLedger,
    can_ask_question,
    record_interrogation_answer,
)
from checkpoint.investigation.results import ActionOutcome, ActionResult, rejected, unchanged
from checkpoint.monitoring.patterns import (
    PatternTracker,
    SupervisorWarning,
    check_warning_patterns,
    create_pattern_tracker,
    reset_pattern_tracker,
)
from checkpoint.scoring.consequence import Consequence, evaluate_consequence
from checkpoint.session.snapshot import (
    AlertRecord,
    DecisionRecord,
    SessionSnapshot,
    ShiftStats,
)

logger = logging.getLogger(__name__)

SnapshotSink = Callable[[SessionSnapshot], None]

CLEAN_DECISION_CREDITS = 3
WARNING_DECISION_CREDITS = 1

_PRE_DECISION_PHASES = (
    InteractionPhase.GREETING,
    InteractionPhase.CREDENTIALS,
    InteractionPhase.INVESTIGATION,
)

_NEXT_PHASE = {
    InteractionPhase.GREETING: InteractionPhase.CREDENTIALS,
    InteractionPhase.CREDENTIALS: InteractionPhase.INVESTIGATION,
}


def is_correct_decision(consequence: Consequence) -> bool:
    return consequence.tier in (ConsequenceTier.NONE, ConsequenceTier.WARNING)


def credits_for_decision(consequence: Consequence, resources_spent: int = 0) -> int:
    if consequence.tier == ConsequenceTier.NONE:
        earned = CLEAN_DECISION_CREDITS
    elif consequence.tier == ConsequenceTier.WARNING:
        earned = WARNING_DECISION_CREDITS
    else:
        earned = -consequence.credits_penalty
    return earned - resources_spent


class ProgressionController:
    def __init__(
        self,
        catalog: Catalog,
        *,
        snapshot_sink: SnapshotSink | None = None,
        reset_infractions_on_shift: bool = config.RESET_INFRACTIONS_ON_SHIFT,
        starting_credits: int = config.STARTING_CREDITS,
    ) -> None:
        self.catalog = catalog
        self.snapshot_sink = snapshot_sink
        self.reset_infractions_on_shift = reset_infractions_on_shift
        self.subject_index = 0
        self.phase = InteractionPhase.GREETING
        self.infractions = 0
        self.credits = starting_credits
        self.total_decisions = 0
        self.total_correct = 0
        self.accuracy = 1.0
        self.shift_stats = ShiftStats()
        self.shift_decisions: list[DecisionRecord] = []
        self.decision_history: dict[str, str] = {}
        self.decision_log: list[DecisionRecord] = []
        self.alert_log: list[AlertRecord] = []
        self.tracker: PatternTracker = create_pattern_tracker()
        self.last_consequence: Consequence | None = None
        self.last_warning: SupervisorWarning | None = None
        self.investigation = self._open_investigation(0)

    # Reads

    @property
    def subject(self) -> Subject:
        return self.catalog.get_subject(self.subject_index)

    @property
    def shift(self) -> Shift:
        return self.catalog.get_shift(self.subject_index)

    @property
    def shift_index(self) -> int:
        return self.catalog.shift_index_for(self.subject_index)

    @property
    def ledger(self) -> InformationLedger:
        return self.investigation.ledger

    @property
    def required_checks(self) -> list[RequiredCheck]:
        return required_checks_for(self.subject, self.shift)

    @property
    def run_complete(self) -> bool:
        return self.phase == InteractionPhase.RUN_COMPLETE

    @property
    def dossier_gaps(self) -> frozenset[str]:
        return dossier_gaps(self.subject.id, self.ledger.identity_scan_quality)

    def tape_status(self, category: QueryCategory) -> TapeStatus:
        return service.tape_status(self.investigation, category)

    def tape_progress(self, category: QueryCategory) -> float:
        return service.tape_progress(self.investigation, category)

    # Interaction phases

    def proceed(self) -> ActionResult:
        action = ActionType.PROCEED
        next_phase = _NEXT_PHASE.get(self.phase)
        if next_phase is None:
            if self.phase == InteractionPhase.INVESTIGATION:
                return unchanged(action, "Investigation already open.")
            return rejected(action, f"Cannot proceed from {self.phase}.")
        self.phase = next_phase
        logger.debug("Subject %s entered %s", self.subject.id, next_phase)
        return ActionResult(action=action, outcome=ActionOutcome.SUCCESS, summary=f"{next_phase}.")

    # Investigation

    def _investigation_blocked(self, action: ActionType) -> ActionResult | None:
        if self.phase != InteractionPhase.INVESTIGATION:
            return rejected(action, f"Investigation is closed during {self.phase}.")
        return None

    def start_query(self, category: QueryCategory) -> ActionResult:
        blocked = self._investigation_blocked(ActionType.START_QUERY)
        if blocked:
            return blocked
        self.investigation, result = service.start_query(self.investigation, QueryCategory(category))
        return result

    def abort_query(self, category: QueryCategory) -> ActionResult:
        blocked = self._investigation_blocked(ActionType.ABORT_QUERY)
        if blocked:
            return blocked
        self.investigation, result = service.abort_query(self.investigation, QueryCategory(category))
        return result

    def complete_scan(self, category: QueryCategory, hold_ms: int | None = None) -> ActionResult:
        blocked = self._investigation_blocked(ActionType.COMPLETE_SCAN)
        if blocked:
            return blocked
        self.investigation, result = service.complete_scan(
            self.investigation, QueryCategory(category), hold_ms
        )
        return result

    def tick(self, delta_ms: int) -> list[QueryCategory]:
        """Advance the playing tape; returns the categories that completed."""
        if self.phase != InteractionPhase.INVESTIGATION:
            return []
        self.investigation, completed = service.tick(
            self.investigation, delta_ms, self.subject, self.required_checks
        )
        return completed

    def record_interrogation_answer(
        self, question_id: str, response: str, bpm_value: int | None = None
    ) -> ActionResult:
        action = ActionType.INTERROGATE
        blocked = self._investigation_blocked(action)
        if blocked:
            return blocked
        if not can_ask_question(self.ledger):
            return rejected(action, "Question limit reached for this subject.")
        ledger = record_interrogation_answer(
            self.ledger, question_id, response, bpm_value, asked_at=self.investigation.clock_ms
        )
        self.investigation = service.replace_ledger(self.investigation, ledger)
        notes = []
        if not ledger.bpm_data_available:
            notes.append("BPM monitor offline. No reading recorded.")
        return ActionResult(
            action=action,
            outcome=ActionOutcome.SUCCESS,
            summary=f"Question {ledger.interrogation.questions_asked} recorded.",
            notes=notes,
        )

    # Decisions

    def commit_decision(self, decision: Decision) -> ActionResult:
        action = ActionType.COMMIT_DECISION
        if self.phase not in _PRE_DECISION_PHASES:
            return rejected(action, f"Cannot decide during {self.phase}.")
        decision = Decision(decision)
        subject = self.subject
        consequence = evaluate_consequence(
            subject, decision, self.ledger, self.shift, self.infractions
        )
        self.tracker, warning = check_warning_patterns(self.tracker, decision, self.ledger)
        self.infractions = consequence.infraction_count

        correct = is_correct_decision(consequence)
        if decision == Decision.APPROVE:
            self.shift_stats.approved += 1
        else:
            self.shift_stats.denied += 1
        if correct:
            self.shift_stats.correct += 1
            self.total_correct += 1
        self.total_decisions += 1
        self.accuracy = self.total_correct / self.total_decisions
        spent = self.investigation.resources_spent
        self.credits += credits_for_decision(consequence, spent)

        record = DecisionRecord(
            subject_id=subject.id,
            subject_name=subject.name,
            decision=decision.value,
            correct=correct,
            tier=consequence.tier.value,
            warrants=subject.warrants,
            severity=consequence.severity,
        )
        self.shift_decisions.append(record)
        self.decision_log.append(record)
        self.decision_history[subject.id] = decision.value
        if warning is not None:
            self.alert_log.append(
                AlertRecord(
                    subject_id=subject.id,
                    warning_type=warning.type.value,
                    count=warning.count,
                    message=warning.message,
                )
            )

        self.last_consequence = consequence
        self.last_warning = warning
        self.phase = InteractionPhase.DECIDED
        logger.debug(
            "Subject %s %s: tier=%s severity=%s infractions=%s",
            subject.id,
            decision,
            consequence.tier,
            consequence.severity,
            self.infractions,
        )
        self._emit_snapshot()
        notes = [item.description for item in consequence.missed_information]
        if spent:
            notes.append(f"Investigation resources charged: {spent}.")
        return ActionResult(
            action=action,
            outcome=ActionOutcome.SUCCESS,
            summary=consequence.message,
            notes=notes,
            consequence=consequence,
            warning=warning,
        )

    # Progression

    def advance_subject(self) -> ActionResult:
        action = ActionType.ADVANCE_SUBJECT
        if self.phase != InteractionPhase.DECIDED:
            return rejected(action, "Commit a decision before advancing.")
        index = self.subject_index
        end_of_shift = self.catalog.is_end_of_shift(index)
        if self.catalog.is_last_subject(index) or (
            end_of_shift and self.catalog.is_last_shift(index)
        ):
            self.phase = InteractionPhase.RUN_COMPLETE
            logger.info(
                "Run complete: %d decisions, accuracy %.2f, credits %d",
                self.total_decisions,
                self.accuracy,
                self.credits,
            )
            self._emit_snapshot()
            return ActionResult(action=action, outcome=ActionOutcome.SUCCESS, summary="Run complete.")

        if end_of_shift:
            self._roll_over_shift()
        self._begin_subject(index + 1)
        summary = f"Shift {self.shift.id} begins." if end_of_shift else "Next subject."
        self._emit_snapshot()
        return ActionResult(action=action, outcome=ActionOutcome.SUCCESS, summary=summary)

    def _roll_over_shift(self) -> None:
        self.shift_stats = ShiftStats()
        self.shift_decisions = []
        self.tracker = reset_pattern_tracker(self.tracker)
        if self.reset_infractions_on_shift:
            self.infractions = 0
        logger.debug("Shift rollover after subject %s", self.subject.id)

    def _open_investigation(self, index: int) -> service.InvestigationSession:
        subject = self.catalog.get_subject(index)
        return service.open_session(determine_equipment_failures(subject.id))

    def _begin_subject(self, index: int) -> None:
        self.investigation = self._open_investigation(index)
        self.subject_index = index
        self.phase = InteractionPhase.GREETING
        self.last_consequence = None
        self.last_warning = None
        logger.debug("Subject %s is current", self.subject.id)

    # Persistence

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            current_subject_index=self.subject_index,
            total_decisions=self.total_decisions,
            total_correct=self.total_correct,
            accuracy=self.accuracy,
            infractions=self.infractions,
            credits=self.credits,
            shift_stats=ShiftStats.from_dict(self.shift_stats.to_dict()),
            shift_decisions=list(self.shift_decisions),
            decision_history=dict(self.decision_history),
            decision_log=list(self.decision_log),
            alert_log=list(self.alert_log),
            pattern_tracker=self.tracker.to_dict(),
            run_complete=self.run_complete,
        )

    def restore(self, snapshot: SessionSnapshot) -> None:
        """Resume at the saved subject with a fresh ledger.

        A subject whose decision was already recorded resumes in the decided
        phase so the next call advances past it.
        """
        self.catalog.get_subject(snapshot.current_subject_index)
        self.total_decisions = snapshot.total_decisions
        self.total_correct = snapshot.total_correct
        self.accuracy = snapshot.accuracy
        self.infractions = snapshot.infractions
        self.credits = snapshot.credits
        self.shift_stats = ShiftStats.from_dict(snapshot.shift_stats.to_dict())
        self.shift_decisions = list(snapshot.shift_decisions)
        self.decision_history = dict(snapshot.decision_history)
        self.decision_log = list(snapshot.decision_log)
        self.alert_log = list(snapshot.alert_log)
        self.tracker = PatternTracker.from_dict(snapshot.pattern_tracker)
        self._begin_subject(snapshot.current_subject_index)
        if snapshot.run_complete:
            self.phase = InteractionPhase.RUN_COMPLETE
        elif self.subject.id in self.decision_history:
            self.phase = InteractionPhase.DECIDED

    def _emit_snapshot(self) -> None:
        if self.snapshot_sink is not None:
            self.snapshot_sink(self.snapshot())
