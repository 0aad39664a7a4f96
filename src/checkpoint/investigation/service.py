"""Resource-gated investigation: memory slots, intel tapes and scans.

Tapes (warrant, transit, incident) play one at a time. Starting or resuming a
tape buffers whichever tape was playing; a buffered tape keeps its elapsed
time and resumes from there. Only :func:`tick` moves time forward, and only
for the playing tape. A tape that reaches its duration completes, which is
the one place its ledger flag and extraction snapshot are written.

Scans (identity, health) have no duration here: they hold a memory slot from
:func:`start_query` until :func:`complete_scan`.

Every operation is a pure function from session to ``(session, result)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from typing import Iterable, Mapping

from checkpoint.domain.enums import (
    SCAN_CATEGORIES,
    TAPE_CATEGORIES,
    EquipmentType,
    QueryCategory,
    RequiredCheck,
    TapeStatus,
)
from checkpoint.domain.models import Subject
from checkpoint.domain.rules import validate_tick_delta
from checkpoint.investigation.costs import (
    INVESTIGATION_RESOURCES,
    TAPE_DURATIONS_MS,
    ActionType,
    would_exceed_resources,
    would_exceed_slots,
)
from checkpoint.investigation.extracts import build_extract_lines, snapshot_from_lines
from checkpoint.investigation.ledger import (
    LEDGER_FLAGS,
    InformationLedger,
    apply_ledger_patch,
    create_empty_ledger,
)
from checkpoint.investigation.results import (
    ActionOutcome,
    ActionResult,
    rejected,
    unchanged,
)
from checkpoint.investigation.scan_quality import scan_quality_from_duration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvestigationSession:
    ledger: InformationLedger
    elapsed_ms: Mapping[QueryCategory, int] = field(default_factory=dict)
    now_playing: QueryCategory | None = None
    buffered: tuple[QueryCategory, ...] = ()
    resources_remaining: int = INVESTIGATION_RESOURCES
    resources_consumed: frozenset[QueryCategory] = frozenset()
    abort_armed: frozenset[QueryCategory] = frozenset()
    clock_ms: int = 0

    @property
    def resources_spent(self) -> int:
        return len(self.resources_consumed)


def open_session(
    equipment_failures: Iterable[EquipmentType] = (),
    resources: int = INVESTIGATION_RESOURCES,
) -> InvestigationSession:
    return InvestigationSession(
        ledger=create_empty_ledger(equipment_failures),
        resources_remaining=resources,
    )


def is_tape(category: QueryCategory) -> bool:
    return category in TAPE_CATEGORIES


def tape_status(session: InvestigationSession, category: QueryCategory) -> TapeStatus:
    if session.ledger.is_gathered(category):
        return TapeStatus.COMPLETE
    if session.now_playing == category:
        return TapeStatus.PLAYING
    if category in session.buffered:
        return TapeStatus.BUFFERED
    return TapeStatus.IDLE


def tape_progress(session: InvestigationSession, category: QueryCategory) -> float:
    if session.ledger.is_gathered(category):
        return 1.0
    return min(1.0, session.elapsed_ms.get(category, 0) / TAPE_DURATIONS_MS[category])


def _play(session: InvestigationSession, category: QueryCategory) -> InvestigationSession:
    buffered = [item for item in session.buffered if item != category]
    current = session.now_playing
    if current is not None and current != category:
        buffered.append(current)
        logger.debug("Tape %s buffered at %sms", current, session.elapsed_ms.get(current, 0))
    return replace(
        session,
        now_playing=category,
        buffered=tuple(buffered),
        abort_armed=session.abort_armed - {category},
    )


def start_query(
    session: InvestigationSession, category: QueryCategory
) -> tuple[InvestigationSession, ActionResult]:
    action = ActionType.START_QUERY
    ledger = session.ledger
    if ledger.is_gathered(category):
        return session, unchanged(action, f"{category} already complete.", category)

    if category in ledger.active_services:
        if not is_tape(category) or session.now_playing == category:
            kind = "tape already playing" if is_tape(category) else "scan already in progress"
            disarmed = replace(session, abort_armed=session.abort_armed - {category})
            return disarmed, unchanged(action, f"{category} {kind}.", category)
        resumed = _play(session, category)
        logger.debug("Tape %s resumed", category)
        return resumed, ActionResult(
            action=action,
            outcome=ActionOutcome.SUCCESS,
            summary=f"{category} tape resumed.",
            category=category,
        )

    exceeded, reason = would_exceed_slots(ledger.active_services)
    if exceeded:
        return session, rejected(action, reason, category)

    if not is_tape(category):
        started = replace(
            session,
            ledger=apply_ledger_patch(
                ledger, active_services=ledger.active_services | {category}
            ),
        )
        logger.debug("Scan %s started", category)
        return started, ActionResult(
            action=action,
            outcome=ActionOutcome.SUCCESS,
            summary=f"{category} scan started.",
            category=category,
        )

    exceeded, reason = would_exceed_resources(
        session.resources_remaining, session.resources_consumed, category
    )
    if exceeded:
        return session, rejected(action, reason, category)

    notes: list[str] = []
    remaining = session.resources_remaining
    consumed = session.resources_consumed
    if category not in consumed:
        remaining -= 1
        consumed = consumed | {category}
        notes.append(f"Investigation resources remaining: {remaining}.")
    started = replace(
        session,
        ledger=apply_ledger_patch(ledger, active_services=ledger.active_services | {category}),
        elapsed_ms={**session.elapsed_ms, category: session.elapsed_ms.get(category, 0)},
        resources_remaining=remaining,
        resources_consumed=consumed,
    )
    started = _play(started, category)
    logger.debug("Tape %s started", category)
    return started, ActionResult(
        action=action,
        outcome=ActionOutcome.SUCCESS,
        summary=f"{category} tape playing.",
        category=category,
        notes=notes,
    )


def abort_query(
    session: InvestigationSession, category: QueryCategory
) -> tuple[InvestigationSession, ActionResult]:
    """Abort needs two requests: the first arms a confirmation, the second discards."""
    action = ActionType.ABORT_QUERY
    ledger = session.ledger
    if ledger.is_gathered(category):
        return session, rejected(action, f"{category} is complete and cannot be aborted.", category)
    if category not in ledger.active_services:
        return session, rejected(action, f"{category} is not running.", category)

    if category not in session.abort_armed:
        armed = replace(session, abort_armed=session.abort_armed | {category})
        return armed, unchanged(
            action, f"Abort {category}? Request again to discard progress.", category
        )

    elapsed = dict(session.elapsed_ms)
    elapsed.pop(category, None)
    aborted = replace(
        session,
        ledger=apply_ledger_patch(ledger, active_services=ledger.active_services - {category}),
        elapsed_ms=elapsed,
        now_playing=None if session.now_playing == category else session.now_playing,
        buffered=tuple(item for item in session.buffered if item != category),
        abort_armed=session.abort_armed - {category},
    )
    logger.debug("Query %s aborted", category)
    return aborted, ActionResult(
        action=action,
        outcome=ActionOutcome.SUCCESS,
        summary=f"{category} aborted. Memory slot released.",
        category=category,
    )


def complete_scan(
    session: InvestigationSession,
    category: QueryCategory,
    hold_ms: int | None = None,
) -> tuple[InvestigationSession, ActionResult]:
    action = ActionType.COMPLETE_SCAN
    if category not in SCAN_CATEGORIES:
        return session, rejected(action, f"{category} is not a scan.", category)
    ledger = session.ledger
    if ledger.is_gathered(category):
        return session, unchanged(action, f"{category} scan already complete.", category)
    if category not in ledger.active_services:
        return session, rejected(action, f"{category} scan has not been started.", category)

    flag = LEDGER_FLAGS[category]
    patch: dict = {
        flag: True,
        "timestamps": {flag: session.clock_ms},
        "active_services": ledger.active_services - {category},
    }
    notes: list[str] = []
    if category == QueryCategory.IDENTITY and hold_ms is not None:
        quality = scan_quality_from_duration(hold_ms)
        patch["identity_scan_quality"] = quality
        notes.append(f"Scan quality: {quality}.")
    completed = replace(
        session,
        ledger=apply_ledger_patch(ledger, **patch),
        abort_armed=session.abort_armed - {category},
    )
    logger.debug("Scan %s complete", category)
    return completed, ActionResult(
        action=action,
        outcome=ActionOutcome.SUCCESS,
        summary=f"{category} scan complete.",
        category=category,
        notes=notes,
    )


def _complete_tape(
    session: InvestigationSession,
    category: QueryCategory,
    subject: Subject,
    required: Iterable[RequiredCheck],
) -> InvestigationSession:
    ledger = session.ledger
    flag = LEDGER_FLAGS[category]
    lines = build_extract_lines(subject, category, required)
    ledger = apply_ledger_patch(
        ledger,
        **{
            flag: True,
            "timestamps": {flag: session.clock_ms},
            "last_extracted": {category: snapshot_from_lines(lines, session.clock_ms)},
            "active_services": ledger.active_services - {category},
        },
    )
    logger.debug("Tape %s complete at %sms", category, session.clock_ms)
    return replace(
        session,
        ledger=ledger,
        now_playing=None if session.now_playing == category else session.now_playing,
        buffered=tuple(item for item in session.buffered if item != category),
        abort_armed=session.abort_armed - {category},
    )


def settle_completions(
    session: InvestigationSession,
    subject: Subject,
    required: Iterable[RequiredCheck],
) -> tuple[InvestigationSession, list[QueryCategory]]:
    """Complete any in-flight tape whose elapsed time has reached its duration."""
    required = list(required)
    completed: list[QueryCategory] = []
    for category in TAPE_CATEGORIES:
        if session.ledger.is_gathered(category):
            continue
        if category not in session.ledger.active_services:
            continue
        if session.elapsed_ms.get(category, 0) >= TAPE_DURATIONS_MS[category]:
            session = _complete_tape(session, category, subject, required)
            completed.append(category)
    return session, completed


def tick(
    session: InvestigationSession,
    delta_ms: int,
    subject: Subject,
    required: Iterable[RequiredCheck],
) -> tuple[InvestigationSession, list[QueryCategory]]:
    validate_tick_delta(delta_ms)
    elapsed = dict(session.elapsed_ms)
    playing = session.now_playing
    if playing is not None:
        duration = TAPE_DURATIONS_MS[playing]
        elapsed[playing] = min(duration, elapsed.get(playing, 0) + delta_ms)
    advanced = replace(session, elapsed_ms=elapsed, clock_ms=session.clock_ms + delta_ms)
    return settle_completions(advanced, subject, required)


def replace_ledger(session: InvestigationSession, ledger: InformationLedger) -> InvestigationSession:
    return replace(session, ledger=ledger)
