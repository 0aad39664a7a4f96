from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from checkpoint import config
from checkpoint.catalog.loader import load_catalog
from checkpoint.directives.resolver import format_required_checks
from checkpoint.domain.enums import (
    SCAN_CATEGORIES,
    TAPE_CATEGORIES,
    Decision,
    QueryCategory,
    SubjectType,
)
from checkpoint.investigation.costs import TICK_INTERVAL_MS
from checkpoint.investigation.dossier_gaps import redact_dossier
from checkpoint.investigation.scan_quality import MAX_SCAN_HOLD_MS
from checkpoint.persistence.db import SessionStore
from checkpoint.session.progression import ProgressionController

_CHECK_TO_TAPE = {
    "WARRANT": QueryCategory.WARRANT,
    "TRANSIT": QueryCategory.TRANSIT,
    "INCIDENT": QueryCategory.INCIDENT,
    "DATABASE": QueryCategory.WARRANT,
}

_SYNTHETIC_TYPES = (SubjectType.REPLICANT, SubjectType.ROBOT_CYBORG)


def _investigate(controller: ProgressionController) -> None:
    for category in SCAN_CATEGORIES:
        controller.start_query(category)
        controller.complete_scan(category, hold_ms=MAX_SCAN_HOLD_MS)
    tapes = [_CHECK_TO_TAPE[check.value] for check in controller.required_checks]
    for category in dict.fromkeys(tapes):
        result = controller.start_query(category)
        if not result.accepted:
            print(f"  ! {result.summary}")
            continue
        while controller.tape_status(category) != "COMPLETE":
            controller.tick(TICK_INTERVAL_MS)
    for category in TAPE_CATEGORIES:
        snapshot = controller.ledger.last_extracted.get(category)
        if snapshot is not None:
            print(f"  {category}: {' / '.join(snapshot.lines)}")
    dossier = controller.subject.dossier
    if dossier is not None:
        fields = redact_dossier(dossier, controller.dossier_gaps)
        print(f"  DOSSIER: {', '.join(fields.values())}")


def _decide(controller: ProgressionController, strategy: str) -> Decision:
    if strategy == "careless":
        return Decision.APPROVE
    subject = controller.subject
    shift = controller.shift
    ledger = controller.ledger
    if ledger.warrant_check and subject.has_warrant:
        return Decision.DENY
    if ledger.transit_log and subject.flagged_travel:
        return Decision.DENY
    if "DENY_SYNTHETIC" in shift.active_rules and subject.subject_type in _SYNTHETIC_TYPES:
        return Decision.DENY
    directive = shift.directive_model
    if directive and directive.base == "ENGINEERS" and subject.dossier:
        if "ENGINEER" in subject.dossier.occupation.upper():
            return Decision.DENY
    return Decision.APPROVE


def _run(controller: ProgressionController, strategy: str) -> None:
    current_shift = None
    while not controller.run_complete:
        if controller.phase == "DECIDED":
            controller.advance_subject()
            continue
        shift = controller.shift
        if shift.id != current_shift:
            current_shift = shift.id
            print(f"== Shift {shift.id} ({shift.time_block}) {shift.chapter}: {shift.directive}")
            print(f"   Required checks: {format_required_checks(controller.required_checks)}")
        subject = controller.subject
        print(f"- {subject.id} {subject.name}")
        controller.proceed()
        controller.proceed()
        if strategy == "thorough":
            _investigate(controller)
        decision = _decide(controller, strategy)
        result = controller.commit_decision(decision)
        consequence = result.consequence
        print(f"  {decision}: {consequence.tier} ({consequence.severity}) {result.summary}")
        for note in result.notes:
            print(f"  * {note}")
        if result.warning is not None:
            print(f"  SUPERVISOR: {result.warning.message}")
        controller.advance_subject()

    print(
        f"Run complete. Decisions {controller.total_decisions}, "
        f"accuracy {controller.accuracy:.2f}, infractions {controller.infractions}, "
        f"credits {controller.credits}."
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Play the default catalog end to end.")
    parser.add_argument("--strategy", choices=("thorough", "careless"), default="thorough")
    parser.add_argument("--catalog", type=Path, default=None)
    parser.add_argument("--db", type=Path, nargs="?", const=config.DEFAULT_DB_PATH, default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    catalog = load_catalog(args.catalog)
    store = SessionStore(args.db) if args.db else None
    try:
        controller = ProgressionController(
            catalog, snapshot_sink=store.save_snapshot if store else None
        )
        if store is not None:
            saved = store.load_snapshot()
            if saved is not None and not saved.run_complete:
                controller.restore(saved)
                print(f"Resumed at subject {controller.subject_index + 1}.")
        _run(controller, args.strategy)
    finally:
        if store is not None:
            store.close()


if __name__ == "__main__":
    main()
