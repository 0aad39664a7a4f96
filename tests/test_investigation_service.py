"""Tests for memory slots, investigation resources and tape timing."""

import pytest

from checkpoint.domain.enums import QueryCategory, RequiredCheck, ScanQuality, TapeStatus
from checkpoint.investigation import service
from checkpoint.investigation.costs import INVESTIGATION_RESOURCES, MEMORY_SLOT_CAPACITY
from checkpoint.investigation.results import ActionOutcome

WARRANT = QueryCategory.WARRANT
TRANSIT = QueryCategory.TRANSIT
INCIDENT = QueryCategory.INCIDENT
IDENTITY = QueryCategory.IDENTITY
HEALTH = QueryCategory.HEALTH

REQUIRED = [RequiredCheck.WARRANT]


def _tick(session, subject, delta_ms):
    return service.tick(session, delta_ms, subject, REQUIRED)


class TestScans:
    def test_scan_holds_slot_until_complete(self):
        session = service.open_session()
        session, result = service.start_query(session, IDENTITY)
        assert result.outcome == ActionOutcome.SUCCESS
        assert IDENTITY in session.ledger.active_services
        assert session.ledger.identity_scan is False

        session, result = service.complete_scan(session, IDENTITY, hold_ms=3000)
        assert result.outcome == ActionOutcome.SUCCESS
        assert session.ledger.identity_scan is True
        assert session.ledger.identity_scan_quality == ScanQuality.COMPLETE
        assert IDENTITY not in session.ledger.active_services

    def test_scans_do_not_spend_resources(self):
        session = service.open_session()
        session, _ = service.start_query(session, HEALTH)
        session, _ = service.complete_scan(session, HEALTH)
        assert session.resources_remaining == INVESTIGATION_RESOURCES
        assert session.ledger.identity_scan_quality is None

    def test_complete_unstarted_scan_rejected(self):
        session = service.open_session()
        _, result = service.complete_scan(session, HEALTH)
        assert result.outcome == ActionOutcome.FAILURE

    def test_complete_scan_rejects_tape(self):
        session = service.open_session()
        session, _ = service.start_query(session, WARRANT)
        _, result = service.complete_scan(session, WARRANT)
        assert result.outcome == ActionOutcome.FAILURE


class TestSlots:
    def test_pool_full_rejects_new_category(self):
        session = service.open_session()
        for category in (IDENTITY, HEALTH, WARRANT):
            session, result = service.start_query(session, category)
            assert result.accepted
        assert len(session.ledger.active_services) == MEMORY_SLOT_CAPACITY

        after, result = service.start_query(session, TRANSIT)
        assert result.outcome == ActionOutcome.FAILURE
        assert after is session

    def test_same_category_in_flight_is_a_no_op(self):
        session = service.open_session()
        session, _ = service.start_query(session, IDENTITY)
        after, result = service.start_query(session, IDENTITY)
        assert result.outcome == ActionOutcome.NO_EFFECT
        assert after is session

    def test_abort_frees_slot_for_new_category(self):
        session = service.open_session()
        for category in (IDENTITY, HEALTH, WARRANT):
            session, _ = service.start_query(session, category)
        session, _ = service.abort_query(session, HEALTH)
        session, result = service.abort_query(session, HEALTH)
        assert result.outcome == ActionOutcome.SUCCESS
        session, result = service.start_query(session, TRANSIT)
        assert result.outcome == ActionOutcome.SUCCESS


class TestResources:
    def test_each_tape_costs_once(self):
        session = service.open_session()
        session, result = service.start_query(session, WARRANT)
        assert session.resources_remaining == INVESTIGATION_RESOURCES - 1
        assert result.notes
        session, _ = service.start_query(session, TRANSIT)
        session, _ = service.start_query(session, WARRANT)
        assert session.resources_remaining == INVESTIGATION_RESOURCES - 2
        assert session.resources_spent == 2

    def test_no_resources_left_rejects_new_tape(self):
        session = service.open_session()
        session, _ = service.start_query(session, WARRANT)
        session, _ = service.start_query(session, TRANSIT)
        after, result = service.start_query(session, INCIDENT)
        assert result.outcome == ActionOutcome.FAILURE
        assert after is session


class TestTapePlayback:
    def test_only_one_tape_plays(self, clean_subject):
        session = service.open_session()
        session, _ = service.start_query(session, WARRANT)
        session, _ = _tick(session, clean_subject, 1000)
        session, _ = service.start_query(session, TRANSIT)
        assert service.tape_status(session, TRANSIT) == TapeStatus.PLAYING
        assert service.tape_status(session, WARRANT) == TapeStatus.BUFFERED

        session, _ = _tick(session, clean_subject, 1000)
        assert session.elapsed_ms[WARRANT] == 1000
        assert session.elapsed_ms[TRANSIT] == 1000

    def test_buffered_tape_resumes_where_it_stopped(self, clean_subject):
        session = service.open_session()
        session, _ = service.start_query(session, WARRANT)
        session, _ = _tick(session, clean_subject, 1500)
        session, _ = service.start_query(session, TRANSIT)
        session, result = service.start_query(session, WARRANT)
        assert result.outcome == ActionOutcome.SUCCESS
        assert session.now_playing == WARRANT
        assert session.buffered == (TRANSIT,)
        assert session.resources_remaining == INVESTIGATION_RESOURCES - 2
        assert service.tape_progress(session, WARRANT) == pytest.approx(1500 / 4000)

    def test_completion_sets_flag_and_snapshot(self, clean_subject):
        session = service.open_session()
        session, _ = service.start_query(session, WARRANT)
        session, completed = _tick(session, clean_subject, 3750)
        assert completed == []
        session, completed = _tick(session, clean_subject, 250)
        assert completed == [WARRANT]
        ledger = session.ledger
        assert ledger.warrant_check is True
        assert ledger.timestamps["warrant_check"] == 4000
        assert WARRANT not in ledger.active_services
        snapshot = ledger.last_extracted[WARRANT]
        assert snapshot.lines == ("-- WARRANT CHECK [REQUIRED] --", "STATUS: CLEAR")
        assert snapshot.timestamp == 4000
        assert service.tape_status(session, WARRANT) == TapeStatus.COMPLETE
        assert session.now_playing is None

    def test_completion_is_idempotent(self, clean_subject):
        session = service.open_session()
        session, _ = service.start_query(session, WARRANT)
        session, _ = _tick(session, clean_subject, 4000)
        remaining = session.resources_remaining
        ledger = session.ledger

        session, result = service.start_query(session, WARRANT)
        assert result.outcome == ActionOutcome.NO_EFFECT
        session, completed = _tick(session, clean_subject, 4000)
        assert completed == []
        assert session.resources_remaining == remaining
        assert session.ledger.timestamps == ledger.timestamps
        assert session.ledger.last_extracted == ledger.last_extracted
        assert session.ledger.warrant_check is True

    def test_elapsed_capped_at_duration(self, clean_subject):
        session = service.open_session()
        session, _ = service.start_query(session, TRANSIT)
        session, completed = _tick(session, clean_subject, 60000)
        assert completed == [TRANSIT]
        assert session.elapsed_ms[TRANSIT] == 6000
        assert service.tape_progress(session, TRANSIT) == 1.0

    def test_clock_advances_without_a_tape(self, clean_subject):
        session = service.open_session()
        session, _ = _tick(session, clean_subject, 250)
        assert session.clock_ms == 250

    def test_negative_tick_rejected(self, clean_subject):
        with pytest.raises(ValueError):
            _tick(service.open_session(), clean_subject, -1)


class TestAbort:
    def test_two_step_abort(self, clean_subject):
        session = service.open_session()
        session, _ = service.start_query(session, WARRANT)
        session, _ = _tick(session, clean_subject, 1000)

        session, result = service.abort_query(session, WARRANT)
        assert result.outcome == ActionOutcome.NO_EFFECT
        assert WARRANT in session.ledger.active_services

        session, result = service.abort_query(session, WARRANT)
        assert result.outcome == ActionOutcome.SUCCESS
        assert WARRANT not in session.ledger.active_services
        assert service.tape_status(session, WARRANT) == TapeStatus.IDLE
        assert session.ledger.warrant_check is False
        assert WARRANT not in session.ledger.last_extracted

    def test_abort_does_not_refund_or_recharge(self, clean_subject):
        session = service.open_session()
        session, _ = service.start_query(session, WARRANT)
        session, _ = service.abort_query(session, WARRANT)
        session, _ = service.abort_query(session, WARRANT)
        assert session.resources_remaining == INVESTIGATION_RESOURCES - 1

        session, result = service.start_query(session, WARRANT)
        assert result.outcome == ActionOutcome.SUCCESS
        assert session.resources_remaining == INVESTIGATION_RESOURCES - 1
        assert session.elapsed_ms[WARRANT] == 0

    def test_reselecting_disarms_pending_abort(self):
        session = service.open_session()
        session, _ = service.start_query(session, WARRANT)
        session, _ = service.start_query(session, TRANSIT)
        session, _ = service.abort_query(session, WARRANT)
        session, _ = service.start_query(session, WARRANT)
        session, result = service.abort_query(session, WARRANT)
        assert result.outcome == ActionOutcome.NO_EFFECT
        assert WARRANT in session.ledger.active_services

    def test_reselecting_playing_tape_disarms_pending_abort(self):
        session = service.open_session()
        session, _ = service.start_query(session, WARRANT)
        session, _ = service.abort_query(session, WARRANT)
        session, result = service.start_query(session, WARRANT)
        assert result.outcome == ActionOutcome.NO_EFFECT
        assert WARRANT not in session.abort_armed
        session, result = service.abort_query(session, WARRANT)
        assert result.outcome == ActionOutcome.NO_EFFECT
        assert session.now_playing == WARRANT

    def test_reselecting_scan_disarms_pending_abort(self):
        session = service.open_session()
        session, _ = service.start_query(session, HEALTH)
        session, _ = service.abort_query(session, HEALTH)
        session, _ = service.start_query(session, HEALTH)
        session, result = service.abort_query(session, HEALTH)
        assert result.outcome == ActionOutcome.NO_EFFECT
        assert HEALTH in session.ledger.active_services

    def test_abort_complete_rejected(self, clean_subject):
        session = service.open_session()
        session, _ = service.start_query(session, WARRANT)
        session, _ = _tick(session, clean_subject, 4000)
        after, result = service.abort_query(session, WARRANT)
        assert result.outcome == ActionOutcome.FAILURE
        assert after is session

    def test_abort_idle_rejected(self):
        session = service.open_session()
        _, result = service.abort_query(session, INCIDENT)
        assert result.outcome == ActionOutcome.FAILURE

    def test_aborting_playing_tape_leaves_buffered_frozen(self, clean_subject):
        session = service.open_session()
        session, _ = service.start_query(session, WARRANT)
        session, _ = _tick(session, clean_subject, 1000)
        session, _ = service.start_query(session, TRANSIT)
        session, _ = service.abort_query(session, TRANSIT)
        session, _ = service.abort_query(session, TRANSIT)
        assert session.now_playing is None
        session, _ = _tick(session, clean_subject, 5000)
        assert session.elapsed_ms[WARRANT] == 1000
        assert service.tape_status(session, WARRANT) == TapeStatus.BUFFERED
