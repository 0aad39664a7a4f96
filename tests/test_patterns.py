"""Tests for supervisor warning patterns."""

from checkpoint.domain.enums import Decision, EquipmentType, WarningType
from checkpoint.investigation.ledger import apply_ledger_patch, create_empty_ledger
from checkpoint.monitoring.patterns import (
    PatternTracker,
    check_warning_patterns,
    create_pattern_tracker,
    reset_pattern_tracker,
)

APPROVE = Decision.APPROVE
DENY = Decision.DENY


def _verified_ledger(failures=()):
    return apply_ledger_patch(
        create_empty_ledger(failures), warrant_check=True, health_scan=True
    )


class TestCounters:
    def test_denials_never_count(self):
        tracker = create_pattern_tracker()
        for _ in range(5):
            tracker, warning = check_warning_patterns(tracker, DENY, create_empty_ledger())
            assert warning is None
        assert all(value == 0 for value in tracker.counters.values())

    def test_no_verification_fires_at_threshold(self):
        tracker = create_pattern_tracker()
        tracker, warning = check_warning_patterns(tracker, APPROVE, create_empty_ledger())
        assert warning is None
        tracker, warning = check_warning_patterns(tracker, APPROVE, create_empty_ledger())
        assert warning.type == WarningType.NO_VERIFICATION
        assert warning.count == 2
        assert "2 subjects" in warning.message

    def test_warning_keeps_firing_past_threshold(self):
        tracker = create_pattern_tracker()
        for _ in range(2):
            tracker, _ = check_warning_patterns(tracker, APPROVE, create_empty_ledger())
        tracker, warning = check_warning_patterns(tracker, APPROVE, create_empty_ledger())
        assert warning.type == WarningType.NO_VERIFICATION
        assert warning.count == 3

    def test_every_qualifying_counter_increments(self):
        tracker, _ = check_warning_patterns(create_pattern_tracker(), APPROVE, create_empty_ledger())
        assert tracker.count(WarningType.NO_VERIFICATION) == 1
        assert tracker.count(WarningType.NO_WARRANT_CHECK) == 1
        assert tracker.count(WarningType.NO_HEALTH_SCAN) == 1

    def test_missing_health_scan(self):
        ledger = apply_ledger_patch(create_empty_ledger(), warrant_check=True)
        tracker = create_pattern_tracker()
        tracker, warning = check_warning_patterns(tracker, APPROVE, ledger)
        assert warning is None
        tracker, warning = check_warning_patterns(tracker, APPROVE, ledger)
        assert warning.type == WarningType.NO_HEALTH_SCAN
        assert tracker.count(WarningType.NO_VERIFICATION) == 0
        assert tracker.count(WarningType.NO_WARRANT_CHECK) == 0

    def test_missing_warrant_check(self):
        ledger = apply_ledger_patch(create_empty_ledger(), health_scan=True)
        tracker = create_pattern_tracker()
        tracker, _ = check_warning_patterns(tracker, APPROVE, ledger)
        tracker, warning = check_warning_patterns(tracker, APPROVE, ledger)
        assert warning.type == WarningType.NO_WARRANT_CHECK
        assert "warrant verification" in warning.message

    def test_input_tracker_unchanged(self):
        tracker = create_pattern_tracker()
        check_warning_patterns(tracker, APPROVE, create_empty_ledger())
        assert tracker.count(WarningType.NO_VERIFICATION) == 0


class TestEquipmentWarning:
    def test_fires_once_per_shift(self):
        failures = [EquipmentType.BPM_MONITOR]
        tracker = create_pattern_tracker()
        tracker, warning = check_warning_patterns(tracker, APPROVE, _verified_ledger(failures))
        assert warning.type == WarningType.EQUIPMENT_FAILURE
        assert warning.count == 1
        tracker, warning = check_warning_patterns(tracker, APPROVE, _verified_ledger(failures))
        assert warning is None

    def test_not_raised_on_denial(self):
        tracker, warning = check_warning_patterns(
            create_pattern_tracker(), DENY, _verified_ledger([EquipmentType.BIOMETRIC_SCANNER])
        )
        assert warning is None
        assert tracker.equipment_failure_noted is False

    def test_deferred_behind_counter_warning(self):
        tracker = create_pattern_tracker()
        for _ in range(2):
            tracker, _ = check_warning_patterns(tracker, APPROVE, create_empty_ledger())
        tracker, warning = check_warning_patterns(
            tracker, APPROVE, create_empty_ledger([EquipmentType.BPM_MONITOR])
        )
        assert warning.type == WarningType.NO_VERIFICATION
        assert tracker.equipment_failure_noted is False
        tracker, warning = check_warning_patterns(
            tracker, APPROVE, _verified_ledger([EquipmentType.BPM_MONITOR])
        )
        assert warning.type == WarningType.EQUIPMENT_FAILURE


class TestReset:
    def test_reset_zeroes_counters(self):
        tracker = create_pattern_tracker()
        for _ in range(4):
            tracker, _ = check_warning_patterns(
                tracker, APPROVE, create_empty_ledger([EquipmentType.BPM_MONITOR])
            )
        tracker = reset_pattern_tracker(tracker)
        assert all(value == 0 for value in tracker.counters.values())
        assert tracker.equipment_failure_noted is False

    def test_dict_round_trip(self):
        tracker = create_pattern_tracker()
        tracker, _ = check_warning_patterns(tracker, APPROVE, create_empty_ledger())
        restored = PatternTracker.from_dict(tracker.to_dict())
        assert restored.counters == tracker.counters
        assert restored.equipment_failure_noted == tracker.equipment_failure_noted
