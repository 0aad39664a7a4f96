"""Tests for stable hashing and per-subject equipment failures."""

from checkpoint.domain.enums import EquipmentType
from checkpoint.investigation.equipment import (
    determine_equipment_failures,
    is_biometric_scanner_working,
    is_bpm_data_available,
)
from checkpoint.investigation.ledger import create_empty_ledger
from checkpoint.util.hashing import percentile_bucket, stable_hash


class TestStableHash:
    def test_known_values(self):
        assert stable_hash("") == 0
        assert stable_hash("A") == 65
        assert stable_hash("aj") == 3113

    def test_hashes_utf16_code_units(self):
        assert stable_hash("é") == 0xE9
        # U+1F600 is the surrogate pair D83D DE00
        assert stable_hash("\U0001F600") == 0xD83D * 31 + 0xDE00

    def test_wraps_to_signed_32_bit(self):
        value = stable_hash("S1-01 EVA PROM REPLICANT TITAN")
        assert -(2**31) <= value < 2**31

    def test_same_input_same_hash(self):
        assert stable_hash("S2-03") == stable_hash("S2-03")

    def test_percentile_bucket_uses_absolute_value(self):
        assert percentile_bucket(-57) == 57
        assert percentile_bucket(65, multiplier=2) == 30


class TestEquipmentFailures:
    def test_upper_case_letter_has_no_failures(self):
        for letter in "ABCDEFGHIJKLMNOPQRSTUVWXYZ":
            assert determine_equipment_failures(letter) == []

    def test_empty_id_fails_both(self):
        assert determine_equipment_failures("") == [
            EquipmentType.BPM_MONITOR,
            EquipmentType.BIOMETRIC_SCANNER,
        ]

    def test_bpm_only(self):
        assert determine_equipment_failures("aj") == [EquipmentType.BPM_MONITOR]

    def test_biometric_only(self):
        assert determine_equipment_failures("7") == [EquipmentType.BIOMETRIC_SCANNER]

    def test_repeatable(self):
        for subject_id in ("S1-01", "S1-02", "S1-10", "S3-03", "d", "aj"):
            assert determine_equipment_failures(subject_id) == determine_equipment_failures(
                subject_id
            )

    def test_status_helpers(self):
        failures = determine_equipment_failures("d")
        assert not is_bpm_data_available(failures)
        assert not is_biometric_scanner_working(failures)
        assert is_bpm_data_available([])
        assert is_biometric_scanner_working([])

    def test_ledger_seeded_from_failures(self):
        ledger = create_empty_ledger(determine_equipment_failures("aj"))
        assert ledger.has_equipment_failure
        assert ledger.bpm_data_available is False
        assert ledger.biometric_scanner_working is True
