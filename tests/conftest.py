"""Shared pytest configuration: path setup and small catalog fixtures."""

import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parent.parent

# Allow ``from checkpoint import ...`` without an install
sys.path.insert(0, str(_ROOT / "src"))

from checkpoint.catalog.loader import Catalog  # noqa: E402
from checkpoint.domain.enums import Decision, RequiredCheck  # noqa: E402
from checkpoint.domain.models import DirectiveRule, Shift, Subject, TravelEntry  # noqa: E402


# Single upper-case letter ids hash to no equipment failures.


@pytest.fixture
def clean_subject():
    return Subject(
        id="A",
        name="ALICE VANCE",
        warrants="NONE",
        intended_outcome=Decision.APPROVE,
    )


@pytest.fixture
def warrant_subject():
    return Subject(
        id="B",
        name="BORIS KANE",
        warrants="WARRANT NO 88412",
        incidents=1,
        intended_outcome=Decision.DENY,
    )


@pytest.fixture
def travel_subject():
    return Subject(
        id="D",
        name="DMITRI OREL",
        travel_history=[
            TravelEntry(
                origin="MARS",
                destination="CERES",
                date="2183.02.19",
                flagged=True,
                flag_note="Restricted berth",
            ),
            TravelEntry(origin="CERES", destination="EARTH", date="2183.05.07"),
        ],
        intended_outcome=Decision.DENY,
    )


@pytest.fixture
def warrant_shift():
    return Shift(
        id=1,
        directive="DENY ALL SUBJECTS WITH ACTIVE WARRANTS",
        unlocked_checks=["DATABASE"],
        active_rules=["CHECK_WARRANTS"],
        directive_model=DirectiveRule(
            id="SHIFT_1",
            base="WARRANTS",
            required_checks=[RequiredCheck.WARRANT],
            text=["DENY: WARRANTS"],
        ),
    )


@pytest.fixture
def transit_shift():
    return Shift(id=2, active_rules=["CHECK_TRANSIT"])


@pytest.fixture
def small_catalog(clean_subject, warrant_subject, travel_subject, warrant_shift, transit_shift):
    """Two shifts of two subjects: A and B under warrants, C and D under transit."""
    clara = Subject(id="C", name="CLARA HOLT", intended_outcome=Decision.APPROVE)
    return Catalog(
        subjects=(clean_subject, warrant_subject, clara, travel_subject),
        shifts=(warrant_shift, transit_shift),
        subjects_per_shift=2,
    )


@pytest.fixture
def equipment_catalog(warrant_shift, transit_shift):
    """Ids aj, ak and al all hash to a BPM monitor failure only."""
    subjects = (
        Subject(id="aj", name="AJAX MORROW", intended_outcome=Decision.APPROVE),
        Subject(id="ak", name="AKIRA SOL", intended_outcome=Decision.APPROVE),
        Subject(id="al", name="ALMA REYES", intended_outcome=Decision.APPROVE),
    )
    return Catalog(subjects=subjects, shifts=(warrant_shift, transit_shift), subjects_per_shift=2)
