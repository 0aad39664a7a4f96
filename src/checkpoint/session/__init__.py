"""Session progression and snapshots."""

from checkpoint.session.progression import ProgressionController
from checkpoint.session.snapshot import (
    SAVE_VERSION,
    AlertRecord,
    DecisionRecord,
    SessionSnapshot,
    ShiftStats,
)

__all__ = [
    "SAVE_VERSION",
    "AlertRecord",
    "DecisionRecord",
    "ProgressionController",
    "SessionSnapshot",
    "ShiftStats",
]
