"""Run-level defaults and policy parameters."""

from __future__ import annotations

from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parent
DEFAULT_CATALOG_PATH = PACKAGE_ROOT / "data" / "catalog.yml"
DEFAULT_DB_PATH = Path("checkpoint_save.sqlite3")

SUBJECTS_PER_SHIFT = 3
STARTING_CREDITS = 100

# Whether the cumulative infraction counter used for severity escalation
# starts over at each shift, or carries across the whole run.
RESET_INFRACTIONS_ON_SHIFT = False
