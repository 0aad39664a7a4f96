"""Supervisor pattern monitoring."""

from checkpoint.monitoring.patterns import (
    PATTERN_THRESHOLD,
    PatternTracker,
    SupervisorWarning,
    check_warning_patterns,
    create_pattern_tracker,
    reset_pattern_tracker,
)

__all__ = [
    "PATTERN_THRESHOLD",
    "PatternTracker",
    "SupervisorWarning",
    "check_warning_patterns",
    "create_pattern_tracker",
    "reset_pattern_tracker",
]
