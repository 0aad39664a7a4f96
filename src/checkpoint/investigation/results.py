"""Result structures for operator actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from checkpoint.domain.enums import QueryCategory
from checkpoint.investigation.costs import ActionType

if TYPE_CHECKING:
    from checkpoint.monitoring.patterns import SupervisorWarning
    from checkpoint.scoring.consequence import Consequence


class ActionOutcome(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"
    NO_EFFECT = "no_effect"


@dataclass(frozen=True)
class ActionResult:
    action: ActionType
    outcome: ActionOutcome
    summary: str
    category: QueryCategory | None = None
    notes: list[str] = field(default_factory=list)
    consequence: "Consequence | None" = None
    warning: "SupervisorWarning | None" = None

    @property
    def accepted(self) -> bool:
        return self.outcome != ActionOutcome.FAILURE


def rejected(action: ActionType, summary: str, category: QueryCategory | None = None) -> ActionResult:
    return ActionResult(
        action=action,
        outcome=ActionOutcome.FAILURE,
        summary=summary,
        category=category,
    )


def unchanged(action: ActionType, summary: str, category: QueryCategory | None = None) -> ActionResult:
    return ActionResult(
        action=action,
        outcome=ActionOutcome.NO_EFFECT,
        summary=summary,
        category=category,
    )
