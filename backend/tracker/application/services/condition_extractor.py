"""Condition extraction — status and overdue conditions implied by a query."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from tracker.domain.entities import TaskStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConditionRule:
    """Keywords that, when present as whole words, set the given conditions."""

    name: str
    keywords: tuple[str, ...]
    conditions: dict[str, Any] = field(default_factory=dict)

    def matches(self, text: str) -> bool:
        return any(
            re.search(rf"\b{re.escape(keyword)}\b", text) for keyword in self.keywords
        )


# Evaluated in order; a later rule overwrites the status set by an earlier one,
# so explicit status language beats the status inferred from "overdue".
CONDITION_RULES: tuple[ConditionRule, ...] = (
    ConditionRule(
        "overdue",
        ("overdue", "past due", "late"),
        {"overdue": True, "status": TaskStatus.IN_PROGRESS},
    ),
    ConditionRule("completed", ("completed", "done", "finished"), {"status": TaskStatus.COMPLETED}),
    ConditionRule("todo", ("todo", "to do", "pending"), {"status": TaskStatus.TODO}),
    ConditionRule("in_progress", ("in progress", "working"), {"status": TaskStatus.IN_PROGRESS}),
    ConditionRule("blocked", ("blocked", "stuck"), {"status": TaskStatus.BLOCKED}),
)


class ConditionExtractor:
    """Applies the condition rule table to a query."""

    def __init__(self, rules: tuple[ConditionRule, ...] = CONDITION_RULES):
        self._rules = rules

    def extract(self, query: str) -> dict[str, Any]:
        text = query.lower()
        conditions: dict[str, Any] = {}
        for rule in self._rules:
            if rule.matches(text):
                conditions.update(rule.conditions)
                logger.debug("Condition rule %s matched", rule.name)
        return conditions
