"""Intent classification by weighted keyword patterns."""

import logging
import re
from dataclasses import dataclass

from tracker.domain.entities import Intent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntentRule:
    intent: Intent
    patterns: tuple[re.Pattern[str], ...]
    weight: float

    def score(self, text: str) -> float:
        return self.weight * sum(1 for pattern in self.patterns if pattern.search(text))


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p) for p in patterns)


# Table order is the tie-break order.
INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(
        Intent.QUERY_TASKS,
        _compile(
            r"show.*tasks",
            r"find.*tasks",
            r"list.*tasks",
            r"get.*tasks",
            r"what.*tasks",
            r"query.*tasks",
        ),
        0.3,
    ),
    IntentRule(
        Intent.ANALYZE_WORKLOAD,
        _compile(
            r"workload",
            r"analyze.*capacity",
            r"how busy",
            r"work.*load",
            r"capacity.*analysis",
        ),
        0.4,
    ),
    IntentRule(
        Intent.ASSESS_RISK,
        _compile(
            r"risk.*assessment",
            r"assess.*risk",
            r"project.*health",
            r"risk.*level",
            r"health.*check",
            r"risk.*for",
            r"what.*risk",
        ),
        0.5,
    ),
    IntentRule(Intent.GENERAL_QUERY, _compile(r".*"), 0.1),
)


class IntentClassifier:
    """Picks the intent whose patterns score highest on the lowercased query.

    A strictly higher score is required to displace an earlier intent.
    Returns ``GENERAL_QUERY`` for blank input or on any failure.
    """

    def __init__(self, rules: tuple[IntentRule, ...] = INTENT_RULES):
        self._rules = rules

    def scores(self, query: str) -> dict[Intent, float]:
        text = query.lower()
        return {rule.intent: round(rule.score(text), 4) for rule in self._rules}

    def classify(self, query: str) -> Intent:
        if not query or not query.strip():
            return Intent.GENERAL_QUERY

        try:
            best_intent = Intent.GENERAL_QUERY
            best_score = 0.0
            for intent, score in self.scores(query).items():
                if score > best_score:
                    best_intent, best_score = intent, score
            logger.debug("Intent classified as %s (score %.2f)", best_intent.value, best_score)
            return best_intent
        except Exception as exc:
            logger.warning("Intent classification failed: %s", exc)
            return Intent.GENERAL_QUERY
