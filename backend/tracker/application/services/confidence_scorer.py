"""Confidence scoring for a parsed query.

Starts from a base score and applies independent adjustments, each of which
leaves a reasoning entry behind. The result is clamped to [0.1, 1.0].
"""

import logging
import re
from dataclasses import dataclass

from tracker.domain.entities import ExtractedEntities, Intent, QueryFilters

logger = logging.getLogger(__name__)

# ── Weights ─────────────────────────────────────────────────────────

_BASE = 0.4
_W_SPECIFIC_INTENT = 0.2
_W_PERSON = 0.15
_W_PROJECT = 0.10
_P_MISSING_PERSON = 0.3
_P_WORKLOAD_WITHOUT_PERSON = 0.4
_P_RISK_WITHOUT_PROJECT = 0.4
_W_PER_FILTER = 0.05
_W_FILTERS_CAP = 0.15
_W_CONSISTENT = 0.1
_W_COMPLEX = 0.05
_COMPLEXITY_THRESHOLD = 0.5

MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 1.0
FALLBACK_CONFIDENCE = 0.5

# ── Person-reference shapes ─────────────────────────────────────────

_POSSESSIVE = re.compile(r"\b[a-z]+'s\s+(tasks|workload|projects|work)\b")
_ASSIGNED_TO = re.compile(r"assigned\s+to\s+[a-z]+")
_CAPITALIZED = re.compile(r"\b[A-Z][a-z]+\b")
_WORD_BEFORE_NOUN = re.compile(r"\b([a-z]+)\s+(tasks|workload|projects|work)\b")


@dataclass(frozen=True)
class ConfidenceAssessment:
    score: float
    reasoning: tuple[str, ...] = ()


def has_person_reference(query: str, filters: QueryFilters | None = None) -> bool:
    """Does the text look like it names a person?"""
    if filters is not None and filters.assignee_name:
        return True
    if not query:
        return False

    lowered = query.lower()
    if _POSSESSIVE.search(lowered) or _ASSIGNED_TO.search(lowered):
        return True
    if _CAPITALIZED.search(query):
        return True
    return bool(_WORD_BEFORE_NOUN.search(lowered))


def intent_is_consistent(intent: Intent, entities: ExtractedEntities) -> bool:
    """Workload needs a person and risk needs a project; everything else passes."""
    if intent == Intent.ANALYZE_WORKLOAD:
        return bool(entities.people)
    if intent == Intent.ASSESS_RISK:
        return bool(entities.projects)
    return True


def query_complexity(entities: ExtractedEntities, filters: QueryFilters) -> float:
    complexity = 0.2 * len(entities.people) + 0.2 * len(entities.projects)
    complexity += 0.1 * len(filters.as_dict())
    return min(complexity, 1.0)


class ConfidenceScorer:
    """Scores how well a query was understood."""

    def score(
        self,
        intent: Intent,
        entities: ExtractedEntities,
        filters: QueryFilters,
        original_query: str = "",
    ) -> float:
        return self.assess(intent, entities, filters, original_query).score

    def assess(
        self,
        intent: Intent,
        entities: ExtractedEntities,
        filters: QueryFilters,
        original_query: str = "",
    ) -> ConfidenceAssessment:
        try:
            confidence = _BASE
            reasoning: list[str] = []

            if intent != Intent.GENERAL_QUERY:
                confidence += _W_SPECIFIC_INTENT
                reasoning.append(f"Intent recognized: {intent.value}")

            if entities.people:
                confidence += _W_PERSON
                reasoning.append(
                    f"Found {len(entities.people)} person(s): {', '.join(entities.people)}"
                )
            if entities.projects:
                confidence += _W_PROJECT
                reasoning.append(
                    f"Found {len(entities.projects)} project(s): {', '.join(entities.projects)}"
                )

            if (
                intent in (Intent.QUERY_TASKS, Intent.GENERAL_QUERY)
                and not entities.people
                and has_person_reference(original_query, filters)
            ):
                confidence -= _P_MISSING_PERSON
                reasoning.append("Person requested but not found - confidence reduced")

            if intent == Intent.ANALYZE_WORKLOAD and not entities.people:
                confidence -= _P_WORKLOAD_WITHOUT_PERSON
                reasoning.append("Workload analysis requires a person - confidence reduced")

            if intent == Intent.ASSESS_RISK and not entities.projects:
                confidence -= _P_RISK_WITHOUT_PROJECT
                reasoning.append("Risk assessment requires a project - confidence reduced")

            filter_count = len(filters.as_dict())
            if filter_count:
                confidence += min(filter_count * _W_PER_FILTER, _W_FILTERS_CAP)
                reasoning.append(f"Applied {filter_count} filter(s)")

            if intent_is_consistent(intent, entities):
                confidence += _W_CONSISTENT
                reasoning.append("Context validation passed")

            if query_complexity(entities, filters) > _COMPLEXITY_THRESHOLD:
                confidence += _W_COMPLEX
                reasoning.append("Complex query detected")

            final = round(max(MIN_CONFIDENCE, min(confidence, MAX_CONFIDENCE)), 4)
            logger.debug("Confidence %.2f: %s", final, reasoning)
            return ConfidenceAssessment(score=final, reasoning=tuple(reasoning))
        except Exception as exc:
            logger.warning("Confidence scoring failed: %s", exc)
            return ConfidenceAssessment(
                score=FALLBACK_CONFIDENCE,
                reasoning=("Confidence scoring failed - using fallback",),
            )
