"""Query parser — turns a raw sentence into a ``ParsedQuery``.

Pipeline:
  classify intent → discover entities → extract conditions →
  build filters → score confidence → assemble reasoning trail.

Any failure produces a fixed low-confidence fallback instead of an error.
"""

import logging
import time

from tracker.application.services.condition_extractor import ConditionExtractor
from tracker.application.services.confidence_scorer import ConfidenceScorer
from tracker.application.services.entity_discovery import EntityDiscovery
from tracker.application.services.intent_classifier import IntentClassifier
from tracker.domain.entities import (
    DiscoveredEntities,
    EntityMatch,
    ExtractedEntities,
    Intent,
    ParsedQuery,
    ParsedQueryMetadata,
    QueryFilters,
)
from tracker.domain.exceptions import EmptyQueryError

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 0.3


class QueryParser:
    """Orchestrates the intent pipeline for a single query."""

    def __init__(
        self,
        classifier: IntentClassifier,
        discovery: EntityDiscovery,
        conditions: ConditionExtractor,
        scorer: ConfidenceScorer,
        *,
        debug_mode: bool = False,
    ):
        self._classifier = classifier
        self._discovery = discovery
        self._conditions = conditions
        self._scorer = scorer
        self._debug_mode = debug_mode

    async def parse_query(self, text: str) -> ParsedQuery:
        start = time.monotonic()
        try:
            if not text or not text.strip():
                raise EmptyQueryError()

            intent = self._classifier.classify(text)
            discovered = await self._discovery.discover(text)
            entities = ExtractedEntities(
                people=tuple(m.matched_value for m in discovered.people),
                projects=tuple(_project_identifier(m) for m in discovered.projects),
                conditions=self._conditions.extract(text),
            )
            filters = build_filters(entities)
            assessment = self._scorer.assess(intent, entities, filters, text)

            reasoning = build_reasoning(intent, entities, filters)
            reasoning.extend(assessment.reasoning)

            duration_ms = int((time.monotonic() - start) * 1000)
            parsed = ParsedQuery(
                intent=intent,
                entities=entities,
                filters=filters,
                confidence=assessment.score,
                metadata=ParsedQueryMetadata(
                    original_query=text,
                    processing_time_ms=duration_ms,
                    reasoning=tuple(reasoning),
                    suggestions=tuple(discovered.suggestions),
                    debug_info=(
                        self._debug_info(text, intent, entities, filters, discovered)
                        if self._debug_mode
                        else None
                    ),
                ),
            )
            logger.info(
                "Parsed query %r: intent=%s confidence=%.2f filters=%s (%dms)",
                text,
                intent.value,
                assessment.score,
                filters.as_dict(),
                duration_ms,
            )
            return parsed
        except Exception as exc:
            logger.warning("Query parsing failed for %r: %s", text, exc)
            return fallback_query(text, exc)

    def _debug_info(
        self,
        text: str,
        intent: Intent,
        entities: ExtractedEntities,
        filters: QueryFilters,
        discovered: DiscoveredEntities,
    ) -> dict:
        return {
            "intent": intent.value,
            "intent_scores": {k.value: v for k, v in self._classifier.scores(text).items()},
            "entities": entities.as_dict(),
            "filters": filters.as_dict(),
            "matches": {
                "people": [_match_debug(m) for m in discovered.people],
                "projects": [_match_debug(m) for m in discovered.projects],
            },
            "unknown_entities": list(discovered.unknown_entities),
        }


def build_filters(entities: ExtractedEntities) -> QueryFilters:
    """First person and first project only; conditions copied through."""
    return QueryFilters(
        assignee_name=entities.people[0] if entities.people else None,
        project_id=entities.projects[0] if entities.projects else None,
        status=entities.conditions.get("status"),
        overdue=True if entities.conditions.get("overdue") else None,
    )


def build_reasoning(
    intent: Intent, entities: ExtractedEntities, filters: QueryFilters
) -> list[str]:
    reasoning = [f"Intent: {intent.value}"]
    if entities.people:
        reasoning.append(f"People: {', '.join(entities.people)}")
        if len(entities.people) > 1:
            reasoning.append(
                f"Additional people ignored for filtering: {', '.join(entities.people[1:])}"
            )
    if entities.projects:
        reasoning.append(f"Projects: {', '.join(entities.projects)}")
    if filters.assignee_name:
        reasoning.append(f"Assignee: {filters.assignee_name}")
    if filters.status:
        reasoning.append(f"Status: {filters.status.value}")
    if filters.overdue:
        reasoning.append("Overdue filter applied")
    return reasoning


def fallback_query(text: str, error: Exception) -> ParsedQuery:
    return ParsedQuery(
        intent=Intent.GENERAL_QUERY,
        entities=ExtractedEntities(),
        filters=QueryFilters(),
        confidence=FALLBACK_CONFIDENCE,
        metadata=ParsedQueryMetadata(
            original_query=text,
            processing_time_ms=0,
            reasoning=(
                "Fallback query created due to parsing error",
                f"Error: {error}",
                "Consider rephrasing your query",
            ),
        ),
    )


def _project_identifier(match: EntityMatch) -> str:
    return match.metadata.get("project_id") or match.matched_value


def _match_debug(match: EntityMatch) -> dict:
    return {
        "value": match.matched_value,
        "confidence": match.confidence,
        "type": match.match_type.value,
        "pattern": match.metadata.get("pattern"),
    }
