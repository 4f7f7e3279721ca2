"""Query processor — executes a parsed query and explains the result.

Flow:
  1. Parse the sentence into a ``ParsedQuery``.
  2. Gate: reject low-confidence or meaningless input before any data call.
  3. Dispatch on intent to the task directory.
  4. Derive insights and recommendations from the returned data.
  5. Post-check: a weak parse with nobody recognized becomes "Person not found".

``process_query`` never raises; every failure becomes a ``success=False``
response that carries recommendations.
"""

import logging
import re
import time
from collections import Counter
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from tracker.application.interfaces import TaskDirectory
from tracker.application.services.entity_directory_cache import EntityDirectoryCache
from tracker.application.services.entity_discovery import available_people_hint
from tracker.application.services.query_parser import QueryParser
from tracker.domain.entities import (
    Intent,
    ParsedQuery,
    QueryAnalysis,
    QueryResponse,
    Task,
    TaskFilters,
    TaskStatus,
)
from tracker.domain.exceptions import MissingEntityError
from tracker.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("tracker.query_pipeline")

GATE_CONFIDENCE = 0.3
GATE_PENALTY = 0.3
PERSON_NOT_FOUND_CONFIDENCE = 0.5
REDISTRIBUTE_ABOVE_OVERDUE = 3

WORKLOAD_NEEDS_PERSON = "Workload analysis requires a person name"
RISK_NEEDS_PROJECT = "Risk assessment requires a project identifier"

# ── Meaningless-input detection ─────────────────────────────────────

_MEANINGFUL_WORDS = (
    "task", "tasks", "show", "find", "get", "all", "my", "the", "for", "with",
    "by", "from", "to", "and", "or", "but", "in", "on", "at", "is", "are",
    "was", "were", "be", "been", "being", "have", "has", "had", "do", "does",
    "did", "will", "would", "could", "should", "can", "may", "might", "must",
    "shall",
)
_RANDOM_CASE_MIX = re.compile(r"^[a-z]{2,}[A-Z]{2,}[a-z]{2,}$")
_ONLY_NON_LETTERS = re.compile(r"^[^a-zA-Z\s]+$")


def is_meaningless_query(text: str) -> bool:
    """No vocabulary word, random case mixing, too short, or no letters at all."""
    stripped = text.strip()
    lowered = stripped.lower()
    return (
        not any(word in lowered for word in _MEANINGFUL_WORDS)
        or bool(_RANDOM_CASE_MIX.match(stripped))
        or len(stripped) < 3
        or bool(_ONLY_NON_LETTERS.match(stripped))
    )


# ── Insight synthesis ───────────────────────────────────────────────


def task_insights(tasks: list[Task], now: datetime) -> list[str]:
    if not tasks:
        return ["No tasks found matching the specified criteria"]

    counts = Counter(task.status for task in tasks)
    overdue = sum(1 for task in tasks if task.is_overdue(now))
    insights = [f"Found {len(tasks)} tasks total"]
    if counts[TaskStatus.IN_PROGRESS]:
        insights.append(f"{counts[TaskStatus.IN_PROGRESS]} tasks currently in progress")
    if overdue:
        insights.append(f"{overdue} tasks are overdue and need immediate attention")
    if counts[TaskStatus.BLOCKED]:
        insights.append(f"{counts[TaskStatus.BLOCKED]} tasks are blocked and may require intervention")
    return insights


def task_recommendations(tasks: list[Task], now: datetime) -> list[str]:
    if not tasks:
        return [
            "Consider adjusting search criteria or checking if tasks exist "
            "for the specified filters"
        ]

    recommendations: list[str] = []
    overdue = sum(1 for task in tasks if task.is_overdue(now))
    if overdue:
        recommendations.append("Prioritize overdue tasks to prevent project delays")
        if overdue > REDISTRIBUTE_ABOVE_OVERDUE:
            recommendations.append("Consider redistributing workload or extending deadlines")
    if any(task.status == TaskStatus.BLOCKED for task in tasks):
        recommendations.append("Address blocked tasks by resolving dependencies or obstacles")
    return recommendations


class QueryProcessor:
    """Runs natural-language queries end to end."""

    def __init__(
        self,
        parser: QueryParser,
        directory: TaskDirectory,
        directory_cache: EntityDirectoryCache,
        *,
        clock: Callable[[], datetime] | None = None,
    ):
        self._parser = parser
        self._directory = directory
        self._directory_cache = directory_cache
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def process_query(self, text: str) -> QueryResponse:
        start = time.monotonic()
        try:
            plog.step_start(PipelineStage.PARSE, f"Query: {text!r}")
            parsed = await self._parser.parse_query(text)
            plog.detail(
                f"Intent {parsed.intent.value}",
                confidence=parsed.confidence,
                filters=parsed.filters.as_dict(),
            )

            if parsed.confidence < GATE_CONFIDENCE or is_meaningless_query(text):
                plog.step_warning(
                    PipelineStage.GATE, "Query too unclear to process", confidence=parsed.confidence
                )
                return await self._unclear_response(text, parsed, _elapsed_ms(start))

            plog.step_start(PipelineStage.DISPATCH, f"Dispatching {parsed.intent.value}")
            data, insights, recommendations = await self._dispatch(parsed)

            response = QueryResponse(
                query=text,
                success=True,
                data=data,
                analysis=QueryAnalysis(
                    intent_recognized=parsed.intent.value,
                    confidence_score=parsed.confidence,
                    entities_found=parsed.entities.as_dict(),
                    filters_applied=parsed.filters.as_dict(),
                    processing_time=_elapsed_ms(start),
                    reasoning=list(parsed.metadata.reasoning),
                    debug_info=parsed.metadata.debug_info,
                ),
                insights=insights,
                recommendations=recommendations,
            )

            if parsed.confidence < PERSON_NOT_FOUND_CONFIDENCE and not parsed.entities.people:
                return await self._person_not_found(response)

            suggestions = self._suggestions(parsed, data)
            if suggestions:
                response.suggestions = suggestions
            plog.step_complete(
                PipelineStage.COMPLETE,
                f"{len(data)} result(s)",
                elapsed_ms=response.analysis.processing_time,
            )
            return response
        except Exception as exc:
            plog.step_error(PipelineStage.ERROR, f"Query processing failed for {text!r}", error=exc)
            return _error_response(text, exc, _elapsed_ms(start))

    # ── Dispatch ────────────────────────────────────────────────────

    async def _dispatch(
        self, parsed: ParsedQuery
    ) -> tuple[list[dict[str, Any]], list[str], list[str]]:
        filters = parsed.filters

        if parsed.intent == Intent.QUERY_TASKS:
            tasks = await self._list_tasks(
                TaskFilters(
                    assignee_name=filters.assignee_name,
                    status=filters.status,
                    overdue=filters.overdue,
                    project_id=filters.project_id,
                )
            )
            return self._task_result(tasks)

        if parsed.intent == Intent.ANALYZE_WORKLOAD:
            if not filters.assignee_name:
                raise MissingEntityError(parsed.intent.value, "person", WORKLOAD_NEEDS_PERSON)
            workload = await self._directory.get_workload_analysis(filters.assignee_name)
            return [workload.to_dict()], list(workload.insights), list(workload.recommendations)

        if parsed.intent == Intent.ASSESS_RISK:
            if not filters.project_id:
                raise MissingEntityError(parsed.intent.value, "project", RISK_NEEDS_PROJECT)
            risk = await self._directory.get_risk_assessment(filters.project_id)
            return [risk.to_dict()], list(risk.insights), list(risk.recommendations)

        # General query: narrow by what was recognized, most specific first.
        entities = parsed.entities
        if entities.people:
            scope = TaskFilters(assignee_name=entities.people[0])
        elif entities.projects:
            scope = TaskFilters(project_id=entities.projects[0])
        else:
            scope = None
        return self._task_result(await self._list_tasks(scope))

    async def _list_tasks(self, filters: TaskFilters | None) -> list[Task]:
        try:
            return await self._directory.list_tasks(filters)
        except Exception as exc:
            logger.warning("Task listing failed: %s", exc)
            return []

    def _task_result(
        self, tasks: list[Task]
    ) -> tuple[list[dict[str, Any]], list[str], list[str]]:
        now = self._clock()
        return (
            [task.to_dict() for task in tasks],
            task_insights(tasks, now),
            task_recommendations(tasks, now),
        )

    # ── Failure responses ───────────────────────────────────────────

    async def _unclear_response(
        self, text: str, parsed: ParsedQuery, elapsed_ms: int
    ) -> QueryResponse:
        error = "Invalid or unclear query"
        if parsed.intent == Intent.ANALYZE_WORKLOAD and not parsed.filters.assignee_name:
            error = WORKLOAD_NEEDS_PERSON
        elif parsed.intent == Intent.ASSESS_RISK and not parsed.filters.project_id:
            error = RISK_NEEDS_PROJECT

        recommendations = [
            "Please provide a clear query about tasks, people, or projects",
            'Try asking about specific people like "show me Alice tasks"',
            'Or ask about general task status like "show me all tasks"',
        ]
        recommendations.extend(await self._people_hint())

        return QueryResponse(
            query=text,
            success=False,
            error=error,
            analysis=QueryAnalysis(
                intent_recognized=parsed.intent.value,
                confidence_score=round(max(0.1, parsed.confidence - GATE_PENALTY), 4),
                processing_time=elapsed_ms,
                reasoning=["Query too unclear or meaningless to process"],
                debug_info=parsed.metadata.debug_info,
            ),
            insights=["The query could not be understood"],
            recommendations=recommendations,
        )

    async def _person_not_found(self, response: QueryResponse) -> QueryResponse:
        plog.step_warning(PipelineStage.COMPLETE, "Person not found", query=response.query)
        response.success = False
        response.error = "Person not found"
        response.data = []
        response.insights = ["The requested person was not found in the system"]
        response.recommendations = [
            "Check the spelling of the person's name",
            "Try using the exact name as it appears in the system",
            *await self._people_hint(),
        ]
        return response

    async def _people_hint(self) -> list[str]:
        people = await self._directory_cache.get_people()
        return [available_people_hint(people)] if people else []

    # ── Follow-up suggestions ───────────────────────────────────────

    @staticmethod
    def _suggestions(parsed: ParsedQuery, data: list[dict[str, Any]]) -> list[str]:
        suggestions = list(parsed.metadata.suggestions)

        if parsed.entities.people and parsed.intent != Intent.ANALYZE_WORKLOAD:
            suggestions.append(f"Analyze {parsed.entities.people[0]}'s workload")

        project_id = parsed.filters.project_id
        if not project_id and data and parsed.intent != Intent.ASSESS_RISK:
            project_id = data[0].get("project_id")
        if project_id and parsed.intent != Intent.ASSESS_RISK:
            suggestions.append(f"Assess risk for project {project_id}")
        return suggestions


def _error_response(text: str, error: Exception, elapsed_ms: int) -> QueryResponse:
    return QueryResponse(
        query=text,
        success=False,
        error=str(error),
        analysis=QueryAnalysis(
            intent_recognized="error",
            confidence_score=0.0,
            processing_time=elapsed_ms,
            reasoning=[f"Error: {error}"],
        ),
        insights=["Query processing encountered an error"],
        recommendations=[
            "Try being more specific with names and project references",
            'Use queries like: "Show Sarah\'s overdue tasks" or "Analyze project health"',
            "Check that referenced people and projects exist in the system",
        ],
    )


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
