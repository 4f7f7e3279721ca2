"""Domain entities for natural-language tracker queries.

A raw sentence is parsed once into a ``ParsedQuery`` and consumed once by the
query processor, which turns it into a ``QueryResponse``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .task import TaskStatus


class Intent(str, Enum):
    """What the user wants done. Exactly one per query."""

    QUERY_TASKS = "query_tasks"
    ANALYZE_WORKLOAD = "analyze_workload"
    ASSESS_RISK = "assess_risk"
    GENERAL_QUERY = "general_query"  # catch-all


class MatchType(str, Enum):
    """How an entity was recognized in the query text."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    PATTERN = "pattern"


@dataclass(frozen=True)
class EntityMatch:
    """A person or project recognized in the query.

    ``confidence`` is 1.0 exactly when ``match_type`` is ``EXACT``.
    """

    matched_value: str
    confidence: float
    match_type: MatchType
    suggestion: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")
        if (self.confidence == 1.0) != (self.match_type == MatchType.EXACT):
            raise ValueError(
                f"{self.match_type.value} match cannot have confidence {self.confidence}"
            )


@dataclass
class DiscoveredEntities:
    """Ranked entity matches plus what could not be recognized."""

    people: list[EntityMatch] = field(default_factory=list)
    projects: list[EntityMatch] = field(default_factory=list)
    unknown_entities: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExtractedEntities:
    """Entity identifiers in discovery order; the first of each is primary."""

    people: tuple[str, ...] = ()
    projects: tuple[str, ...] = ()
    conditions: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "people": list(self.people),
            "projects": list(self.projects),
            "conditions": {
                key: value.value if isinstance(value, Enum) else value
                for key, value in self.conditions.items()
            },
        }


@dataclass(frozen=True)
class QueryFilters:
    """Sparse filters derived from the extracted entities."""

    assignee_name: str | None = None
    status: TaskStatus | None = None
    overdue: bool | None = None
    project_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Render only the keys that are set, using the wire names."""
        data: dict[str, Any] = {}
        if self.assignee_name:
            data["assigneeName"] = self.assignee_name
        if self.status:
            data["status"] = self.status.value
        if self.overdue:
            data["overdue"] = True
        if self.project_id:
            data["projectId"] = self.project_id
        return data


@dataclass(frozen=True)
class ParsedQueryMetadata:
    original_query: str
    processing_time_ms: int
    reasoning: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    debug_info: dict[str, Any] | None = None


@dataclass(frozen=True)
class ParsedQuery:
    """The single contract handed from parsing to execution."""

    intent: Intent
    entities: ExtractedEntities
    filters: QueryFilters
    confidence: float
    metadata: ParsedQueryMetadata


@dataclass
class QueryAnalysis:
    """How the query was understood — echoed back in every response."""

    intent_recognized: str
    confidence_score: float
    entities_found: dict[str, Any] = field(
        default_factory=lambda: {"people": [], "projects": [], "conditions": {}}
    )
    filters_applied: dict[str, Any] = field(default_factory=dict)
    processing_time: int = 0
    reasoning: list[str] = field(default_factory=list)
    debug_info: dict[str, Any] | None = None


@dataclass
class QueryResponse:
    """Externally observable result of a natural-language query."""

    query: str
    success: bool
    analysis: QueryAnalysis
    data: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None
    insights: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    suggestions: list[str] | None = None
