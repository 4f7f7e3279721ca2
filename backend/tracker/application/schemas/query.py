"""Pydantic schemas for natural-language query requests and responses."""

from typing import Any

from pydantic import BaseModel, Field, model_serializer

from tracker.domain.entities import ParsedQuery, QueryResponse

# ── Request Schemas ──────────────────────────────────────────────────


class QueryRequest(BaseModel):
    """Request body for a natural-language query."""

    prompt: str = Field(
        ...,
        min_length=5,
        max_length=500,
        description="Natural language query",
        examples=["Show me Sarah's overdue tasks", "Analyze project health"],
    )


# ── Response Schemas ─────────────────────────────────────────────────


class EntitiesFoundSchema(BaseModel):
    people: list[str] = []
    projects: list[str] = []
    conditions: dict[str, Any] = {}


class QueryAnalysisSchema(BaseModel):
    """How the query was understood."""

    intent_recognized: str
    confidence_score: float
    entities_found: EntitiesFoundSchema
    filters_applied: dict[str, Any] = {}
    processing_time: int = 0
    reasoning: list[str] = []
    debug_info: dict[str, Any] | None = Field(default=None, serialization_alias="debugInfo")


class QueryResponseSchema(BaseModel):
    """Result of a natural-language query."""

    query: str
    success: bool
    data: list[dict[str, Any]] = []
    error: str | None = None
    analysis: QueryAnalysisSchema
    insights: list[str] = []
    recommendations: list[str] = []
    suggestions: list[str] | None = None

    @model_serializer(mode="wrap")
    def _omit_unset_optionals(self, handler):
        data = handler(self)
        for key in ("error", "suggestions"):
            if data.get(key) is None:
                data.pop(key, None)
        return data

    @classmethod
    def from_domain(cls, response: QueryResponse) -> "QueryResponseSchema":
        analysis = response.analysis
        return cls(
            query=response.query,
            success=response.success,
            data=response.data,
            error=response.error,
            analysis=QueryAnalysisSchema(
                intent_recognized=analysis.intent_recognized,
                confidence_score=analysis.confidence_score,
                entities_found=EntitiesFoundSchema(**analysis.entities_found),
                filters_applied=analysis.filters_applied,
                processing_time=analysis.processing_time,
                reasoning=analysis.reasoning,
                debug_info=analysis.debug_info,
            ),
            insights=response.insights,
            recommendations=response.recommendations,
            suggestions=response.suggestions,
        )


class ParsedQueryMetadataSchema(BaseModel):
    original_query: str
    processing_time_ms: int
    reasoning: list[str] = []
    suggestions: list[str] = []
    debug_info: dict[str, Any] | None = None


class ParsedQuerySchema(BaseModel):
    """Structured interpretation of a query, without executing it."""

    intent: str
    entities: EntitiesFoundSchema
    filters: dict[str, Any] = {}
    confidence: float
    metadata: ParsedQueryMetadataSchema

    @classmethod
    def from_domain(cls, parsed: ParsedQuery) -> "ParsedQuerySchema":
        return cls(
            intent=parsed.intent.value,
            entities=EntitiesFoundSchema(**parsed.entities.as_dict()),
            filters=parsed.filters.as_dict(),
            confidence=parsed.confidence,
            metadata=ParsedQueryMetadataSchema(
                original_query=parsed.metadata.original_query,
                processing_time_ms=parsed.metadata.processing_time_ms,
                reasoning=list(parsed.metadata.reasoning),
                suggestions=list(parsed.metadata.suggestions),
                debug_info=parsed.metadata.debug_info,
            ),
        )


# ── Tool Schemas ─────────────────────────────────────────────────────


class ToolDescriptor(BaseModel):
    """Describes a callable tool and its input schema."""

    name: str
    description: str
    input_schema: dict[str, Any] = Field(serialization_alias="inputSchema")


class ToolContent(BaseModel):
    type: str = "text"
    text: str


class ToolResult(BaseModel):
    """Tool-call envelope: the payload is serialized JSON text."""

    content: list[ToolContent]
