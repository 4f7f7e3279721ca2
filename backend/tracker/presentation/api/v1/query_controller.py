"""Query API controller — endpoints for natural-language tracker queries."""

from fastapi import APIRouter, Depends

from tracker.application.schemas.query import (
    ParsedQuerySchema,
    QueryRequest,
    QueryResponseSchema,
)
from tracker.application.services import QueryParser, QueryProcessor
from tracker.infrastructure.dependencies import get_query_parser, get_query_processor

router = APIRouter(prefix="/query", tags=["query"])


@router.post("", response_model=QueryResponseSchema)
async def execute_query(
    body: QueryRequest,
    processor: QueryProcessor = Depends(get_query_processor),
):
    """Interpret a natural-language query and run it against the tracker.

    Unclear or unresolvable queries still return 200 with ``success=false``.
    """
    response = await processor.process_query(body.prompt)
    return QueryResponseSchema.from_domain(response)


@router.post("/parse", response_model=ParsedQuerySchema)
async def parse_query(
    body: QueryRequest,
    parser: QueryParser = Depends(get_query_parser),
):
    """Interpret a query only (no data access beyond entity lookup) — useful for debugging."""
    parsed = await parser.parse_query(body.prompt)
    return ParsedQuerySchema.from_domain(parsed)
