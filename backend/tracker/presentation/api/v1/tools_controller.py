"""Tool-call surface — exposes the query processor as a callable tool."""

from fastapi import APIRouter, Depends

from tracker.application.schemas.query import (
    QueryRequest,
    QueryResponseSchema,
    ToolContent,
    ToolDescriptor,
    ToolResult,
)
from tracker.application.services import QueryProcessor
from tracker.infrastructure.dependencies import get_query_processor

router = APIRouter(prefix="/tools", tags=["tools"])

NATURAL_LANGUAGE_QUERY = ToolDescriptor(
    name="natural_language_query",
    description=(
        "Process natural language queries about tasks, people and projects "
        "with entity discovery and analysis"
    ),
    input_schema=QueryRequest.model_json_schema(),
)


@router.get("", response_model=list[ToolDescriptor])
async def list_tools():
    """List the tools this service exposes."""
    return [NATURAL_LANGUAGE_QUERY]


@router.post("/natural_language_query", response_model=ToolResult)
async def natural_language_query(
    body: QueryRequest,
    processor: QueryProcessor = Depends(get_query_processor),
):
    """Run a query and wrap the JSON result in a text content envelope."""
    response = await processor.process_query(body.prompt)
    payload = QueryResponseSchema.from_domain(response).model_dump_json(by_alias=True, indent=2)
    return ToolResult(content=[ToolContent(type="text", text=payload)])
