from .query import (
    ParsedQuerySchema,
    QueryAnalysisSchema,
    QueryRequest,
    QueryResponseSchema,
    ToolContent,
    ToolDescriptor,
    ToolResult,
)
from .tracker import (
    ProjectCreate,
    ProjectResponse,
    RiskAssessmentResponse,
    TaskCreate,
    TaskResponse,
    WorkloadResponse,
)

__all__ = [
    "ParsedQuerySchema",
    "QueryAnalysisSchema",
    "QueryRequest",
    "QueryResponseSchema",
    "ToolContent",
    "ToolDescriptor",
    "ToolResult",
    "ProjectCreate",
    "ProjectResponse",
    "RiskAssessmentResponse",
    "TaskCreate",
    "TaskResponse",
    "WorkloadResponse",
]
