from .task import (
    Project,
    ProjectStatus,
    ProjectSummary,
    Task,
    TaskFilters,
    TaskStatus,
)
from .analysis import (
    ProjectComparison,
    RelativePerformance,
    RiskLevel,
    RiskPattern,
    RiskPatternType,
    RiskRecord,
    RiskTrend,
    TeamContext,
    VelocityTrend,
    WorkloadPrediction,
    WorkloadRecord,
)
from .query import (
    DiscoveredEntities,
    EntityMatch,
    ExtractedEntities,
    Intent,
    MatchType,
    ParsedQuery,
    ParsedQueryMetadata,
    QueryAnalysis,
    QueryFilters,
    QueryResponse,
)

__all__ = [
    "Project",
    "ProjectStatus",
    "ProjectSummary",
    "Task",
    "TaskFilters",
    "TaskStatus",
    "ProjectComparison",
    "RelativePerformance",
    "RiskLevel",
    "RiskPattern",
    "RiskPatternType",
    "RiskRecord",
    "RiskTrend",
    "TeamContext",
    "VelocityTrend",
    "WorkloadPrediction",
    "WorkloadRecord",
    "DiscoveredEntities",
    "EntityMatch",
    "ExtractedEntities",
    "Intent",
    "MatchType",
    "ParsedQuery",
    "ParsedQueryMetadata",
    "QueryAnalysis",
    "QueryFilters",
    "QueryResponse",
]
