"""Pydantic DTOs for tasks, projects and their analyses."""

from datetime import datetime

from pydantic import BaseModel, Field

from tracker.domain.entities import ProjectStatus, TaskStatus


class ProjectCreate(BaseModel):
    """Schema for creating a new project."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Website Redesign"])
    description: str | None = Field(None, max_length=2000)
    start_date: datetime
    end_date: datetime
    status: ProjectStatus = ProjectStatus.PLANNED


class ProjectResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    name: str
    description: str | None
    status: ProjectStatus
    start_date: datetime
    end_date: datetime
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskCreate(BaseModel):
    """Schema for creating a new task."""

    title: str = Field(..., min_length=1, max_length=255, examples=["Write release notes"])
    description: str | None = Field(None, max_length=2000)
    assignee_name: str = Field(..., min_length=1, max_length=255, examples=["Alice"])
    due_date: datetime
    project_id: str = Field(..., max_length=36)
    status: TaskStatus = TaskStatus.TODO


class TaskResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    title: str
    description: str | None
    assignee_name: str
    status: TaskStatus
    due_date: datetime
    project_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

class WorkloadPredictionSchema(BaseModel):
    next_week_score: int
    next_month_score: int
    burnout_risk: str
    recommended_actions: list[str]


class TeamContextSchema(BaseModel):
    team_average_workload: float
    team_member_count: int
    workload_distribution: dict[str, float]
    top_performers: list[str]
    at_risk_members: list[str]


class WorkloadResponse(BaseModel):
    """Workload analysis for one assignee."""

    assignee: str
    total_tasks: int
    overdue_tasks: int
    workload_score: float
    status_breakdown: dict[str, int]
    efficiency: float
    capacity_utilization: float
    burnout_risk: str
    velocity_trend: str
    risk_factors: list[str]
    insights: list[str]
    recommendations: list[str]
    prediction: WorkloadPredictionSchema | None = None
    team_context: TeamContextSchema | None = None
    requires_attention: bool


class RiskPatternSchema(BaseModel):
    type: str
    severity: str
    confidence: float
    description: str
    indicators: list[str]
    recommendations: list[str]


class ProjectComparisonSchema(BaseModel):
    benchmark_risk: float
    performance_relative: str
    similar_projects: list[str]
    lessons_learned: list[str]


class RiskAssessmentResponse(BaseModel):
    """Delivery risk assessment for one project."""

    project_id: str
    project_name: str
    risk_level: str
    risk_score: float
    progress: int
    total_tasks: int
    overdue_tasks: int
    blocked_tasks: int
    risk_breakdown: dict[str, float]
    trend: str
    patterns: list[RiskPatternSchema]
    early_warnings: list[str]
    insights: list[str]
    recommendations: list[str]
    mitigation_strategies: list[str]
    monitoring_recommendations: list[str]
    comparison: ProjectComparisonSchema | None = None
    requires_attention: bool
