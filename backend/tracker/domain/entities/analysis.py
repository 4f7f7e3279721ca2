"""Domain entities for workload and risk analysis records."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class RiskLevel(str, Enum):
    """Severity bands shared by project risk and burnout risk."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class RiskTrend(str, Enum):
    """Direction a project's risk is heading."""

    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    DETERIORATING = "DETERIORATING"
    CRITICAL = "CRITICAL"


class VelocityTrend(str, Enum):
    """Direction of a person's completion rate."""

    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    DECLINING = "DECLINING"


class RiskPatternType(str, Enum):
    SCHEDULE_RISK = "SCHEDULE_RISK"
    RESOURCE_RISK = "RESOURCE_RISK"
    QUALITY_RISK = "QUALITY_RISK"
    DEPENDENCY_RISK = "DEPENDENCY_RISK"


class RelativePerformance(str, Enum):
    """Project risk compared with the portfolio benchmark."""

    BETTER = "BETTER"
    SIMILAR = "SIMILAR"
    WORSE = "WORSE"


@dataclass
class WorkloadPrediction:
    """Projected workload score from the current velocity trend."""

    next_week_score: int
    next_month_score: int
    burnout_risk: RiskLevel = RiskLevel.LOW
    recommended_actions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["burnout_risk"] = self.burnout_risk.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkloadPrediction":
        return cls(
            next_week_score=int(data.get("next_week_score", 0)),
            next_month_score=int(data.get("next_month_score", 0)),
            burnout_risk=RiskLevel(data.get("burnout_risk", RiskLevel.LOW.value)),
            recommended_actions=list(data.get("recommended_actions") or []),
        )


@dataclass
class TeamContext:
    """How one person's workload compares with everyone holding tasks."""

    team_average_workload: float
    team_member_count: int
    workload_distribution: dict[str, float] = field(default_factory=dict)
    top_performers: list[str] = field(default_factory=list)
    at_risk_members: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TeamContext":
        return cls(
            team_average_workload=float(data.get("team_average_workload", 0.0)),
            team_member_count=int(data.get("team_member_count", 0)),
            workload_distribution=dict(data.get("workload_distribution") or {}),
            top_performers=list(data.get("top_performers") or []),
            at_risk_members=list(data.get("at_risk_members") or []),
        )


@dataclass
class RiskPattern:
    """A recognized shape of project trouble with its own remedies."""

    type: RiskPatternType
    severity: RiskLevel
    confidence: float
    description: str
    indicators: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        data["severity"] = self.severity.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RiskPattern":
        return cls(
            type=RiskPatternType(data["type"]),
            severity=RiskLevel(data.get("severity", RiskLevel.LOW.value)),
            confidence=float(data.get("confidence", 0.0)),
            description=data.get("description", ""),
            indicators=list(data.get("indicators") or []),
            recommendations=list(data.get("recommendations") or []),
        )


@dataclass
class ProjectComparison:
    """A project's risk against the other projects in the tracker."""

    benchmark_risk: float
    performance_relative: RelativePerformance
    similar_projects: list[str] = field(default_factory=list)
    lessons_learned: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["performance_relative"] = self.performance_relative.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectComparison":
        return cls(
            benchmark_risk=float(data.get("benchmark_risk", 50.0)),
            performance_relative=RelativePerformance(
                data.get("performance_relative", RelativePerformance.SIMILAR.value)
            ),
            similar_projects=list(data.get("similar_projects") or []),
            lessons_learned=list(data.get("lessons_learned") or []),
        )


@dataclass
class WorkloadRecord:
    """Workload analysis for a single person."""

    assignee: str
    total_tasks: int = 0
    overdue_tasks: int = 0
    workload_score: float = 0.0
    status_breakdown: dict[str, int] = field(default_factory=dict)
    efficiency: float = 100.0
    capacity_utilization: float = 0.0
    burnout_risk: RiskLevel = RiskLevel.LOW
    velocity_trend: VelocityTrend = VelocityTrend.STABLE
    risk_factors: list[str] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    prediction: WorkloadPrediction | None = None
    team_context: TeamContext | None = None

    @property
    def requires_attention(self) -> bool:
        return self.workload_score > 80 or len(self.risk_factors) > 1

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["burnout_risk"] = self.burnout_risk.value
        data["velocity_trend"] = self.velocity_trend.value
        data["prediction"] = self.prediction.to_dict() if self.prediction else None
        data["team_context"] = self.team_context.to_dict() if self.team_context else None
        data["requires_attention"] = self.requires_attention
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkloadRecord":
        prediction = data.get("prediction")
        team_context = data.get("team_context")
        return cls(
            assignee=data.get("assignee", ""),
            total_tasks=int(data.get("total_tasks", 0)),
            overdue_tasks=int(data.get("overdue_tasks", 0)),
            workload_score=float(data.get("workload_score", 0.0)),
            status_breakdown=dict(data.get("status_breakdown") or {}),
            efficiency=float(data.get("efficiency", 100.0)),
            capacity_utilization=float(data.get("capacity_utilization", 0.0)),
            burnout_risk=RiskLevel(data.get("burnout_risk", RiskLevel.LOW.value)),
            velocity_trend=VelocityTrend(data.get("velocity_trend", VelocityTrend.STABLE.value)),
            risk_factors=list(data.get("risk_factors") or []),
            insights=list(data.get("insights") or []),
            recommendations=list(data.get("recommendations") or []),
            prediction=WorkloadPrediction.from_dict(prediction) if prediction else None,
            team_context=TeamContext.from_dict(team_context) if team_context else None,
        )


@dataclass
class RiskRecord:
    """Risk assessment for a single project."""

    project_id: str
    project_name: str
    risk_level: RiskLevel = RiskLevel.LOW
    risk_score: float = 0.0
    progress: int = 0
    total_tasks: int = 0
    overdue_tasks: int = 0
    blocked_tasks: int = 0
    risk_breakdown: dict[str, float] = field(default_factory=dict)
    trend: RiskTrend = RiskTrend.STABLE
    patterns: list[RiskPattern] = field(default_factory=list)
    early_warnings: list[str] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    mitigation_strategies: list[str] = field(default_factory=list)
    monitoring_recommendations: list[str] = field(default_factory=list)
    comparison: ProjectComparison | None = None

    @property
    def requires_attention(self) -> bool:
        return self.risk_score > 70 or bool(self.early_warnings)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["risk_level"] = self.risk_level.value
        data["trend"] = self.trend.value
        data["patterns"] = [pattern.to_dict() for pattern in self.patterns]
        data["comparison"] = self.comparison.to_dict() if self.comparison else None
        data["requires_attention"] = self.requires_attention
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RiskRecord":
        comparison = data.get("comparison")
        return cls(
            project_id=data.get("project_id", ""),
            project_name=data.get("project_name", ""),
            risk_level=RiskLevel(data.get("risk_level", RiskLevel.LOW.value)),
            risk_score=float(data.get("risk_score", 0.0)),
            progress=int(data.get("progress", 0)),
            total_tasks=int(data.get("total_tasks", 0)),
            overdue_tasks=int(data.get("overdue_tasks", 0)),
            blocked_tasks=int(data.get("blocked_tasks", 0)),
            risk_breakdown=dict(data.get("risk_breakdown") or {}),
            trend=RiskTrend(data.get("trend", RiskTrend.STABLE.value)),
            patterns=[RiskPattern.from_dict(p) for p in data.get("patterns") or []],
            early_warnings=list(data.get("early_warnings") or []),
            insights=list(data.get("insights") or []),
            recommendations=list(data.get("recommendations") or []),
            mitigation_strategies=list(data.get("mitigation_strategies") or []),
            monitoring_recommendations=list(data.get("monitoring_recommendations") or []),
            comparison=ProjectComparison.from_dict(comparison) if comparison else None,
        )
