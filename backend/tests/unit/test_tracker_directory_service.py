"""Unit tests for TrackerDirectoryService — workload and risk analysis."""

from datetime import datetime, timedelta, timezone

import pytest

from tracker.application.services.tracker_directory_service import (
    TrackerDirectoryService,
    analyze_workload,
    assess_risk,
    burnout_risk,
    detect_risk_patterns,
    monitoring_recommendations,
    predict_workload,
    risk_level,
    team_context,
    velocity_trend,
)
from tracker.domain.entities import (
    Project,
    ProjectStatus,
    RelativePerformance,
    RiskLevel,
    RiskPatternType,
    RiskTrend,
    Task,
    TaskFilters,
    TaskStatus,
    VelocityTrend,
)
from tracker.domain.exceptions import EntityNotFoundError

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


# ── Fakes ────────────────────────────────────────────────────────────


class FakeTaskRepo:
    def __init__(self, tasks=None):
        self.tasks = tasks or []
        self.last_filters = None

    async def get_all(self, filters=None, *, skip=0, limit=None):
        self.last_filters = filters
        result = self.tasks
        if filters and filters.assignee_name:
            result = [t for t in result if t.assignee_name.lower() == filters.assignee_name.lower()]
        if filters and filters.project_id:
            result = [t for t in result if t.project_id == filters.project_id]
        return result


class FakeProjectRepo:
    def __init__(self, projects=None):
        self.projects = {p.id: p for p in (projects or [])}

    async def get_by_id(self, project_id):
        return self.projects.get(project_id)

    async def get_all(self, *, skip=0, limit=None):
        return list(self.projects.values())


def _project(project_id="p1", name="Apollo", status=ProjectStatus.IN_PROGRESS) -> Project:
    return Project(
        id=project_id,
        name=name,
        status=status,
        start_date=NOW - timedelta(days=30),
        end_date=NOW + timedelta(days=30),
    )


def _task(status, due_in_days=5, assignee="Alice", project_id="p1") -> Task:
    return Task(
        title=f"{status.value} task",
        assignee_name=assignee,
        status=status,
        due_date=NOW + timedelta(days=due_in_days),
        project_id=project_id,
    )


def _done(days_ago, assignee="Alice") -> Task:
    return Task(
        title="done task",
        assignee_name=assignee,
        status=TaskStatus.COMPLETED,
        due_date=NOW + timedelta(days=5),
        project_id="p1",
        updated_at=NOW - timedelta(days=days_ago),
    )


# ── Bands ────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "score, expected",
    [(91, RiskLevel.CRITICAL), (85, RiskLevel.HIGH), (70, RiskLevel.MEDIUM), (65, RiskLevel.LOW)],
)
def test_burnout_risk_bands(score, expected):
    assert burnout_risk(score) == expected


@pytest.mark.parametrize(
    "score, expected",
    [(75, RiskLevel.CRITICAL), (60, RiskLevel.HIGH), (40, RiskLevel.MEDIUM), (39.9, RiskLevel.LOW)],
)
def test_risk_level_bands(score, expected):
    assert risk_level(score) == expected


# ── Workload ─────────────────────────────────────────────────────────


def test_analyze_workload_mixed_tasks():
    tasks = [
        _task(TaskStatus.COMPLETED, -3),
        _task(TaskStatus.COMPLETED, -1),
        _task(TaskStatus.IN_PROGRESS, -1),
        _task(TaskStatus.TODO, 4),
    ]

    record = analyze_workload("Alice", tasks, NOW)

    assert record.total_tasks == 4
    assert record.overdue_tasks == 1
    assert record.workload_score == pytest.approx(45.0)
    assert record.efficiency == pytest.approx(45.0)
    assert record.capacity_utilization == pytest.approx(25.0)
    assert record.burnout_risk == RiskLevel.LOW
    assert record.status_breakdown == {
        "TODO": 1,
        "IN_PROGRESS": 1,
        "COMPLETED": 2,
        "BLOCKED": 0,
    }
    assert record.risk_factors == []
    assert record.insights == ["Alice has 4 tasks assigned", "1 tasks are overdue"]
    assert record.recommendations == [
        "Prioritize overdue tasks",
        "Capacity available for additional tasks or stretch projects",
        "Review task complexity and provide additional support or training",
        "Consider breaking down complex tasks into smaller components",
    ]


def test_analyze_workload_without_tasks():
    record = analyze_workload("Dave", [], NOW)

    assert record.total_tasks == 0
    assert record.workload_score == 0.0
    assert record.efficiency == 100.0
    assert record.insights == ["No tasks assigned to Dave"]
    assert record.recommendations == [
        "Capacity available for additional tasks or stretch projects"
    ]


def test_analyze_workload_overloaded():
    tasks = [_task(TaskStatus.IN_PROGRESS, -2) for _ in range(12)]

    record = analyze_workload("Bob", tasks, NOW)

    assert record.capacity_utilization == 100.0
    assert "Too many active tasks may lead to context switching overhead" in record.risk_factors
    assert "Multiple overdue tasks indicating capacity or priority issues" in record.risk_factors
    assert record.requires_attention is True


@pytest.mark.asyncio
async def test_get_workload_analysis_filters_by_assignee():
    repo = FakeTaskRepo([_task(TaskStatus.TODO), _task(TaskStatus.TODO, assignee="Bob")])
    service = TrackerDirectoryService(repo, FakeProjectRepo(), clock=lambda: NOW)

    record = await service.get_workload_analysis("alice")

    assert repo.last_filters == TaskFilters(assignee_name="alice")
    assert record.total_tasks == 1
    assert record.assignee == "alice"


# ── Risk ─────────────────────────────────────────────────────────────


def test_assess_risk_with_overdue_and_blocked():
    tasks = [
        _task(TaskStatus.IN_PROGRESS, -1),
        _task(TaskStatus.BLOCKED, 5),
        _task(TaskStatus.COMPLETED, -10),
        _task(TaskStatus.COMPLETED, -5),
    ]

    record = assess_risk(_project(), tasks, NOW)

    assert record.progress == 50
    assert record.risk_score == pytest.approx(60.0)
    assert record.risk_level == RiskLevel.HIGH
    assert record.trend == RiskTrend.STABLE
    assert record.risk_breakdown == pytest.approx(
        {"schedule": 10.0, "resource": 20.0, "scope": 0.0, "quality": 20.0, "dependencies": 20.0}
    )
    assert record.insights == [
        "Project Apollo has 4 total tasks",
        "1 overdue tasks",
        "1 blocked tasks",
        "50% completion rate",
    ]
    assert record.recommendations[:3] == [
        "Immediate intervention required",
        "Schedule emergency project review",
        "Consider extending deadlines",
    ]
    assert record.mitigation_strategies == [
        "Schedule mitigation: Prioritize overdue tasks and reassess timeline",
        "Consider parallel workstreams to accelerate critical path",
        "Resource mitigation: Establish dedicated unblocking sessions",
        "Create escalation paths for persistent blockers",
    ]
    assert record.early_warnings == []


def test_assess_risk_healthy_project_is_improving():
    tasks = [_task(TaskStatus.COMPLETED, -i) for i in range(1, 6)]

    record = assess_risk(_project(), tasks, NOW)

    assert record.risk_score == pytest.approx(20.0)
    assert record.risk_level == RiskLevel.LOW
    assert record.trend == RiskTrend.IMPROVING
    assert "Risk trend is improving with velocity -2" in record.insights
    assert record.recommendations == ["Continue monitoring progress", "Maintain current pace"]
    assert record.requires_attention is False


def test_assess_risk_many_overdue_is_deteriorating():
    tasks = [_task(TaskStatus.IN_PROGRESS, -3) for _ in range(6)]

    record = assess_risk(_project(), tasks, NOW)

    assert record.risk_score == 100.0
    assert record.risk_level == RiskLevel.CRITICAL
    assert record.trend == RiskTrend.CRITICAL
    assert "CRITICAL: Risk score above 80 - immediate attention required" in record.early_warnings
    assert "ALERT: High number of overdue tasks - schedule review required" in record.early_warnings


@pytest.mark.asyncio
async def test_get_risk_assessment_unknown_project():
    service = TrackerDirectoryService(FakeTaskRepo(), FakeProjectRepo(), clock=lambda: NOW)

    with pytest.raises(EntityNotFoundError):
        await service.get_risk_assessment("missing")


@pytest.mark.asyncio
async def test_get_risk_assessment_scopes_tasks_to_project():
    repo = FakeTaskRepo([_task(TaskStatus.TODO), _task(TaskStatus.TODO, project_id="p2")])
    service = TrackerDirectoryService(repo, FakeProjectRepo([_project()]), clock=lambda: NOW)

    record = await service.get_risk_assessment("p1")

    assert record.project_id == "p1"
    assert record.total_tasks == 1


# ── Velocity and prediction ──────────────────────────────────────────


@pytest.mark.parametrize(
    "days_ago, expected",
    [
        ([1, 2, 3, 4, 20, 21], VelocityTrend.IMPROVING),
        ([2, 16, 18, 20], VelocityTrend.DECLINING),
        ([1, 2, 20, 21], VelocityTrend.STABLE),
        ([1, 2, 3], VelocityTrend.STABLE),
        ([1, 20], VelocityTrend.STABLE),
    ],
)
def test_velocity_trend_compares_two_week_windows(days_ago, expected):
    tasks = [_done(days) for days in days_ago] + [_task(TaskStatus.TODO)]

    assert velocity_trend(tasks, NOW) == expected


def test_prediction_follows_velocity():
    improving = predict_workload(50.0, VelocityTrend.IMPROVING)
    declining = predict_workload(97.0, VelocityTrend.DECLINING)
    stable = predict_workload(70.0, VelocityTrend.STABLE)

    assert (improving.next_week_score, improving.next_month_score) == (45, 35)
    assert improving.burnout_risk == RiskLevel.LOW
    assert improving.recommended_actions == [
        "Continue current workload management practices",
        "Consider opportunities for additional responsibilities",
    ]
    assert (declining.next_week_score, declining.next_month_score) == (100, 100)
    assert declining.burnout_risk == RiskLevel.CRITICAL
    assert declining.recommended_actions[0] == "IMMEDIATE: Redistribute workload to prevent burnout"
    assert (stable.next_week_score, stable.next_month_score) == (70, 70)
    assert stable.burnout_risk == RiskLevel.MEDIUM


def test_declining_velocity_adds_recommendations_and_raises_forecast():
    tasks = [_done(1), _done(16), _done(18), _done(20)]

    record = analyze_workload("Alice", tasks, NOW)

    assert record.velocity_trend == VelocityTrend.DECLINING
    assert record.workload_score == pytest.approx(70.0)
    assert record.recommendations[-2:] == [
        "Investigate causes of declining velocity and provide targeted support",
        "Consider workload adjustment or skill development opportunities",
    ]
    assert record.prediction.next_week_score == 75
    assert record.prediction.next_month_score == 85
    assert record.prediction.burnout_risk == RiskLevel.HIGH


# ── Team context ─────────────────────────────────────────────────────


def test_team_context_averages_members_and_picks_top_performers():
    team = [
        _task(TaskStatus.COMPLETED),
        _task(TaskStatus.COMPLETED),
        _task(TaskStatus.TODO, assignee="alice"),
        *[_task(TaskStatus.COMPLETED, assignee="Bob") for _ in range(4)],
        _task(TaskStatus.TODO, -2, assignee="Carol"),
        _task(TaskStatus.COMPLETED, assignee="Dan"),
    ]

    context = team_context("Alice", 50.0, team, NOW)

    assert context.team_member_count == 4
    assert context.team_average_workload == 40.0
    assert context.workload_distribution == {"Alice": 50.0, "team_avg": 40.0}
    assert context.top_performers == ["Bob", "Dan"]
    assert context.at_risk_members == []


def test_team_context_without_members_uses_default_average():
    context = team_context("Bob", 85.0, [], NOW)

    assert context.team_member_count == 0
    assert context.team_average_workload == 50.0
    assert context.at_risk_members == ["Bob"]


def test_workload_without_team_compares_person_with_self():
    record = analyze_workload("Alice", [_task(TaskStatus.COMPLETED), _task(TaskStatus.TODO)], NOW)

    assert record.team_context.team_member_count == 1
    assert record.team_context.team_average_workload == record.workload_score


@pytest.mark.asyncio
async def test_get_workload_analysis_sets_person_against_team():
    repo = FakeTaskRepo(
        [
            _task(TaskStatus.TODO),
            _task(TaskStatus.TODO, assignee="Bob"),
            _task(TaskStatus.TODO, assignee="Carol"),
        ]
    )
    service = TrackerDirectoryService(repo, FakeProjectRepo(), clock=lambda: NOW)

    record = await service.get_workload_analysis("alice")

    assert record.total_tasks == 1
    assert record.team_context.team_member_count == 3
    assert record.to_dict()["team_context"]["workload_distribution"]["alice"] == 10.0


# ── Risk patterns and comparison ─────────────────────────────────────


def test_overdue_and_blocked_project_shows_schedule_and_resource_patterns():
    tasks = [_task(TaskStatus.BLOCKED) for _ in range(4)]
    tasks += [_task(TaskStatus.IN_PROGRESS, -2) for _ in range(3)]

    record = assess_risk(_project(), tasks, NOW)

    assert [p.type for p in record.patterns] == [
        RiskPatternType.SCHEDULE_RISK,
        RiskPatternType.RESOURCE_RISK,
    ]
    assert [p.severity for p in record.patterns] == [RiskLevel.HIGH, RiskLevel.HIGH]
    assert record.patterns[0].indicators == ["3 overdue tasks", "0% progress (below expected)"]
    assert record.early_warnings == [
        "CRITICAL: Risk score above 80 - immediate attention required",
        "ALERT: Multiple blocked tasks - dependency management needed",
        "WARNING: Multiple high-severity risk patterns detected",
        "FORECAST: Risk projected to reach critical levels within 30 days",
    ]
    assert record.monitoring_recommendations == [
        "Implement daily risk score monitoring with automated alerts",
        "Set up weekly stakeholder risk review meetings",
        "Monitor overdue task count with threshold alerting",
        "Track blocked task resolution time and escalation patterns",
    ]


def test_quality_and_dependency_patterns():
    breakdown = {"schedule": 0.0, "resource": 0.0, "scope": 0.0, "quality": 55.0, "dependencies": 80.0}

    patterns = detect_risk_patterns(0, 0, 90, breakdown, RiskTrend.DETERIORATING)

    assert [(p.type, p.severity) for p in patterns] == [
        (RiskPatternType.QUALITY_RISK, RiskLevel.MEDIUM),
        (RiskPatternType.DEPENDENCY_RISK, RiskLevel.HIGH),
    ]
    assert patterns[1].confidence == pytest.approx(0.82)


def test_quiet_project_needs_no_monitoring():
    assert monitoring_recommendations(40.0, 1, 0) == []


def test_comparison_benchmarks_against_projects_with_tasks():
    projects = [
        _project("p1", "Apollo"),
        _project("p2", "Zeus", ProjectStatus.COMPLETED),
        _project("p3", "Hermes", ProjectStatus.CANCELLED),
        _project("p4", "Ares"),
        _project("p5", "Olympus"),
        _project("p6", "Empty"),
    ]
    apollo = [_task(TaskStatus.COMPLETED, -i) for i in range(1, 6)]
    portfolio = apollo + [
        _task(TaskStatus.COMPLETED, project_id="p2"),
        _task(TaskStatus.TODO, project_id="p2"),
        _task(TaskStatus.COMPLETED, project_id="p3"),
        _task(TaskStatus.TODO, project_id="p3"),
        _task(TaskStatus.TODO, project_id="p4"),
        _task(TaskStatus.BLOCKED, -2, project_id="p5"),
        _task(TaskStatus.BLOCKED, -2, project_id="p5"),
    ]

    record = assess_risk(projects[0], apollo, NOW, projects=projects, all_tasks=portfolio)

    assert record.risk_score == pytest.approx(20.0)
    assert record.comparison.benchmark_risk == 32.0
    assert record.comparison.performance_relative == RelativePerformance.BETTER
    assert record.comparison.similar_projects == ["Zeus", "Ares"]
    assert record.comparison.lessons_learned == [
        "Low-risk projects maintain regular task completion and minimal blockers",
        "High-risk projects often have accumulating overdue tasks requiring intervention",
        "Successful projects demonstrate consistent progress tracking and proactive issue resolution",
    ]


@pytest.mark.asyncio
async def test_get_risk_assessment_compares_with_other_projects():
    repo = FakeTaskRepo(
        [
            _task(TaskStatus.TODO),
            _task(TaskStatus.TODO, -2, project_id="p2"),
            _task(TaskStatus.COMPLETED, project_id="p2"),
        ]
    )
    projects = FakeProjectRepo([_project(), _project("p2", "Zeus")])
    service = TrackerDirectoryService(repo, projects, clock=lambda: NOW)

    record = await service.get_risk_assessment("p1")

    assert record.total_tasks == 1
    assert record.comparison.benchmark_risk == 35.0
    assert record.comparison.similar_projects == ["Zeus"]
    assert record.comparison.performance_relative == RelativePerformance.WORSE
