"""In-process task directory backed by the tracker repositories.

Besides plain listing it computes the two analyses the query pipeline
dispatches to: per-person workload and per-project delivery risk. Both are
set against the whole tracker: a workload carries team context and a risk
assessment carries a comparison with the other projects.
"""

import logging
from collections import Counter
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from tracker.application.interfaces import (
    ProjectRepository,
    TaskDirectory,
    TaskRepository,
)
from tracker.domain.entities import (
    Project,
    ProjectComparison,
    ProjectStatus,
    RelativePerformance,
    RiskLevel,
    RiskPattern,
    RiskPatternType,
    RiskRecord,
    RiskTrend,
    Task,
    TaskFilters,
    TaskStatus,
    TeamContext,
    VelocityTrend,
    WorkloadPrediction,
    WorkloadRecord,
)
from tracker.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)

# ── Workload model ──────────────────────────────────────────────────

_W_TASK_LOAD = 10
_W_COMPLETION = 30
_W_OVERDUE_RATIO = 40
_EFFICIENCY_OVERDUE_PENALTY = 20
OPTIMAL_ACTIVE_TASKS = 8
AT_RISK_WORKLOAD = 80

_VELOCITY_WINDOW = timedelta(days=14)
_MIN_COMPLETIONS_FOR_TREND = 3
_TOP_PERFORMER_COMPLETION = 0.7
_TOP_PERFORMER_MIN_SCORE = 20
_DEFAULT_TEAM_AVERAGE = 50.0

# ── Risk model ──────────────────────────────────────────────────────

_RISK_BASE = 50
_W_RISK_OVERDUE = 15
_W_RISK_BLOCKED = 10
_W_RISK_PROGRESS = 0.3
_EXPECTED_PROGRESS = 50

_W_BENCH_OVERDUE = 50
_W_BENCH_BLOCKED = 40
_W_BENCH_INCOMPLETE = 30
_DEFAULT_BENCHMARK = 50.0
_SIMILAR_RISK_RANGE = 20
_RELATIVE_MARGIN = 10


def burnout_risk(score: float) -> RiskLevel:
    if score > 90:
        return RiskLevel.CRITICAL
    if score > 80:
        return RiskLevel.HIGH
    if score > 65:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def risk_level(score: float) -> RiskLevel:
    if score >= 75:
        return RiskLevel.CRITICAL
    if score >= 60:
        return RiskLevel.HIGH
    if score >= 40:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def relative_performance(score: float, benchmark: float) -> RelativePerformance:
    difference = score - benchmark
    if difference < -_RELATIVE_MARGIN:
        return RelativePerformance.BETTER
    if difference > _RELATIVE_MARGIN:
        return RelativePerformance.WORSE
    return RelativePerformance.SIMILAR


class TrackerDirectoryService(TaskDirectory):
    """``TaskDirectory`` over the task and project repositories."""

    def __init__(
        self,
        task_repo: TaskRepository,
        project_repo: ProjectRepository,
        *,
        clock: Callable[[], datetime] | None = None,
    ):
        self._task_repo = task_repo
        self._project_repo = project_repo
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def list_tasks(self, filters: TaskFilters | None = None) -> list[Task]:
        return await self._task_repo.get_all(filters)

    async def list_projects(self) -> list[Project]:
        return await self._project_repo.get_all()

    # ── Workload ────────────────────────────────────────────────────

    async def get_workload_analysis(self, person_name: str) -> WorkloadRecord:
        team_tasks = await self._task_repo.get_all()
        tasks = await self._task_repo.get_all(TaskFilters(assignee_name=person_name))
        record = analyze_workload(person_name, tasks, self._clock(), team_tasks=team_tasks)
        logger.info(
            "Workload for %s: %d tasks, score %.1f, burnout %s, velocity %s",
            person_name,
            record.total_tasks,
            record.workload_score,
            record.burnout_risk.value,
            record.velocity_trend.value,
        )
        return record

    # ── Risk ────────────────────────────────────────────────────────

    async def get_risk_assessment(self, project_id: str) -> RiskRecord:
        project = await self._project_repo.get_by_id(project_id)
        if project is None:
            raise EntityNotFoundError("Project", project_id)

        projects = await self._project_repo.get_all()
        all_tasks = await self._task_repo.get_all()
        tasks = await self._task_repo.get_all(TaskFilters(project_id=project_id))
        record = assess_risk(project, tasks, self._clock(), projects=projects, all_tasks=all_tasks)
        logger.info(
            "Risk for project %s: score %.1f, level %s, %d pattern(s)",
            project.name,
            record.risk_score,
            record.risk_level.value,
            len(record.patterns),
        )
        return record


# ── Workload analysis ───────────────────────────────────────────────


def _workload_score(total: int, completed: int, overdue: int) -> float:
    if not total:
        return 0.0
    score = (
        total * _W_TASK_LOAD
        + completed / total * _W_COMPLETION
        - overdue / total * _W_OVERDUE_RATIO
    )
    return max(0.0, min(100.0, score))


def velocity_trend(tasks: list[Task], now: datetime) -> VelocityTrend:
    """Completions in the last two weeks against the two weeks before."""
    finished = [at for at in (task.completed_at() for task in tasks) if at is not None]
    if len(finished) < _MIN_COMPLETIONS_FOR_TREND:
        return VelocityTrend.STABLE

    recent_start = now - _VELOCITY_WINDOW
    earlier_start = recent_start - _VELOCITY_WINDOW
    recent = sum(1 for at in finished if at >= recent_start)
    earlier = sum(1 for at in finished if earlier_start <= at < recent_start)
    if not earlier:
        return VelocityTrend.STABLE
    if recent > earlier * 1.1:
        return VelocityTrend.IMPROVING
    if recent < earlier * 0.9:
        return VelocityTrend.DECLINING
    return VelocityTrend.STABLE


def predictive_actions(risk: RiskLevel, trend: VelocityTrend) -> list[str]:
    if risk == RiskLevel.CRITICAL:
        return [
            "IMMEDIATE: Redistribute workload to prevent burnout",
            "IMMEDIATE: Schedule 1:1 discussion about capacity and support needs",
            "Consider temporary workload reduction or time off",
        ]
    if risk == RiskLevel.HIGH:
        return [
            "Schedule workload review within 48 hours",
            "Identify tasks that can be postponed or reassigned",
            "Implement daily check-ins for early warning detection",
        ]
    if risk == RiskLevel.MEDIUM:
        return [
            "Monitor workload trends closely",
            "Proactively discuss upcoming capacity during planning sessions",
        ]
    actions = ["Continue current workload management practices"]
    if trend == VelocityTrend.IMPROVING:
        actions.append("Consider opportunities for additional responsibilities")
    return actions


def predict_workload(score: float, trend: VelocityTrend) -> WorkloadPrediction:
    """Next-week and next-month scores shifted by the velocity trend."""
    if trend == VelocityTrend.IMPROVING:
        next_week, next_month = max(0.0, score - 5), max(0.0, score - 15)
    elif trend == VelocityTrend.DECLINING:
        next_week, next_month = min(100.0, score + 5), min(100.0, score + 15)
    else:
        next_week = next_month = score

    risk = burnout_risk(next_month)
    return WorkloadPrediction(
        next_week_score=round(next_week),
        next_month_score=round(next_month),
        burnout_risk=risk,
        recommended_actions=predictive_actions(risk, trend),
    )


def team_context(
    assignee: str, score: float, team_tasks: list[Task], now: datetime
) -> TeamContext:
    """Team average and top performers over everyone holding tasks."""
    members: dict[str, tuple[str, list[Task]]] = {}
    for task in team_tasks:
        name = (task.assignee_name or "").strip()
        if name:
            members.setdefault(name.lower(), (name, []))[1].append(task)

    scored: list[tuple[str, float, float]] = []
    for name, tasks in members.values():
        total = len(tasks)
        completed = sum(1 for task in tasks if task.status == TaskStatus.COMPLETED)
        overdue = sum(1 for task in tasks if task.is_overdue(now))
        scored.append((name, _workload_score(total, completed, overdue), completed / total))

    if scored:
        average = float(round(sum(member_score for _, member_score, _ in scored) / len(scored)))
    else:
        average = _DEFAULT_TEAM_AVERAGE

    performers = sorted(
        (
            member
            for member in scored
            if member[2] > _TOP_PERFORMER_COMPLETION and member[1] > _TOP_PERFORMER_MIN_SCORE
        ),
        key=lambda member: member[2],
        reverse=True,
    )
    return TeamContext(
        team_average_workload=average,
        team_member_count=len(scored),
        workload_distribution={assignee: score, "team_avg": average},
        top_performers=[name for name, _, _ in performers[:3]],
        at_risk_members=[assignee] if score > AT_RISK_WORKLOAD else [],
    )


def analyze_workload(
    assignee: str,
    tasks: list[Task],
    now: datetime,
    *,
    team_tasks: list[Task] | None = None,
) -> WorkloadRecord:
    """Workload score, capacity and burnout indicators for one person's tasks.

    ``team_tasks`` is every task in the tracker; without it the person is
    compared only with themselves.
    """
    counts = Counter(task.status for task in tasks)
    breakdown = {status.value: counts.get(status, 0) for status in TaskStatus}
    total = len(tasks)
    overdue = sum(1 for task in tasks if task.is_overdue(now))
    completed = breakdown[TaskStatus.COMPLETED.value]
    in_progress = breakdown[TaskStatus.IN_PROGRESS.value]
    todo = breakdown[TaskStatus.TODO.value]
    blocked = breakdown[TaskStatus.BLOCKED.value]
    active = todo + in_progress

    score = _workload_score(total, completed, overdue)
    if total:
        completion = completed / total
        efficiency = completion * 100 - overdue / total * _EFFICIENCY_OVERDUE_PENALTY
        efficiency = max(0.0, min(100.0, efficiency))
    else:
        completion = 0.0
        efficiency = 100.0
    capacity = min(100.0, active / OPTIMAL_ACTIVE_TASKS * 100)
    trend = velocity_trend(tasks, now)

    risk_factors: list[str] = []
    if score > 85:
        risk_factors.append("Extremely high workload score indicating potential burnout")
    if overdue > 3:
        risk_factors.append("Multiple overdue tasks indicating capacity or priority issues")
    if blocked > 2:
        risk_factors.append("Multiple blocked tasks indicating dependency or resource issues")
    if active > 10:
        risk_factors.append("Too many active tasks may lead to context switching overhead")
    if total and completion < 0.3:
        risk_factors.append("Low task completion rate may indicate scope or skill mismatches")

    if total:
        insights = [f"{assignee} has {total} tasks assigned"]
        insights.append(
            f"{overdue} tasks are overdue" if overdue else "No overdue tasks"
        )
    else:
        insights = [f"No tasks assigned to {assignee}"]
    if score > 70 and overdue == 0:
        insights.append("High workload but on track - monitor closely for early warning signs")
    if in_progress > 5:
        insights.append("Many tasks in progress simultaneously - consider focus prioritization")
    if todo > in_progress * 2:
        insights.append("Large backlog relative to active work - potential planning opportunity")
    if total and completed > active:
        insights.append("Strong completion rate - good candidate for additional responsibilities")
    if blocked:
        insights.append("Blocked tasks present - may benefit from dependency management support")

    recommendations: list[str] = []
    if overdue:
        recommendations.append("Prioritize overdue tasks")
    if capacity > 90:
        recommendations.append("Consider redistributing some tasks or extending deadlines")
        recommendations.append("Schedule regular check-ins to prevent overload")
    if capacity < 50:
        recommendations.append("Capacity available for additional tasks or stretch projects")
    if efficiency < 70:
        recommendations.append("Review task complexity and provide additional support or training")
        recommendations.append("Consider breaking down complex tasks into smaller components")
    if trend == VelocityTrend.DECLINING:
        recommendations.append("Investigate causes of declining velocity and provide targeted support")
        recommendations.append("Consider workload adjustment or skill development opportunities")
    if len(risk_factors) > 2:
        recommendations.append("Multiple risk factors identified - schedule immediate workload review")
        recommendations.append("Consider implementing workload monitoring and early warning systems")

    rounded_score = round(score, 1)
    return WorkloadRecord(
        assignee=assignee,
        total_tasks=total,
        overdue_tasks=overdue,
        workload_score=rounded_score,
        status_breakdown=breakdown,
        efficiency=round(efficiency, 1),
        capacity_utilization=round(capacity, 1),
        burnout_risk=burnout_risk(score),
        velocity_trend=trend,
        risk_factors=risk_factors,
        insights=insights,
        recommendations=recommendations,
        prediction=predict_workload(rounded_score, trend),
        team_context=team_context(
            assignee, rounded_score, tasks if team_tasks is None else team_tasks, now
        ),
    )


# ── Risk assessment ─────────────────────────────────────────────────


def detect_risk_patterns(
    overdue: int,
    blocked: int,
    progress: int,
    breakdown: dict[str, float],
    trend: RiskTrend,
) -> list[RiskPattern]:
    patterns: list[RiskPattern] = []
    if overdue > 2 and progress < 70:
        patterns.append(
            RiskPattern(
                type=RiskPatternType.SCHEDULE_RISK,
                severity=RiskLevel.CRITICAL if overdue > 5 else RiskLevel.HIGH,
                confidence=0.85,
                description="Schedule slippage pattern detected with accumulating overdue tasks",
                indicators=[f"{overdue} overdue tasks", f"{progress}% progress (below expected)"],
                recommendations=[
                    "Reassess project timeline and resource allocation",
                    "Implement daily standup meetings for better tracking",
                    "Consider scope reduction or deadline extension",
                ],
            )
        )
    if blocked > 1 and breakdown["resource"] > 60:
        patterns.append(
            RiskPattern(
                type=RiskPatternType.RESOURCE_RISK,
                severity=RiskLevel.HIGH if blocked > 3 else RiskLevel.MEDIUM,
                confidence=0.78,
                description="Resource bottleneck pattern with multiple blocked tasks",
                indicators=[
                    f"{blocked} blocked tasks",
                    "High resource risk score",
                    "Potential skill or capacity gaps",
                ],
                recommendations=[
                    "Identify and resolve blocking dependencies",
                    "Consider additional resource allocation",
                    "Implement cross-training to reduce single points of failure",
                ],
            )
        )
    if breakdown["quality"] > 50 and trend == RiskTrend.DETERIORATING:
        patterns.append(
            RiskPattern(
                type=RiskPatternType.QUALITY_RISK,
                severity=RiskLevel.MEDIUM,
                confidence=0.65,
                description="Quality degradation pattern with increasing technical debt",
                indicators=[
                    "High quality risk indicators",
                    "Deteriorating trend detected",
                    "Potential technical debt accumulation",
                ],
                recommendations=[
                    "Implement additional quality gates",
                    "Increase code review coverage",
                    "Consider refactoring sprints",
                ],
            )
        )
    if breakdown["dependencies"] > 70:
        patterns.append(
            RiskPattern(
                type=RiskPatternType.DEPENDENCY_RISK,
                severity=RiskLevel.HIGH,
                confidence=0.82,
                description="Complex dependency pattern increasing project vulnerability",
                indicators=[
                    "High dependency risk score",
                    "Many tasks overdue or blocked at once",
                    "Potential cascading failure risk",
                ],
                recommendations=[
                    "Map and document all critical dependencies",
                    "Develop contingency plans for key dependencies",
                    "Implement regular dependency health checks",
                ],
            )
        )
    return patterns


def monitoring_recommendations(score: float, overdue: int, blocked: int) -> list[str]:
    recommendations: list[str] = []
    if score > 60:
        recommendations.append("Implement daily risk score monitoring with automated alerts")
        recommendations.append("Set up weekly stakeholder risk review meetings")
    if overdue > 2:
        recommendations.append("Monitor overdue task count with threshold alerting")
    if blocked > 1:
        recommendations.append("Track blocked task resolution time and escalation patterns")
    return recommendations


def benchmark_risk(tasks: list[Task], now: datetime) -> int:
    """Portfolio-comparable risk of one project's tasks (0-100)."""
    total = len(tasks)
    overdue = sum(1 for task in tasks if task.is_overdue(now))
    blocked = sum(1 for task in tasks if task.status == TaskStatus.BLOCKED)
    completed = sum(1 for task in tasks if task.status == TaskStatus.COMPLETED)
    score = (
        overdue / total * _W_BENCH_OVERDUE
        + blocked / total * _W_BENCH_BLOCKED
        + (1 - completed / total) * _W_BENCH_INCOMPLETE
    )
    return round(max(0.0, min(100.0, score)))


def compare_project(
    project: Project,
    score: float,
    projects: list[Project],
    all_tasks: list[Task],
    now: datetime,
) -> ProjectComparison:
    """Benchmark against every project that has tasks."""
    tasks_by_project: dict[str, list[Task]] = {}
    for task in all_tasks:
        tasks_by_project.setdefault(task.project_id, []).append(task)

    risks = [
        (other, benchmark_risk(tasks_by_project[other.id], now))
        for other in projects
        if tasks_by_project.get(other.id)
    ]
    if not risks:
        return ProjectComparison(
            benchmark_risk=_DEFAULT_BENCHMARK,
            performance_relative=relative_performance(score, _DEFAULT_BENCHMARK),
        )

    benchmark = float(round(sum(risk for _, risk in risks) / len(risks)))
    similar = sorted(
        (
            (other, risk)
            for other, risk in risks
            if other.id != project.id
            and abs(risk - score) < _SIMILAR_RISK_RANGE
            and other.status != ProjectStatus.CANCELLED
        ),
        key=lambda item: abs(item[1] - score),
    )

    lessons: list[str] = []
    if any(risk < 30 for _, risk in risks):
        lessons.append("Low-risk projects maintain regular task completion and minimal blockers")
    if any(risk > 70 for _, risk in risks):
        lessons.append(
            "High-risk projects often have accumulating overdue tasks requiring intervention"
        )
    if any(other.status == ProjectStatus.COMPLETED for other, _ in risks):
        lessons.append(
            "Successful projects demonstrate consistent progress tracking "
            "and proactive issue resolution"
        )

    return ProjectComparison(
        benchmark_risk=benchmark,
        performance_relative=relative_performance(score, benchmark),
        similar_projects=[other.name for other, _ in similar[:3]],
        lessons_learned=lessons,
    )


def assess_risk(
    project: Project,
    tasks: list[Task],
    now: datetime,
    *,
    projects: list[Project] | None = None,
    all_tasks: list[Task] | None = None,
) -> RiskRecord:
    """Delivery risk of a project from its overdue, blocked and completed tasks.

    ``projects`` and ``all_tasks`` describe the whole tracker for the
    benchmark comparison; without them the project is its own benchmark.
    """
    total = len(tasks)
    overdue = sum(1 for task in tasks if task.is_overdue(now))
    blocked = sum(1 for task in tasks if task.status == TaskStatus.BLOCKED)
    completed = sum(1 for task in tasks if task.status == TaskStatus.COMPLETED)
    progress = round(completed / total * 100) if total else 0

    score = _RISK_BASE + overdue * _W_RISK_OVERDUE + blocked * _W_RISK_BLOCKED
    score -= progress * _W_RISK_PROGRESS
    score = round(max(0.0, min(100.0, score)), 1)
    level = risk_level(score)

    breakdown = {
        "schedule": min(100.0, overdue / 10 * 100),
        "resource": min(100.0, blocked / 5 * 100),
        "scope": min(100.0, max(0, _EXPECTED_PROGRESS - progress) * 2.0),
        "quality": max(0.0, score - 40),
        "dependencies": min(100.0, (blocked + overdue) * 10.0),
    }

    # Trend
    trend = RiskTrend.STABLE
    velocity = 0
    forecast = score
    if overdue > 3:
        trend = RiskTrend.DETERIORATING
        velocity = 5
        forecast = min(100.0, score + 15)
    if blocked > 2:
        trend = RiskTrend.DETERIORATING
        velocity += 3
        forecast = min(100.0, forecast + 10)
    if progress > 80 and score < 30:
        trend = RiskTrend.IMPROVING
        velocity = -2
        forecast = max(0.0, score - 5)
    if score > 90:
        trend = RiskTrend.CRITICAL

    patterns = detect_risk_patterns(overdue, blocked, progress, breakdown, trend)

    warnings: list[str] = []
    if score > 80:
        warnings.append("CRITICAL: Risk score above 80 - immediate attention required")
    if trend == RiskTrend.DETERIORATING and velocity > 3:
        warnings.append("WARNING: Risk rapidly increasing - intervention needed within 48 hours")
    if overdue > 5:
        warnings.append("ALERT: High number of overdue tasks - schedule review required")
    if blocked > 3:
        warnings.append("ALERT: Multiple blocked tasks - dependency management needed")
    severe = [p for p in patterns if p.severity in (RiskLevel.CRITICAL, RiskLevel.HIGH)]
    if len(severe) > 1:
        warnings.append("WARNING: Multiple high-severity risk patterns detected")
    if forecast > 90:
        warnings.append("FORECAST: Risk projected to reach critical levels within 30 days")

    insights = [
        f"Project {project.name} has {total} total tasks",
        f"{overdue} overdue tasks" if overdue else "No overdue tasks",
        f"{blocked} blocked tasks" if blocked else "No blocked tasks",
        f"{progress}% completion rate",
    ]
    if trend != RiskTrend.STABLE:
        insights.append(f"Risk trend is {trend.value.lower()} with velocity {velocity}")
    category, concern = max(breakdown.items(), key=lambda item: item[1])
    if concern > 50:
        insights.append(f"{category} risk category shows highest concern at {concern:.0f}%")

    if level in (RiskLevel.CRITICAL, RiskLevel.HIGH):
        recommendations = [
            "Immediate intervention required",
            "Schedule emergency project review",
            "Consider extending deadlines",
        ]
    elif overdue:
        recommendations = ["Prioritize overdue tasks", "Review task dependencies"]
    else:
        recommendations = ["Continue monitoring progress", "Maintain current pace"]

    mitigation: list[str] = []
    if overdue:
        mitigation.append("Schedule mitigation: Prioritize overdue tasks and reassess timeline")
        mitigation.append("Consider parallel workstreams to accelerate critical path")
    if blocked:
        mitigation.append("Resource mitigation: Establish dedicated unblocking sessions")
        mitigation.append("Create escalation paths for persistent blockers")
    if score > 70:
        mitigation.append("Risk mitigation: Implement daily risk monitoring and reporting")
        mitigation.append("Consider bringing in additional expertise or resources")

    return RiskRecord(
        project_id=project.id,
        project_name=project.name,
        risk_level=level,
        risk_score=score,
        progress=progress,
        total_tasks=total,
        overdue_tasks=overdue,
        blocked_tasks=blocked,
        risk_breakdown=breakdown,
        trend=trend,
        patterns=patterns,
        early_warnings=warnings,
        insights=insights,
        recommendations=recommendations + mitigation,
        mitigation_strategies=mitigation,
        monitoring_recommendations=monitoring_recommendations(score, overdue, blocked),
        comparison=compare_project(
            project,
            score,
            [project] if projects is None else projects,
            tasks if all_tasks is None else all_tasks,
            now,
        ),
    )
