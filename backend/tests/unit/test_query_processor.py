"""Unit tests for QueryProcessor — gating, dispatch, enrichment and failure responses."""

from datetime import datetime, timedelta, timezone

import pytest

from tracker.application.services import (
    ConditionExtractor,
    ConfidenceScorer,
    EntityDirectoryCache,
    EntityDiscovery,
    FuzzyMatcher,
    IntentClassifier,
    QueryParser,
    QueryProcessor,
)
from tracker.application.services.query_processor import (
    RISK_NEEDS_PROJECT,
    WORKLOAD_NEEDS_PERSON,
    is_meaningless_query,
    task_insights,
    task_recommendations,
)
from tracker.domain.entities import (
    ExtractedEntities,
    Intent,
    ParsedQuery,
    ParsedQueryMetadata,
    QueryFilters,
    RiskLevel,
    RiskRecord,
    Task,
    TaskFilters,
    TaskStatus,
    WorkloadRecord,
)
from tracker.domain.exceptions import EntityNotFoundError

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


# ── Fakes ────────────────────────────────────────────────────────────


class FakeCache:
    def __init__(self, initial: dict | None = None):
        self.store = dict(initial or {})

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ttl_seconds):
        self.store[key] = value

    async def delete(self, key):
        self.store.pop(key, None)


class RecordingDirectory:
    """Task directory fake that records every data call."""

    def __init__(self, tasks=None, fail_listing=False, missing_projects=()):
        self.tasks = tasks or []
        self.fail_listing = fail_listing
        self.missing_projects = set(missing_projects)
        self.calls: list[tuple] = []

    async def list_tasks(self, filters=None):
        self.calls.append(("list_tasks", filters))
        if self.fail_listing:
            raise ConnectionError("directory down")
        return self.tasks

    async def list_projects(self):
        self.calls.append(("list_projects",))
        return []

    async def get_workload_analysis(self, person_name):
        self.calls.append(("get_workload_analysis", person_name))
        return WorkloadRecord(
            assignee=person_name,
            total_tasks=3,
            insights=[f"{person_name} has 3 tasks assigned"],
            recommendations=["Capacity available for additional tasks or stretch projects"],
        )

    async def get_risk_assessment(self, project_id):
        self.calls.append(("get_risk_assessment", project_id))
        if project_id in self.missing_projects:
            raise EntityNotFoundError("Project", project_id)
        return RiskRecord(
            project_id=project_id,
            project_name="Apollo",
            risk_level=RiskLevel.MEDIUM,
            risk_score=45.0,
            insights=["Project Apollo has 4 total tasks"],
            recommendations=["Continue monitoring progress"],
        )


class StubParser:
    """Hands the processor a fixed parse result."""

    def __init__(self, parsed: ParsedQuery):
        self.parsed = parsed

    async def parse_query(self, text):
        return self.parsed


KNOWN_ENTITIES = {
    "entities:people:all": ["Alice", "Bob"],
    "entities:projects:all": [
        {"id": "p1", "name": "Website Redesign", "status": "IN_PROGRESS"},
        {"id": "p2", "name": "Apollo", "status": "PLANNED"},
    ],
}


def _task(title, assignee="Alice", status=TaskStatus.TODO, due_in_days=5, project_id="p1"):
    return Task(
        title=title,
        assignee_name=assignee,
        status=status,
        due_date=NOW + timedelta(days=due_in_days),
        project_id=project_id,
    )


def _processor(directory: RecordingDirectory) -> QueryProcessor:
    directory_cache = EntityDirectoryCache(directory, FakeCache(KNOWN_ENTITIES))
    parser = QueryParser(
        IntentClassifier(),
        EntityDiscovery(directory_cache, FuzzyMatcher()),
        ConditionExtractor(),
        ConfidenceScorer(),
    )
    return QueryProcessor(parser, directory, directory_cache, clock=lambda: NOW)


# ── Task queries ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_known_person_task_query():
    directory = RecordingDirectory(
        tasks=[
            _task("Design UI", status=TaskStatus.IN_PROGRESS, due_in_days=-2),
            _task("API integration"),
        ]
    )

    response = await _processor(directory).process_query("show alice tasks")

    assert response.success is True
    assert response.error is None
    assert response.analysis.intent_recognized == "query_tasks"
    assert response.analysis.confidence_score == pytest.approx(0.9)
    assert response.analysis.filters_applied == {"assigneeName": "Alice"}
    assert directory.calls == [("list_tasks", TaskFilters(assignee_name="Alice"))]
    assert [row["title"] for row in response.data] == ["Design UI", "API integration"]
    assert response.insights == [
        "Found 2 tasks total",
        "1 tasks currently in progress",
        "1 tasks are overdue and need immediate attention",
    ]
    assert response.recommendations == ["Prioritize overdue tasks to prevent project delays"]
    assert response.suggestions == ["Analyze Alice's workload", "Assess risk for project p1"]


@pytest.mark.asyncio
async def test_status_filtered_task_query():
    directory = RecordingDirectory(tasks=[_task("Done", "Bob", TaskStatus.COMPLETED)])

    response = await _processor(directory).process_query("Query Bob finished tasks")

    assert response.success is True
    assert response.analysis.confidence_score == pytest.approx(0.95)
    assert directory.calls == [
        ("list_tasks", TaskFilters(assignee_name="Bob", status=TaskStatus.COMPLETED))
    ]


@pytest.mark.asyncio
async def test_unscoped_task_query_is_treated_as_missing_person():
    directory = RecordingDirectory(tasks=[_task("A"), _task("B", "Bob")])

    response = await _processor(directory).process_query("show me all tasks")

    assert response.analysis.confidence_score == pytest.approx(0.4)
    assert directory.calls == [("list_tasks", TaskFilters())]
    assert response.success is False
    assert response.error == "Person not found"
    assert response.data == []


@pytest.mark.asyncio
async def test_unrecognized_person_becomes_person_not_found():
    directory = RecordingDirectory(tasks=[_task("A")])

    response = await _processor(directory).process_query("show me hello tasks")

    assert response.success is False
    assert response.error == "Person not found"
    assert response.data == []
    assert response.analysis.confidence_score == pytest.approx(0.4)
    assert response.insights == ["The requested person was not found in the system"]
    assert response.recommendations == [
        "Check the spelling of the person's name",
        "Try using the exact name as it appears in the system",
        "Available people: Alice, Bob",
    ]


@pytest.mark.asyncio
async def test_listing_failure_degrades_to_empty_data():
    directory = RecordingDirectory(fail_listing=True)

    response = await _processor(directory).process_query("show alice tasks")

    assert response.success is True
    assert response.data == []
    assert response.insights == ["No tasks found matching the specified criteria"]


@pytest.mark.asyncio
async def test_general_query_is_scoped_to_recognized_person():
    directory = RecordingDirectory(tasks=[_task("A")])

    response = await _processor(directory).process_query("anything for alice?")

    assert response.analysis.intent_recognized == "general_query"
    assert directory.calls == [("list_tasks", TaskFilters(assignee_name="Alice"))]


# ── Workload and risk ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_workload_query_dispatches_to_analysis():
    directory = RecordingDirectory()

    response = await _processor(directory).process_query("Analyze Bob's workload")

    assert response.success is True
    assert response.analysis.intent_recognized == "analyze_workload"
    assert response.analysis.confidence_score == pytest.approx(0.9)
    assert directory.calls == [("get_workload_analysis", "Bob")]
    assert response.data[0]["assignee"] == "Bob"
    assert response.insights == ["Bob has 3 tasks assigned"]
    assert response.suggestions is None


@pytest.mark.asyncio
async def test_workload_without_person_is_gated():
    directory = RecordingDirectory()

    response = await _processor(directory).process_query("analyze workload")

    assert response.success is False
    assert response.error == WORKLOAD_NEEDS_PERSON
    assert response.analysis.confidence_score == pytest.approx(0.1)
    assert directory.calls == []


@pytest.mark.asyncio
async def test_risk_query_uses_project_identifier():
    directory = RecordingDirectory()

    response = await _processor(directory).process_query("assess risk for project apollo")

    assert response.success is True
    assert directory.calls == [("get_risk_assessment", "p2")]
    assert response.data[0]["risk_level"] == "MEDIUM"
    assert response.recommendations == ["Continue monitoring progress"]


@pytest.mark.asyncio
async def test_missing_project_becomes_error_response():
    directory = RecordingDirectory(missing_projects={"p2"})

    response = await _processor(directory).process_query("assess risk for project apollo")

    assert response.success is False
    assert response.analysis.intent_recognized == "error"
    assert response.analysis.confidence_score == 0.0
    assert response.error == "Project with id 'p2' not found"
    assert len(response.recommendations) == 3


@pytest.mark.asyncio
async def test_general_query_is_scoped_to_recognized_project():
    directory = RecordingDirectory(tasks=[_task("A", project_id="p2")])

    response = await _processor(directory).process_query("anything new in apollo?")

    assert response.success is True
    assert response.analysis.intent_recognized == "general_query"
    assert directory.calls == [("list_tasks", TaskFilters(project_id="p2"))]


@pytest.mark.asyncio
async def test_risk_without_project_names_the_missing_project():
    directory = RecordingDirectory()

    response = await _processor(directory).process_query("assess risk")

    assert response.success is False
    assert response.analysis.intent_recognized == "assess_risk"
    assert response.error == RISK_NEEDS_PROJECT
    assert directory.calls == []


@pytest.mark.parametrize(
    "intent, message",
    [
        (Intent.ANALYZE_WORKLOAD, WORKLOAD_NEEDS_PERSON),
        (Intent.ASSESS_RISK, RISK_NEEDS_PROJECT),
    ],
)
@pytest.mark.asyncio
async def test_missing_entity_after_gate_becomes_error_response(intent, message):
    directory = RecordingDirectory()
    parsed = ParsedQuery(
        intent=intent,
        entities=ExtractedEntities(),
        filters=QueryFilters(),
        confidence=0.6,
        metadata=ParsedQueryMetadata(original_query="show the numbers", processing_time_ms=1),
    )
    directory_cache = EntityDirectoryCache(directory, FakeCache(KNOWN_ENTITIES))
    processor = QueryProcessor(StubParser(parsed), directory, directory_cache, clock=lambda: NOW)

    response = await processor.process_query("show the numbers")

    assert response.success is False
    assert response.analysis.intent_recognized == "error"
    assert response.error == message
    assert directory.calls == []


# ── Gate ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_meaningless_query_makes_no_data_calls():
    directory = RecordingDirectory()

    response = await _processor(directory).process_query("asASDASDas")

    assert response.success is False
    assert response.error == "Invalid or unclear query"
    assert response.data == []
    assert response.analysis.reasoning == ["Query too unclear or meaningless to process"]
    assert response.insights == ["The query could not be understood"]
    assert response.recommendations[-1] == "Available people: Alice, Bob"
    assert directory.calls == []


@pytest.mark.parametrize("query", ["ab", "!!!???", "12345"])
@pytest.mark.asyncio
async def test_short_or_letterless_query_makes_no_data_calls(query):
    directory = RecordingDirectory()

    response = await _processor(directory).process_query(query)

    assert response.success is False
    assert response.error == "Invalid or unclear query"
    assert response.data == []
    assert directory.calls == []


@pytest.mark.parametrize(
    "query, expected",
    [
        ("asASDASDas", True),
        ("!!!???", True),
        ("ab", True),
        ("xyzzy", True),
        ("show alice tasks", False),
        ("Analyze Bob's workload", False),
    ],
)
def test_is_meaningless_query(query, expected):
    assert is_meaningless_query(query) is expected


# ── Insight helpers ──────────────────────────────────────────────────


def test_task_insights_counts_blocked_and_overdue():
    tasks = [
        _task("a", status=TaskStatus.BLOCKED, due_in_days=-1),
        _task("b", status=TaskStatus.COMPLETED, due_in_days=-1),
    ]

    assert task_insights(tasks, NOW) == [
        "Found 2 tasks total",
        "1 tasks are overdue and need immediate attention",
        "1 tasks are blocked and may require intervention",
    ]


def test_task_recommendations_suggest_redistribution_when_many_overdue():
    tasks = [_task(str(i), due_in_days=-1) for i in range(4)]

    assert task_recommendations(tasks, NOW) == [
        "Prioritize overdue tasks to prevent project delays",
        "Consider redistributing workload or extending deadlines",
    ]


def test_task_recommendations_for_empty_result():
    assert task_recommendations([], NOW) == [
        "Consider adjusting search criteria or checking if tasks exist for the specified filters"
    ]
