"""Integration tests for the query and tool endpoints with a faked task directory."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

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
from tracker.domain.entities import Task, TaskStatus, WorkloadRecord
from tracker.infrastructure.cache import InMemoryKeyValueCache
from tracker.infrastructure.dependencies import get_query_parser, get_query_processor
from tracker.main import app

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


# ── Fakes ────────────────────────────────────────────────────────────


class FakeDirectory:
    def __init__(self):
        self.calls: list[str] = []
        self.tasks = [
            Task(
                title="Design UI",
                assignee_name="Alice",
                status=TaskStatus.IN_PROGRESS,
                due_date=NOW - timedelta(days=1),
                project_id="p1",
            )
        ]

    async def list_tasks(self, filters=None):
        self.calls.append("list_tasks")
        if filters is None or not filters.assignee_name:
            return self.tasks
        wanted = filters.assignee_name.lower()
        return [t for t in self.tasks if t.assignee_name.lower() == wanted]

    async def list_projects(self):
        self.calls.append("list_projects")
        return []

    async def get_workload_analysis(self, person_name):
        self.calls.append("get_workload_analysis")
        return WorkloadRecord(assignee=person_name, total_tasks=1)

    async def get_risk_assessment(self, project_id):
        raise AssertionError("not used")


def _wire(directory: FakeDirectory) -> None:
    cache = InMemoryKeyValueCache()
    directory_cache = EntityDirectoryCache(directory, cache)
    parser = QueryParser(
        IntentClassifier(),
        EntityDiscovery(directory_cache, FuzzyMatcher()),
        ConditionExtractor(),
        ConfidenceScorer(),
        debug_mode=True,
    )
    processor = QueryProcessor(parser, directory, directory_cache, clock=lambda: NOW)
    app.dependency_overrides[get_query_parser] = lambda: parser
    app.dependency_overrides[get_query_processor] = lambda: processor


async def _post(path: str, body: dict):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.post(path, json=body)


async def _get(path: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get(path)


# ── Tests ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_query_returns_tasks_and_analysis():
    directory = FakeDirectory()
    _wire(directory)
    try:
        response = await _post("/api/v1/query", {"prompt": "show alice tasks"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"][0]["title"] == "Design UI"
    assert body["analysis"]["intent_recognized"] == "query_tasks"
    assert body["analysis"]["entities_found"]["people"] == ["Alice"]
    assert body["analysis"]["filters_applied"] == {"assigneeName": "Alice"}
    assert body["analysis"]["debugInfo"]["intent"] == "query_tasks"
    assert "1 tasks are overdue and need immediate attention" in body["insights"]
    assert "error" not in body
    assert body["suggestions"] == ["Analyze Alice's workload", "Assess risk for project p1"]


@pytest.mark.asyncio
async def test_unclear_query_is_200_with_failure():
    directory = FakeDirectory()
    _wire(directory)
    try:
        response = await _post("/api/v1/query", {"prompt": "asASDASDas"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Invalid or unclear query"
    assert "suggestions" not in body
    assert body["data"] == []
    assert "get_workload_analysis" not in directory.calls


@pytest.mark.asyncio
async def test_short_prompt_is_rejected():
    response = await _post("/api/v1/query", {"prompt": "hi"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_parse_endpoint_returns_structured_query():
    _wire(FakeDirectory())
    try:
        response = await _post("/api/v1/query/parse", {"prompt": "Analyze Alice's workload"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    body = response.json()
    assert body["intent"] == "analyze_workload"
    assert body["entities"]["people"] == ["Alice"]
    assert body["filters"] == {"assigneeName": "Alice"}
    assert body["metadata"]["original_query"] == "Analyze Alice's workload"


@pytest.mark.asyncio
async def test_tools_listing_describes_query_tool():
    response = await _get("/api/v1/tools")

    assert response.status_code == 200
    tools = response.json()
    assert [t["name"] for t in tools] == ["natural_language_query"]
    assert "prompt" in tools[0]["inputSchema"]["properties"]


@pytest.mark.asyncio
async def test_tool_call_wraps_json_result_in_text_content():
    _wire(FakeDirectory())
    try:
        response = await _post(
            "/api/v1/tools/natural_language_query", {"prompt": "Analyze Alice's workload"}
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    content = response.json()["content"]
    assert content[0]["type"] == "text"
    payload = json.loads(content[0]["text"])
    assert payload["success"] is True
    assert payload["data"][0]["assignee"] == "Alice"
    assert "error" not in payload
    assert "suggestions" not in payload
