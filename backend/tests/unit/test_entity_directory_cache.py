"""Unit tests for EntityDirectoryCache — loading, TTL caching and stale fallback."""

from datetime import datetime, timezone

import pytest

from tracker.application.services.entity_directory_cache import (
    PEOPLE_KEY,
    PROJECTS_KEY,
    EntityDirectoryCache,
)
from tracker.domain.entities import (
    Project,
    ProjectStatus,
    ProjectSummary,
    Task,
)

_DUE = datetime(2030, 1, 1, tzinfo=timezone.utc)


# ── Fakes ────────────────────────────────────────────────────────────


class FakeCache:
    """Dict-backed cache that records TTLs."""

    def __init__(self, initial: dict | None = None):
        self.store: dict = dict(initial or {})
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ttl_seconds):
        self.store[key] = value
        self.ttls[key] = ttl_seconds

    async def delete(self, key):
        self.store.pop(key, None)


class BrokenCache:
    async def get(self, key):
        raise ConnectionError("cache down")

    async def set(self, key, value, ttl_seconds):
        raise ConnectionError("cache down")

    async def delete(self, key):
        raise ConnectionError("cache down")


class FakeDirectory:
    def __init__(self, tasks=None, projects=None, fail=False):
        self.tasks = tasks or []
        self.projects = projects or []
        self.fail = fail
        self.task_calls = 0
        self.project_calls = 0

    async def list_tasks(self, filters=None):
        self.task_calls += 1
        if self.fail:
            raise ConnectionError("directory down")
        return self.tasks

    async def list_projects(self):
        self.project_calls += 1
        if self.fail:
            raise ConnectionError("directory down")
        return self.projects


def _task(assignee: str) -> Task:
    return Task(title="t", assignee_name=assignee, due_date=_DUE, project_id="p1")


def _project(project_id: str, name: str) -> Project:
    return Project(
        id=project_id,
        name=name,
        start_date=_DUE,
        end_date=_DUE,
        status=ProjectStatus.IN_PROGRESS,
    )


# ── People ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_people_are_distinct_non_empty_in_first_seen_order():
    directory = FakeDirectory(
        tasks=[_task("Bob"), _task("Alice"), _task("Bob"), _task("  "), _task(" Carol ")]
    )
    cache = EntityDirectoryCache(directory, FakeCache())

    assert await cache.get_people() == ["Bob", "Alice", "Carol"]


@pytest.mark.asyncio
async def test_people_load_once_within_ttl():
    directory = FakeDirectory(tasks=[_task("Alice")])
    backing = FakeCache()
    cache = EntityDirectoryCache(directory, backing, ttl_seconds=300, stale_ttl_seconds=86400)

    await cache.get_people()
    await cache.get_people()

    assert directory.task_calls == 1
    assert backing.ttls[PEOPLE_KEY] == 300
    assert backing.ttls[PEOPLE_KEY + ":last_known"] == 86400


@pytest.mark.asyncio
async def test_cached_people_are_served_without_directory_call():
    directory = FakeDirectory(tasks=[_task("Alice")])
    cache = EntityDirectoryCache(directory, FakeCache({PEOPLE_KEY: ["Zed"]}))

    assert await cache.get_people() == ["Zed"]
    assert directory.task_calls == 0


@pytest.mark.asyncio
async def test_directory_failure_falls_back_to_last_known():
    directory = FakeDirectory(fail=True)
    backing = FakeCache({PEOPLE_KEY + ":last_known": ["Alice", "Bob"]})
    cache = EntityDirectoryCache(directory, backing)

    assert await cache.get_people() == ["Alice", "Bob"]


@pytest.mark.asyncio
async def test_directory_failure_without_last_known_returns_empty():
    cache = EntityDirectoryCache(FakeDirectory(fail=True), FakeCache())

    assert await cache.get_people() == []
    assert await cache.get_projects() == []


@pytest.mark.asyncio
async def test_cache_backend_failure_counts_as_miss():
    directory = FakeDirectory(tasks=[_task("Alice")])
    cache = EntityDirectoryCache(directory, BrokenCache())

    assert await cache.get_people() == ["Alice"]
    await cache.invalidate()


# ── Projects ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_projects_are_returned_as_summaries():
    directory = FakeDirectory(projects=[_project("p1", "Apollo")])
    backing = FakeCache()
    cache = EntityDirectoryCache(directory, backing)

    projects = await cache.get_projects()

    assert projects == [ProjectSummary(id="p1", name="Apollo", status="IN_PROGRESS")]
    assert backing.store[PROJECTS_KEY] == [
        {"id": "p1", "name": "Apollo", "status": "IN_PROGRESS"}
    ]


# ── Invalidation ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_invalidate_drops_fresh_entries_but_keeps_last_known():
    directory = FakeDirectory(tasks=[_task("Alice")])
    backing = FakeCache()
    cache = EntityDirectoryCache(directory, backing)
    await cache.get_people()

    await cache.invalidate()

    assert PEOPLE_KEY not in backing.store
    assert backing.store[PEOPLE_KEY + ":last_known"] == ["Alice"]

    await cache.get_people()
    assert directory.task_calls == 2
