"""Entity directory cache — known people and projects for entity discovery.

The lists are loaded from the task directory on a cache miss and replaced
wholesale. A copy of the last successful load is kept under a long-lived
``<key>:last_known`` entry so a directory outage degrades to stale data
instead of an empty pool.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from tracker.application.interfaces import KeyValueCache, TaskDirectory
from tracker.domain.entities import ProjectSummary

logger = logging.getLogger(__name__)

PEOPLE_KEY = "entities:people:all"
PROJECTS_KEY = "entities:projects:all"
_LAST_KNOWN_SUFFIX = ":last_known"


class EntityDirectoryCache:
    """Cached lists of known assignees and projects.

    Never raises: directory failures fall back to the last-known list, or an
    empty list when nothing was ever loaded.
    """

    def __init__(
        self,
        directory: TaskDirectory,
        cache: KeyValueCache,
        *,
        ttl_seconds: int = 300,
        stale_ttl_seconds: int = 86400,
    ):
        self._directory = directory
        self._cache = cache
        self._ttl_seconds = ttl_seconds
        self._stale_ttl_seconds = stale_ttl_seconds

    async def get_people(self) -> list[str]:
        """Distinct, non-empty assignee names in first-seen order."""
        return await self._load(PEOPLE_KEY, self._fetch_people)

    async def get_projects(self) -> list[ProjectSummary]:
        raw = await self._load(PROJECTS_KEY, self._fetch_projects)
        return [self._to_summary(item) for item in raw]

    async def invalidate(self) -> None:
        """Drop the fresh entries; the last-known copies survive."""
        for key in (PEOPLE_KEY, PROJECTS_KEY):
            try:
                await self._cache.delete(key)
            except Exception as exc:
                logger.warning("Entity cache delete failed for %s: %s", key, exc)
        logger.debug("Entity directory cache invalidated")

    # ── Loading ─────────────────────────────────────────────────────

    async def _load(
        self, key: str, fetch: Callable[[], Awaitable[list[Any]]]
    ) -> list[Any]:
        cached = await self._safe_get(key)
        if cached is not None:
            return cached

        try:
            fresh = await fetch()
        except Exception as exc:
            stale = await self._safe_get(key + _LAST_KNOWN_SUFFIX)
            logger.warning(
                "Entity directory load failed for %s (%s); using %s",
                key,
                exc,
                "last-known value" if stale is not None else "empty list",
            )
            return stale if stale is not None else []

        await self._safe_set(key, fresh, self._ttl_seconds)
        await self._safe_set(key + _LAST_KNOWN_SUFFIX, fresh, self._stale_ttl_seconds)
        logger.debug("Entity directory loaded %s: %d entries", key, len(fresh))
        return fresh

    async def _fetch_people(self) -> list[str]:
        tasks = await self._directory.list_tasks()
        names: list[str] = []
        seen: set[str] = set()
        for task in tasks:
            name = (task.assignee_name or "").strip()
            if name and name not in seen:
                seen.add(name)
                names.append(name)
        return names

    async def _fetch_projects(self) -> list[dict[str, str]]:
        projects = await self._directory.list_projects()
        return [
            {"id": p.id, "name": p.name, "status": getattr(p.status, "value", p.status)}
            for p in projects
        ]

    # ── Cache access (backend failures count as misses) ─────────────

    async def _safe_get(self, key: str) -> Any | None:
        try:
            return await self._cache.get(key)
        except Exception as exc:
            logger.warning("Entity cache read failed for %s: %s", key, exc)
            return None

    async def _safe_set(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            await self._cache.set(key, value, ttl_seconds)
        except Exception as exc:
            logger.warning("Entity cache write failed for %s: %s", key, exc)

    @staticmethod
    def _to_summary(item: Any) -> ProjectSummary:
        if isinstance(item, ProjectSummary):
            return item
        return ProjectSummary(
            id=str(item["id"]),
            name=str(item["name"]),
            status=str(item.get("status", "")),
        )
