"""Tracker REST API client — implements the TaskDirectory interface.

Talks to a remote tracker service over HTTP with httpx. Responses may be
bare JSON or wrapped in a ``{"success": ..., "data": ...}`` envelope, and
record keys may be snake_case or camelCase.
"""

import logging
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx

from tracker.application.interfaces import TaskDirectory
from tracker.domain.entities import (
    Project,
    ProjectStatus,
    RiskRecord,
    Task,
    TaskFilters,
    TaskStatus,
    WorkloadRecord,
)
from tracker.domain.exceptions import EntityNotFoundError, TrackerApiError

logger = logging.getLogger(__name__)


class TrackerApiClient(TaskDirectory):
    """Infrastructure adapter — reads tasks and analyses from a tracker API.

    An injected ``http_client`` is reused and never closed here; otherwise a
    short-lived client is created per request.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8020/api/v1",
        *,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client

    async def list_tasks(self, filters: TaskFilters | None = None) -> list[Task]:
        params: dict[str, str] = {}
        if filters is not None:
            if filters.assignee_name:
                params["assignee_name"] = filters.assignee_name
            if filters.status:
                params["status"] = filters.status.value
            if filters.overdue:
                params["overdue"] = "true"
            if filters.project_id:
                params["project_id"] = filters.project_id

        data = await self._get("/tasks", params=params)
        return [_parse_task(item) for item in data or []]

    async def list_projects(self) -> list[Project]:
        data = await self._get("/projects")
        return [_parse_project(item) for item in data or []]

    async def get_workload_analysis(self, person_name: str) -> WorkloadRecord:
        data = await self._get(f"/tasks/workload/{quote(person_name, safe='')}")
        return WorkloadRecord.from_dict(_snake_nested(data, "prediction", "team_context"))

    async def get_risk_assessment(self, project_id: str) -> RiskRecord:
        try:
            data = await self._get(f"/projects/{quote(project_id, safe='')}/risk")
        except TrackerApiError as exc:
            if exc.status_code == 404:
                raise EntityNotFoundError("Project", project_id) from exc
            raise
        return RiskRecord.from_dict(_snake_nested(data, "patterns", "comparison"))

    # ── Transport ───────────────────────────────────────────────────

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _get(self, path: str, *, params: dict[str, str] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            logger.debug("GET %s params=%s", url, params)
            response = await client.get(url, params=params)
            if not response.is_success:
                self._raise_api_error(response)

            payload = response.json()
            if isinstance(payload, dict) and "data" in payload and "success" in payload:
                return payload["data"]
            return payload
        finally:
            if should_close:
                await client.aclose()

    @staticmethod
    def _raise_api_error(response: httpx.Response) -> None:
        """Raise TrackerApiError from a non-2xx httpx Response."""
        try:
            data = response.json()
            message = data.get("detail") or data.get("error") or response.text
            if isinstance(message, dict):
                message = message.get("message", response.text)
        except Exception:
            message = response.text

        raise TrackerApiError(status_code=response.status_code, message=str(message))


# ── Record parsing ──────────────────────────────────────────────────


def _pick(data: dict[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    if snake in data:
        return data[snake]
    return data.get(camel, default)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _parse_task(data: dict[str, Any]) -> Task:
    task = Task(
        id=str(data["id"]),
        title=data.get("title", ""),
        description=data.get("description"),
        assignee_name=_pick(data, "assignee_name", "assigneeName", "") or "",
        due_date=_parse_datetime(_pick(data, "due_date", "dueDate")),
        project_id=str(_pick(data, "project_id", "projectId", "")),
        status=TaskStatus(data.get("status", TaskStatus.TODO.value)),
    )
    created = _pick(data, "created_at", "createdAt")
    if created:
        task.created_at = _parse_datetime(created)
    updated = _pick(data, "updated_at", "updatedAt")
    if updated:
        task.updated_at = _parse_datetime(updated)
    return task


def _parse_project(data: dict[str, Any]) -> Project:
    return Project(
        id=str(data["id"]),
        name=data.get("name", ""),
        description=data.get("description"),
        status=ProjectStatus(data.get("status", ProjectStatus.PLANNED.value)),
        start_date=_parse_datetime(_pick(data, "start_date", "startDate")),
        end_date=_parse_datetime(_pick(data, "end_date", "endDate")),
    )


def _snake_keys(data: dict[str, Any]) -> dict[str, Any]:
    """camelCase → snake_case for top-level keys."""
    converted: dict[str, Any] = {}
    for key, value in (data or {}).items():
        snake = "".join(f"_{c.lower()}" if c.isupper() else c for c in key)
        converted[snake.lstrip("_")] = value
    return converted


def _snake_nested(data: dict[str, Any], *nested: str) -> dict[str, Any]:
    """``_snake_keys`` one level down into the named objects and lists of objects."""
    converted = _snake_keys(data)
    for key in nested:
        value = converted.get(key)
        if isinstance(value, dict):
            converted[key] = _snake_keys(value)
        elif isinstance(value, list):
            converted[key] = [_snake_keys(item) if isinstance(item, dict) else item for item in value]
    return converted
