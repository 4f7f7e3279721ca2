"""Domain entities for the project/task tracking store."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4


class TaskStatus(str, Enum):
    """Lifecycle states of a task."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    BLOCKED = "BLOCKED"


class ProjectStatus(str, Enum):
    """Lifecycle states of a project."""

    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ON_HOLD = "ON_HOLD"
    CANCELLED = "CANCELLED"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class Project:
    """A project grouping a set of tasks."""

    name: str
    start_date: datetime
    end_date: datetime
    status: ProjectStatus = ProjectStatus.PLANNED
    description: str | None = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "status": self.status.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        }


@dataclass
class Task:
    """A unit of work assigned to one person within a project."""

    title: str
    assignee_name: str
    due_date: datetime
    project_id: str
    status: TaskStatus = TaskStatus.TODO
    description: str | None = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def completed_at(self) -> datetime | None:
        """When a completed task was last touched, as UTC; None while still open."""
        if self.status != TaskStatus.COMPLETED:
            return None
        return _as_aware(self.updated_at)

    def is_overdue(self, now: datetime | None = None) -> bool:
        """A task is overdue when its due date has passed and it is not completed."""
        reference = _as_aware(now or _utcnow())
        return (
            _as_aware(self.due_date) < reference
            and self.status != TaskStatus.COMPLETED
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "assignee_name": self.assignee_name,
            "status": self.status.value,
            "due_date": self.due_date.isoformat(),
            "project_id": self.project_id,
        }


@dataclass(frozen=True)
class ProjectSummary:
    """The slice of a project that entity discovery needs."""

    id: str
    name: str
    status: str


@dataclass(frozen=True)
class TaskFilters:
    """Filters accepted by task listing on the directory."""

    assignee_name: str | None = None
    status: TaskStatus | None = None
    overdue: bool | None = None
    project_id: str | None = None
