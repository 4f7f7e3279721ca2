"""Abstract task/project directory — the data capability the query pipeline consumes.

Implemented in-process over the repositories (``TrackerDirectoryService``)
or remotely over HTTP (``TrackerApiClient``).
"""

from abc import ABC, abstractmethod

from tracker.domain.entities import (
    Project,
    RiskRecord,
    Task,
    TaskFilters,
    WorkloadRecord,
)


class TaskDirectory(ABC):
    """Port — read-only view of tasks, projects and their analyses."""

    @abstractmethod
    async def list_tasks(self, filters: TaskFilters | None = None) -> list[Task]:
        """Return tasks matching the optional filters."""
        ...

    @abstractmethod
    async def list_projects(self) -> list[Project]:
        """Return every known project."""
        ...

    @abstractmethod
    async def get_workload_analysis(self, person_name: str) -> WorkloadRecord:
        """Analyze the workload of one assignee."""
        ...

    @abstractmethod
    async def get_risk_assessment(self, project_id: str) -> RiskRecord:
        """Assess the delivery risk of one project.

        Raises:
            EntityNotFoundError: if the project does not exist.
        """
        ...
