"""Abstract repository interfaces (ports) for task and project persistence."""

from abc import ABC, abstractmethod

from tracker.domain.entities import Project, Task, TaskFilters


class TaskRepository(ABC):
    """Port for task persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, task_id: str) -> Task | None:
        """Retrieve a single task by its UUID."""
        ...

    @abstractmethod
    async def get_all(
        self,
        filters: TaskFilters | None = None,
        *,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Task]:
        """Retrieve a filtered list of tasks ordered by due date."""
        ...

    @abstractmethod
    async def create(self, task: Task) -> Task:
        """Persist a new task and return it."""
        ...

    @abstractmethod
    async def delete(self, task_id: str) -> bool:
        """Delete a task. Returns True if deleted, False if not found."""
        ...


class ProjectRepository(ABC):
    """Port for project persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, project_id: str) -> Project | None:
        """Retrieve a single project by its UUID."""
        ...

    @abstractmethod
    async def get_all(self, *, skip: int = 0, limit: int | None = None) -> list[Project]:
        """Retrieve projects ordered by name."""
        ...

    @abstractmethod
    async def create(self, project: Project) -> Project:
        """Persist a new project and return it."""
        ...

    @abstractmethod
    async def delete(self, project_id: str) -> bool:
        """Delete a project. Returns True if deleted, False if not found."""
        ...
