"""Application services (use cases) for task and project CRUD.

Every write drops the entity directory cache so new assignees and projects
become discoverable on the next query.
"""

import logging

from tracker.application.interfaces import ProjectRepository, TaskRepository
from tracker.application.schemas.tracker import ProjectCreate, TaskCreate
from tracker.application.services.entity_directory_cache import EntityDirectoryCache
from tracker.domain.entities import Project, Task, TaskFilters
from tracker.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)


class ProjectService:
    """Orchestrates project CRUD logic. Depends on the repository port (DI)."""

    def __init__(self, repository: ProjectRepository, directory_cache: EntityDirectoryCache):
        self._repository = repository
        self._directory_cache = directory_cache

    async def get_project(self, project_id: str) -> Project:
        project = await self._repository.get_by_id(project_id)
        if project is None:
            raise EntityNotFoundError("Project", project_id)
        return project

    async def list_projects(self, *, skip: int = 0, limit: int = 100) -> list[Project]:
        return await self._repository.get_all(skip=skip, limit=limit)

    async def create_project(self, data: ProjectCreate) -> Project:
        project = Project(
            name=data.name,
            description=data.description,
            start_date=data.start_date,
            end_date=data.end_date,
            status=data.status,
        )
        created = await self._repository.create(project)
        await self._directory_cache.invalidate()
        logger.info("Project created: %s (%s)", created.name, created.id)
        return created

    async def delete_project(self, project_id: str) -> bool:
        await self.get_project(project_id)
        deleted = await self._repository.delete(project_id)
        await self._directory_cache.invalidate()
        return deleted


class TaskService:
    """Orchestrates task CRUD logic. Depends on the repository ports (DI)."""

    def __init__(
        self,
        repository: TaskRepository,
        project_repository: ProjectRepository,
        directory_cache: EntityDirectoryCache,
    ):
        self._repository = repository
        self._project_repository = project_repository
        self._directory_cache = directory_cache

    async def get_task(self, task_id: str) -> Task:
        task = await self._repository.get_by_id(task_id)
        if task is None:
            raise EntityNotFoundError("Task", task_id)
        return task

    async def list_tasks(
        self,
        filters: TaskFilters | None = None,
        *,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Task]:
        return await self._repository.get_all(filters, skip=skip, limit=limit)

    async def create_task(self, data: TaskCreate) -> Task:
        if await self._project_repository.get_by_id(data.project_id) is None:
            raise EntityNotFoundError("Project", data.project_id)

        task = Task(
            title=data.title,
            description=data.description,
            assignee_name=data.assignee_name.strip(),
            due_date=data.due_date,
            project_id=data.project_id,
            status=data.status,
        )
        created = await self._repository.create(task)
        await self._directory_cache.invalidate()
        logger.info("Task created: %s for %s", created.id, created.assignee_name)
        return created

    async def delete_task(self, task_id: str) -> bool:
        await self.get_task(task_id)
        deleted = await self._repository.delete(task_id)
        await self._directory_cache.invalidate()
        return deleted
