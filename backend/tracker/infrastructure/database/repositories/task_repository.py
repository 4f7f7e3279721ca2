"""Concrete repository implementation for Task backed by SQLAlchemy."""

from collections.abc import Callable
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.application.interfaces import TaskRepository
from tracker.domain.entities import Task, TaskFilters, TaskStatus
from tracker.infrastructure.database.models import TaskModel


class SQLAlchemyTaskRepository(TaskRepository):
    """Implements the TaskRepository port using SQLAlchemy async sessions."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        clock: Callable[[], datetime] | None = None,
    ):
        self._session = session
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _to_entity(self, model: TaskModel) -> Task:
        """Map ORM model → domain entity."""
        return Task(
            id=model.id,
            title=model.title,
            description=model.description,
            status=TaskStatus(model.status),
            assignee_name=model.assignee_name,
            due_date=model.due_date,
            project_id=model.project_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Task) -> TaskModel:
        """Map domain entity → ORM model (for creation)."""
        return TaskModel(
            id=entity.id,
            title=entity.title,
            description=entity.description,
            status=entity.status.value,
            assignee_name=entity.assignee_name,
            due_date=entity.due_date,
            project_id=entity.project_id,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def get_by_id(self, task_id: str) -> Task | None:
        result = await self._session.get(TaskModel, task_id)
        return self._to_entity(result) if result else None

    async def get_all(
        self,
        filters: TaskFilters | None = None,
        *,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Task]:
        stmt = select(TaskModel)

        if filters is not None:
            if filters.assignee_name:
                stmt = stmt.where(
                    func.lower(TaskModel.assignee_name) == filters.assignee_name.lower()
                )
            if filters.status is not None:
                stmt = stmt.where(TaskModel.status == filters.status.value)
            if filters.project_id:
                stmt = stmt.where(TaskModel.project_id == filters.project_id)
            if filters.overdue:
                stmt = stmt.where(
                    TaskModel.due_date < self._clock(),
                    TaskModel.status != TaskStatus.COMPLETED.value,
                )

        stmt = stmt.order_by(TaskModel.due_date, TaskModel.id).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def create(self, task: Task) -> Task:
        model = self._to_model(task)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, task_id: str) -> bool:
        model = await self._session.get(TaskModel, task_id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True
