"""Concrete repository implementation for Project backed by SQLAlchemy."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.application.interfaces import ProjectRepository
from tracker.domain.entities import Project, ProjectStatus
from tracker.infrastructure.database.models import ProjectModel, TaskModel


class SQLAlchemyProjectRepository(ProjectRepository):
    """Implements the ProjectRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: ProjectModel) -> Project:
        """Map ORM model → domain entity."""
        return Project(
            id=model.id,
            name=model.name,
            description=model.description,
            status=ProjectStatus(model.status),
            start_date=model.start_date,
            end_date=model.end_date,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Project) -> ProjectModel:
        """Map domain entity → ORM model (for creation)."""
        return ProjectModel(
            id=entity.id,
            name=entity.name,
            description=entity.description,
            status=entity.status.value,
            start_date=entity.start_date,
            end_date=entity.end_date,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def get_by_id(self, project_id: str) -> Project | None:
        result = await self._session.get(ProjectModel, project_id)
        return self._to_entity(result) if result else None

    async def get_all(self, *, skip: int = 0, limit: int | None = None) -> list[Project]:
        stmt = select(ProjectModel).order_by(ProjectModel.name).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def create(self, project: Project) -> Project:
        model = self._to_model(project)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, project_id: str) -> bool:
        model = await self._session.get(ProjectModel, project_id)
        if model is None:
            return False
        await self._session.execute(delete(TaskModel).where(TaskModel.project_id == project_id))
        await self._session.delete(model)
        await self._session.flush()
        return True
