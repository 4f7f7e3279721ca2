from .project_repository import SQLAlchemyProjectRepository
from .task_repository import SQLAlchemyTaskRepository

__all__ = [
    "SQLAlchemyProjectRepository",
    "SQLAlchemyTaskRepository",
]
