from .key_value_cache import KeyValueCache
from .task_directory import TaskDirectory
from .task_repository import ProjectRepository, TaskRepository

__all__ = [
    "KeyValueCache",
    "TaskDirectory",
    "ProjectRepository",
    "TaskRepository",
]
