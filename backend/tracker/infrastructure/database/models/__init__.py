from .tracker_models import ProjectModel, TaskModel

__all__ = [
    "ProjectModel",
    "TaskModel",
]
