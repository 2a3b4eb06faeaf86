"""Infrastructure models package exports."""
from .base import Base, metadata
from .task import TaskModel
from .task_list import TaskListModel

__all__ = [
    "Base",
    "metadata",
    "TaskModel",
    "TaskListModel",
]
