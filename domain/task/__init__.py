"""Task domain exports."""
from .entity import Task, TaskImportance, TaskStatus
from .repository import TaskRepository

__all__ = ["Task", "TaskImportance", "TaskStatus", "TaskRepository"]
