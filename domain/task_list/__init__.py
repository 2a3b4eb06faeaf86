"""Task list domain exports."""
from .entity import TaskList
from .repository import TaskListRepository

__all__ = ["TaskList", "TaskListRepository"]
