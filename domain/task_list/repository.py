"""Repository abstraction for task lists."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from .entity import TaskList


class TaskListRepository(ABC):
    """Contract for persisting and querying task lists."""

    @abstractmethod
    async def list_all(self) -> List[TaskList]:
        ...

    @abstractmethod
    async def all_ids(self) -> List[str]:
        ...

    @abstractmethod
    async def get_by_id(self, list_id: str) -> TaskList:
        """Raises ``ListNotFoundException`` when no row matches."""
        ...

    @abstractmethod
    async def create(self, task_list: TaskList) -> None:
        ...

    @abstractmethod
    async def update(self, task_list: TaskList) -> int:
        ...

    @abstractmethod
    async def delete(self, list_id: str) -> int:
        ...
