"""Repository abstraction for tasks."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from .entity import Task


class TaskRepository(ABC):
    """Contract for persisting and querying tasks.

    Implementations raise ``QueryException`` (or a subclass) when the store
    rejects an operation.
    """

    @abstractmethod
    async def list_all(self) -> List[Task]:
        ...

    @abstractmethod
    async def list_by_parent(self, list_id: str) -> List[Task]:
        ...

    @abstractmethod
    async def ids_by_parent(self, list_id: str) -> List[str]:
        ...

    @abstractmethod
    async def count_by(self, column: str, value: str) -> int:
        """Count tasks whose ``column`` (``id_task`` or ``parent_list``) equals ``value``."""
        ...

    @abstractmethod
    async def get_by_id(self, task_id: str) -> Task:
        """Raises ``TaskNotFoundException`` when no row matches."""
        ...

    @abstractmethod
    async def create(self, task: Task) -> None:
        ...

    @abstractmethod
    async def update(self, task: Task) -> int:
        """Replace every column of the row keyed by ``task.id_task``; returns rows matched."""
        ...

    @abstractmethod
    async def delete(self, task_id: str) -> int:
        ...
