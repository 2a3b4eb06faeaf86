"""Unit of Work 抽象定义"""
from __future__ import annotations

from abc import ABC, abstractmethod

from domain.task.repository import TaskRepository
from domain.task_list.repository import TaskListRepository


class AbstractUnitOfWork(ABC):
    """应用层事务边界控制抽象

    每个 RPC 操作使用一个独立的 Unit of Work（独立会话与连接），不跨请求共享。
    """

    task_repository: TaskRepository
    list_repository: TaskListRepository

    def __init__(self, *, readonly: bool = False) -> None:
        self._committed = False
        self._readonly = readonly
        self.task_repository = None  # type: ignore[assignment]
        self.list_repository = None  # type: ignore[assignment]

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc:
            await self.rollback()
        else:
            # 只在非只读且未显式提交时自动提交
            if not self._readonly and not self._committed:
                await self.commit()

    @abstractmethod
    async def commit(self) -> None:
        """提交事务"""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """回滚事务"""
        ...
