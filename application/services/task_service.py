"""
任务应用服务（application/services）- 每个操作独立的 Unit of Work
"""
from __future__ import annotations

from typing import Callable, List, Literal

from core.config import settings
from core.logging_config import get_logger
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.task import Task


logger = get_logger(__name__)

CountColumn = Literal["id_task", "parent_list"]


class TaskApplicationService:
    """任务应用服务

    所有方法在失败时抛出 BusinessException 子类，由 gRPC 层转换为响应信封。
    """

    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        *,
        count_tasks_by: CountColumn | None = None,
    ):
        self._uow_factory = uow_factory
        self._count_tasks_by: CountColumn = count_tasks_by or settings.provider.count_tasks_by

    @property
    def count_tasks_by(self) -> CountColumn:
        return self._count_tasks_by

    async def list_all_tasks(self) -> List[Task]:
        async with self._uow_factory(readonly=True) as uow:
            return await uow.task_repository.list_all()

    async def list_tasks_from_list(self, list_id: str) -> List[Task]:
        async with self._uow_factory(readonly=True) as uow:
            return await uow.task_repository.list_by_parent(list_id)

    async def task_ids_from_list(self, list_id: str) -> List[str]:
        async with self._uow_factory(readonly=True) as uow:
            return await uow.task_repository.ids_by_parent(list_id)

    async def count_tasks(self, value: str) -> int:
        """统计任务数量；按哪一列过滤由 count_tasks_by 决定（默认 id_task）。"""
        async with self._uow_factory(readonly=True) as uow:
            return await uow.task_repository.count_by(self._count_tasks_by, value)

    async def create_task(self, task: Task) -> Task:
        async with self._uow_factory() as uow:
            await uow.task_repository.create(task)
            await uow.commit()
        logger.info("task_created", id_task=task.id_task, parent_list=task.parent_list)
        return task

    async def get_task(self, task_id: str) -> Task:
        async with self._uow_factory(readonly=True) as uow:
            return await uow.task_repository.get_by_id(task_id)

    async def update_task(self, task: Task) -> int:
        async with self._uow_factory() as uow:
            matched = await uow.task_repository.update(task)
            await uow.commit()
        logger.info("task_updated", id_task=task.id_task, rows=matched)
        return matched

    async def delete_task(self, task_id: str) -> int:
        async with self._uow_factory() as uow:
            removed = await uow.task_repository.delete(task_id)
            await uow.commit()
        logger.info("task_deleted", id_task=task_id, rows=removed)
        return removed
