"""
任务列表应用服务
"""
from typing import Callable, List

from core.logging_config import get_logger
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.task_list import TaskList


logger = get_logger(__name__)


class ListApplicationService:
    """任务列表应用服务

    删除列表不会触及 tasks 表，其下任务保持原样。
    """

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def list_all_lists(self) -> List[TaskList]:
        async with self._uow_factory(readonly=True) as uow:
            return await uow.list_repository.list_all()

    async def all_list_ids(self) -> List[str]:
        async with self._uow_factory(readonly=True) as uow:
            return await uow.list_repository.all_ids()

    async def create_list(self, task_list: TaskList) -> None:
        async with self._uow_factory() as uow:
            await uow.list_repository.create(task_list)
            await uow.commit()
        logger.info("list_created", id_list=task_list.id_list, provider=task_list.provider)

    async def get_list(self, list_id: str) -> TaskList:
        async with self._uow_factory(readonly=True) as uow:
            return await uow.list_repository.get_by_id(list_id)

    async def update_list(self, task_list: TaskList) -> int:
        async with self._uow_factory() as uow:
            matched = await uow.list_repository.update(task_list)
            await uow.commit()
        logger.info("list_updated", id_list=task_list.id_list, rows=matched)
        return matched

    async def delete_list(self, list_id: str) -> int:
        async with self._uow_factory() as uow:
            removed = await uow.list_repository.delete(list_id)
            await uow.commit()
        logger.info("list_deleted", id_list=list_id, rows=removed)
        return removed
