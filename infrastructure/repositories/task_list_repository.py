"""
任务列表仓储实现
"""
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.common.exceptions import ListNotFoundException
from domain.task_list import TaskList, TaskListRepository
from infrastructure.models.task_list import TaskListModel
from infrastructure.repositories.errors import translate_db_errors


class SQLAlchemyTaskListRepository(TaskListRepository):
    """任务列表仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: TaskListModel) -> TaskList:
        return TaskList(
            id_list=model.id_list,
            name=model.name,
            is_owner=model.is_owner,
            icon_name=model.icon_name,
            provider=model.provider,
        )

    def _to_model(self, entity: TaskList) -> TaskListModel:
        return TaskListModel(
            id_list=entity.id_list,
            name=entity.name,
            is_owner=entity.is_owner,
            icon_name=entity.icon_name,
            provider=entity.provider,
        )

    async def list_all(self) -> List[TaskList]:
        with translate_db_errors("Failed to fetch lists"):
            result = await self.session.execute(select(TaskListModel))
            models = result.scalars().all()
        return [self._to_entity(m) for m in models]

    async def all_ids(self) -> List[str]:
        with translate_db_errors("Failed to fetch list ids"):
            result = await self.session.execute(select(TaskListModel.id_list))
            return list(result.scalars().all())

    async def get_by_id(self, list_id: str) -> TaskList:
        with translate_db_errors("Failed to fetch list"):
            model = await self.session.get(TaskListModel, list_id)
        if model is None:
            raise ListNotFoundException(list_id)
        return self._to_entity(model)

    async def create(self, task_list: TaskList) -> None:
        with translate_db_errors("Failed to add list"):
            self.session.add(self._to_model(task_list))
            await self.session.flush()

    async def update(self, task_list: TaskList) -> int:
        with translate_db_errors("Failed to update list"):
            result = await self.session.execute(
                update(TaskListModel)
                .where(TaskListModel.id_list == task_list.id_list)
                .values(
                    name=task_list.name,
                    is_owner=task_list.is_owner,
                    icon_name=task_list.icon_name,
                    provider=task_list.provider,
                )
            )
            return int(result.rowcount or 0)

    async def delete(self, list_id: str) -> int:
        with translate_db_errors("Failed to remove list"):
            result = await self.session.execute(
                delete(TaskListModel).where(TaskListModel.id_list == list_id)
            )
            return int(result.rowcount or 0)
