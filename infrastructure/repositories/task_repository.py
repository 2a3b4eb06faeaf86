"""
任务仓储实现 - 使用SQLAlchemy实现数据访问
"""
from typing import List

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.common.exceptions import TaskNotFoundException
from domain.task import Task, TaskRepository
from infrastructure.models.task import TaskModel
from infrastructure.repositories.errors import translate_db_errors


_COUNTABLE_COLUMNS = {
    "id_task": TaskModel.id_task,
    "parent_list": TaskModel.parent_list,
}


class SQLAlchemyTaskRepository(TaskRepository):
    """任务仓储的SQLAlchemy实现

    查询不附加 ORDER BY，结果顺序即数据库返回顺序
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: TaskModel) -> Task:
        """将数据库模型转换为领域实体"""
        return Task(
            id_task=model.id_task,
            parent_list=model.parent_list,
            title=model.title,
            body=model.body,
            completed_on=model.completed_on,
            due_date=model.due_date,
            importance=model.importance,
            favorite=model.favorite,
            is_reminder_on=model.is_reminder_on,
            reminder_date=model.reminder_date,
            status=model.status,
            created_date_time=model.created_date_time,
            last_modified_date_time=model.last_modified_date_time,
        )

    def _columns(self, entity: Task) -> dict:
        """除主键外的全部列，用于整行替换"""
        return {
            "parent_list": entity.parent_list,
            "title": entity.title,
            "body": entity.body,
            "completed_on": entity.completed_on,
            "due_date": entity.due_date,
            "importance": int(entity.importance),
            "favorite": entity.favorite,
            "is_reminder_on": entity.is_reminder_on,
            "reminder_date": entity.reminder_date,
            "status": int(entity.status),
            "created_date_time": entity.created_date_time,
            "last_modified_date_time": entity.last_modified_date_time,
        }

    def _to_model(self, entity: Task) -> TaskModel:
        """将领域实体转换为数据库模型"""
        return TaskModel(id_task=entity.id_task, **self._columns(entity))

    async def list_all(self) -> List[Task]:
        with translate_db_errors("Failed to fetch list of tasks"):
            result = await self.session.execute(select(TaskModel))
            models = result.scalars().all()
        return [self._to_entity(m) for m in models]

    async def list_by_parent(self, list_id: str) -> List[Task]:
        with translate_db_errors("Failed to fetch list of tasks"):
            result = await self.session.execute(
                select(TaskModel).where(TaskModel.parent_list == list_id)
            )
            models = result.scalars().all()
        return [self._to_entity(m) for m in models]

    async def ids_by_parent(self, list_id: str) -> List[str]:
        with translate_db_errors("Failed to fetch task ids"):
            result = await self.session.execute(
                select(TaskModel.id_task).where(TaskModel.parent_list == list_id)
            )
            return list(result.scalars().all())

    async def count_by(self, column: str, value: str) -> int:
        try:
            col = _COUNTABLE_COLUMNS[column]
        except KeyError:
            raise ValueError(f"tasks cannot be counted by {column!r}") from None
        with translate_db_errors("Failed to count tasks"):
            result = await self.session.execute(
                select(func.count()).select_from(TaskModel).where(col == value)
            )
            return int(result.scalar_one())

    async def get_by_id(self, task_id: str) -> Task:
        with translate_db_errors("Failed to fetch task"):
            model = await self.session.get(TaskModel, task_id)
        if model is None:
            raise TaskNotFoundException(task_id)
        return self._to_entity(model)

    async def create(self, task: Task) -> None:
        with translate_db_errors("Failed to add task"):
            self.session.add(self._to_model(task))
            await self.session.flush()

    async def update(self, task: Task) -> int:
        with translate_db_errors("Failed to update task"):
            result = await self.session.execute(
                update(TaskModel)
                .where(TaskModel.id_task == task.id_task)
                .values(**self._columns(task))
            )
            return int(result.rowcount or 0)

    async def delete(self, task_id: str) -> int:
        with translate_db_errors("Failed to remove task"):
            result = await self.session.execute(
                delete(TaskModel).where(TaskModel.id_task == task_id)
            )
            return int(result.rowcount or 0)
