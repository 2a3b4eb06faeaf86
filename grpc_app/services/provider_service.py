from __future__ import annotations

from typing import AsyncIterator, Optional

import grpc
from google.protobuf import empty_pb2, wrappers_pb2

from application.services.list_service import ListApplicationService
from application.services.task_service import TaskApplicationService
from core.config import ProviderSettings, settings
from domain.common.exceptions import BusinessException
from domain.task import Task
from domain.task_list import TaskList
from grpc_app.generated import provider_pb2, provider_pb2_grpc
from grpc_app.mappers import list_from_proto, list_to_proto, task_from_proto, task_to_proto
from grpc_app.streaming import StreamingEmitter
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


def _task_failure(exc: BusinessException) -> provider_pb2.TaskResponse:
    return provider_pb2.TaskResponse(successful=False, message=exc.message, code=int(exc.code))


def _list_failure(exc: BusinessException) -> provider_pb2.ListResponse:
    return provider_pb2.ListResponse(successful=False, message=exc.message, code=int(exc.code))


def _task_fetched(task: Task) -> provider_pb2.TaskResponse:
    return provider_pb2.TaskResponse(
        successful=True,
        message="Task fetched successfully.",
        task=task_to_proto(task),
    )


def _list_fetched(task_list: TaskList) -> provider_pb2.ListResponse:
    return provider_pb2.ListResponse(
        successful=True,
        message="List fetched successfully.",
        list=list_to_proto(task_list),
    )


class ProviderService(provider_pb2_grpc.ProviderServicer):
    """Thin adapter from ``taskprovider.v1.Provider`` to the application services.

    Every business failure is caught here and returned as
    ``successful=False`` with the exception message and business code; the
    RPC status stays OK. Create echoes the task back but not the list, and
    update/delete never carry an entity.
    """

    def __init__(
        self,
        task_service: Optional[TaskApplicationService] = None,
        list_service: Optional[ListApplicationService] = None,
        *,
        identity: Optional[ProviderSettings] = None,
        emitter: Optional[StreamingEmitter] = None,
    ) -> None:
        self._tasks = task_service or TaskApplicationService(uow_factory=SQLAlchemyUnitOfWork)
        self._lists = list_service or ListApplicationService(uow_factory=SQLAlchemyUnitOfWork)
        self._identity = identity or settings.provider
        self._emitter = emitter or StreamingEmitter()

    # Provider metadata
    async def GetId(self, request: empty_pb2.Empty, context: grpc.aio.ServicerContext) -> wrappers_pb2.StringValue:  # type: ignore[override]
        return wrappers_pb2.StringValue(value=self._identity.id)

    async def GetName(self, request: empty_pb2.Empty, context: grpc.aio.ServicerContext) -> wrappers_pb2.StringValue:  # type: ignore[override]
        return wrappers_pb2.StringValue(value=self._identity.name)

    async def GetDescription(self, request: empty_pb2.Empty, context: grpc.aio.ServicerContext) -> wrappers_pb2.StringValue:  # type: ignore[override]
        return wrappers_pb2.StringValue(value=self._identity.description)

    async def GetIconName(self, request: empty_pb2.Empty, context: grpc.aio.ServicerContext) -> wrappers_pb2.StringValue:  # type: ignore[override]
        return wrappers_pb2.StringValue(value=self._identity.icon_name)

    # Tasks
    async def ReadAllTasks(self, request: empty_pb2.Empty, context: grpc.aio.ServicerContext) -> AsyncIterator[provider_pb2.TaskResponse]:  # type: ignore[override]
        async for msg in self._emitter.stream(
            self._tasks.list_all_tasks,
            _task_fetched,
            _task_failure,
            name="ReadAllTasks",
        ):
            yield msg

    async def ReadTasksFromList(self, request: wrappers_pb2.StringValue, context: grpc.aio.ServicerContext) -> AsyncIterator[provider_pb2.TaskResponse]:  # type: ignore[override]
        list_id = request.value

        async def _fetch():
            return await self._tasks.list_tasks_from_list(list_id)

        async for msg in self._emitter.stream(_fetch, _task_fetched, _task_failure, name="ReadTasksFromList"):
            yield msg

    async def ReadTaskIdsFromList(self, request: wrappers_pb2.StringValue, context: grpc.aio.ServicerContext) -> provider_pb2.TaskIdResponse:  # type: ignore[override]
        try:
            ids = await self._tasks.task_ids_from_list(request.value)
        except BusinessException as exc:
            return provider_pb2.TaskIdResponse(
                successful=False,
                message=f"Failed to fetch list of tasks: {exc.message}",
                code=int(exc.code),
            )
        return provider_pb2.TaskIdResponse(
            successful=True,
            message="Task ids fetched successfully.",
            ids=ids,
        )

    async def ReadTaskCountFromList(self, request: wrappers_pb2.StringValue, context: grpc.aio.ServicerContext) -> provider_pb2.CountResponse:  # type: ignore[override]
        try:
            count = await self._tasks.count_tasks(request.value)
        except BusinessException as exc:
            return provider_pb2.CountResponse(successful=False, message=exc.message, code=int(exc.code))
        return provider_pb2.CountResponse(
            successful=True,
            message="Task count fetched successfully.",
            count=count,
        )

    async def CreateTask(self, request: provider_pb2.Task, context: grpc.aio.ServicerContext) -> provider_pb2.TaskResponse:  # type: ignore[override]
        try:
            await self._tasks.create_task(task_from_proto(request))
        except BusinessException as exc:
            return _task_failure(exc)
        response = provider_pb2.TaskResponse(successful=True, message="Task added successfully.")
        response.task.CopyFrom(request)
        return response

    async def ReadTask(self, request: wrappers_pb2.StringValue, context: grpc.aio.ServicerContext) -> provider_pb2.TaskResponse:  # type: ignore[override]
        try:
            task = await self._tasks.get_task(request.value)
        except BusinessException as exc:
            return _task_failure(exc)
        return _task_fetched(task)

    async def UpdateTask(self, request: provider_pb2.Task, context: grpc.aio.ServicerContext) -> provider_pb2.TaskResponse:  # type: ignore[override]
        try:
            await self._tasks.update_task(task_from_proto(request))
        except BusinessException as exc:
            return _task_failure(exc)
        return provider_pb2.TaskResponse(successful=True, message="Task updated successfully.")

    async def DeleteTask(self, request: wrappers_pb2.StringValue, context: grpc.aio.ServicerContext) -> provider_pb2.TaskResponse:  # type: ignore[override]
        try:
            await self._tasks.delete_task(request.value)
        except BusinessException as exc:
            return _task_failure(exc)
        return provider_pb2.TaskResponse(successful=True, message="Task removed successfully.")

    # Lists
    async def ReadAllLists(self, request: empty_pb2.Empty, context: grpc.aio.ServicerContext) -> AsyncIterator[provider_pb2.ListResponse]:  # type: ignore[override]
        async for msg in self._emitter.stream(
            self._lists.list_all_lists,
            _list_fetched,
            _list_failure,
            name="ReadAllLists",
        ):
            yield msg

    async def ReadAllListIds(self, request: empty_pb2.Empty, context: grpc.aio.ServicerContext) -> provider_pb2.ListIdResponse:  # type: ignore[override]
        try:
            ids = await self._lists.all_list_ids()
        except BusinessException as exc:
            return provider_pb2.ListIdResponse(
                successful=False,
                message=f"Failed to fetch lists: {exc.message}",
                code=int(exc.code),
            )
        return provider_pb2.ListIdResponse(
            successful=True,
            message="List ids fetched successfully.",
            ids=ids,
        )

    async def CreateList(self, request: provider_pb2.List, context: grpc.aio.ServicerContext) -> provider_pb2.ListResponse:  # type: ignore[override]
        try:
            await self._lists.create_list(list_from_proto(request))
        except BusinessException as exc:
            return _list_failure(exc)
        return provider_pb2.ListResponse(successful=True, message="List added successfully.")

    async def ReadList(self, request: wrappers_pb2.StringValue, context: grpc.aio.ServicerContext) -> provider_pb2.ListResponse:  # type: ignore[override]
        try:
            task_list = await self._lists.get_list(request.value)
        except BusinessException as exc:
            return _list_failure(exc)
        return _list_fetched(task_list)

    async def UpdateList(self, request: provider_pb2.List, context: grpc.aio.ServicerContext) -> provider_pb2.ListResponse:  # type: ignore[override]
        try:
            await self._lists.update_list(list_from_proto(request))
        except BusinessException as exc:
            return _list_failure(exc)
        return provider_pb2.ListResponse(successful=True, message="List updated successfully.")

    async def DeleteList(self, request: wrappers_pb2.StringValue, context: grpc.aio.ServicerContext) -> provider_pb2.ListResponse:  # type: ignore[override]
        try:
            await self._lists.delete_list(request.value)
        except BusinessException as exc:
            return _list_failure(exc)
        return provider_pb2.ListResponse(successful=True, message="List removed successfully.")
