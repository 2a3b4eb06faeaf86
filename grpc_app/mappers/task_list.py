from __future__ import annotations

from domain.task_list import TaskList
from grpc_app.generated import provider_pb2


def list_to_proto(task_list: TaskList) -> provider_pb2.List:
    msg = provider_pb2.List(
        id=task_list.id_list,
        name=task_list.name,
        is_owner=bool(task_list.is_owner),
        provider=task_list.provider,
    )
    # optional field: leave unset rather than sending ""
    if task_list.icon_name is not None:
        msg.icon_name = task_list.icon_name
    return msg


def list_from_proto(msg: provider_pb2.List) -> TaskList:
    return TaskList(
        id_list=msg.id,
        name=msg.name,
        is_owner=msg.is_owner,
        icon_name=msg.icon_name if msg.HasField("icon_name") else None,
        provider=msg.provider,
    )
