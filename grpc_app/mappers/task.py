from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from google.protobuf import timestamp_pb2

from domain.task import Task
from grpc_app.generated import provider_pb2


def _to_timestamp(dt: Optional[datetime]) -> Optional[timestamp_pb2.Timestamp]:
    if dt is None:
        return None
    ts = timestamp_pb2.Timestamp()
    ts.FromDatetime(dt)
    return ts


def _from_timestamp(msg, field: str) -> Optional[datetime]:
    if not msg.HasField(field):
        return None
    return getattr(msg, field).ToDatetime(tzinfo=timezone.utc)


_TIMESTAMP_FIELDS = (
    "completed_on",
    "due_date",
    "reminder_date",
    "created_date_time",
    "last_modified_date_time",
)


def task_to_proto(task: Task) -> provider_pb2.Task:
    msg = provider_pb2.Task(
        id=task.id_task,
        parent=task.parent_list,
        title=task.title,
        body=task.body,
        importance=int(task.importance),
        favorite=bool(task.favorite),
        is_reminder_on=bool(task.is_reminder_on),
        status=int(task.status),
    )
    for field in _TIMESTAMP_FIELDS:
        ts = _to_timestamp(getattr(task, field))
        if ts is not None:
            getattr(msg, field).CopyFrom(ts)
    return msg


def task_from_proto(msg: provider_pb2.Task) -> Task:
    return Task(
        id_task=msg.id,
        parent_list=msg.parent,
        title=msg.title,
        body=msg.body,
        completed_on=_from_timestamp(msg, "completed_on"),
        due_date=_from_timestamp(msg, "due_date"),
        importance=int(msg.importance),
        favorite=msg.favorite,
        is_reminder_on=msg.is_reminder_on,
        reminder_date=_from_timestamp(msg, "reminder_date"),
        status=int(msg.status),
        created_date_time=_from_timestamp(msg, "created_date_time"),
        last_modified_date_time=_from_timestamp(msg, "last_modified_date_time"),
    )
