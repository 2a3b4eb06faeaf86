"""Storage-facing representation of a task."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum
from typing import Optional


class TaskImportance(IntEnum):
    LOW = 0
    NORMAL = 1
    HIGH = 2


class TaskStatus(IntEnum):
    NOT_STARTED = 0
    COMPLETED = 1


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class Task:
    """A row of the ``tasks`` table.

    ``parent_list`` references a list by id only; nothing guarantees that list
    exists, and deleting the list leaves the task in place.

    ``importance`` and ``status`` are kept as plain ints so values written by
    newer clients survive a round trip; see ``TaskImportance`` / ``TaskStatus``.
    """

    id_task: str
    parent_list: str = ""
    title: str = ""
    body: str = ""
    completed_on: Optional[datetime] = None
    due_date: Optional[datetime] = None
    importance: int = TaskImportance.LOW
    favorite: bool = False
    is_reminder_on: bool = False
    reminder_date: Optional[datetime] = None
    status: int = TaskStatus.NOT_STARTED
    created_date_time: Optional[datetime] = None
    last_modified_date_time: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.completed_on = _ensure_utc(self.completed_on)
        self.due_date = _ensure_utc(self.due_date)
        self.reminder_date = _ensure_utc(self.reminder_date)
        self.created_date_time = _ensure_utc(self.created_date_time)
        self.last_modified_date_time = _ensure_utc(self.last_modified_date_time)
