"""Storage-facing representation of a task list."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class TaskList:
    """A row of the ``lists`` table.

    ``provider`` names the backend integration that created the list.
    """

    id_list: str
    name: str = ""
    is_owner: bool = False
    icon_name: Optional[str] = None
    provider: str = ""
