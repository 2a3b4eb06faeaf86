"""Protobuf <-> domain entity conversions."""
from .task import task_from_proto, task_to_proto
from .task_list import list_from_proto, list_to_proto

__all__ = ["task_from_proto", "task_to_proto", "list_from_proto", "list_to_proto"]
