"""领域层业务异常定义，供领域与基础设施使用。

gRPC 层把这些异常转换为响应信封中的 ``successful=false`` + ``message`` + ``code``，
不会作为传输层错误抛给客户端。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)


class StorageConnectionException(BusinessException):
    """Store unreachable, misconfigured or out of connections."""

    def __init__(self, reason: str):
        super().__init__(
            code=BusinessCode.SERVICE_UNAVAILABLE,
            message=f"Failed to connect to the database: {reason}",
            error_type="StorageConnectionError",
            details={"reason": reason},
        )


class QueryException(BusinessException):
    """Query or mutation rejected by the store."""

    def __init__(
        self,
        message: str,
        *,
        code: int = BusinessCode.DATABASE_ERROR,
        error_type: str = "QueryError",
        details: Optional[dict] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            error_type=error_type,
            details=details,
        )


class TaskNotFoundException(QueryException):
    def __init__(self, task_id: str):
        super().__init__(
            f"Task {task_id!r} not found.",
            code=BusinessCode.NOT_FOUND,
            error_type="TaskNotFound",
            details={"id_task": task_id},
        )


class ListNotFoundException(QueryException):
    def __init__(self, list_id: str):
        super().__init__(
            f"List {list_id!r} not found.",
            code=BusinessCode.NOT_FOUND,
            error_type="ListNotFound",
            details={"id_list": list_id},
        )
