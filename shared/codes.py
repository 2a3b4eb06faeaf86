"""
Shared business codes used across layers (Domain/Application/gRPC).

These values travel on the wire in the ``code`` field of every response
envelope, so existing numbers must never be reassigned.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """业务状态码定义（单一来源）"""

    # 成功
    SUCCESS = 0

    # 参数错误 (1xxxx)
    PARAM_ERROR = 10000

    # 业务错误 (2xxxx)
    BUSINESS_ERROR = 20000
    NOT_FOUND = 20006  # 资源未找到（通用）

    # 系统错误 (4xxxx)
    SYSTEM_ERROR = 40000
    DATABASE_ERROR = 40001
    SERVICE_UNAVAILABLE = 40003


__all__ = ["BusinessCode"]
