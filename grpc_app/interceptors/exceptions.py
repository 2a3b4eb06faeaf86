from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict
import contextvars

import grpc

from core.logging_config import get_logger
from grpc_app.interceptors._handlers import rewrap
from grpc_app.interceptors.request_id import get_request_id
from domain.common.exceptions import BusinessException
from shared.codes import BusinessCode


logger = get_logger(__name__)

# Mark that the current request has been mapped to a gRPC status
_mapped_error: contextvars.ContextVar[bool] = contextvars.ContextVar("grpc_mapped_error", default=False)


def set_mapped_error() -> None:
    _mapped_error.set(True)


def is_mapped_error() -> bool:
    return bool(_mapped_error.get())


def _business_code_to_grpc_status(code: int) -> grpc.StatusCode:
    try:
        bc = BusinessCode(code)
    except ValueError:
        return grpc.StatusCode.FAILED_PRECONDITION

    mapping = {
        BusinessCode.PARAM_ERROR: grpc.StatusCode.INVALID_ARGUMENT,
        BusinessCode.NOT_FOUND: grpc.StatusCode.NOT_FOUND,
        BusinessCode.SERVICE_UNAVAILABLE: grpc.StatusCode.UNAVAILABLE,
        BusinessCode.SYSTEM_ERROR: grpc.StatusCode.INTERNAL,
        BusinessCode.DATABASE_ERROR: grpc.StatusCode.INTERNAL,
    }

    return mapping.get(bc, grpc.StatusCode.FAILED_PRECONDITION)


def describe_error(exc: Exception) -> Dict[str, Any]:
    """把逃逸到拦截器的异常整理为状态码、trailing metadata 和日志字段。"""
    if isinstance(exc, BusinessException):
        return {
            "status": _business_code_to_grpc_status(exc.code),
            "code": str(exc.code),
            "error_type": exc.error_type or "BusinessError",
            "message": exc.message,
            "details": exc.details,
            "public_message": exc.message,
        }
    return {
        "status": grpc.StatusCode.INTERNAL,
        "code": str(BusinessCode.SYSTEM_ERROR.value),
        "error_type": "SystemError",
        "message": str(exc),
        "details": None,
        "public_message": "Internal server error",
    }


class ExceptionMappingInterceptor(grpc.aio.ServerInterceptor):
    """Last-resort mapping of exceptions that escaped a servicer.

    The Provider servicer turns business failures into response envelopes
    itself, so anything reaching this point is either a ``BusinessException``
    raised outside that boundary or a bug; both abort the RPC with a status.
    """

    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        handler = await continuation(handler_call_details)
        if handler is None:
            return handler

        method = handler_call_details.method

        async def _abort(context: grpc.aio.ServicerContext, exc: Exception) -> None:
            error = describe_error(exc)
            try:
                context.set_trailing_metadata((
                    ("x-biz-code", error["code"]),
                    ("x-error-type", error["error_type"]),
                ))
            except Exception:
                pass
            set_mapped_error()
            # Concise error log (no stack)
            logger.error(
                "grpc_mapped_error",
                method=method,
                code=error["code"],
                status=str(error["status"]),
                message=error["message"],
                details=error["details"],
                request_id=get_request_id(),
            )
            await context.abort(error["status"], error["public_message"])

        async def _unary_unary(request, context: grpc.aio.ServicerContext):
            try:
                return await handler.unary_unary(request, context)
            except grpc.aio.AbortError:
                raise
            except Exception as exc:
                await _abort(context, exc)

        async def _unary_stream(request, context: grpc.aio.ServicerContext):
            try:
                async for response in handler.unary_stream(request, context):
                    yield response
            except grpc.aio.AbortError:
                raise
            except Exception as exc:
                await _abort(context, exc)

        return rewrap(handler, unary_unary=_unary_unary, unary_stream=_unary_stream)
