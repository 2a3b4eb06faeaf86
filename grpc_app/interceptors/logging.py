from __future__ import annotations

import time
from typing import Callable, Awaitable

import grpc

from core.logging_config import get_logger
from grpc_app.interceptors._handlers import rewrap
from grpc_app.interceptors.request_id import get_request_id
from grpc_app.interceptors.exceptions import is_mapped_error


logger = get_logger(__name__)


class LoggingInterceptor(grpc.aio.ServerInterceptor):
    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        handler = await continuation(handler_call_details)
        if handler is None:
            return handler

        method = handler_call_details.method

        def _log_start(context: grpc.aio.ServicerContext) -> float:
            peer = context.peer() if hasattr(context, "peer") else None
            logger.info("grpc_request", method=method, peer=peer, request_id=get_request_id())
            return time.perf_counter()

        def _log_error(exc: Exception) -> None:
            if isinstance(exc, (grpc.RpcError, grpc.aio.AbortError)) or is_mapped_error():
                # Already mapped/aborted by exception interceptor; avoid duplicate error logs here
                return
            # Unknown/unexpected exception -> log with stack
            logger.error(
                "grpc_unhandled_error",
                method=method,
                error=str(exc),
                exc_info=True,
                request_id=get_request_id(),
            )

        def _log_done(start: float, **extra) -> None:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "grpc_request_done",
                method=method,
                elapsed_ms=round(elapsed_ms, 2),
                request_id=get_request_id(),
                **extra,
            )

        async def _unary_unary(request, context: grpc.aio.ServicerContext):
            start = _log_start(context)
            try:
                return await handler.unary_unary(request, context)
            except Exception as exc:
                _log_error(exc)
                raise
            finally:
                _log_done(start)

        async def _unary_stream(request, context: grpc.aio.ServicerContext):
            start = _log_start(context)
            sent = 0
            try:
                async for response in handler.unary_stream(request, context):
                    yield response
                    sent += 1
            except Exception as exc:
                _log_error(exc)
                raise
            finally:
                _log_done(start, messages=sent)

        return rewrap(handler, unary_unary=_unary_unary, unary_stream=_unary_stream)
