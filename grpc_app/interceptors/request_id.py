from __future__ import annotations

import uuid
import contextvars
from typing import Callable, Awaitable

import grpc

from grpc_app.interceptors._handlers import rewrap


REQUEST_ID_META_KEY = "x-request-id"
_request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("grpc_request_id", default=None)


def get_request_id() -> str | None:
    return _request_id_var.get()


class RequestIdInterceptor(grpc.aio.ServerInterceptor):
    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        handler = await continuation(handler_call_details)
        if handler is None:
            return handler

        def _bind(context: grpc.aio.ServicerContext) -> contextvars.Token:
            # Try to get request-id from incoming metadata
            md = dict(handler_call_details.invocation_metadata or [])
            request_id = md.get(REQUEST_ID_META_KEY) or str(uuid.uuid4())
            # Attach as trailing metadata so the client can correlate
            try:
                context.set_trailing_metadata(((REQUEST_ID_META_KEY, request_id),))
            except Exception:
                pass
            return _request_id_var.set(request_id)

        async def _unary_unary(request, context: grpc.aio.ServicerContext):
            token = _bind(context)
            try:
                return await handler.unary_unary(request, context)
            finally:
                _request_id_var.reset(token)

        async def _unary_stream(request, context: grpc.aio.ServicerContext):
            # 不 reset：流被取消时生成器可能在另一个 Context 中被关闭；
            # 每个 RPC 都运行在独立 task 的 Context 副本中，值随之丢弃
            _bind(context)
            async for response in handler.unary_stream(request, context):
                yield response

        return rewrap(handler, unary_unary=_unary_unary, unary_stream=_unary_stream)
