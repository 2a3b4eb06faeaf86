from __future__ import annotations

import inspect
from typing import Callable, Optional

import grpc


def rewrap(
    handler: grpc.RpcMethodHandler,
    *,
    unary_unary: Optional[Callable] = None,
    unary_stream: Optional[Callable] = None,
) -> grpc.RpcMethodHandler:
    """Rebuild ``handler`` around a replacement behavior of the same arity.

    Wrapped: coroutine unary-unary handlers and async-generator unary-stream
    handlers. Sync handlers, ``context.write()`` style streams and
    client-streaming methods are returned unchanged.
    """
    if handler.unary_unary and unary_unary is not None:
        if not inspect.iscoroutinefunction(handler.unary_unary):
            return handler
        return grpc.unary_unary_rpc_method_handler(
            unary_unary,
            request_deserializer=handler.request_deserializer,
            response_serializer=handler.response_serializer,
        )
    if handler.unary_stream and unary_stream is not None:
        if not inspect.isasyncgenfunction(handler.unary_stream):
            return handler
        return grpc.unary_stream_rpc_method_handler(
            unary_stream,
            request_deserializer=handler.request_deserializer,
            response_serializer=handler.response_serializer,
        )
    return handler
