"""Producer/consumer bridge for server-streaming RPCs.

Each streaming call spawns one producer task that runs the query and puts one
response message per result onto a bounded ``asyncio.Queue``; the RPC's async
generator drains that queue. A full queue suspends the producer until the
client catches up.

Outcomes seen by the client:

- query succeeds: one message per element, in store order, then end of stream
  (zero messages for an empty result);
- query fails with a ``BusinessException``: exactly one terminal error message
  built by ``on_error``, then end of stream;
- anything else: re-raised in the RPC so the interceptors report ``INTERNAL``.

If the client goes away the generator is closed and the producer is cancelled
before its next send. It is never retried.
"""
from __future__ import annotations

import asyncio
from typing import AsyncIterator, Awaitable, Callable, Generic, Iterable, Optional, TypeVar

from core.config import settings
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException


logger = get_logger(__name__)

T = TypeVar("T")
M = TypeVar("M")

_CLOSED = object()


class _Raised:
    __slots__ = ("exc",)

    def __init__(self, exc: BaseException) -> None:
        self.exc = exc


class StreamingEmitter(Generic[T, M]):
    def __init__(self, buffer_size: Optional[int] = None) -> None:
        self._buffer_size = buffer_size or settings.grpc.stream_buffer_size

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    async def stream(
        self,
        fetch: Callable[[], Awaitable[Iterable[T]]],
        on_item: Callable[[T], M],
        on_error: Callable[[BusinessException], M],
        *,
        name: str = "stream",
    ) -> AsyncIterator[M]:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._buffer_size)
        producer = asyncio.create_task(
            self._produce(fetch, on_item, on_error, queue, name),
            name=f"stream-producer:{name}",
        )
        sent = 0
        finished = False
        try:
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    finished = True
                    break
                if isinstance(item, _Raised):
                    finished = True
                    raise item.exc
                yield item
                sent += 1
        finally:
            if not producer.done():
                producer.cancel()
            # 回收 producer 结果，关闭流后不留下未完成的 task
            await asyncio.gather(producer, return_exceptions=True)
            if finished:
                logger.debug("stream_closed", stream=name, sent=sent)
            else:
                logger.info("stream_cancelled", stream=name, sent=sent)

    async def _produce(
        self,
        fetch: Callable[[], Awaitable[Iterable[T]]],
        on_item: Callable[[T], M],
        on_error: Callable[[BusinessException], M],
        queue: asyncio.Queue,
        name: str,
    ) -> None:
        try:
            try:
                items = await fetch()
            except BusinessException as exc:
                logger.warning(
                    "stream_query_failed",
                    stream=name,
                    code=str(exc.code),
                    message=exc.message,
                    details=exc.details,
                )
                await queue.put(on_error(exc))
            else:
                for item in items:
                    await queue.put(on_item(item))
        except Exception as exc:
            # Surfaced by the consumer side of stream()
            logger.error("stream_producer_failed", stream=name, error=str(exc), exc_info=True)
            await queue.put(_Raised(exc))
            return
        await queue.put(_CLOSED)
