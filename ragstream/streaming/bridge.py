"""
Adapters between pull-based iteration and push-based buffered streams.

A PushStream owns a small buffer that a producer fills through a
StreamController. The producer is only asked for more (its `pull` callback is
awaited) when a consumer reads and the buffer is empty, so a slow consumer
naturally throttles the producer.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Awaitable,
    Callable,
    Deque,
    Generic,
    Iterable,
    Optional,
    TypeVar,
    Union,
)

from ragstream.streaming.errors import StreamCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_READ_SIZE = 64 * 1024

_READABLE = "readable"
_CLOSED = "closed"
_ERRORED = "errored"
_CANCELLED = "cancelled"


class StreamController(Generic[T]):
    """Producer-side handle of a PushStream."""

    def __init__(self, stream: "PushStream[T]") -> None:
        self._stream = stream

    def enqueue(self, item: T) -> None:
        self._stream._enqueue(item)

    def close(self) -> None:
        self._stream._close()

    def error(self, exc: BaseException) -> None:
        self._stream._error(exc)


PullCallback = Callable[[StreamController[T]], Awaitable[None]]
CancelCallback = Callable[[Any], Awaitable[None]]


class PushStream(Generic[T]):
    def __init__(self, pull: PullCallback, cancel: Optional[CancelCallback] = None) -> None:
        self._pull = pull
        self._on_cancel = cancel
        self._buffer: Deque[T] = deque()
        self._state = _READABLE
        self._stored_error: BaseException | None = None
        self._cancel_reason: Any = None
        self._read_lock = asyncio.Lock()
        self._controller: StreamController[T] = StreamController(self)

    @property
    def state(self) -> str:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state != _READABLE

    # --- Producer side ---
    def _enqueue(self, item: T) -> None:
        if self._state == _CLOSED:
            raise RuntimeError("Cannot enqueue into a closed stream")
        if self._state != _READABLE:
            return
        self._buffer.append(item)

    def _close(self) -> None:
        if self._state == _READABLE:
            self._state = _CLOSED

    def _error(self, exc: BaseException) -> None:
        if self._state != _READABLE:
            return
        self._state = _ERRORED
        self._stored_error = exc
        self._buffer.clear()

    # --- Consumer side ---
    def __aiter__(self) -> "PushStream[T]":
        return self

    async def __anext__(self) -> T:
        async with self._read_lock:
            while True:
                if self._buffer:
                    return self._buffer.popleft()
                if self._state == _CLOSED:
                    raise StopAsyncIteration
                if self._state == _ERRORED:
                    raise self._stored_error
                if self._state == _CANCELLED:
                    raise StreamCancelled(self._cancel_reason)
                await self._pull_once()

    async def _pull_once(self) -> None:
        try:
            await self._pull(self._controller)
        except Exception as exc:
            self._error(exc)

    async def cancel(self, reason: Any = None) -> None:
        """
        Stop the stream from the consumer side. Pending and later reads by
        other observers fail with StreamCancelled; the caller itself gets no error.
        """
        if self._state != _READABLE:
            if self._state == _CLOSED:
                self._buffer.clear()
            return
        self._state = _CANCELLED
        self._cancel_reason = reason
        self._buffer.clear()
        logger.debug("Stream cancelled", extra={"reason": repr(reason)})
        if self._on_cancel is not None:
            await self._on_cancel(reason)

    async def aclose(self) -> None:
        await self.cancel("closed by consumer")


class _IteratorSource(Generic[T]):
    """Pull callback that advances a sync or async iterator one step per pull."""

    def __init__(self, iterable: Union[Iterable[T], AsyncIterable[T]]) -> None:
        if hasattr(iterable, "__aiter__"):
            self._iterator: Any = iterable.__aiter__()  # type: ignore[union-attr]
            self._is_async = True
        elif hasattr(iterable, "__iter__"):
            self._iterator = iter(iterable)  # type: ignore[arg-type]
            self._is_async = False
        else:
            raise TypeError(f"Expected an iterable or async iterable, got {type(iterable).__name__}")
        self._pulling = False
        self._cancelled = False
        self._released = False

    async def pull(self, controller: StreamController[T]) -> None:
        self._pulling = True
        try:
            if self._is_async:
                item = await self._iterator.__anext__()
            else:
                item = next(self._iterator)
        except (StopIteration, StopAsyncIteration):
            controller.close()
            return
        finally:
            self._pulling = False

        if self._cancelled:
            # cancel() arrived while the iterator was busy; release it now.
            await self._release()
            return
        controller.enqueue(item)

    async def cancel(self, reason: Any) -> None:
        self._cancelled = True
        if not self._pulling:
            await self._release()

    async def _release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._is_async:
            aclose = getattr(self._iterator, "aclose", None)
            if aclose is not None:
                await aclose()
        else:
            close = getattr(self._iterator, "close", None)
            if close is not None:
                close()


def to_push_stream(iterable: Union[Iterable[T], AsyncIterable[T]]) -> PushStream[T]:
    """
    Wrap a sync or async iterable in a PushStream.

    The iterator is advanced exactly once per consumer read that finds the
    buffer empty. Cancelling the stream closes the iterator (`close()` /
    `aclose()`), releasing whatever the generator holds.
    """
    source: _IteratorSource[T] = _IteratorSource(iterable)
    return PushStream(source.pull, source.cancel)


async def _iterate_push_stream(stream: PushStream[T]) -> AsyncIterator[T]:
    try:
        async for item in stream:
            yield item
    finally:
        await stream.cancel("iterator closed")


async def _iterate_reader(reader: Any, chunk_size: int) -> AsyncIterator[bytes]:
    while True:
        chunk = await reader.read(chunk_size)
        if not chunk:
            return
        yield chunk


def to_pull_iterable(stream: Any, chunk_size: int = DEFAULT_READ_SIZE) -> AsyncIterator[Any]:
    """
    Expose a push-based stream as an async iterator.

    Accepts a PushStream or a reader with an awaitable `read(n)` that returns
    an empty bytes object at end of stream (asyncio.StreamReader and friends).
    Errors raised by the stream surface from the pending `__anext__`.
    """
    if isinstance(stream, PushStream):
        return _iterate_push_stream(stream)
    if inspect.iscoroutinefunction(getattr(stream, "read", None)):
        return _iterate_reader(stream, chunk_size)
    raise TypeError(f"Unsupported stream type: {type(stream).__name__}")


__all__ = [
    "DEFAULT_READ_SIZE",
    "PushStream",
    "StreamController",
    "to_push_stream",
    "to_pull_iterable",
]
