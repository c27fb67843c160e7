"""
ND-JSON framing: multiplex a payload stream and an auxiliary data block into
`{"type": ..., "value": ...}` records, one per line, and parse them back.

Ordering of the auxiliary block is controlled by DataOrder:

* DATA_LAST (default): every `chunk` record first, then the `data` block,
  then end of stream. Deferred data keeps running while chunks stream.
* DATA_FIRST: the `data` block (awaiting deferred data if needed), then the
  `chunk` records.

Decoding treats any malformed line as fatal for the whole stream.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from enum import Enum
from typing import Any, AsyncIterable, Awaitable, Iterable, List, Optional, Union

from pydantic import BaseModel

from ragstream.streaming.bridge import PushStream, StreamController, to_pull_iterable, to_push_stream
from ragstream.streaming.envelope import (
    ChunkEnvelope,
    DataEnvelope,
    Envelope,
    envelope_from_dict,
    envelope_to_dict,
)
from ragstream.streaming.errors import DecodeFrameError, TruncatedFrameError, UpstreamFailure

logger = logging.getLogger(__name__)

NEWLINE = b"\n"

AuxiliaryData = Union[Iterable[Any], Awaitable[Iterable[Any]]]
Source = Union[Iterable[Any], AsyncIterable[Any]]


class DataOrder(str, Enum):
    DATA_FIRST = "data-first"
    DATA_LAST = "data-last"


DEFAULT_DATA_ORDER = DataOrder.DATA_LAST


def _json_default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def serialize_envelope(envelope: Envelope) -> bytes:
    """One envelope as compact JSON plus the line terminator, UTF-8 encoded."""
    try:
        text = json.dumps(
            envelope_to_dict(envelope),
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
            default=_json_default,
        )
        return text.encode("utf-8") + NEWLINE
    except (TypeError, ValueError) as exc:
        raise UpstreamFailure(f"Cannot serialize {envelope.type} value: {exc}") from exc


def _current_task_cancelling() -> bool:
    task = asyncio.current_task()
    # Task.cancelling() exists on Python 3.11+
    cancelling = getattr(task, "cancelling", None)
    return bool(cancelling is not None and cancelling())


def _as_values(data: Any) -> List[Any]:
    if isinstance(data, (str, bytes, bytearray)) or not isinstance(data, Iterable):
        raise TypeError(f"Auxiliary data must be a sequence of JSON values, got {type(data).__name__}")
    return list(data)


class _Encoder:
    def __init__(self, source: Source, data: Optional[AuxiliaryData], order: DataOrder) -> None:
        self._source = to_push_stream(source)
        self._order = order
        self._values: Optional[List[Any]] = None
        self._deferred: Any = None
        self._task: Optional[asyncio.Future] = None
        self._owns_task = False
        self._data_pending = data is not None
        self._cancelled = False

        if data is not None:
            if inspect.isawaitable(data):
                self._deferred = data
            else:
                self._values = _as_values(data)

    def _start_deferred(self) -> None:
        if self._deferred is None or self._task is not None:
            return
        if asyncio.isfuture(self._deferred):
            self._task = self._deferred
        else:
            self._task = asyncio.ensure_future(self._deferred)
            self._owns_task = True

    async def _resolve_data(self) -> List[Any]:
        if self._values is not None:
            return self._values
        self._start_deferred()
        try:
            resolved = await self._task
            return _as_values(resolved)
        except asyncio.CancelledError:
            if not self._cancelled or _current_task_cancelling():
                raise
            # the stream was cancelled under this read; the reader sees StreamCancelled
            return []
        except Exception as exc:
            raise UpstreamFailure(f"Auxiliary data failed: {exc}") from exc

    async def _emit_data(self, controller: StreamController[bytes]) -> None:
        self._data_pending = False
        values = await self._resolve_data()
        for value in values:
            controller.enqueue(serialize_envelope(DataEnvelope(value)))
        logger.debug("Emitted auxiliary data block", extra={"count": len(values)})

    async def pull(self, controller: StreamController[bytes]) -> None:
        try:
            await self._step(controller)
        except Exception:
            self._drop_deferred()
            await self._source.cancel("encode failed")
            raise

    async def _step(self, controller: StreamController[bytes]) -> None:
        self._start_deferred()

        if self._data_pending and self._order is DataOrder.DATA_FIRST:
            await self._emit_data(controller)
            return

        try:
            item = await self._source.__anext__()
        except StopAsyncIteration:
            if self._data_pending:
                await self._emit_data(controller)
            controller.close()
            return
        except Exception as exc:
            raise UpstreamFailure(f"Source stream failed: {exc}") from exc

        controller.enqueue(serialize_envelope(ChunkEnvelope(item)))

    def _drop_deferred(self) -> None:
        if self._owns_task and self._task is not None:
            if not self._task.done():
                self._task.cancel()
            elif not self._task.cancelled():
                # mark a failure nobody awaited as retrieved
                self._task.exception()
        elif self._task is None and inspect.iscoroutine(self._deferred):
            # never scheduled; close it so it is not reported as un-awaited
            self._deferred.close()

    async def cancel(self, reason: Any) -> None:
        self._cancelled = True
        self._drop_deferred()
        await self._source.cancel(reason)


def encode(
    source: Source,
    data: Optional[AuxiliaryData] = None,
    order: Union[DataOrder, str] = DEFAULT_DATA_ORDER,
) -> PushStream[bytes]:
    """
    Encode `source` (sync or async iterable) into an ND-JSON byte stream.

    `data` is an optional sequence of JSON values, or an awaitable resolving
    to one, emitted as a contiguous block of `data` records placed according
    to `order`. The returned stream closes only after both the source is
    exhausted and the data block is written. Any failure of the source, the
    deferred data or serialization ends the stream with UpstreamFailure.
    """
    encoder = _Encoder(source, data, DataOrder(order))
    return PushStream(encoder.pull, encoder.cancel)


class _Decoder:
    def __init__(self, chunks: PushStream[Any]) -> None:
        self._chunks = chunks
        self._buffer = bytearray()
        self._line_number = 0
        self._pending_error: Optional[DecodeFrameError] = None

    def _parse(self, raw: bytes, final: bool = False) -> Optional[Envelope]:
        self._line_number += 1
        error_cls = TruncatedFrameError if final else DecodeFrameError
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise error_cls(
                f"Line {self._line_number} is not valid UTF-8",
                line_number=self._line_number,
                line=raw.decode("utf-8", errors="replace"),
            ) from exc

        if not text.strip():
            return None

        try:
            obj = json.loads(text)
        except json.JSONDecodeError as exc:
            message = "Stream ended inside a truncated record" if final else f"Invalid JSON on line {self._line_number}"
            raise error_cls(message, line_number=self._line_number, line=text) from exc

        try:
            return envelope_from_dict(obj)
        except ValueError as exc:
            raise DecodeFrameError(
                f"Invalid envelope on line {self._line_number}: {exc}",
                line_number=self._line_number,
                line=text,
            ) from exc

    def _feed(self, chunk: Any, controller: StreamController[Envelope]) -> int:
        if not isinstance(chunk, (bytes, bytearray, memoryview)):
            raise TypeError(f"Byte stream produced {type(chunk).__name__}, expected bytes")

        chunk = bytes(chunk)
        self._buffer.extend(chunk)
        if NEWLINE not in chunk:
            return 0

        *lines, rest = self._buffer.split(NEWLINE)
        self._buffer = bytearray(rest)

        emitted = 0
        for raw in lines:
            try:
                envelope = self._parse(bytes(raw))
            except DecodeFrameError as exc:
                if not emitted:
                    raise
                # deliver the records that precede the bad line first
                self._pending_error = exc
                return emitted
            if envelope is not None:
                controller.enqueue(envelope)
                emitted += 1
        return emitted

    async def pull(self, controller: StreamController[Envelope]) -> None:
        try:
            if self._pending_error is not None:
                raise self._pending_error
            while True:
                try:
                    chunk = await self._chunks.__anext__()
                except StopAsyncIteration:
                    self._finish(controller)
                    return
                if self._feed(chunk, controller):
                    return
        except Exception:
            await self._chunks.cancel("decode failed")
            raise

    def _finish(self, controller: StreamController[Envelope]) -> None:
        remainder, self._buffer = bytes(self._buffer), bytearray()
        if remainder.strip():
            envelope = self._parse(remainder, final=True)
            if envelope is not None:
                controller.enqueue(envelope)
        controller.close()

    async def cancel(self, reason: Any) -> None:
        self._buffer.clear()
        await self._chunks.cancel(reason)


def _byte_source(byte_stream: Any) -> PushStream[Any]:
    if isinstance(byte_stream, PushStream):
        return byte_stream
    if inspect.iscoroutinefunction(getattr(byte_stream, "read", None)):
        return to_push_stream(to_pull_iterable(byte_stream))
    if hasattr(byte_stream, "__aiter__") or hasattr(byte_stream, "__iter__"):
        if isinstance(byte_stream, (bytes, bytearray, str)):
            raise TypeError("decode() expects a stream of byte chunks, not a single value")
        return to_push_stream(byte_stream)
    raise TypeError(f"Unsupported byte stream: {type(byte_stream).__name__}")


def decode(byte_stream: Any) -> PushStream[Envelope]:
    """
    Decode an ND-JSON byte stream into envelopes.

    `byte_stream` may be a PushStream, a (sync or async) iterable of bytes,
    or a reader with an async `read(n)`. Records may be split across chunks in any
    way. A final record without a trailing newline is accepted when it is
    complete JSON; otherwise the stream fails with TruncatedFrameError.
    """
    decoder = _Decoder(_byte_source(byte_stream))
    return PushStream(decoder.pull, decoder.cancel)


__all__ = [
    "AuxiliaryData",
    "DataOrder",
    "DEFAULT_DATA_ORDER",
    "serialize_envelope",
    "encode",
    "decode",
]
