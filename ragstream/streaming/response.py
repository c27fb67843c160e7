"""
HTTP responses whose body is an ND-JSON stream.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, AsyncIterator, Callable, Dict, Mapping, Optional, Union

from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from ragstream.streaming.bridge import PushStream, to_push_stream
from ragstream.streaming.errors import StreamError
from ragstream.streaming.ndjson import DEFAULT_DATA_ORDER, AuxiliaryData, DataOrder, Source, encode

logger = logging.getLogger(__name__)

NDJSON_MEDIA_TYPE = "application/x-ndjson"
NDJSON_CONTENT_TYPE = f"{NDJSON_MEDIA_TYPE}; charset=utf-8"

ChunkMapper = Callable[[Any], Any]


class ResponseOptions(BaseModel):
    """
    Status and header overrides for a streamed response.

    `status_text` is accepted for callers that carry a reason phrase, but ASGI
    has no field for it: the server picks the phrase from `status_code`.
    """

    status_code: int = Field(default=200, ge=100, le=599)
    status_text: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)


def merge_headers(overrides: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Default ND-JSON headers with caller headers on top (case-insensitive)."""
    headers = {"content-type": NDJSON_CONTENT_TYPE}
    for name, value in (overrides or {}).items():
        headers[name.lower()] = value
    return headers


async def map_source(source: Source, map_chunk: ChunkMapper) -> AsyncIterator[Any]:
    """Apply `map_chunk` (sync or async) to every element of `source`."""
    stream = to_push_stream(source)
    try:
        async for item in stream:
            mapped = map_chunk(item)
            if inspect.isawaitable(mapped):
                mapped = await mapped
            yield mapped
    finally:
        await stream.cancel("mapping stopped")


async def _iter_body(stream: PushStream[bytes]) -> AsyncIterator[bytes]:
    try:
        async for chunk in stream:
            yield chunk
    except StreamError:
        # Re-raised so the server aborts the body instead of ending it cleanly.
        logger.exception("ND-JSON response stream failed")
        raise
    finally:
        await stream.cancel("response closed")


def ndjson_response(
    source: Source,
    *,
    data: Optional[AuxiliaryData] = None,
    options: Optional[ResponseOptions] = None,
    map_chunk: Optional[ChunkMapper] = None,
    order: Union[DataOrder, str, None] = None,
) -> StreamingResponse:
    """
    Build a StreamingResponse whose body is `encode(source, data)`.

    `map_chunk`, when given, narrows each source element right before it is
    wrapped into a `chunk` record.
    """
    options = options or ResponseOptions()
    if map_chunk is not None:
        source = map_source(source, map_chunk)

    stream = encode(source, data=data, order=order or DEFAULT_DATA_ORDER)
    headers = merge_headers(options.headers)
    logger.debug(
        "Streaming ND-JSON response",
        extra={
            "status_code": options.status_code,
            "status_text": options.status_text,
            "content_type": headers["content-type"],
        },
    )
    return StreamingResponse(
        _iter_body(stream),
        status_code=options.status_code,
        headers=headers,
        media_type=NDJSON_MEDIA_TYPE,
    )


__all__ = [
    "NDJSON_MEDIA_TYPE",
    "NDJSON_CONTENT_TYPE",
    "ResponseOptions",
    "merge_headers",
    "map_source",
    "ndjson_response",
]
