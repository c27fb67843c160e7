"""
ND-JSON streaming: stream adapters, wire codec and HTTP responses.
"""

from ragstream.streaming.bridge import PushStream, StreamController, to_pull_iterable, to_push_stream
from ragstream.streaming.envelope import ChunkEnvelope, DataEnvelope, Envelope
from ragstream.streaming.errors import (
    DecodeFrameError,
    StreamCancelled,
    StreamError,
    TruncatedFrameError,
    UpstreamFailure,
)
from ragstream.streaming.ndjson import DEFAULT_DATA_ORDER, DataOrder, decode, encode
from ragstream.streaming.response import NDJSON_CONTENT_TYPE, ResponseOptions, ndjson_response

__all__ = [
    "PushStream",
    "StreamController",
    "to_pull_iterable",
    "to_push_stream",
    "ChunkEnvelope",
    "DataEnvelope",
    "Envelope",
    "StreamError",
    "UpstreamFailure",
    "DecodeFrameError",
    "TruncatedFrameError",
    "StreamCancelled",
    "DataOrder",
    "DEFAULT_DATA_ORDER",
    "encode",
    "decode",
    "NDJSON_CONTENT_TYPE",
    "ResponseOptions",
    "ndjson_response",
]
