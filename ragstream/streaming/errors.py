"""
Exceptions raised by the streaming layer.
"""

from __future__ import annotations


class StreamError(Exception):
    """Base class for streaming failures."""


class UpstreamFailure(StreamError):
    """The source stream or the deferred auxiliary data failed."""


class DecodeFrameError(StreamError):
    def __init__(self, message: str, line_number: int | None = None, line: str | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number
        self.line = line


class TruncatedFrameError(DecodeFrameError):
    """Byte stream ended inside an unterminated, unparsable record."""


class StreamCancelled(StreamError):
    def __init__(self, reason: object = None) -> None:
        super().__init__(f"stream was cancelled: {reason}" if reason is not None else "stream was cancelled")
        self.reason = reason


__all__ = [
    "StreamError",
    "UpstreamFailure",
    "DecodeFrameError",
    "TruncatedFrameError",
    "StreamCancelled",
]
