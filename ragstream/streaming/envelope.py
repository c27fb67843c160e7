"""
Wire envelopes: the `{type, value}` records carried one per ND-JSON line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Union

CHUNK = "chunk"
DATA = "data"


@dataclass(frozen=True)
class ChunkEnvelope:
    value: Any
    type: Literal["chunk"] = field(default=CHUNK, init=False)


@dataclass(frozen=True)
class DataEnvelope:
    value: Any
    type: Literal["data"] = field(default=DATA, init=False)


Envelope = Union[ChunkEnvelope, DataEnvelope]


def envelope_to_dict(envelope: Envelope) -> Dict[str, Any]:
    return {"type": envelope.type, "value": envelope.value}


def envelope_from_dict(obj: Any) -> Envelope:
    """
    Build an envelope from a parsed JSON object.
    Raises ValueError for anything that is not exactly `{"type": ..., "value": ...}`.
    """
    if not isinstance(obj, dict):
        raise ValueError(f"expected a JSON object, got {type(obj).__name__}")
    if set(obj) != {"type", "value"}:
        raise ValueError(f"unexpected envelope keys: {sorted(obj)}")

    kind = obj["type"]
    if kind == CHUNK:
        return ChunkEnvelope(value=obj["value"])
    if kind == DATA:
        return DataEnvelope(value=obj["value"])
    raise ValueError(f"unknown envelope type: {kind!r}")


__all__ = [
    "CHUNK",
    "DATA",
    "ChunkEnvelope",
    "DataEnvelope",
    "Envelope",
    "envelope_to_dict",
    "envelope_from_dict",
]
