"""Tests for ND-JSON HTTP responses."""

import json
import logging

import pytest

from ragstream.streaming.errors import UpstreamFailure
from ragstream.streaming.response import (
    NDJSON_CONTENT_TYPE,
    ResponseOptions,
    merge_headers,
    ndjson_response,
)
from tests.fakes import CountingIterable


async def read_body(response):
    return b"".join([chunk async for chunk in response.body_iterator])


def test_content_type_defaults_to_ndjson():
    response = ndjson_response(["a"])

    assert response.headers["content-type"] == "application/x-ndjson; charset=utf-8"
    assert response.status_code == 200


def test_caller_headers_override_defaults_case_insensitively():
    response = ndjson_response(
        ["a"],
        options=ResponseOptions(status_code=201, headers={"Content-Type": "application/json", "X-Trace": "abc"}),
    )

    assert response.headers["content-type"] == "application/json"
    assert response.headers.getlist("content-type") == ["application/json"]
    assert response.headers["x-trace"] == "abc"
    assert response.status_code == 201


def test_merge_headers_without_overrides():
    assert merge_headers() == {"content-type": NDJSON_CONTENT_TYPE}


@pytest.mark.asyncio
async def test_body_is_encoded_stream():
    response = ndjson_response([{"key": "value"}], data=[{"extra": "data"}])

    body = await read_body(response)

    assert body == b'{"type":"chunk","value":{"key":"value"}}\n{"type":"data","value":{"extra":"data"}}\n'


@pytest.mark.asyncio
async def test_order_can_be_selected_per_response():
    response = ndjson_response(["x"], data=[1], order="data-first")

    lines = (await read_body(response)).splitlines()

    assert [json.loads(line)["type"] for line in lines] == ["data", "chunk"]


@pytest.mark.asyncio
async def test_map_chunk_narrows_each_element():
    upstream = [{"text": "Hel", "logprobs": [0.1]}, {"text": "lo", "logprobs": [0.2]}]
    response = ndjson_response(upstream, map_chunk=lambda item: item["text"])

    lines = (await read_body(response)).splitlines()

    assert [json.loads(line) for line in lines] == [
        {"type": "chunk", "value": "Hel"},
        {"type": "chunk", "value": "lo"},
    ]


@pytest.mark.asyncio
async def test_async_map_chunk_is_awaited():
    async def upper(item):
        return item.upper()

    response = ndjson_response(["a", "b"], map_chunk=upper)

    assert await read_body(response) == b'{"type":"chunk","value":"A"}\n{"type":"chunk","value":"B"}\n'


@pytest.mark.asyncio
async def test_upstream_failure_is_raised_from_body(caplog):
    def broken():
        yield "partial"
        raise ConnectionError("model backend dropped")

    response = ndjson_response(broken())
    received = []

    with caplog.at_level(logging.ERROR, logger="ragstream.streaming.response"):
        with pytest.raises(UpstreamFailure):
            async for chunk in response.body_iterator:
                received.append(chunk)

    assert received == [b'{"type":"chunk","value":"partial"}\n']
    assert "ND-JSON response stream failed" in caplog.text


@pytest.mark.asyncio
async def test_closing_body_early_releases_source():
    source = CountingIterable(["a", "b", "c"])
    response = ndjson_response(source, map_chunk=str.upper)

    body = response.body_iterator
    assert await body.__anext__() == b'{"type":"chunk","value":"A"}\n'
    await body.aclose()

    assert source.closed is True
    assert source.pulled == 1


def test_response_options_validate_status_code():
    with pytest.raises(ValueError):
        ResponseOptions(status_code=42)


def test_status_text_is_accepted_alongside_status_code():
    options = ResponseOptions(status_code=202, status_text="Accepted for streaming")

    response = ndjson_response(["a"], options=options)

    assert options.status_text == "Accepted for streaming"
    assert response.status_code == 202
    assert response.headers["content-type"] == NDJSON_CONTENT_TYPE
