"""
Ask the running service a question and print the ND-JSON stream as it arrives.

Example:
    python -m scripts.stream_ask --question "What is the refund policy?"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx

from ragstream.config import settings, setup_logging
from ragstream.streaming import ChunkEnvelope, DataEnvelope, StreamError, decode


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Stream an answer from /api/v1/ask/stream.")
    parser.add_argument("--question", "-q", required=True, help="Question to ask")
    parser.add_argument("--top-k", type=int, default=None, help="Override retrieved document count")
    parser.add_argument(
        "--url",
        default=f"http://localhost:{settings.app_port}/api/v1/ask/stream",
        help="Streaming endpoint URL",
    )
    return parser.parse_args()


async def ask(url: str, question: str, top_k: int | None) -> None:
    payload = {"question": question, "top_k": top_k}
    async with httpx.AsyncClient(timeout=None) as client:
        async with client.stream("POST", url, json=payload) as response:
            response.raise_for_status()
            async for envelope in decode(response.aiter_bytes()):
                if isinstance(envelope, ChunkEnvelope):
                    print(envelope.value, end="", flush=True)
                elif isinstance(envelope, DataEnvelope):
                    sources = envelope.value.get("sources", []) if isinstance(envelope.value, dict) else []
                    print("\n\nSources:")
                    for idx, source in enumerate(sources, start=1):
                        print(f"  [{idx}] id={source.get('id')} similarity={source.get('similarity')}")
    print()


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args()

    try:
        asyncio.run(ask(args.url, args.question, args.top_k))
    except (httpx.HTTPError, StreamError):
        logger.exception("Streaming request failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
