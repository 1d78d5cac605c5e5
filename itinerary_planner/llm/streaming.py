"""
Server-sent event re-framing.

OpenAI-compatible chat completion endpoints stream ``data: {...}`` lines,
each carrying a chunk whose ``choices[0].delta.content`` holds the next
fragment of generated text, and finish with ``data: [DONE]``. This module
turns such a byte stream into the plain concatenation of those fragments.

Decoding is incremental: network chunks may split a line, or even a
multi-byte UTF-8 character, at any point, and the emitted text is the same
however the bytes were chunked.
"""

import codecs
import json
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


def extract_delta(payload: Any) -> str:
    """Content fragment of one streamed completion chunk, or ""."""
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return ""
    content = delta.get("content")
    return content if isinstance(content, str) else ""


class SSEDeltaDecoder:
    """
    Incremental decoder from SSE bytes to content deltas.

    Feed it raw chunks as they arrive; each call returns the non-empty
    deltas completed by that chunk. After ``[DONE]`` the decoder is
    finished and ignores further input.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.done = False

    def feed(self, chunk: bytes) -> list[str]:
        """
        Consume a chunk of the event stream.

        Args:
            chunk: Raw bytes from the network

        Returns:
            Content deltas of every line completed by this chunk
        """
        if self.done:
            return []

        self._buffer += self._decoder.decode(chunk)
        lines = self._buffer.split("\n")
        # The last element is an incomplete line (possibly empty)
        self._buffer = lines.pop()
        return self._process(lines)

    def flush(self) -> list[str]:
        """Process whatever remains once the stream has ended."""
        if self.done:
            return []

        self._buffer += self._decoder.decode(b"", final=True)
        remainder, self._buffer = self._buffer, ""
        return self._process([remainder]) if remainder else []

    def _process(self, lines: list[str]) -> list[str]:
        deltas = []
        for raw_line in lines:
            line = raw_line.rstrip("\r")
            if not line.startswith(DATA_PREFIX):
                continue

            data = line[len(DATA_PREFIX):]
            if data == DONE_SENTINEL:
                self.done = True
                self._buffer = ""
                break

            try:
                parsed = json.loads(data)
            except ValueError:
                # Keep-alives and empty data lines carry no JSON
                continue

            delta = extract_delta(parsed)
            if delta:
                deltas.append(delta)
        return deltas


async def iter_text_deltas(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """
    Re-frame an SSE byte stream into content deltas.

    Stops at ``[DONE]`` or when the stream ends, whichever comes first.

    Args:
        chunks: Raw SSE bytes as received

    Yields:
        Non-empty content fragments in order
    """
    decoder = SSEDeltaDecoder()
    async for chunk in chunks:
        for delta in decoder.feed(chunk):
            yield delta
        if decoder.done:
            return
    for delta in decoder.flush():
        yield delta


async def encode_deltas(deltas: AsyncIterable[str]) -> AsyncIterator[bytes]:
    """Encode text fragments as UTF-8 for a plain-text response body."""
    async for delta in deltas:
        yield delta.encode("utf-8")
