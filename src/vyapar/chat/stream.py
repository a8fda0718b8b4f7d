"""Incremental decoding of server-sent-event completion streams.

This module hides the wire format of the completion stream:
- UTF-8 decoding across arbitrary read boundaries
- Line assembly (partial trailing lines are held back)
- The ``data:`` record prefix and the ``[DONE]`` terminator
- The shape of the JSON payload carrying the text delta
"""

import codecs
import json
from collections.abc import AsyncIterator
from typing import Any

from .models import StreamFrame

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


def parse_frame(payload: str) -> StreamFrame | None:
    """Parse the payload of one ``data:`` line.

    Returns None when the payload is not valid JSON. Such lines are expected
    when a record was cut mid-way and are dropped by the caller.
    """
    try:
        parsed: Any = json.loads(payload)
    except json.JSONDecodeError:
        return None

    delta_text = None
    if isinstance(parsed, dict):
        choices = parsed.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            delta = choices[0].get("delta")
            if isinstance(delta, dict):
                content = delta.get("content")
                if isinstance(content, str):
                    delta_text = content

    return StreamFrame(delta_text=delta_text)


class SSEStreamDecoder:
    """Turns raw response bytes into stream frames.

    Usage:
        decoder = SSEStreamDecoder()
        async for chunk in body:
            for frame in decoder.feed(chunk):
                ...
        decoder.flush()
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._discarded = 0

    @property
    def pending_text(self) -> str:
        """Text received after the last newline, not yet processed."""
        return self._buffer

    @property
    def discarded_frames(self) -> int:
        """Number of ``data:`` lines dropped because they did not parse."""
        return self._discarded

    def feed(self, chunk: bytes) -> list[StreamFrame]:
        """Consume one read from the response body.

        Args:
            chunk: Raw bytes, possibly ending inside a multi-byte character

        Returns:
            Frames for every complete line in the buffer, in arrival order
        """
        self._buffer += self._decoder.decode(chunk)
        return self._drain_lines()

    def flush(self) -> list[StreamFrame]:
        """Finish decoding at end of stream.

        Bytes held by the UTF-8 decoder are released, but a trailing line with
        no newline is left unprocessed.
        """
        self._buffer += self._decoder.decode(b"", final=True)
        return self._drain_lines()

    def _drain_lines(self) -> list[StreamFrame]:
        *lines, self._buffer = self._buffer.split("\n")

        frames: list[StreamFrame] = []
        for line in lines:
            if not line.startswith(DATA_PREFIX):
                continue

            payload = line[len(DATA_PREFIX):].strip()
            if payload == DONE_SENTINEL:
                continue

            frame = parse_frame(payload)
            if frame is None:
                self._discarded += 1
                continue
            frames.append(frame)

        return frames


async def iter_frames(
    chunks: AsyncIterator[bytes],
    decoder: SSEStreamDecoder | None = None
) -> AsyncIterator[StreamFrame]:
    """Decode an async byte stream into frames.

    Pass a decoder to inspect its counters once the stream is done.
    """
    decoder = decoder or SSEStreamDecoder()
    async for chunk in chunks:
        for frame in decoder.feed(chunk):
            yield frame
    for frame in decoder.flush():
        yield frame
