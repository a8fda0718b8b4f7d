"""Unit tests for SSE stream decoding."""
import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from vyapar.chat import SSEStreamDecoder, StreamFrame, iter_frames, parse_frame


def sse_frame(content: str) -> str:
    return "data: " + json.dumps({"choices": [{"delta": {"content": content}}]}) + "\n"


HELLO_BODY = (
    'data: {"choices":[{"delta":{"content":"He"}}]}\n'
    'data: {"choices":[{"delta":{"content":"llo"}}]}\n'
    "data: [DONE]\n"
).encode("utf-8")


def _split(data: bytes, cuts: list[int]) -> list[bytes]:
    points = sorted({c for c in cuts if 0 < c < len(data)})
    bounds = [0, *points, len(data)]
    return [data[a:b] for a, b in zip(bounds, bounds[1:])]


def _decode_all(chunks: list[bytes]) -> tuple[str, SSEStreamDecoder]:
    decoder = SSEStreamDecoder()
    frames: list[StreamFrame] = []
    for chunk in chunks:
        frames.extend(decoder.feed(chunk))
    frames.extend(decoder.flush())
    return "".join(f.delta_text or "" for f in frames), decoder


class TestParseFrame:
    """Tests for parse_frame."""

    def test_extracts_delta_content(self):
        """Test that choices[0].delta.content is extracted."""
        frame = parse_frame('{"choices":[{"delta":{"content":"Hi"}}]}')
        assert frame == StreamFrame(delta_text="Hi")

    def test_frame_without_content(self):
        """Test that a role-only delta parses with no text."""
        frame = parse_frame('{"choices":[{"delta":{"role":"assistant"}}]}')
        assert frame is not None
        assert frame.delta_text is None

    def test_empty_choices(self):
        """Test that a frame with no choices carries no text."""
        frame = parse_frame('{"choices":[]}')
        assert frame is not None
        assert frame.delta_text is None

    def test_invalid_json_returns_none(self):
        """Test that a truncated record is reported as unparsable."""
        assert parse_frame("{not json") is None


class TestSSEStreamDecoder:
    """Tests for SSEStreamDecoder."""

    def test_single_chunk(self):
        """Test decoding a whole body delivered at once."""
        text, decoder = _decode_all([HELLO_BODY])
        assert text == "Hello"
        assert decoder.discarded_frames == 0

    @given(st.lists(st.integers(min_value=0, max_value=len(HELLO_BODY)), max_size=20))
    def test_arbitrary_read_boundaries(self, cuts: list[int]):
        """Property test: splitting the body anywhere yields the same text."""
        text, _ = _decode_all(_split(HELLO_BODY, cuts))
        assert text == "Hello"

    def test_byte_at_a_time(self):
        """Test feeding one byte per read."""
        chunks = [HELLO_BODY[i:i + 1] for i in range(len(HELLO_BODY))]
        text, _ = _decode_all(chunks)
        assert text == "Hello"

    @given(st.integers(min_value=1, max_value=200))
    def test_multibyte_characters_split(self, cut: int):
        """Property test: multi-byte characters survive any split point."""
        body = (sse_frame("Total: ₹1,250") + sse_frame(" नमस्ते 🙏") + "data: [DONE]\n").encode("utf-8")
        text, _ = _decode_all(_split(body, [cut]))
        assert text == "Total: ₹1,250 नमस्ते 🙏"

    def test_partial_line_is_held_back(self):
        """Test that no frame is emitted until the newline arrives."""
        decoder = SSEStreamDecoder()
        assert decoder.feed(b'data: {"choices":[{"delta":{"content":"He"}}]}') == []
        assert decoder.pending_text.startswith("data: ")
        assert decoder.feed(b"\n") == [StreamFrame(delta_text="He")]
        assert decoder.pending_text == ""

    def test_malformed_frame_does_not_halt_stream(self):
        """Test that a bad frame between two good ones is skipped."""
        body = (sse_frame("He") + "data: {not json\n" + sse_frame("llo")).encode("utf-8")
        text, decoder = _decode_all([body])
        assert text == "Hello"
        assert decoder.discarded_frames == 1

    def test_done_sentinel_is_not_content(self):
        """Test that [DONE] is skipped without counting as a discard."""
        text, decoder = _decode_all([b"data: [DONE]\n"])
        assert text == ""
        assert decoder.discarded_frames == 0

    def test_non_data_lines_ignored(self):
        """Test that comments, events and blank lines are ignored."""
        body = (": keep-alive\n\nevent: message\n" + sse_frame("ok")).encode("utf-8")
        text, decoder = _decode_all([body])
        assert text == "ok"
        assert decoder.discarded_frames == 0

    def test_crlf_line_endings(self):
        """Test that CRLF-terminated lines decode."""
        body = b'data: {"choices":[{"delta":{"content":"ok"}}]}\r\n'
        text, _ = _decode_all([body])
        assert text == "ok"

    def test_unterminated_trailing_line_dropped(self):
        """Test that a final line without newline is not processed."""
        body = (sse_frame("He") + 'data: {"choices":[{"delta":{"content":"llo"}}]}').encode("utf-8")
        text, decoder = _decode_all([body])
        assert text == "He"
        assert decoder.pending_text.startswith("data: ")


class TestIterFrames:
    """Tests for the async iter_frames helper."""

    @pytest.mark.asyncio
    async def test_iter_frames(self):
        """Test decoding an async byte stream."""
        async def chunks():
            for part in _split(HELLO_BODY, [5, 40, 41, 70]):
                yield part

        frames = [frame async for frame in iter_frames(chunks())]
        assert "".join(f.delta_text or "" for f in frames) == "Hello"

    @pytest.mark.asyncio
    async def test_iter_frames_with_caller_decoder(self):
        """Test that a passed decoder records discarded frames."""
        body = (sse_frame("He") + "data: {not json\n" + sse_frame("llo")).encode("utf-8")

        async def chunks():
            yield body

        decoder = SSEStreamDecoder()
        frames = [frame async for frame in iter_frames(chunks(), decoder)]

        assert "".join(f.delta_text or "" for f in frames) == "Hello"
        assert decoder.discarded_frames == 1
