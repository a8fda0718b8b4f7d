"""Pytest configuration and shared fixtures."""
import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any

import pytest

from vyapar.chat import CompletionTransport
from vyapar.invoicing import CatalogEntry, InMemoryCatalog
from vyapar.store import InMemoryDataStore


def sse_frame(content: str) -> str:
    """One ``data:`` line carrying a text delta."""
    return "data: " + json.dumps({"choices": [{"delta": {"content": content}}]}) + "\n"


class FakeTransport(CompletionTransport):
    """Completion transport that replays canned chunks.

    Args:
        chunks: Body chunks yielded in order
        open_error: Raised when the stream is opened
        read_error: Raised after all chunks have been yielded
    """

    def __init__(
        self,
        chunks: list[bytes] | None = None,
        open_error: Exception | None = None,
        read_error: Exception | None = None
    ):
        self.chunks = chunks or []
        self.open_error = open_error
        self.read_error = read_error
        self.bodies: list[dict[str, Any]] = []
        self.closed = False

    async def _body(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            yield chunk
        if self.read_error is not None:
            raise self.read_error

    @asynccontextmanager
    async def open_stream(self, body: dict[str, Any]) -> AsyncIterator[AsyncIterator[bytes]]:
        self.bodies.append(body)
        if self.open_error is not None:
            raise self.open_error
        yield self._body()

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_transport():
    """Factory for fake transports."""
    return FakeTransport


@pytest.fixture
def hello_chunks():
    """A reply streamed as "Hello" followed by the terminator."""
    body = sse_frame("He") + sse_frame("llo") + "data: [DONE]\n"
    return [body.encode("utf-8")]


@pytest.fixture
def store():
    """Fresh in-memory data store (connect is a no-op)."""
    return InMemoryDataStore()


@pytest.fixture
def catalog():
    """Small inventory catalog."""
    return InMemoryCatalog([
        CatalogEntry(id="inv-1", description="Basmati Rice 5kg", unit_price=Decimal("450")),
        CatalogEntry(id="inv-2", description="Toor Dal 1kg", unit_price=Decimal("160.50")),
    ])


@pytest.fixture
def frame():
    """Builder for ``data:`` lines."""
    return sse_frame
