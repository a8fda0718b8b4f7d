from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from typing import Any


class CompletionTransport(ABC):
    """Abstract base class for completion transports.

    This module hides the design decision of how a conversation reaches the
    model. Implementations must handle transport-specific details like:
    - HTTP client setup and authentication headers
    - Endpoint addressing
    - Translating HTTP statuses and network failures into
      CompletionStatusError / CompletionConnectionError

    Supports async context manager protocol for proper resource cleanup:
        async with transport:
            async with transport.open_stream(body) as chunks:
                async for chunk in chunks:
                    ...
    """

    @abstractmethod
    def open_stream(
        self,
        body: dict[str, Any]
    ) -> AbstractAsyncContextManager[AsyncIterator[bytes]]:
        """Submit a conversation and open the streamed response body.

        Args:
            body: JSON body with ``messages``, ``userId``, ``contextType``
                and ``contextData``

        Returns:
            Async context manager yielding the raw response bytes. Leaving the
            context releases the connection, whether or not the body was
            fully read.

        Raises:
            CompletionStatusError: The endpoint answered with a non-2xx status
            CompletionConnectionError: The request or a body read failed
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        pass

    async def __aenter__(self) -> "CompletionTransport":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
