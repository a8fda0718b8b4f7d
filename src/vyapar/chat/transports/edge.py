from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from ..errors import CompletionConnectionError, CompletionStatusError
from ..transport import CompletionTransport


async def _read_body(response: httpx.Response) -> AsyncIterator[bytes]:
    """Yield decoded body chunks, translating network failures."""
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    except httpx.HTTPError as e:
        raise CompletionConnectionError(str(e)) from e


class EdgeFunctionTransport(CompletionTransport):
    """Transport for the backend's ``ai-assistant`` edge function.

    Hidden design decisions:
    - Function URL layout (``{base_url}/functions/v1/{function}``)
    - Bearer authentication with the publishable key
    - httpx client lifecycle and timeouts
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        function: str = "ai-assistant",
        timeout: float = 60.0,
        **client_kwargs: Any
    ):
        """Initialize the edge function transport.

        Args:
            base_url: Backend project URL
            api_key: Publishable (anon) key sent as bearer token
            function: Edge function name
            timeout: Request timeout in seconds
            **client_kwargs: Additional kwargs for httpx.AsyncClient
        """
        self._url = f"{base_url.rstrip('/')}/functions/v1/{function}"
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            **client_kwargs
        )

    @property
    def url(self) -> str:
        """Get the full function URL."""
        return self._url

    @asynccontextmanager
    async def open_stream(self, body: dict[str, Any]) -> AsyncIterator[AsyncIterator[bytes]]:
        """POST the conversation and stream the response body."""
        try:
            async with self._client.stream("POST", self._url, json=body) as response:
                if not response.is_success:
                    raise CompletionStatusError(response.status_code)
                yield _read_body(response)
        except httpx.HTTPError as e:
            raise CompletionConnectionError(str(e)) from e

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
