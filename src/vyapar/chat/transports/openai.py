import json
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from openai import APIConnectionError, APIError, APIStatusError, AsyncOpenAI

from ..errors import CompletionConnectionError, CompletionStatusError
from ..transport import CompletionTransport


def _context_message(body: dict[str, Any]) -> dict[str, str] | None:
    """Render the request context as a system message, if there is one."""
    context_type = body.get("contextType")
    context_data = body.get("contextData")
    if context_type is None and context_data is None:
        return None

    content = f"Context type: {context_type or 'general'}"
    if context_data is not None:
        content += f"\nContext data: {json.dumps(context_data, default=str)}"
    return {"role": "system", "content": content}


async def _read_body(response: Any) -> AsyncIterator[bytes]:
    """Yield raw SSE bytes from an SDK streaming response."""
    try:
        async for chunk in response.iter_bytes():
            yield chunk
    except (httpx.HTTPError, APIError) as e:
        raise CompletionConnectionError(str(e)) from e


class OpenAITransport(CompletionTransport):
    """Streams completions straight from an OpenAI-compatible API.

    Hidden design decisions:
    - OpenAI API client initialization
    - Context forwarding (OpenAI rejects unknown body fields, so the request
      context travels as a leading system message and ``userId`` as ``user``)
    - Raw streaming so the session decodes the same SSE bytes it would
      receive from the edge function
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        organization: str | None = None,
        temperature: float = 0.7,
        **client_kwargs: Any
    ):
        """Initialize OpenAI transport.

        Args:
            api_key: OpenAI API key
            model: Chat model to use
            base_url: Optional custom API base URL
            organization: Optional organization ID
            temperature: Sampling temperature
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._temperature = temperature
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    def build_request(self, body: dict[str, Any]) -> dict[str, Any]:
        """Convert the endpoint body into Chat Completions parameters."""
        messages = list(body.get("messages", []))
        system = _context_message(body)
        if system is not None:
            messages.insert(0, system)

        request_params: dict[str, Any] = {
            "model": self._model,
            "messages": messages,
            "temperature": self._temperature,
            "stream": True,
        }
        if body.get("userId"):
            request_params["user"] = str(body["userId"])
        return request_params

    @asynccontextmanager
    async def open_stream(self, body: dict[str, Any]) -> AsyncIterator[AsyncIterator[bytes]]:
        """Open a raw streaming chat completion."""
        request_params = self.build_request(body)

        async with AsyncExitStack() as stack:
            try:
                response = await stack.enter_async_context(
                    self._client.chat.completions.with_streaming_response.create(**request_params)
                )
            except APIStatusError as e:
                raise CompletionStatusError(e.status_code, e.message) from e
            except APIConnectionError as e:
                raise CompletionConnectionError(str(e)) from e

            yield _read_body(response)

    async def close(self) -> None:
        """Close the OpenAI client."""
        await self._client.close()
