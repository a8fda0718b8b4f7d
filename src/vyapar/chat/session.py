"""Streaming chat session.

A session owns one transcript and at most one in-flight completion request.
Each visible change to the transcript is published as a snapshot so the
presentation layer can re-render as the reply grows.
"""

from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

from .errors import (
    ChatError,
    CompletionStatusError,
    CompletionTransportError,
    RequestFailedError,
    chat_error_for_status,
)
from .models import (
    DEFAULT_GREETING,
    ChatMessage,
    ChatRequestContext,
    ChatRole,
    StreamFrame,
    build_request_body,
)
from .stream import SSEStreamDecoder, iter_frames
from .transport import CompletionTransport


class ChatSession:
    """Conversation with the business assistant.

    The transcript is append-only, except that the last assistant message
    grows while a reply is being streamed. Once the stream ends the message
    is frozen.

    Usage:
        session = ChatSession(transport, context)
        async for transcript in session.submit("How many invoices are overdue?"):
            render(transcript)
    """

    def __init__(
        self,
        transport: CompletionTransport,
        context: ChatRequestContext | None = None,
        greeting: str = DEFAULT_GREETING
    ):
        """Initialize the session.

        Args:
            transport: Completion transport used for every request
            context: Metadata forwarded verbatim with each request
            greeting: Seeded first assistant message
        """
        self._transport = transport
        self._context = context or ChatRequestContext()
        self._greeting = greeting
        self._messages: list[ChatMessage] = [ChatMessage.assistant(greeting)]
        self._pending = False
        self._reply = ""
        self._debug_callback: Any | None = None

    @property
    def messages(self) -> list[ChatMessage]:
        """Snapshot of the transcript."""
        return list(self._messages)

    @property
    def context(self) -> ChatRequestContext:
        """Get the request context."""
        return self._context

    @property
    def is_pending(self) -> bool:
        """True while a request is in flight."""
        return self._pending

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback for detailed execution logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "chat", message)

    def reset(self) -> None:
        """Discard the conversation and start over from the greeting."""
        if self._pending:
            raise RuntimeError("Cannot reset a session while a response is pending")
        self._messages = [ChatMessage.assistant(self._greeting)]

    async def submit(self, content: str) -> AsyncIterator[list[ChatMessage]]:
        """Send a user message and stream the assistant's reply.

        Blank messages, and messages submitted while another request is still
        pending, are ignored: the iterator ends without yielding.

        Args:
            content: The user's message text

        Yields:
            Transcript snapshots after every visible change
        """
        if not content.strip():
            self._debug("debug", "Ignoring blank message")
            return
        if self._pending:
            self._debug("warning", "Ignoring message while a response is pending")
            return

        self._pending = True
        try:
            self._messages.append(ChatMessage.user(content))
            yield self.messages

            async with aclosing(self._stream_reply()) as replies:
                async for transcript in replies:
                    yield transcript
        finally:
            self._pending = False

    async def send(self, content: str) -> ChatMessage | None:
        """Submit a message and wait for the complete reply.

        Returns:
            The final assistant message, or None if the message was ignored
        """
        last: ChatMessage | None = None
        async for transcript in self.submit(content):
            last = transcript[-1]
        if last is None or last.role != ChatRole.ASSISTANT:
            return None
        return last

    async def _stream_reply(self) -> AsyncIterator[list[ChatMessage]]:
        self._reply = ""
        placeholder = False
        error: ChatError | None = None

        self._debug("info", f"Submitting {len(self._messages)} messages")
        try:
            body = build_request_body(self._messages, self._context)
            async with self._transport.open_stream(body) as chunks:
                self._messages.append(ChatMessage.assistant(""))
                placeholder = True
                yield self.messages

                decoder = SSEStreamDecoder()
                async for frame in iter_frames(chunks, decoder):
                    if self._grow_reply(frame):
                        yield self.messages

                if decoder.discarded_frames:
                    self._debug(
                        "debug",
                        f"Discarded {decoder.discarded_frames} unparsable frame(s)"
                    )
        except CompletionStatusError as e:
            error = chat_error_for_status(e.status_code)
            self._debug("error", str(e))
        except CompletionTransportError as e:
            error = RequestFailedError(str(e))
            self._debug("error", str(e))
        except Exception as e:
            # Chat failures end as a visible message, whatever raised them
            error = RequestFailedError(str(e))
            self._debug("error", f"Unexpected {type(e).__name__}: {e}")

        if error is None:
            self._debug("info", f"Reply complete ({len(self._reply)} chars)")
            return

        error_message = ChatMessage.assistant(error.user_message)
        if placeholder and not self._reply:
            self._messages[-1] = error_message
        else:
            self._messages.append(error_message)
        yield self.messages

    def _grow_reply(self, frame: StreamFrame) -> bool:
        if not frame.delta_text:
            return False
        self._reply += frame.delta_text
        self._messages[-1] = ChatMessage.assistant(self._reply)
        return True
