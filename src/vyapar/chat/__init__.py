"""Streaming chat with the business assistant."""

from .errors import (
    ChatError,
    CompletionConnectionError,
    CompletionStatusError,
    CompletionTransportError,
    CreditsExhaustedError,
    RateLimitedError,
    RequestFailedError,
)
from .factory import create_completion_transport
from .models import DEFAULT_GREETING, ChatMessage, ChatRequestContext, ChatRole, StreamFrame
from .session import ChatSession
from .stream import SSEStreamDecoder, iter_frames, parse_frame
from .transport import CompletionTransport
from .transports import EdgeFunctionTransport, OpenAITransport

__all__ = [
    "ChatError",
    "ChatMessage",
    "ChatRequestContext",
    "ChatRole",
    "ChatSession",
    "CompletionConnectionError",
    "CompletionStatusError",
    "CompletionTransport",
    "CompletionTransportError",
    "CreditsExhaustedError",
    "DEFAULT_GREETING",
    "EdgeFunctionTransport",
    "OpenAITransport",
    "RateLimitedError",
    "RequestFailedError",
    "SSEStreamDecoder",
    "StreamFrame",
    "create_completion_transport",
    "iter_frames",
    "parse_frame",
]
