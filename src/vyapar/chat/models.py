from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import to_jsonable_python

DEFAULT_GREETING = (
    "Hi! I'm your VYAPAR AI assistant. I can help you with invoices, customers, "
    "inventory, and business insights. What would you like to know?"
)


class ChatRole(str, Enum):
    """Sender of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """Represents a chat message in a conversation."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: ChatRole = Field(description="Role of the message sender: 'user' or 'assistant'")
    content: str = Field(description="Content of the message")

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role=ChatRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(role=ChatRole.ASSISTANT, content=content)


class ChatRequestContext(BaseModel):
    """Caller-owned metadata forwarded verbatim with every completion request.

    The chat session never interprets ``context_data``; it is whatever the
    page hosting the assistant wants the backend to see (an invoice, a
    customer record, a dashboard snapshot...).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    context_type: str | None = Field(default=None, alias="contextType")
    context_data: Any = Field(default=None, alias="contextData")
    user_id: str | None = Field(default=None, alias="userId")


class StreamFrame(BaseModel):
    """One decoded ``data:`` record of a completion stream."""

    model_config = ConfigDict(frozen=True)

    delta_text: str | None = Field(default=None, description="Incremental text, if any")


def build_request_body(
    messages: list[ChatMessage],
    context: ChatRequestContext
) -> dict[str, Any]:
    """Build the JSON body expected by the completion endpoint.

    ``context_data`` is converted to JSON-native values; Decimal and date
    become strings and anything unknown falls back to ``str()``.
    """
    return {
        "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
        "userId": context.user_id,
        "contextType": context.context_type,
        "contextData": to_jsonable_python(context.context_data, fallback=str),
    }
