"""Error taxonomy for the chat layer.

Transport errors describe what went wrong on the wire. Chat errors describe
what the user should be told; the session turns every chat error into a
visible assistant message instead of raising it.
"""


class CompletionTransportError(Exception):
    """Base class for completion transport failures."""


class CompletionStatusError(CompletionTransportError):
    """The completion endpoint answered with a non-success HTTP status."""

    def __init__(self, status_code: int, detail: str | None = None):
        msg = f"Completion endpoint returned HTTP {status_code}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
        self.status_code = status_code


class CompletionConnectionError(CompletionTransportError):
    """Network failure while opening or reading the completion stream."""

    def __init__(self, message: str):
        super().__init__(f"Network error: {message}")


class ChatError(Exception):
    """Base class for errors surfaced to the user as an assistant message."""

    user_message = "Sorry, I encountered an error. Please try again."

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.user_message)
        self.detail = detail


class RateLimitedError(ChatError):
    """HTTP 429 from the completion endpoint."""

    user_message = "Rate limit exceeded. Please try again later."


class CreditsExhaustedError(ChatError):
    """HTTP 402 from the completion endpoint."""

    user_message = "AI credits exhausted. Please add more credits."


class RequestFailedError(ChatError):
    """Any other HTTP or network failure."""

    user_message = "Failed to get response"


def chat_error_for_status(status_code: int) -> ChatError:
    """Map a non-success HTTP status to the chat error shown to the user."""
    if status_code == 429:
        return RateLimitedError()
    if status_code == 402:
        return CreditsExhaustedError()
    return RequestFailedError(f"HTTP {status_code}")
