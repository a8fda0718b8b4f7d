from typing import Any

from .transport import CompletionTransport
from .transports import EdgeFunctionTransport, OpenAITransport


def create_completion_transport(kind: str, **config: Any) -> CompletionTransport:
    """Create a completion transport instance.

    This factory function hides the instantiation logic for different transports.

    Args:
        kind: Transport type ('edge', 'openai')
        **config: Transport-specific configuration
            For edge:
                - base_url: str (required)
                - api_key: str (required)
                - function: str (default: 'ai-assistant')
                - timeout: float (default: 60.0)
            For openai:
                - api_key: str (required)
                - model: str (default: 'gpt-4o-mini')
                - base_url: str | None
                - temperature: float (default: 0.7)

    Returns:
        Initialized completion transport

    Raises:
        ValueError: If transport type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> transport = create_completion_transport(
        ...     "edge",
        ...     base_url="https://project.example.co",
        ...     api_key="eyJ..."
        ... )
    """
    kind_lower = kind.lower()

    if kind_lower == "edge":
        for key in ("base_url", "api_key"):
            if key not in config:
                raise TypeError(f"Edge transport requires '{key}' in config")
        return EdgeFunctionTransport(**config)

    if kind_lower == "openai":
        if "api_key" not in config:
            raise TypeError("OpenAI transport requires 'api_key' in config")
        return OpenAITransport(**config)

    raise ValueError(
        f"Unsupported transport: {kind}. "
        f"Supported transports: 'edge', 'openai'"
    )
