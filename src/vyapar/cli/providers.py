"""Provider factory functions for CLI.

Centralizes creation of the data store, completion transport and chat context
from environment variables. Hides configuration details from command
implementations.
"""

import os
from datetime import datetime
from typing import Any

from rich.console import Console
from rich.text import Text

from .. import config
from ..chat import ChatRequestContext, CompletionTransport, create_completion_transport
from ..store import DataStore, create_data_store

# Default console for output
_console = Console()


def get_store(backend: str | None = None) -> DataStore:
    """Create data store from environment variables.

    Args:
        backend: Override for VYAPAR_STORE ("memory" or "postgres")

    Returns:
        Data store instance (not yet connected)

    Environment variables:
        VYAPAR_STORE: Backend type (default: postgres)
        POSTGRES_HOST: Database host (default: localhost)
        POSTGRES_PORT: Database port (default: 5432)
        POSTGRES_DB: Database name (default: vyapar)
        POSTGRES_USER: Database user (default: vyapar)
        POSTGRES_PASSWORD: Database password (default: vyapar_dev)
    """
    backend = backend or os.getenv("VYAPAR_STORE", "postgres")
    if backend == "memory":
        return create_data_store("memory")

    return create_data_store(
        backend,
        host=os.getenv("POSTGRES_HOST", config.DEFAULT_POSTGRES_HOST),
        port=int(os.getenv("POSTGRES_PORT", str(config.DEFAULT_POSTGRES_PORT))),
        database=os.getenv("POSTGRES_DB", config.DEFAULT_POSTGRES_DB),
        user=os.getenv("POSTGRES_USER", config.DEFAULT_POSTGRES_USER),
        password=os.getenv("POSTGRES_PASSWORD", config.DEFAULT_POSTGRES_PASSWORD)
    )


def get_transport(console: Console | None = None) -> CompletionTransport:
    """Create completion transport from environment variables.

    Args:
        console: Optional Rich console for output

    Returns:
        Completion transport instance

    Raises:
        SystemExit: If the selected transport is not configured

    Environment variables:
        VYAPAR_CHAT_TRANSPORT: Transport type (edge, openai; default: edge)
        VYAPAR_BACKEND_URL: Backend project URL (for edge)
        VYAPAR_PUBLISHABLE_KEY: Publishable key (for edge)
        VYAPAR_ASSISTANT_FUNCTION: Edge function name (default: ai-assistant)
        OPENAI_API_KEY: OpenAI API key (for openai)
        OPENAI_CHAT_MODEL: OpenAI model (default: gpt-4o-mini)
        OPENAI_BASE_URL: Optional OpenAI-compatible base URL
    """
    import typer

    con = console or _console
    kind = os.getenv("VYAPAR_CHAT_TRANSPORT", "edge").lower()

    if kind == "edge":
        base_url = os.getenv("VYAPAR_BACKEND_URL")
        api_key = os.getenv("VYAPAR_PUBLISHABLE_KEY")
        if not base_url or not api_key:
            con.print("[red]Error: VYAPAR_BACKEND_URL and VYAPAR_PUBLISHABLE_KEY must be set[/red]")
            raise typer.Exit(code=1)
        return create_completion_transport(
            "edge",
            base_url=base_url,
            api_key=api_key,
            function=os.getenv("VYAPAR_ASSISTANT_FUNCTION", config.DEFAULT_ASSISTANT_FUNCTION),
            timeout=config.DEFAULT_CHAT_TIMEOUT,
        )

    if kind == "openai":
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            con.print("[red]Error: OPENAI_API_KEY not set in environment[/red]")
            raise typer.Exit(code=1)
        return create_completion_transport(
            "openai",
            api_key=api_key,
            model=os.getenv("OPENAI_CHAT_MODEL", config.DEFAULT_OPENAI_MODEL),
            base_url=os.getenv("OPENAI_BASE_URL") or None,
        )

    con.print(f"[red]Error: Unknown chat transport: {kind}[/red]")
    raise typer.Exit(code=1)


def get_context(context_type: str | None = None, context_data: Any = None) -> ChatRequestContext:
    """Build the chat request context.

    Environment variables:
        VYAPAR_USER_ID: Identifier of the signed-in user
    """
    return ChatRequestContext(
        context_type=context_type,
        context_data=context_data,
        user_id=os.getenv("VYAPAR_USER_ID") or None,
    )


def make_debug_printer(console: Console, min_level: int):
    """Debug callback that prints component messages at or above ``min_level``.

    Returns:
        Callable(level: str, component: str, message: str)
    """
    styles = {
        config.LogLevel.DEBUG: "dim",
        config.LogLevel.INFO: "cyan",
        config.LogLevel.WARNING: "yellow",
        config.LogLevel.ERROR: "red",
    }

    def _print(level: str, component: str, message: str) -> None:
        numeric = config.LogLevel.from_string(level)
        if numeric < min_level:
            return
        if len(message) > config.LOG_MAX_MESSAGE_LENGTH:
            message = message[:config.LOG_MAX_MESSAGE_LENGTH] + "..."
        stamp = datetime.now().strftime(config.LOG_TIMESTAMP_FORMAT)
        style = styles.get(numeric, "dim")
        console.print(Text(
            f"{stamp} {config.LogLevel.name(numeric):<7} [{component}] {message}",
            style=style,
        ))

    return _print
