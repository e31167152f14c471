"""Provider factory functions for CLI.

Centralizes creation of the conversation store and LLM instances from
environment variables. Hides configuration details from command
implementations.
"""

import os

from rich.console import Console

from ..conversation import ConversationStore, create_conversation_store
from ..llm import LLMProvider, create_llm_provider

DEFAULT_DB_PATH = "./revealchat.db"

# Default console for output
_console = Console()


def get_store(backend: str | None = None, path: str | None = None) -> ConversationStore:
    """Create conversation store from arguments or environment variables.

    Args:
        backend: "memory" or "sqlite"; overrides REVEALCHAT_STORE
        path: SQLite database path; overrides REVEALCHAT_DB_PATH

    Environment variables:
        REVEALCHAT_STORE: Store type (memory, sqlite; default: sqlite)
        REVEALCHAT_DB_PATH: SQLite database path (default: ./revealchat.db)
    """
    backend = (backend or os.getenv("REVEALCHAT_STORE", "sqlite")).lower()
    if backend == "sqlite":
        return create_conversation_store(
            "sqlite",
            path=path or os.getenv("REVEALCHAT_DB_PATH", DEFAULT_DB_PATH),
        )
    return create_conversation_store(backend)


def get_llm(console: Console | None = None) -> LLMProvider | None:
    """Create LLM provider from environment variables.

    Without an OpenAI key the offline echo provider is used, so the TUI
    and the reveal animation can be tried without network access.

    Args:
        console: Optional Rich console for output

    Returns:
        LLM provider instance, or None if the provider is unknown

    Environment variables:
        LLM_PROVIDER: Provider type (openai, echo; default: openai)
        OPENAI_API_KEY: OpenAI API key (for openai provider)
        OPENAI_CHAT_MODEL: OpenAI model (default: gpt-3.5-turbo)
        OPENAI_BASE_URL: Alternative OpenAI-compatible endpoint
    """
    con = console or _console
    llm_provider = os.getenv("LLM_PROVIDER", "openai").lower()
    model = os.getenv("OPENAI_CHAT_MODEL", "gpt-3.5-turbo")

    if llm_provider == "openai":
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            con.print("[yellow]Warning: OPENAI_API_KEY not set, using the offline echo provider[/yellow]")
            return create_llm_provider("echo", model=model)
        return create_llm_provider(
            "openai",
            api_key=api_key,
            model=model,
            base_url=os.getenv("OPENAI_BASE_URL"),
        )

    elif llm_provider == "echo":
        return create_llm_provider("echo", model=model)

    con.print(f"[red]Error: Unknown LLM provider: {llm_provider}[/red]")
    return None


def require_llm(console: Console | None = None) -> LLMProvider:
    """Get LLM provider, raising error if not configured.

    Raises:
        SystemExit: If LLM provider is not configured
    """
    import typer

    con = console or _console
    llm = get_llm(con)
    if not llm:
        con.print("[red]Error: LLM provider not configured[/red]")
        raise typer.Exit(code=1)
    return llm
