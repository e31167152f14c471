"""Main CLI application using Typer."""
import asyncio
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..conversation.models import MAX_TITLE_LENGTH
from ..llm.catalog import DEFAULT_MODELS, VISION_MODEL, output_token_limit
from ..rendering import classify
from ..streaming import ManualScheduler, RevealSession, reveal_stream, token_delay, tokenize, total_reveal_ms
from ..ui.config import DEFAULT_REVEAL_SPEED, MAX_REVEAL_SPEED, MIN_REVEAL_SPEED
from ..ui.formatting import render_message_renderable
from .providers import get_store, require_llm

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="revealchat",
    help="Terminal chat client that reveals model replies as typed, structured text",
    no_args_is_help=True,
    add_completion=True,
)

history_app = typer.Typer(help="Browse and manage saved conversations")
app.add_typer(history_app, name="history")

# Console for rich output
console = Console()


def _read_source(source: str) -> str:
    """Read message text from a file, or stdin for "-"."""
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        console.print(f"[red]Error: File not found: {source}[/red]")
        raise typer.Exit(code=1)
    return path.read_text(encoding="utf-8")


def _check_speed(speed: float) -> float:
    if not MIN_REVEAL_SPEED <= speed <= MAX_REVEAL_SPEED:
        console.print(
            f"[red]Error: --speed must be between {MIN_REVEAL_SPEED} and {MAX_REVEAL_SPEED}[/red]"
        )
        raise typer.Exit(code=1)
    return speed


def _preview(text: str, width: int = 60) -> str:
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 3] + "..."


@app.command()
def chat(
    store: str | None = typer.Option(
        None,
        "--store",
        "-s",
        help="Conversation store: 'memory' (session-only) or 'sqlite' (persistent)"
    ),
    db: str | None = typer.Option(
        None,
        "--db",
        help="Path for the SQLite database (only with --store sqlite)"
    ),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model for new turns (see: revealchat models)"
    ),
    speed: float = typer.Option(
        DEFAULT_REVEAL_SPEED,
        "--speed",
        help="Reveal speed multiplier; 2.0 reveals twice as fast"
    ),
    conversation: str | None = typer.Option(
        None,
        "--open",
        "-o",
        help="Conversation id to open on start"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch the interactive chat TUI."""
    _check_speed(speed)

    async def _chat():
        from ..ui import run_textual_tui

        llm = require_llm(console)
        try:
            conversation_store = get_store(store, db)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)

        await run_textual_tui(
            store=conversation_store,
            llm=llm,
            model=model,
            speed=speed,
            log_level=log_level,
            conversation_id=conversation,
        )
        console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_chat())
    except KeyboardInterrupt:
        pass


@app.command()
def render(
    source: str = typer.Argument("-", help="Message file, or '-' for stdin"),
):
    """Render a message the way the chat shows a finished reply."""
    console.print(render_message_renderable(_read_source(source)))


@app.command()
def sections(
    source: str = typer.Argument("-", help="Message file, or '-' for stdin"),
):
    """Show how a message is split into typed sections."""
    text = _read_source(source)

    table = Table(title="Sections", title_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Type", style="bold cyan", no_wrap=True)
    table.add_column("Lines", justify="right")
    table.add_column("Info", style="magenta")
    table.add_column("Preview")

    for index, section in enumerate(classify(text), start=1):
        info = section.language or (section.note_kind.value if section.note_kind else "") or (section.title or "")
        table.add_row(
            str(index),
            section.type.value,
            str(section.text.count("\n") + 1 if section.text else 0),
            info,
            Text(_preview(section.text)),
        )

    console.print(table)


@app.command()
def tokens(
    source: str = typer.Argument("-", help="Message file, or '-' for stdin"),
    speed: float = typer.Option(
        DEFAULT_REVEAL_SPEED,
        "--speed",
        help="Reveal speed multiplier"
    ),
    limit: int = typer.Option(
        200,
        "--limit",
        "-n",
        help="Maximum number of tokens to list"
    ),
):
    """Dry-run the reveal: tokens, delays and when each one appears."""
    _check_speed(speed)
    text = _read_source(source)
    message_tokens = tokenize(text)

    # Drive a real session on a virtual clock to get the reveal times
    scheduler = ManualScheduler()
    reveal_times: list[float] = []
    session = RevealSession(
        "dry-run",
        message_tokens,
        scheduler=scheduler,
        on_update=lambda _text: reveal_times.append(scheduler.now_ms),
        speed=speed,
    )
    session.start()
    scheduler.run_until_idle()

    table = Table(title="Tokens", title_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Token")
    table.add_column("Delay (ms)", justify="right", style="yellow")
    table.add_column("At (ms)", justify="right", style="green")

    previous = None
    for index, token in enumerate(message_tokens[:limit]):
        delay = 0 if previous is None else token_delay(token, previous) / speed
        at = reveal_times[index] if index < len(reveal_times) else 0
        table.add_row(str(index), Text(repr(token.text)), f"{delay:.0f}", f"{at:.0f}")
        previous = token

    console.print(table)
    if len(message_tokens) > limit:
        console.print(f"[dim]... {len(message_tokens) - limit} more tokens[/dim]")

    total_ms = total_reveal_ms(message_tokens) / speed
    console.print(
        f"[bold]{len(message_tokens)}[/bold] tokens, "
        f"full reveal in [bold green]{total_ms / 1000:.2f}s[/bold green] "
        f"[dim](session status: {session.status.value})[/dim]"
    )


@app.command()
def reveal(
    source: str = typer.Argument("-", help="Message file, or '-' for stdin"),
    speed: float = typer.Option(
        DEFAULT_REVEAL_SPEED,
        "--speed",
        help="Reveal speed multiplier"
    ),
):
    """Animate a message in the terminal as the chat would."""
    _check_speed(speed)
    text = _read_source(source)

    async def _reveal():
        with Live(console=console, refresh_per_second=30, vertical_overflow="visible") as live:
            async for shown in reveal_stream(text, speed=speed):
                live.update(render_message_renderable(shown))

    try:
        asyncio.run(_reveal())
    except KeyboardInterrupt:
        console.print("\n[yellow]Reveal stopped.[/yellow]")


@app.command()
def models():
    """List the models offered in the chat."""
    table = Table(title="Models", title_style="bold cyan")
    table.add_column("Id", style="bold", no_wrap=True)
    table.add_column("Name")
    table.add_column("Context", justify="right")
    table.add_column("Max output", justify="right")
    table.add_column("$/1k tokens", justify="right")
    table.add_column("Description", style="dim")

    for model in DEFAULT_MODELS:
        name = model.name
        if model.is_default:
            name += " [green](default)[/green]"
        if model.id == VISION_MODEL:
            name += " [magenta](vision)[/magenta]"
        table.add_row(
            model.id,
            name,
            str(model.max_tokens),
            str(output_token_limit(model.id, [])),
            f"{model.cost_per_1k_tokens:.3f}",
            model.description,
        )

    console.print(table)


@history_app.command("list")
def history_list(
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum conversations to list"),
    db: str | None = typer.Option(None, "--db", help="Path for the SQLite database"),
):
    """List saved conversations, most recent first."""
    async def _list():
        store = get_store("sqlite", db)
        try:
            await store.connect()
            summaries = await store.list_summaries(limit)
        finally:
            await store.disconnect()

        if not summaries:
            console.print("[dim]No saved conversations.[/dim]")
            return

        table = Table(title="Conversations", title_style="bold cyan")
        table.add_column("Id", style="dim")
        table.add_column("Title", style="bold")
        table.add_column("Model", style="magenta")
        table.add_column("Updated")
        table.add_column("Last message")
        for summary in summaries:
            table.add_row(
                summary.id,
                Text(summary.title),
                summary.model,
                summary.updated_at.astimezone().strftime("%Y-%m-%d %H:%M"),
                Text(_preview(summary.last_message, 40)),
            )
        console.print(table)

    asyncio.run(_list())


@history_app.command("show")
def history_show(
    conversation_id: str = typer.Argument(..., help="Conversation id"),
    db: str | None = typer.Option(None, "--db", help="Path for the SQLite database"),
):
    """Print a saved conversation."""
    async def _show():
        store = get_store("sqlite", db)
        try:
            await store.connect()
            conversation = await store.get_conversation(conversation_id)
        except KeyError:
            console.print(f"[red]Error: Conversation not found: {conversation_id}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

        console.print(f"[bold cyan]{conversation.title}[/bold cyan] [dim]({conversation.model})[/dim]\n")
        for message in conversation.messages:
            timestamp = message.timestamp.astimezone().strftime("%H:%M:%S")
            if message.is_user:
                console.print(Panel(Text(message.content), title=f"You [{timestamp}]", title_align="left", border_style="green"))
            else:
                subtitle = message.model_used or None
                console.print(
                    Panel(
                        render_message_renderable(message.content),
                        title=f"Assistant [{timestamp}]",
                        title_align="left",
                        subtitle=subtitle,
                        border_style="magenta",
                    )
                )

    asyncio.run(_show())


@history_app.command("rename")
def history_rename(
    conversation_id: str = typer.Argument(..., help="Conversation id"),
    title: str = typer.Argument(..., help="New title"),
    db: str | None = typer.Option(None, "--db", help="Path for the SQLite database"),
):
    """Rename a saved conversation."""
    clean = title.strip()[:MAX_TITLE_LENGTH]
    if not clean:
        console.print("[red]Error: Title cannot be empty[/red]")
        raise typer.Exit(code=1)

    async def _rename():
        store = get_store("sqlite", db)
        try:
            await store.connect()
            await store.rename_conversation(conversation_id, clean)
        except KeyError:
            console.print(f"[red]Error: Conversation not found: {conversation_id}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()
        console.print(f"[green]Renamed to '{clean}'[/green]")

    asyncio.run(_rename())


@history_app.command("delete")
def history_delete(
    conversation_id: str = typer.Argument(..., help="Conversation id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    db: str | None = typer.Option(None, "--db", help="Path for the SQLite database"),
):
    """Delete a saved conversation."""
    if not yes and not typer.confirm(f"Delete conversation {conversation_id}?"):
        console.print("[dim]Aborted.[/dim]")
        return

    async def _delete():
        store = get_store("sqlite", db)
        try:
            await store.connect()
            await store.delete_conversation(conversation_id)
        except KeyError:
            console.print(f"[red]Error: Conversation not found: {conversation_id}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()
        console.print("[green]Conversation deleted.[/green]")

    asyncio.run(_delete())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
