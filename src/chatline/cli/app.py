"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live

from ..log import configure_logging
from ..session import TurnPhase
from .formatting import format_message, format_timeline
from .providers import get_controller, get_replay_controller, get_settings

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="chatline",
    help="Streaming chat client with search activity tracking",
    no_args_is_help=True,
    add_completion=False,
)

# Console for rich output
console = Console()

EXIT_COMMANDS = {"exit", "quit", "/exit", "/quit"}


@app.command()
def chat(
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Backend base URL (default: $CHATLINE_API_URL or http://localhost:8000)"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error"
    ),
):
    """Chat interactively with a streaming backend."""
    settings = get_settings(url=url, log_level=log_level)
    configure_logging(settings.log_level)

    async def _chat():
        controller = get_controller(settings)
        console.print(format_timeline(controller.snapshot))
        console.print("[dim]Type 'exit' to leave.[/dim]")
        try:
            while True:
                try:
                    text = console.input("[bold magenta]You:[/] ")
                except (EOFError, KeyboardInterrupt):
                    break
                if text.strip().lower() in EXIT_COMMANDS:
                    break
                if not text.strip():
                    continue

                with Live(console=console, refresh_per_second=12, transient=False) as live:
                    unsubscribe = controller.subscribe(
                        lambda snapshot: live.update(format_message(snapshot[-1]))
                    )
                    try:
                        phase = await controller.submit(text)
                    finally:
                        unsubscribe()
                if phase is TurnPhase.FAILED:
                    console.print("[dim]The turn failed; you can try again.[/dim]")
        finally:
            await controller.close()

    asyncio.run(_chat())


@app.command()
def replay(
    file: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="File with one raw event payload per line"
    ),
    prompt: str = typer.Option(
        "replay",
        "--prompt",
        "-p",
        help="User input recorded for the replayed turn"
    ),
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error"
    ),
):
    """Replay recorded payloads as one turn and print the resulting timeline."""
    settings = get_settings(log_level=log_level)
    configure_logging(settings.log_level)

    payloads = [line for line in file.read_text(encoding="utf-8").splitlines() if line.strip()]

    async def _replay():
        controller, factory = get_replay_controller(payloads, settings)
        phase = await controller.submit(prompt)
        console.print(format_timeline(controller.snapshot))
        console.print(f"[dim]Request:[/dim] {factory.urls[0]}")
        console.print(f"[dim]Phase:[/dim] {phase.value}")
        token = controller.checkpoints.token
        console.print(f"[dim]Checkpoint:[/dim] {token if token else '-'}")
        return phase

    phase = asyncio.run(_replay())
    if phase is TurnPhase.FAILED:
        raise typer.Exit(code=1)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
