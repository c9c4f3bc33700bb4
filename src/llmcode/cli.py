"""CLI entry point using typer."""

from __future__ import annotations

import logging
from typing import Callable

import typer
from rich.console import Console
from rich.text import Text

from llmcode import __version__
from llmcode import config as config_module
from llmcode.config import ensure_config_dir, log_level
from llmcode.controller import SessionController
from llmcode.services.ollama import OllamaClient
from llmcode.services.shell import CommandExecutor
from llmcode.session import Session

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="llmcode",
    help="Terminal shell with Ollama chat and error explanation.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

# Red foreground, matching rich's "red" style.
STDERR_SGR = "31"


def setup_logging() -> None:
    """Log to the state directory; the terminal is reserved for the session."""
    ensure_config_dir()
    logging.basicConfig(
        level=getattr(logging, log_level().upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.FileHandler(str(config_module.LOG_FILE))],
    )


def print_banner() -> None:
    for line in (
        "=== LLMCode ===",
        "Terminal coding support tool with Ollama integration",
        'Type "exit" or press Ctrl+C to quit',
        'Type "help" to see available commands',
        'Type "!" to toggle between Shell and Chat mode',
        "=============",
    ):
        console.print(line, style="green", markup=False)


def raw_sink(target: Console, sgr: str = "") -> Callable[[str], None]:
    """Write chunks straight to the console's file, control characters included.

    ``sgr`` is an ANSI color code wrapped around each chunk when the
    console has color enabled.
    """

    def write(chunk: str) -> None:
        stream = target.file
        if sgr and target.color_system is not None:
            stream.write(f"\x1b[{sgr}m{chunk}\x1b[0m")
        else:
            stream.write(chunk)
        stream.flush()

    return write


def build_controller(
    session: Session,
    out: Console | None = None,
    err: Console | None = None,
) -> SessionController:
    """Wire the executor and Ollama client to one session and console."""
    out = out if out is not None else console
    err = err if err is not None else err_console
    executor = CommandExecutor(
        session.commands,
        on_stdout=raw_sink(out),
        on_stderr=raw_sink(err, STDERR_SGR),
    )
    client = OllamaClient(session.chat, lambda: session.config)
    return SessionController(session, executor, client, out)


@app.command()
def main() -> None:
    """Start an interactive Shell/Chat session."""
    print_banner()
    try:
        setup_logging()
        session = Session.open()
    except Exception as e:
        logger.exception("Startup failed")
        err_console.print(Text(f"Error: {e}", style="red"))
        raise typer.Exit(1)

    logger.info("llmcode v%s started", __version__)
    controller = build_controller(session)
    controller.run(console.input)


if __name__ == "__main__":
    app()
