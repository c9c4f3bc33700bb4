"""REPL session controller: resolves each input line to exactly one action."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from rich.console import Console
from rich.text import Text

from llmcode.errors import (
    OllamaConnectionError,
    OllamaResponseError,
    PersistenceError,
    SpawnError,
)
from llmcode.services.ollama import OllamaClient
from llmcode.services.shell import CommandExecutor
from llmcode.session import Mode, Session
from llmcode.storage.models import Role
from llmcode.utils.formatting import (
    banner_rule,
    chat_ordinal,
    format_timestamp,
    status_glyph,
    truncate,
)

logger = logging.getLogger(__name__)

TOGGLE = "!"
EXIT = "exit"
SET_MODEL = "config:model"

PROMPT_STYLES = {Mode.SHELL: "blue", Mode.CHAT: "green"}

COMMON_HELP = [
    ("!", "Toggle between Shell and Chat mode"),
    ("exit", "Exit the application"),
    ("help", "Show this help message"),
    ("config", "Show current configuration"),
    ("config:model <name>", "Change Ollama model"),
]

SHELL_HELP = [
    ("history", "Show command history"),
    ("clear", "Clear command history"),
    ("explain", "Explain the error from the last command"),
]

CHAT_HELP = [
    ("history", "Show chat history"),
    ("clear", "Clear chat history"),
]


class SessionController:
    """Owns the mode state machine and dispatches input lines."""

    def __init__(
        self,
        session: Session,
        executor: CommandExecutor,
        client: OllamaClient,
        console: Console | None = None,
    ) -> None:
        self.session = session
        self.executor = executor
        self.client = client
        self.console = console or Console()

    def prompt(self) -> Text:
        mode = self.session.mode
        return Text(f"LLMCode [{mode.value}] > ", style=PROMPT_STYLES[mode])

    def run(self, read_line: Callable[[Text], str]) -> None:
        """Read and handle lines until exit, end of input or Ctrl+C.

        Each action runs to completion before the next line is read.
        """
        try:
            while True:
                line = read_line(self.prompt())
                if not asyncio.run(self.handle_line(line)):
                    break
        except (EOFError, KeyboardInterrupt):
            self.console.print()
        self.console.print("Goodbye!", style="green")

    async def handle_line(self, line: str) -> bool:
        """Handle one input line. Returns False when the session should end."""
        text = line.strip()

        if text == TOGGLE:
            mode = self.session.toggle_mode()
            self.console.print(f"Switched to {mode.value.upper()} mode", style="yellow")
            return True

        if text == EXIT:
            return False

        if text == "config":
            self._show_config()
            return True

        if text == SET_MODEL or text.startswith(SET_MODEL + " "):
            self._set_model(text[len(SET_MODEL):].strip())
            return True

        if text == "help":
            self._show_help()
            return True

        if not text:
            return True

        if self.session.mode is Mode.SHELL:
            await self._handle_shell(text)
        else:
            await self._handle_chat(text)
        return True

    # --- Shell mode ---

    async def _handle_shell(self, text: str) -> None:
        if text == "history":
            self._show_command_history()
        elif text == "clear":
            self._clear(self.session.commands, "Command history cleared")
        elif text == "explain":
            await self._explain()
        else:
            await self._execute(text)

    async def _execute(self, command: str) -> None:
        self.console.print(Text(f"Executing: {command}", style="dim"))
        try:
            record = await self.executor.execute(command)
        except SpawnError as e:
            self.console.print(Text(f"Failed to run command: {e}", style="red"))
            return
        except PersistenceError as e:
            self.console.print(Text(f"Failed to save command history: {e}", style="red"))
            return

        if record.has_error:
            self.console.print(
                'Command completed with errors. Type "explain" to analyze the error.',
                style="yellow",
                markup=False,
            )

    async def _explain(self) -> None:
        record = self.session.last_failed_command()
        if record is None:
            self.console.print("No errors found in recent commands.", style="yellow")
            return

        self.console.print(
            f"Analyzing error using Ollama ({self.session.config.model})...",
            style="yellow",
            markup=False,
        )
        try:
            explanation = await self.client.explain_error(record.error)
        except (OllamaResponseError, OllamaConnectionError) as e:
            self._report_inference_error(e)
            return

        self.console.print(Text(f"\n{banner_rule('ERROR EXPLANATION')}\n", style="green"))
        self.console.print(Text(explanation, style="yellow"))
        self.console.print(Text(f"\n{'=' * 25}\n", style="green"))

    def _show_command_history(self) -> None:
        self.console.print(banner_rule("Command History"), style="green")
        for index, record in enumerate(self.session.commands.records, start=1):
            self.console.print(
                Text.assemble(
                    (f"{index}.", "yellow"),
                    " ",
                    (status_glyph(record.has_error), "red" if record.has_error else "green"),
                    " ",
                    (record.command, "blue"),
                    " ",
                    (f"[{format_timestamp(record.timestamp)}]", "dim"),
                )
            )
        self.console.print("=" * 23, style="green")

    # --- Chat mode ---

    async def _handle_chat(self, text: str) -> None:
        if text == "history":
            self._show_chat_history()
        elif text == "clear":
            self._clear(self.session.chat, "Chat history cleared")
        else:
            await self._chat(text)

    async def _chat(self, message: str) -> None:
        self.console.print(
            f"Sending message to Ollama ({self.session.config.model})...",
            style="yellow",
            markup=False,
        )
        try:
            turn = await self.client.chat(message)
        except (OllamaResponseError, OllamaConnectionError) as e:
            self._report_inference_error(e)
            return
        except PersistenceError as e:
            self.console.print(Text(f"Failed to save chat history: {e}", style="red"))
            return

        self.console.print(Text(f"\n{banner_rule('OLLAMA RESPONSE')}\n", style="green"))
        self.console.print(Text(turn.content))
        self.console.print(Text("\n" + "=" * 23 + "\n", style="green"))

    def _show_chat_history(self) -> None:
        self.console.print(banner_rule("Chat History"), style="green")
        for index, turn in enumerate(self.session.chat.records):
            self.console.print(
                Text.assemble(
                    (f"{chat_ordinal(index)}.", "yellow"),
                    " ",
                    (f"[{turn.role.value.upper()}]", "blue" if turn.role is Role.USER else "green"),
                    " ",
                    truncate(turn.content),
                    " ",
                    (f"[{format_timestamp(turn.timestamp)}]", "dim"),
                )
            )
        self.console.print("=" * 23, style="green")

    # --- Shared built-ins ---

    def _clear(self, history, message: str) -> None:
        try:
            history.clear()
        except PersistenceError as e:
            self.console.print(Text(f"Failed to clear history: {e}", style="red"))
            return
        self.console.print(message, style="green")

    def _show_config(self) -> None:
        config = self.session.config
        self.console.print(banner_rule("Current Configuration"), style="green")
        self.console.print(Text.assemble(("Ollama Model: ", "yellow"), (config.model, "blue")))
        self.console.print(Text.assemble(("Ollama URL: ", "yellow"), (config.base_url, "blue")))
        self.console.print("=" * 28, style="green")

    def _set_model(self, model: str) -> None:
        if not model:
            self.console.print(
                "Please provide a model name. Example: config:model llama3",
                style="red",
                markup=False,
            )
            return
        try:
            self.session.set_model(model)
        except PersistenceError as e:
            self.console.print(Text(f"Failed to save config: {e}", style="red"))
            return
        logger.info("Model changed to %s", model)
        self.console.print(Text.assemble(("Ollama model changed to: ", "green"), (model, "blue")))

    def _show_help(self) -> None:
        if self.session.mode is Mode.SHELL:
            entries = COMMON_HELP + SHELL_HELP
            footer = "Any other input will be executed as a shell command"
        else:
            entries = COMMON_HELP + CHAT_HELP
            footer = "Any other input will be sent to Ollama"

        self.console.print(banner_rule("Available Commands"), style="green")
        for name, description in entries:
            self.console.print(Text.assemble((name, "green"), f" - {description}"))
        self.console.print(footer, style="green")
        self.console.print("=" * 28, style="green")

    def _report_inference_error(self, error: Exception) -> None:
        if isinstance(error, OllamaResponseError):
            self.console.print(Text(f"Error from Ollama: {error}", style="red"))
            return
        self.console.print(
            Text(
                f"Failed to connect to Ollama: {error}\n"
                f"Make sure Ollama is running and the model '{self.session.config.model}' is installed.",
                style="red",
            )
        )
