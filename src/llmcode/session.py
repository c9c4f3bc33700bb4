"""Process-wide session state: mode, histories and connection config."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from llmcode import config as config_module
from llmcode.config import ConnectionConfig, load_config, save_config
from llmcode.storage.history import JsonHistory, chat_history, command_history
from llmcode.storage.models import ChatTurn, CommandRecord

logger = logging.getLogger(__name__)


class Mode(Enum):
    SHELL = "Shell"
    CHAT = "Chat"

    def toggled(self) -> Mode:
        return Mode.CHAT if self is Mode.SHELL else Mode.SHELL


@dataclass
class Session:
    """Single owner of all mutable state for one program run."""

    config: ConnectionConfig
    commands: JsonHistory[CommandRecord]
    chat: JsonHistory[ChatTurn]
    config_path: Path | None = None
    mode: Mode = field(default=Mode.SHELL)

    @classmethod
    def open(
        cls,
        config_path: Path | None = None,
        commands_path: Path | None = None,
        chat_path: Path | None = None,
    ) -> Session:
        """Load config and both histories from disk, healing anything malformed."""
        config_path = config_path or config_module.CONFIG_FILE
        commands = command_history(commands_path or config_module.COMMAND_HISTORY_FILE)
        chat = chat_history(chat_path or config_module.CHAT_HISTORY_FILE)

        session = cls(config=load_config(config_path), commands=commands, chat=chat, config_path=config_path)
        commands.load()
        chat.load()
        logger.info(
            "Session opened: %d commands, %d chat turns, model %s",
            len(commands),
            len(chat),
            session.config.model,
        )
        return session

    def toggle_mode(self) -> Mode:
        self.mode = self.mode.toggled()
        return self.mode

    def set_model(self, model: str) -> None:
        """Change the model and persist before returning."""
        updated = ConnectionConfig(base_url=self.config.base_url, model=model)
        save_config(updated, self.config_path)
        self.config = updated

    def last_failed_command(self) -> CommandRecord | None:
        for record in reversed(self.commands.records):
            if record.has_error:
                return record
        return None
