"""Configuration management: JSON connection settings + environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from llmcode.utils.files import ensure_dir, read_json, write_json

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(os.environ.get("LLMCODE_HOME", Path.home() / ".llmcode")).expanduser()
CONFIG_FILE = CONFIG_DIR / "config.json"
COMMAND_HISTORY_FILE = CONFIG_DIR / "history.json"
CHAT_HISTORY_FILE = CONFIG_DIR / "chat_history.json"
LOG_FILE = CONFIG_DIR / "llmcode.log"

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "qwen2.5-coder"


@dataclass
class ConnectionConfig:
    """Where the Ollama service lives and which model to ask."""

    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL

    def to_dict(self) -> dict:
        return {"ollama": {"baseUrl": self.base_url, "model": self.model}}


def ensure_config_dir() -> None:
    """Create config directory with secure permissions."""
    ensure_dir(CONFIG_DIR)


def log_level() -> str:
    return os.environ.get("LLMCODE_LOG_LEVEL", "WARNING")


def _parse(data: object) -> tuple[ConnectionConfig, bool]:
    """Build a config from decoded JSON. Returns (config, complete)."""
    config = ConnectionConfig()
    if not isinstance(data, dict) or not isinstance(data.get("ollama"), dict):
        return config, False

    ollama = data["ollama"]
    complete = True

    base_url = ollama.get("baseUrl")
    if isinstance(base_url, str) and base_url:
        config.base_url = base_url
    else:
        complete = False

    model = ollama.get("model")
    if isinstance(model, str) and model:
        config.model = model
    else:
        complete = False

    return config, complete


def load_config(path: Path | None = None) -> ConnectionConfig:
    """Load the connection config, healing a missing or malformed file with defaults."""
    path = path or CONFIG_FILE
    try:
        data = read_json(path)
    except (OSError, ValueError) as e:
        logger.info("Config unreadable (%s), writing defaults to %s", e, path)
        data = None

    config, complete = _parse(data)
    if not complete:
        save_config(config, path)
    return config


def save_config(config: ConnectionConfig, path: Path | None = None) -> None:
    """Save configuration to JSON file. Raises PersistenceError on write failure."""
    write_json(path or CONFIG_FILE, config.to_dict())
