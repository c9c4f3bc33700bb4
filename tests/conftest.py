"""Shared test fixtures."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from helpers import FakeOllama, FakeRunner
from llmcode.config import ConnectionConfig
from llmcode.controller import SessionController
from llmcode.services.ollama import OllamaClient
from llmcode.services.shell import CommandExecutor
from llmcode.session import Session
from llmcode.storage.history import chat_history, command_history


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.json"


@pytest.fixture
def session(tmp_path, config_path):
    return Session.open(
        config_path=config_path,
        commands_path=tmp_path / "history.json",
        chat_path=tmp_path / "chat_history.json",
    )


@pytest.fixture
def commands(tmp_path):
    history = command_history(tmp_path / "history.json")
    history.load()
    return history


@pytest.fixture
def chats(tmp_path):
    history = chat_history(tmp_path / "chat_history.json")
    history.load()
    return history


@pytest.fixture
def connection_config():
    return ConnectionConfig(base_url="http://ollama.test:11434", model="llama3")


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def ollama():
    return FakeOllama()


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200, force_terminal=False, color_system=None)


@pytest.fixture
def controller(session, runner, ollama, console):
    executor = CommandExecutor(session.commands, runner=runner)
    client = OllamaClient(session.chat, lambda: session.config, runner=runner, transport=ollama.transport)
    return SessionController(session, executor, client, console)
