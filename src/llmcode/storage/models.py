"""Data models for llmcode."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ProcessResult:
    """Raw outcome of a spawned process."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0


@dataclass(frozen=True)
class CommandRecord:
    """A stored command history entry.

    ``has_error`` is derived once in :meth:`create` and carried as data from
    then on; loading a record from disk keeps the persisted value.
    """

    command: str
    timestamp: str
    exit_code: int
    output: str = ""
    error: str = ""
    has_error: bool = False

    @classmethod
    def create(cls, command: str, exit_code: int, output: str, error: str) -> CommandRecord:
        return cls(
            command=command,
            timestamp=now_iso(),
            exit_code=exit_code,
            output=output,
            error=error,
            has_error=exit_code != 0 or len(error) > 0,
        )

    def to_dict(self) -> dict:
        return {
            "command": self.command,
            "timestamp": self.timestamp,
            "exitCode": self.exit_code,
            "output": self.output,
            "error": self.error,
            "hasError": self.has_error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CommandRecord:
        exit_code = data["exitCode"]
        # Processes killed by a signal were persisted with a null exit code.
        return cls(
            command=str(data["command"]),
            timestamp=str(data["timestamp"]),
            exit_code=-1 if exit_code is None else int(exit_code),
            output=str(data.get("output", "")),
            error=str(data.get("error", "")),
            has_error=bool(data["hasError"]),
        )


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatTurn:
    """One message in the chat transcript."""

    role: Role
    content: str
    timestamp: str

    @classmethod
    def create(cls, role: Role, content: str) -> ChatTurn:
        return cls(role=role, content=content, timestamp=now_iso())

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> ChatTurn:
        return cls(
            role=Role(data["role"]),
            content=str(data["content"]),
            timestamp=str(data["timestamp"]),
        )
