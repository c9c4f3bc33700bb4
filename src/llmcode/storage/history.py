"""Write-through JSON history for commands and chat turns."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Generic, Protocol, TypeVar

from llmcode.storage.models import ChatTurn, CommandRecord
from llmcode.utils.files import read_json, write_json

logger = logging.getLogger(__name__)


class _Record(Protocol):
    def to_dict(self) -> dict: ...


T = TypeVar("T", bound=_Record)


class JsonHistory(Generic[T]):
    """Append-only list persisted in full to a JSON file on every mutation."""

    def __init__(self, path: Path, parse: Callable[[dict], T]) -> None:
        self.path = path
        self._parse = parse
        self._records: list[T] = []

    @property
    def records(self) -> tuple[T, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def load(self) -> list[T]:
        """Load persisted records. A missing or malformed file becomes ``[]``."""
        try:
            data = read_json(self.path)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            records = [self._parse(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.info("History %s unreadable (%s), starting empty", self.path, e)
            self._replace([])
            return []

        self._records = records
        logger.debug("Loaded %d records from %s", len(records), self.path)
        return list(records)

    def append(self, record: T) -> None:
        self._replace([*self._records, record])

    def clear(self) -> None:
        self._replace([])
        logger.info("History cleared: %s", self.path)

    def _replace(self, records: list[T]) -> None:
        """Persist ``records``, then adopt them. A failed write changes nothing."""
        write_json(self.path, [record.to_dict() for record in records])
        self._records = records


def command_history(path: Path) -> JsonHistory[CommandRecord]:
    return JsonHistory(path, CommandRecord.from_dict)


def chat_history(path: Path) -> JsonHistory[ChatTurn]:
    return JsonHistory(path, ChatTurn.from_dict)
