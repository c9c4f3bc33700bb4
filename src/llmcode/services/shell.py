"""Shell command executor service."""

from __future__ import annotations

import asyncio
import codecs
import logging
from typing import Awaitable, Callable, Optional, Protocol

from llmcode.errors import SpawnError
from llmcode.storage.history import JsonHistory
from llmcode.storage.models import CommandRecord, ProcessResult

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096

ChunkSink = Callable[[str], None]


class ProcessRunner(Protocol):
    def __call__(
        self,
        command: str,
        cwd: Optional[str] = None,
        on_stdout: Optional[ChunkSink] = None,
        on_stderr: Optional[ChunkSink] = None,
    ) -> Awaitable[ProcessResult]: ...


async def _pump(stream: asyncio.StreamReader | None, sink: Optional[ChunkSink]) -> str:
    """Read a pipe to EOF, forwarding each decoded chunk to ``sink``."""
    if stream is None:
        return ""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    parts: list[str] = []
    while True:
        data = await stream.read(CHUNK_SIZE)
        text = decoder.decode(data, final=not data)
        if text:
            parts.append(text)
            if sink is not None:
                sink(text)
        if not data:
            break
    return "".join(parts)


async def run_process(
    command: str,
    cwd: Optional[str] = None,
    on_stdout: Optional[ChunkSink] = None,
    on_stderr: Optional[ChunkSink] = None,
) -> ProcessResult:
    """Run ``command`` through the shell to completion, streaming both pipes."""
    try:
        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except OSError as e:
        logger.exception("Failed to spawn: %s", command)
        raise SpawnError(str(e)) from e

    stdout, stderr = await asyncio.gather(
        _pump(proc.stdout, on_stdout),
        _pump(proc.stderr, on_stderr),
    )
    returncode = await proc.wait()
    # Negative return codes mean the child died from a signal.
    return ProcessResult(stdout=stdout, stderr=stderr, exit_code=returncode)


class CommandExecutor:
    """Run user commands and record each outcome in the command history."""

    def __init__(
        self,
        history: JsonHistory[CommandRecord],
        runner: ProcessRunner = run_process,
        on_stdout: Optional[ChunkSink] = None,
        on_stderr: Optional[ChunkSink] = None,
    ) -> None:
        self.history = history
        self.runner = runner
        self.on_stdout = on_stdout
        self.on_stderr = on_stderr

    async def execute(self, command: str, cwd: Optional[str] = None) -> CommandRecord:
        """Execute a shell command.

        A non-zero exit or stderr output is captured in the returned record.
        Only a failure to spawn the process raises (:class:`SpawnError`).
        """
        result = await self.runner(
            command,
            cwd=cwd,
            on_stdout=self.on_stdout,
            on_stderr=self.on_stderr,
        )
        record = CommandRecord.create(
            command=command,
            exit_code=result.exit_code,
            output=result.stdout,
            error=result.stderr,
        )
        logger.info("Command finished: %s (exit %d)", command, record.exit_code)
        self.history.append(record)
        return record
