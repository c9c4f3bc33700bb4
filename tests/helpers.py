"""Test doubles for the process runner and the Ollama HTTP service."""

from __future__ import annotations

import json

import httpx
from rich.console import Console

from llmcode.storage.models import ProcessResult


class FakeRunner:
    """Stands in for run_process: returns canned results and records calls."""

    def __init__(self, results: dict[str, ProcessResult] | None = None) -> None:
        self.results = results or {}
        self.calls: list[str] = []

    async def __call__(self, command, cwd=None, on_stdout=None, on_stderr=None):
        self.calls.append(command)
        result = self.results.get(command, ProcessResult(stdout=".\n..\nREADME.md\n"))
        if on_stdout and result.stdout:
            on_stdout(result.stdout)
        if on_stderr and result.stderr:
            on_stderr(result.stderr)
        return result


class FakeOllama:
    """httpx handler that answers /api/generate and keeps the request bodies."""

    def __init__(self, reply: dict | None = None) -> None:
        self.reply = reply if reply is not None else {"response": "Use ls -la."}
        self.requests: list[dict] = []
        self.urls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.urls.append(str(request.url))
        self.requests.append(json.loads(request.content))
        return httpx.Response(200, json=self.reply)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def output_of(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]
