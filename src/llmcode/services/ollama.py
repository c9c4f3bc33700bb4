"""Ollama inference client for chat and error explanation."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

import httpx

from llmcode.config import ConnectionConfig
from llmcode.errors import OllamaConnectionError, OllamaResponseError, SpawnError
from llmcode.services.shell import ProcessRunner, run_process
from llmcode.storage.history import JsonHistory
from llmcode.storage.models import ChatTurn, Role

logger = logging.getLogger(__name__)

LISTING_COMMAND = "ls -a"
MAX_LISTING_CHARS = 4000
TRUNCATION_MARKER = "\n... (truncated)"

INSTRUCTIONS = """IMPORTANT INSTRUCTIONS:
- Provide concise, summarized responses
- Focus on the key points only
- Use bullet points for clarity when appropriate
- Keep explanations brief and to the point
- Avoid unnecessary details and verbose explanations"""

CHAT_REMINDER = "Remember to provide a concise summary focusing only on the key points."

EXPLAIN_TEMPLATE = (
    "I got the following error in my terminal. Please explain what it means "
    "and suggest how to fix it. Be concise and focus on the key points:"
)


def bound_listing(listing: str, limit: int = MAX_LISTING_CHARS) -> str:
    """Cap the directory listing so a huge directory cannot flood the prompt."""
    if len(listing) <= limit:
        return listing
    return listing[:limit] + TRUNCATION_MARKER


class OllamaClient:
    """Send prompts to Ollama's ``/api/generate`` endpoint."""

    def __init__(
        self,
        history: JsonHistory[ChatTurn],
        get_config: Callable[[], ConnectionConfig],
        runner: ProcessRunner = run_process,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.history = history
        self.get_config = get_config
        self.runner = runner
        self.transport = transport

    async def _directory_listing(self, cwd: Optional[str] = None) -> str:
        try:
            result = await self.runner(LISTING_COMMAND, cwd=cwd)
        except SpawnError as e:
            return f"Error executing command: {e}"
        if result.exit_code != 0:
            return f"Error executing command: {result.stderr}"
        return bound_listing(result.stdout)

    async def build_context(self, cwd: Optional[str] = None) -> str:
        """Assemble the ``<info>`` block prepended to every request."""
        date_str = datetime.now(timezone.utc).isoformat()
        listing = await self._directory_listing(cwd)
        return (
            "<info>\n"
            f"Date: {date_str}\n"
            f"Directory Listing ({LISTING_COMMAND}):\n"
            f"{listing}\n"
            "\n"
            f"{INSTRUCTIONS}\n"
            "</info>"
        )

    async def generate(self, prompt: str) -> str:
        """Make one non-streaming generate request. No timeout, no retry."""
        config = self.get_config()
        url = f"{config.base_url.rstrip('/')}/api/generate"
        payload = {"model": config.model, "prompt": prompt, "stream": False}

        logger.info("POST %s (model=%s, %d prompt chars)", url, config.model, len(prompt))
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=None) as client:
                response = await client.post(url, json=payload)
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning("Ollama request failed: %s", e)
            raise OllamaConnectionError(str(e) or type(e).__name__) from e
        except json.JSONDecodeError as e:
            logger.warning("Ollama returned non-JSON (HTTP %d)", response.status_code)
            raise OllamaConnectionError(f"Invalid JSON in response: {e}") from e

        if not isinstance(data, dict):
            raise OllamaConnectionError("Unexpected response format")
        if data.get("error"):
            logger.warning("Ollama error: %s", data["error"])
            raise OllamaResponseError(str(data["error"]))

        text = data.get("response")
        if not isinstance(text, str):
            raise OllamaConnectionError("Response is missing the 'response' field")
        return text

    async def chat(self, message: str, cwd: Optional[str] = None) -> ChatTurn:
        """Send a chat message and return the assistant's turn.

        The user turn is recorded first and is kept even if the request
        fails; the assistant turn is recorded only on success.
        """
        self.history.append(ChatTurn.create(Role.USER, message))

        context = await self.build_context(cwd)
        prompt = f"{context}\n\n{message}\n\n{CHAT_REMINDER}"
        text = await self.generate(prompt)

        turn = ChatTurn.create(Role.ASSISTANT, text)
        self.history.append(turn)
        return turn

    async def explain_error(self, error_text: str, cwd: Optional[str] = None) -> str:
        """Ask the model to explain a terminal error. Chat history is not touched."""
        context = await self.build_context(cwd)
        prompt = f"{context}\n\n{EXPLAIN_TEMPLATE}\n\n{error_text}"
        return await self.generate(prompt)
