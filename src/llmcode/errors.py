"""Exception hierarchy shared across layers."""

from __future__ import annotations


class LlmcodeError(Exception):
    """Base class for all llmcode errors."""


class PersistenceError(LlmcodeError):
    """A config or history file could not be written."""


class SpawnError(LlmcodeError):
    """A shell process could not be started at all."""


class InferenceError(LlmcodeError):
    """Base class for Ollama request failures."""


class OllamaResponseError(InferenceError):
    """Ollama answered with an application-level ``error`` field."""


class OllamaConnectionError(InferenceError):
    """Ollama was unreachable or returned something that is not a valid reply."""
