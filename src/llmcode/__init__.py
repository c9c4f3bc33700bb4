"""LLMCode - terminal shell and Ollama chat in one session."""

__version__ = "0.1.0"
