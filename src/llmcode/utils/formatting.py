"""Display helpers for the terminal."""

from __future__ import annotations

import logging
from datetime import datetime

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 50
OK_GLYPH = "✓"
ERR_GLYPH = "✖"


def truncate(text: str, max_len: int = PREVIEW_LENGTH) -> str:
    """Shorten ``text`` for display, marking the cut with an ellipsis."""
    if len(text) > max_len:
        return text[:max_len] + "..."
    return text


def format_timestamp(timestamp: str) -> str:
    """Render an ISO-8601 timestamp in local time, or return it unchanged if unparsable."""
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return timestamp
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def status_glyph(has_error: bool) -> str:
    return ERR_GLYPH if has_error else OK_GLYPH


def chat_ordinal(index: int) -> int:
    """Exchange number for the ``index``-th turn; user and assistant share one."""
    return index // 2 + 1


def banner_rule(title: str) -> str:
    return f"=== {title} ==="
