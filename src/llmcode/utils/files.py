"""JSON file helpers shared by the config and history stores."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from llmcode.errors import PersistenceError

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> None:
    """Create a directory with owner-only permissions."""
    path.mkdir(parents=True, exist_ok=True)
    os.chmod(path, 0o700)


def read_json(path: Path) -> Any:
    """Read and decode a JSON file. Raises OSError or ValueError."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, data: Any) -> None:
    """Replace ``path`` with ``data`` as indented JSON.

    The data goes to a temp file in the same directory first, so an
    interrupted write never leaves ``path`` truncated.
    """
    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        tmp_path = Path(name)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        raise PersistenceError(f"Could not write {path}: {e}") from e
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
