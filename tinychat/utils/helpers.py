"""Small filesystem and identifier helpers."""

from __future__ import annotations

import os
import re
import tempfile
import time
from pathlib import Path

_SESSION_ID_RE = re.compile(r"\d+")


def ensure_dir(path: Path) -> Path:
    """Create *path* (and parents) if missing and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write *content* to *path* through a temp file in the same directory and rename it."""
    ensure_dir(path.parent)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.tmp-", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def word_count(text: str) -> int:
    """Token estimate used for every budget: whitespace-delimited word count."""
    return len(text.split())


def new_session_id() -> str:
    """High-resolution timestamp used as a fresh session id."""
    return str(time.time_ns())


def session_id_from_identifier(identifier: str) -> str | None:
    """Extract the first run of digits from a saved session identifier.

    >>> session_id_from_identifier("chat-1700000000000.yaml")
    '1700000000000'
    """
    match = _SESSION_ID_RE.search(identifier or "")
    return match.group(0) if match else None
