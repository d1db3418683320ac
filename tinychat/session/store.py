"""Saved chat sessions as YAML files."""

from __future__ import annotations

import time
from pathlib import Path

import yaml

from tinychat.logging import get_logger
from tinychat.utils.helpers import atomic_write_text, ensure_dir

logger = get_logger(__name__)


class HistoryStore:
    """
    Stores one YAML file per session in the history directory.

    Each file holds the turn log (``chatHistory``) and the memory context
    (``memory``) as two lists of strings. Read and write failures are logged
    and degrade to empty results.
    """

    SUFFIX = ".yaml"

    def __init__(self, history_dir: Path):
        try:
            self.history_dir = ensure_dir(history_dir)
        except OSError as e:
            logger.error("history_dir_create_failed", path=str(history_dir), error=str(e))
            raise RuntimeError(f"Failed to create history directory: {history_dir}") from e

    @classmethod
    def file_name(cls, session_id: str) -> str:
        return f"chat-{session_id}{cls.SUFFIX}"

    def save(self, session_id: str, turns: list[str], context: list[str]) -> None:
        """Write a session snapshot; sessions without turns are not stored."""
        if not session_id or not turns:
            return
        path = self.history_dir / self.file_name(session_id)
        started = time.perf_counter()
        document = {"chatHistory": list(turns), "memory": list(context)}
        try:
            atomic_write_text(path, yaml.safe_dump(document, allow_unicode=True, sort_keys=False))
        except (OSError, yaml.YAMLError) as e:
            logger.warning("session_save_failed", session_id=session_id, path=str(path), error=str(e))
            return
        logger.debug(
            "session_saved",
            session_id=session_id,
            turn_count=len(turns),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 3),
        )

    def load(self, identifier: str) -> tuple[list[str], list[str]]:
        """Return ``(turns, context)`` for a saved session file name."""
        path = self.history_dir / identifier
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("session_load_failed", identifier=identifier, error=str(e))
            return [], []

        if not isinstance(data, dict):
            logger.warning("session_load_failed", identifier=identifier, error="not a mapping")
            return [], []
        turns = [str(t) for t in data.get("chatHistory") or []]
        context = [str(c) for c in data.get("memory") or []]
        return turns, context

    def list_sessions(self) -> list[str]:
        """Saved session file names, oldest first."""
        try:
            return sorted(p.name for p in self.history_dir.glob(f"*{self.SUFFIX}") if p.is_file())
        except OSError as e:
            logger.warning("session_list_failed", path=str(self.history_dir), error=str(e))
            return []
