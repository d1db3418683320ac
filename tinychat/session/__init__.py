"""Session persistence."""

from tinychat.session.store import HistoryStore

__all__ = ["HistoryStore"]
