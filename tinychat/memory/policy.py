"""Memory policies: how the turn log is condensed into prompt context."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from tinychat.config.schema import MemoryType
from tinychat.logging import get_logger
from tinychat.memory.turns import TurnLog
from tinychat.utils.helpers import word_count

logger = get_logger(__name__)

# Words reserved for speaker tags and template scaffolding in every budget.
SAFETY_MARGIN = 30

Summarizer = Callable[[str], str]


class MemoryPolicy(ABC):
    """Owns the session's turn log and derives bounded context from it."""

    kind: MemoryType

    def __init__(self) -> None:
        self.turns = TurnLog()

    def append(self, turn: str) -> None:
        self.turns.append(turn)

    def reset(self) -> None:
        self.turns.reset()

    def history(self) -> list[str]:
        return self.turns.snapshot()

    def set_history(self, turns: list[str]) -> None:
        self.turns.restore(turns)

    @abstractmethod
    def context(self, max_tokens: int) -> list[str]:
        """Return the context as an ordered list of strings."""

    @abstractmethod
    def context_string(self, max_tokens: int) -> str:
        """Return the context ready for embedding into a prompt."""

    def set_context(self, context: list[str]) -> None:
        """Restore previously saved context. No-op unless the policy keeps its own state."""

    def on_end_of_response(self) -> None:
        """Called once a streamed reply has been fully received."""


class BufferPolicy(MemoryPolicy):
    """Sliding window: the most recent whole turns that fit the budget."""

    kind = MemoryType.BUFFER

    def context(self, max_tokens: int) -> list[str]:
        return self.turns.window(max_tokens)

    def context_string(self, max_tokens: int) -> str:
        return ", ".join(self.context(max_tokens))


class SummaryPolicy(MemoryPolicy):
    """Recursive summary: after every reply the recent history is re-summarized by the model.

    ``context``/``context_string`` ignore ``max_tokens`` and always return the
    stored summary; the summary size is bounded only by what the model returns.
    """

    kind = MemoryType.SUMMARY

    def __init__(self, max_total_tokens: int, summarizer: Summarizer) -> None:
        super().__init__()
        self.max_total_tokens = max_total_tokens
        self.summarizer = summarizer
        self.summary = ""

    def reset(self) -> None:
        super().reset()
        self.summary = ""

    def context(self, max_tokens: int) -> list[str]:
        return [self.summary]

    def context_string(self, max_tokens: int) -> str:
        return self.summary

    def set_context(self, context: list[str]) -> None:
        if len(context) <= 1:
            self.summary = context[0] if context else ""
            return
        # Several entries means a raw buffer context was saved; summarize the history instead.
        self.summarize_now()

    def on_end_of_response(self) -> None:
        self.summarize_now()

    def summarize_now(self) -> None:
        """Blocking round-trip: the next prompt needs the fresh summary."""
        window = " ".join(self.turns.window(self.max_total_tokens - SAFETY_MARGIN))
        if not window:
            self.summary = ""
            return
        self.summary = self.summarizer(window)
        logger.debug(
            "summary_updated",
            window_words=word_count(window),
            summary_words=word_count(self.summary),
        )


def build_memory_policy(kind: str, *, max_total_tokens: int, summarizer: Summarizer) -> MemoryPolicy:
    """Select the memory policy named in settings.

    Raises:
        ValueError: *kind* is not a known memory type.
    """
    if kind == MemoryType.SUMMARY.value:
        return SummaryPolicy(max_total_tokens, summarizer)
    if kind == MemoryType.BUFFER.value:
        return BufferPolicy()
    raise ValueError(f"Unknown memory type: {kind}")
