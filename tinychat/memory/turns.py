"""Turn log: the ordered, speaker-tagged history of one chat session."""

from __future__ import annotations

from typing import Iterable

from tinychat.utils.helpers import word_count

USER_TAG = "User: "
AI_TAG = "AI: "
# Marker shown (and logged) right before a reply starts streaming.
AI_PLACEHOLDER = AI_TAG


def fit_recent(turns: Iterable[str], max_tokens: int) -> list[str]:
    """Greedy most-recent-fit window over *turns*.

    Walks from the newest turn backwards, keeping whole turns while the running
    word count stays within *max_tokens*. Stops at the first turn that does not
    fit; turns are never split. The result is in chronological order.
    """
    kept_reversed: list[str] = []
    total = 0
    for turn in reversed(list(turns)):
        tokens = word_count(turn)
        if total + tokens > max_tokens:
            break
        kept_reversed.append(turn)
        total += tokens
    return list(reversed(kept_reversed))


class TurnLog:
    """Append-only list of turns with merge-on-continuation for streamed replies."""

    def __init__(self, turns: Iterable[str] | None = None) -> None:
        self._turns: list[str] = list(turns or [])

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self):
        return iter(list(self._turns))

    @property
    def last(self) -> str | None:
        return self._turns[-1] if self._turns else None

    def append(self, turn: str) -> None:
        """Append *turn*, merging streamed continuations into the in-progress AI turn.

        A fragment is concatenated onto the last turn when that turn is exactly
        the empty AI placeholder, or when it is an AI turn and the fragment is
        not a new user turn. The placeholder branch merges whatever arrives
        next, a user turn included.
        """
        last = self.last
        if last is not None and (
            last == AI_PLACEHOLDER
            or (last.startswith(AI_TAG) and not turn.startswith(USER_TAG))
        ):
            self._turns[-1] = f"{last} {turn}"
        else:
            self._turns.append(turn)

    def reset(self) -> None:
        self._turns.clear()

    def snapshot(self) -> list[str]:
        return list(self._turns)

    def restore(self, turns: Iterable[str]) -> None:
        """Replace the whole log; loaded history is never merged with the current one."""
        self._turns = list(turns)

    def window(self, max_tokens: int) -> list[str]:
        return fit_recent(self._turns, max_tokens)
