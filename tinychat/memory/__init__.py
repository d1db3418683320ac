"""Conversation memory: turn log and memory policies."""

from tinychat.memory.policy import (
    SAFETY_MARGIN,
    BufferPolicy,
    MemoryPolicy,
    SummaryPolicy,
    build_memory_policy,
)
from tinychat.memory.turns import AI_PLACEHOLDER, AI_TAG, USER_TAG, TurnLog, fit_recent

__all__ = [
    "AI_PLACEHOLDER",
    "AI_TAG",
    "SAFETY_MARGIN",
    "USER_TAG",
    "BufferPolicy",
    "MemoryPolicy",
    "SummaryPolicy",
    "TurnLog",
    "build_memory_policy",
    "fit_recent",
]
