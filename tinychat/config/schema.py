"""Configuration schema using Pydantic."""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_ENV_REF_RE = re.compile(r"^\$\{?([A-Za-z_][A-Za-z0-9_]*)\}?$")


def _resolve_env(value: str) -> str:
    """Resolve a ``$VAR`` or ``${VAR}`` reference; unset variables keep the original text."""
    if not value:
        return value
    m = _ENV_REF_RE.match(value.strip())
    if not m:
        return value
    return os.environ.get(m.group(1), value)


class ModelType(str, Enum):
    """Models the client knows how to format prompts for."""

    PHI2 = "Phi2"
    TINYLLAMA = "TinyLlama"


class MemoryType(str, Enum):
    """Conversation memory policies."""

    BUFFER = "buffer"
    SUMMARY = "summary"


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Config(Base):
    """Root configuration for tinychat."""

    base_url: str = "http://server:9000"
    model: str = ModelType.PHI2.value
    memory: str = MemoryType.BUFFER.value
    stop_at: str = "User:"
    max_total_tokens: int = Field(default=300, gt=0)
    quantization: str = "q4"
    history_path: str = "~/.tinychat/history"
    system_prompt_phi: str = (
        "A chat between a curious user and an artificial intelligence assistant. "
        "The assistant gives helpful answers to the user's questions."
    )
    system_prompt_tiny_llama: str = "You are a kind AI chatbot."
    request_timeout: float = Field(default=120.0, gt=0)

    @field_validator("model", "memory", mode="before")
    @classmethod
    def _enum_to_value(cls, v: object) -> object:
        return v.value if isinstance(v, Enum) else v

    @property
    def resolved_base_url(self) -> str:
        """Base URL with env references resolved and trailing slash stripped."""
        return _resolve_env(self.base_url).rstrip("/")

    @property
    def history_dir(self) -> Path:
        return Path(self.history_path).expanduser()
