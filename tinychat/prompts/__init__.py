"""Prompt builders."""

from tinychat.prompts.builders import (
    PhiPromptBuilder,
    PromptBuilder,
    TinyLlamaPromptBuilder,
    build_prompt_builder,
)

__all__ = ["PhiPromptBuilder", "PromptBuilder", "TinyLlamaPromptBuilder", "build_prompt_builder"]
