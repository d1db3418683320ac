"""Prompt templates for the supported small models."""

from __future__ import annotations

from tinychat.config.schema import Config, ModelType


class PromptBuilder:
    """Minimal fallback template; model-specific builders override both methods."""

    def __init__(self, system_prompt: str = "") -> None:
        self.system_prompt = system_prompt

    def build_prompt(self, user_input: str, context: str) -> str:
        return f"User: {user_input}\nAI:"

    def build_summarization_prompt(self, raw_text: str) -> str:
        return f"Summarize: {raw_text}\nAI:"


class PhiPromptBuilder(PromptBuilder):
    """Plain ``System:/User:/AI:`` layout used by Phi-2."""

    def build_prompt(self, user_input: str, context: str) -> str:
        return f"System:{self.system_prompt}\n{context}\nUser:{user_input}\nAI:"

    def build_summarization_prompt(self, raw_text: str) -> str:
        return f"Instruct: Summarize the chat\n{raw_text}\nOutput:"


class TinyLlamaPromptBuilder(PromptBuilder):
    """Zephyr-style ``<|system|>/<|user|>/<|assistant|>`` chat tags used by TinyLlama."""

    def build_prompt(self, user_input: str, context: str) -> str:
        return f"<|system|>\n{self.system_prompt}\n{context}\n<|user|>\n{user_input}\n<|assistant|>"

    def build_summarization_prompt(self, raw_text: str) -> str:
        return (
            "<|system|>\nYou are chat summarization bot.\n"
            f"<|user|>\nSummarize: {raw_text}\n<|assistant|>"
        )


def build_prompt_builder(config: Config) -> PromptBuilder:
    """Pick the builder matching ``config.model`` and bind its system prompt.

    Raises:
        ValueError: the model name matches no known template.
    """
    if ModelType.PHI2.value in config.model:
        return PhiPromptBuilder(config.system_prompt_phi)
    if ModelType.TINYLLAMA.value in config.model:
        return TinyLlamaPromptBuilder(config.system_prompt_tiny_llama)
    raise ValueError(f"Unknown model or prompt type: {config.model}")
