"""Session controller: lifecycle, token budgeting and prompt dispatch."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import structlog

from tinychat.chat.indicator import ActivityIndicator
from tinychat.chat.intake import ResponseIntake
from tinychat.config.loader import load_config, save_config
from tinychat.config.schema import Config, MemoryType, ModelType
from tinychat.logging import get_logger
from tinychat.memory.policy import SAFETY_MARGIN, MemoryPolicy, build_memory_policy
from tinychat.memory.turns import AI_PLACEHOLDER, USER_TAG
from tinychat.prompts.builders import PromptBuilder, build_prompt_builder
from tinychat.providers.client import ModelServiceClient
from tinychat.session.store import HistoryStore
from tinychat.utils.helpers import new_session_id, session_id_from_identifier, word_count

logger = get_logger(__name__)

USER_LABEL = "You: "


class SessionController:
    """
    Drives one chat session at a time.

    Holds the settings, the active prompt builder and memory policy, and
    mediates between user input, the model service and the history store.
    State is either no session (``session_id is None``) or one active session.
    """

    def __init__(
        self,
        config: Config,
        *,
        client: ModelServiceClient,
        store: HistoryStore,
        show: Callable[[str], None],
        config_path: Path | None = None,
        indicator: ActivityIndicator | None = None,
    ):
        self.config = config
        self.config_path = config_path
        self.client = client
        self.store = store
        self.session_id: str | None = None
        self.prompt_builder: PromptBuilder = build_prompt_builder(config)
        self.memory: MemoryPolicy = self._build_memory()
        self.intake = ResponseIntake(
            show,
            indicator or ActivityIndicator(show),
            record=self._record,
            on_end=self._end_of_response,
        )

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        show: Callable[[str], None],
        config_path: Path | None = None,
    ) -> "SessionController":
        """Build the controller with the HTTP client and file store from *config*."""
        client = ModelServiceClient(config)
        try:
            return cls(
                config,
                client=client,
                store=HistoryStore(config.history_dir),
                show=show,
                config_path=config_path,
            )
        except Exception:
            client.close()
            raise

    def _build_memory(self) -> MemoryPolicy:
        return build_memory_policy(
            self.config.memory,
            max_total_tokens=self.config.max_total_tokens,
            summarizer=self.summarize,
        )

    @property
    def active(self) -> bool:
        return self.session_id is not None

    @property
    def model_name(self) -> str:
        return self.config.model

    @property
    def memory_kind(self) -> str:
        return self.config.memory

    def initialize(self) -> bool:
        ok = self.client.initialize()
        if not ok:
            self.intake.forward("Failed to initialize model service\n")
        return ok

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> None:
        if self.active:
            self.end()
        self.session_id = new_session_id()
        self.memory.reset()
        structlog.contextvars.bind_contextvars(session_id=self.session_id)
        logger.info("session_started", model=self.model_name, memory=self.memory_kind)

    def end(self) -> None:
        if not self.active:
            return
        turns = self.memory.history()
        context = self.memory.context(self.config.max_total_tokens - SAFETY_MARGIN)
        self.store.save(self.session_id, turns, context)
        logger.info("session_ended", turn_count=len(turns))
        self.session_id = None
        structlog.contextvars.unbind_contextvars("session_id")

    def resume_saved(self, identifier: str, turns: list[str], context: list[str]) -> None:
        """Continue a saved session and replay its turns on the display."""
        if self.active:
            self.end()
        session_id = session_id_from_identifier(identifier)
        if session_id is None:
            session_id = new_session_id()
            logger.warning("session_id_not_found", identifier=identifier, fallback=session_id)
        self.session_id = session_id
        structlog.contextvars.bind_contextvars(session_id=session_id)

        self.memory.set_history(turns)
        self.memory.set_context(context)

        for turn in turns:
            if turn.startswith(USER_TAG):
                turn = USER_LABEL + turn[len(USER_TAG):]
            self.intake.forward(turn)
            self.intake.forward("\n")
        logger.info("session_resumed", identifier=identifier, turn_count=len(turns))

    def resume(self, identifier: str) -> None:
        turns, context = self.store.load(identifier)
        self.resume_saved(identifier, turns, context)

    def list_sessions(self) -> list[str]:
        return self.store.list_sessions()

    # -- conversation ------------------------------------------------------

    def context_budget(self, user_input: str) -> int:
        return max(0, self.config.max_total_tokens - word_count(user_input) - SAFETY_MARGIN)

    def process_input(self, user_input: str) -> bool:
        """Send one user message and block until the whole reply was received.

        Failures are shown as a single ``Error: ...`` line; the session stays usable.
        Returns True when the reply streamed without transport errors.
        """
        try:
            prompt = self.prompt_builder.build_prompt(
                user_input,
                self.memory.context_string(self.context_budget(user_input)),
            )
            self.memory.append(USER_TAG + user_input)
            self.intake.accept(AI_PLACEHOLDER)
            self.intake.begin()
            return self.client.stream(prompt, self.intake.accept)
        except Exception as e:
            logger.exception("process_input_failed")
            self.intake.abort()
            self.intake.forward(f"Error: {e}\n")
            return False

    def summarize(self, raw_text: str) -> str:
        prompt = self.prompt_builder.build_summarization_prompt(raw_text)
        return self.client.request(prompt)

    def _record(self, fragment: str) -> None:
        self.memory.append(fragment)

    def _end_of_response(self) -> None:
        self.memory.on_end_of_response()

    # -- settings ----------------------------------------------------------

    def _apply_settings(self, **changes: str) -> None:
        # Only the changed keys reach the settings file; per-run overrides stay in memory.
        save_config(load_config(self.config_path).model_copy(update=changes), self.config_path)
        updated = self.config.model_copy(update=changes)
        self.config = updated
        self.client.config = updated

    def update_model(self, model: ModelType | str) -> None:
        """Switch model; always ends the current session and starts a fresh one."""
        model = ModelType(model)
        self._apply_settings(model=model.value)
        self.end()
        self.prompt_builder = build_prompt_builder(self.config)
        self.client.initialize()
        self.start()

    def update_memory(self, memory: MemoryType | str) -> None:
        """Switch memory policy; always ends the current session and starts a fresh one."""
        memory = MemoryType(memory)
        self._apply_settings(memory=memory.value)
        self.end()
        self.memory = self._build_memory()
        self.start()
