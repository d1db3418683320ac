"""Response intake: routes streamed fragments to the turn log and the display."""

from __future__ import annotations

from enum import Enum
from typing import Callable

from tinychat.chat.indicator import ActivityIndicator
from tinychat.logging import get_logger
from tinychat.providers.client import END_OF_STREAM

logger = get_logger(__name__)


class IntakeState(str, Enum):
    IDLE = "idle"
    WAITING = "waiting"
    STREAMING = "streaming"


class ResponseIntake:
    """
    Single entry point for everything shown while a session is active.

    Every display goes through ``forward``, which stops the activity indicator
    before touching the sink, so spinner frames never land inside streamed
    text. Fragments are recorded through *record*; the end-of-stream sentinel
    triggers *on_end* after the closing newline is shown.
    """

    def __init__(
        self,
        show: Callable[[str], None],
        indicator: ActivityIndicator,
        *,
        record: Callable[[str], None],
        on_end: Callable[[], None],
    ) -> None:
        self._show = show
        self.indicator = indicator
        self._record = record
        self._on_end = on_end
        self.state = IntakeState.IDLE

    def begin(self) -> None:
        self.state = IntakeState.WAITING
        self.indicator.start()

    def abort(self) -> None:
        self.state = IntakeState.IDLE
        self.indicator.stop()

    def forward(self, text: str) -> None:
        self.indicator.stop()
        self._show(text)

    def accept(self, fragment: str) -> None:
        if fragment == END_OF_STREAM:
            self.state = IntakeState.IDLE
            self.forward("\n")
            self._on_end()
            return

        if self.state is IntakeState.WAITING:
            self.state = IntakeState.STREAMING
            logger.debug("first_fragment_received")
        if fragment:
            self._record(fragment)
        self.forward(fragment)
