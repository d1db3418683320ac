"""Spinner shown while waiting for the first fragment of a reply."""

from __future__ import annotations

import threading
from typing import Callable


class ActivityIndicator:
    """
    Cancellable periodic task redrawing a rotating glyph on a worker thread.

    ``stop()`` sets the stop flag and joins the thread, so once it returns the
    indicator has written its last frame. Both ``start()`` and ``stop()`` are
    idempotent.
    """

    FRAMES = ("|", "/", "-", "\\")

    def __init__(
        self,
        write: Callable[[str], None],
        *,
        prefix: str = "AI: ",
        interval: float = 0.1,
    ) -> None:
        self._write = write
        self.prefix = prefix
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._guard = threading.Lock()

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        with self._guard:
            if self._thread is not None:
                return
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, name="tinychat-indicator", daemon=True)
            self._thread.start()

    def stop(self) -> None:
        with self._guard:
            thread, self._thread = self._thread, None
            self._stop.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _run(self) -> None:
        i = 0
        while not self._stop.is_set():
            self._write(f"\r{self.prefix}{self.FRAMES[i % len(self.FRAMES)]}")
            i += 1
            if self._stop.wait(self.interval):
                break
        # Blank the glyph and leave the cursor right after the prefix.
        self._write(f"\r{self.prefix} \r{self.prefix}")
