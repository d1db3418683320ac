"""HTTP client for the local model server (``/initialize/`` and ``/generate/``)."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

import httpx

from tinychat.config.schema import Config
from tinychat.logging import get_logger

logger = get_logger(__name__)

# Delivered exactly once after the last streamed fragment, also when the transport fails.
END_OF_STREAM = "$END$"

FragmentConsumer = Callable[[str], None]


class ModelServiceClient:
    """
    Talks to the model server over HTTP.

    Streaming replies are read on a dedicated I/O worker thread that forwards
    each line to the consumer as it arrives; the calling thread blocks until
    the end-of-stream sentinel has been delivered. Transport failures are
    logged and reported through the return value, never raised.
    """

    def __init__(self, config: Config, transport: httpx.BaseTransport | None = None):
        self.config = config
        self._http = httpx.Client(
            base_url=config.resolved_base_url,
            timeout=config.request_timeout,
            transport=transport,
        )
        self._io = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tinychat-io")
        self._cancelled = threading.Event()

    def close(self) -> None:
        self._io.shutdown(wait=True)
        self._http.close()

    def __enter__(self) -> "ModelServiceClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def initialize(self) -> bool:
        """Ask the server to load the configured model. Returns True on HTTP 200."""
        payload = {
            "model": self.config.model,
            "max_total_tokens": self.config.max_total_tokens,
            "stop_at": self.config.stop_at,
            "quantization": self.config.quantization,
        }
        logger.info("model_initialize_request", **payload)
        try:
            response = self._http.post("/initialize/", json=payload)
        except httpx.HTTPError as e:
            logger.warning("model_initialize_failed", error=str(e))
            return False
        if response.status_code != httpx.codes.OK:
            logger.warning("model_initialize_failed", status_code=response.status_code)
            return False
        logger.info("model_initialized", status_code=response.status_code, body=response.text[:200])
        return True

    def stream(self, prompt: str, on_fragment: FragmentConsumer) -> bool:
        """Stream a reply for *prompt* into *on_fragment*, then deliver ``END_OF_STREAM``.

        Returns False when the transport failed. Exceptions raised by
        *on_fragment* propagate to the caller after the sentinel was delivered.
        Ctrl-C while waiting drops the rest of the reply and is re-raised the same way.
        """
        self._cancelled.clear()
        future = self._io.submit(self._stream_worker, prompt, on_fragment)
        try:
            return future.result()
        except KeyboardInterrupt:
            # Worker drops the rest of the reply at the next line and still sends the sentinel.
            self._cancelled.set()
            logger.info("model_stream_cancelled")
            future.result()
            raise

    def _stream_worker(self, prompt: str, on_fragment: FragmentConsumer) -> bool:
        started = time.perf_counter()
        fragments = 0
        ok = True
        try:
            with self._http.stream("POST", "/generate/", json={"prompt": prompt}) as response:
                response.raise_for_status()
                for line in response.iter_lines():
                    if self._cancelled.is_set():
                        break
                    fragments += 1
                    on_fragment(line)
        except httpx.HTTPError as e:
            ok = False
            logger.warning("model_stream_failed", error=str(e), fragments=fragments)
        finally:
            on_fragment(END_OF_STREAM)
        logger.debug(
            "model_stream_done",
            ok=ok,
            fragments=fragments,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return ok

    def request(self, prompt: str) -> str:
        """Synchronous round-trip returning the whole reply body, or "" on failure."""
        try:
            response = self._http.post("/generate/", json={"prompt": prompt})
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("model_request_failed", error=str(e))
            return ""
        return response.text
