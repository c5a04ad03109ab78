"""Response side of an event stream, bridging writers to a WSGI body.

Sessions write from whichever thread drives them; the WSGI server pulls the
chunks through ``iter_body()`` on its own worker thread. The queue between
them is unbounded, so writes never block. ``write()`` reports backpressure
once more than ``high_water_mark`` chunks are waiting.

An idle body yields an SSE comment every ``heartbeat_interval`` seconds. Under
WSGI a dropped client is only noticed when a chunk is written to its socket,
so without heartbeats an idle stream would hold its worker thread forever.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Generator, Mapping

from eventstream.exceptions import HeadersAlreadySentError, StreamEndedError

DEFAULT_HIGH_WATER_MARK = 64
DEFAULT_HEARTBEAT_SECONDS = 15.0
HEARTBEAT_COMMENT = ": keep-alive\n\n"

logger = logging.getLogger(__name__)

_END = object()


class StreamTransport:
    """Buffered response stream with a one-shot head and an end marker."""

    def __init__(
        self,
        high_water_mark: int = DEFAULT_HIGH_WATER_MARK,
        heartbeat_interval: float | None = DEFAULT_HEARTBEAT_SECONDS,
    ):
        self.high_water_mark = high_water_mark
        self.heartbeat_interval = heartbeat_interval
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._lock = threading.Lock()
        self._status: int | None = None
        self._headers: dict[str, str] = {}
        self._ended = False
        self._finished = False
        self._on_finish: list[Callable[[], None]] = []

    @property
    def headers_sent(self) -> bool:
        return self._status is not None

    @property
    def status(self) -> int | None:
        return self._status

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def buffered(self) -> int:
        """Number of chunks written but not yet pulled by the consumer."""
        return self._queue.qsize()

    def write_head(self, status: int, headers: Mapping[str, str]) -> None:
        with self._lock:
            if self._status is not None:
                raise HeadersAlreadySentError(self._status)
            if self._ended:
                raise StreamEndedError()
            self._status = status
            self._headers = dict(headers)

    def write(self, chunk: str) -> bool:
        """Queue a chunk for the consumer.

        Returns:
            False when the buffer has reached the high-water mark, True otherwise
        """
        with self._lock:
            if self._ended:
                raise StreamEndedError()
            self._queue.put(chunk)
            return self._queue.qsize() < self.high_water_mark

    def end(self, callback: Callable[[], None] | None = None) -> None:
        """End the stream; ``callback`` runs once the consumer has drained it."""
        run_now = False
        with self._lock:
            if self._ended and not self._finished:
                raise StreamEndedError()
            self._ended = True
            if callback is not None:
                if self._finished:
                    run_now = True
                else:
                    self._on_finish.append(callback)
            if not self._finished:
                self._queue.put(_END)

        if run_now:
            self._run_callback(callback)  # type: ignore[arg-type]

    def detach(self) -> None:
        """Mark the consumer as gone and fire pending end callbacks.

        Called when the body has been drained or the WSGI server closed the
        response (client disconnect). Idempotent.
        """
        with self._lock:
            if self._finished:
                return
            self._finished = True
            self._ended = True
            callbacks = list(self._on_finish)
            self._on_finish.clear()

        for callback in callbacks:
            self._run_callback(callback)

    def iter_body(self) -> Generator[str, None, None]:
        """Yield chunks as they are written until the stream ends.

        While no chunk arrives, a ``: keep-alive`` comment is yielded once per
        heartbeat interval. EventSource clients ignore comment lines.
        """
        heartbeat = self.heartbeat_interval
        timeout = min(1.0, heartbeat) if heartbeat is not None else 1.0
        last_sent = _now()
        try:
            while not self._finished:
                try:
                    chunk = self._queue.get(timeout=timeout)
                except queue.Empty:
                    if heartbeat is None:
                        continue
                    now = _now()
                    if now - last_sent >= heartbeat:
                        last_sent = now
                        yield HEARTBEAT_COMMENT
                    continue
                if chunk is _END:
                    return
                yield chunk  # type: ignore[misc]
                last_sent = _now()
        finally:
            self.detach()

    @staticmethod
    def _run_callback(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception as e:
            logger.warning(
                "Stream end callback raised exception",
                exc_info=True,
                extra={
                    "callback": getattr(callback, "__name__", repr(callback)),
                    "error": str(e),
                },
            )


def _now() -> float:
    return time.perf_counter()
