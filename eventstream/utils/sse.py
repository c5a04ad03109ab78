"""Server-Sent Events sessions and message framing.

A session owns one request/response pair. It writes the response head once,
frames ``send``/``emit`` payloads as SSE messages and consults the
closed-connection registry to decide whether a reconnecting client may resume.

Every message is written as::

    event: <name>        (emit only)
    id: <connection id>
    retry: <ms>          (only when retry is non-zero)
    data: <line>         (one per payload line)
    <blank line>
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from flask import Response, stream_with_context
from prometheus_client import Counter
from pydantic import BaseModel
from werkzeug.http import is_hop_by_hop_header
from werkzeug.wrappers import Request

from eventstream.consts import EVENT_STREAM_MIMETYPE
from eventstream.exceptions import InvalidFieldError, StreamEndedError
from eventstream.utils.identity import is_new_connection, resolve_connection_id
from eventstream.utils.stream_transport import StreamTransport

if TYPE_CHECKING:
    from eventstream.services.closed_registry import ClosedConnectionRegistry

SSE_MESSAGES_TOTAL = Counter(
    "sse_messages_total",
    "Total SSE messages written to streams",
    ["kind"],
)
SSE_SESSIONS_CLOSED_TOTAL = Counter(
    "sse_sessions_closed_total",
    "Total SSE sessions closed by the server",
    ["status"],
)

logger = logging.getLogger(__name__)

DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": EVENT_STREAM_MIMETYPE,
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


@dataclass(frozen=True)
class TextPayload:
    """Preformatted text; each line becomes its own ``data:`` field."""

    text: str


@dataclass(frozen=True)
class StructuredPayload:
    """A JSON-serializable value (or pydantic model) sent as one ``data:`` line."""

    value: Any


@dataclass(frozen=True)
class EmptyPayload:
    """No data; encodes as a single empty ``data:`` line."""


EMPTY = EmptyPayload()

Payload = Union[TextPayload, StructuredPayload, EmptyPayload]


def as_payload(value: Any) -> Payload:
    """Classify a raw value for call sites that don't know its type."""

    if isinstance(value, (TextPayload, StructuredPayload, EmptyPayload)):
        return value
    if isinstance(value, str):
        return TextPayload(value)
    return StructuredPayload(value)


def payload_lines(payload: Payload) -> list[str]:
    if isinstance(payload, EmptyPayload):
        return [""]
    if isinstance(payload, TextPayload):
        text = payload.text.replace("\r\n", "\n").replace("\r", "\n")
        return text.split("\n")
    value = payload.value
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    # NaN and infinities have no JSON form
    return [json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)]


def _single_line(field: str, value: str) -> str:
    if "\n" in value or "\r" in value:
        raise InvalidFieldError(field, value)
    return value


def encode_message(
    payload: Payload,
    *,
    connection_id: str,
    retry: int = 0,
    event: str | None = None,
) -> str:
    """Serialize one SSE message, blank-line terminator included."""

    lines: list[str] = []
    if event is not None:
        lines.append(f"event: {_single_line('event', event)}")
    lines.append(f"id: {connection_id}")
    if retry:
        lines.append(f"retry: {retry}")
    lines.extend(f"data: {line}" for line in payload_lines(payload))
    return "\n".join(lines) + "\n\n"


def is_event_source(request: Request) -> bool:
    """Check whether the request was made by an EventSource.

    Only an exact ``Accept: text/event-stream`` on a GET qualifies; some
    clients don't set the header, so a False result is not conclusive.
    """

    return request.method == "GET" and request.headers.get("Accept") == EVENT_STREAM_MIMETYPE


class SSESession:
    """One server-side event stream bound to a request.

    The id comes from the ``id`` query parameter, the ``Last-Event-ID`` header
    or a generated value. If the registry has the id marked closed, the
    session is closed immediately with status 204 so the browser doesn't
    retry.
    """

    def __init__(
        self,
        request: Request,
        registry: "ClosedConnectionRegistry",
        *,
        retry: int = 0,
        transport: StreamTransport | None = None,
    ):
        self.request = request
        self.registry = registry
        self.retry = retry
        self.transport = transport if transport is not None else StreamTransport()
        self.id = resolve_connection_id(request)
        self.is_new = is_new_connection(request)
        # Looked up once; later registry changes don't affect this session.
        self.closed = registry.is_marked_closed(self.id)
        self._close_called = False

        if self.closed:
            logger.info(
                "Rejecting reconnect for closed connection",
                extra={"connection_id": self.id},
            )
            self.close()

    @property
    def headers_sent(self) -> bool:
        return self.transport.headers_sent

    @property
    def ended(self) -> bool:
        return self.transport.ended

    def write_head(self, status: int = 200, headers: Mapping[str, str] | None = None) -> "SSESession":
        """Send the response head; ignored once a head has been sent."""
        if self.transport.headers_sent:
            logger.debug(
                "Ignoring write_head after head was sent",
                extra={"connection_id": self.id, "status": status},
            )
            return self
        merged = dict(DEFAULT_HEADERS)
        if headers:
            merged.update(headers)
        self.transport.write_head(status, merged)
        return self

    def send(self, data: Any = EMPTY) -> bool:
        """Send a message to the default ``message`` listener.

        Returns:
            False when the stream buffer is under backpressure
        """
        return self._write_message(as_payload(data), event=None)

    def emit(self, event: str, data: Any = EMPTY) -> bool:
        """Send a message dispatched to the listener for ``event``."""
        return self._write_message(as_payload(data), event=event)

    def close(self, callback: Callable[[], None] | None = None) -> None:
        """Close the stream and toggle the id's closed mark.

        A reconnect with this id is answered with 204 and clears the mark.
        Closing the same session again does nothing.
        """
        if self._close_called:
            logger.debug(
                "Ignoring repeated close on session",
                extra={"connection_id": self.id},
            )
            return
        self._close_called = True

        self.registry.toggle_closed(self.id)
        self._ensure_head(204)
        self.transport.end(callback)

        SSE_SESSIONS_CLOSED_TOTAL.labels(status=str(self.transport.status)).inc()
        logger.info(
            "Closed SSE session",
            extra={"connection_id": self.id, "status": self.transport.status},
        )

    def response(self) -> Response:
        """Build the streaming Flask response for this session.

        Hop-by-hop headers from the head are left to the WSGI server.
        """
        self._ensure_head()
        headers = {
            key: value
            for key, value in self.transport.headers.items()
            if not is_hop_by_hop_header(key)
        }
        response = Response(
            stream_with_context(self.transport.iter_body()),
            status=self.transport.status,
            headers=headers,
        )
        response.headers.setdefault("X-Accel-Buffering", "no")
        response.call_on_close(self.transport.detach)
        return response

    def _ensure_head(self, status: int = 200) -> None:
        if not self.transport.headers_sent:
            self.write_head(status)

    def _write_message(self, payload: Payload, *, event: str | None) -> bool:
        if self.transport.ended:
            raise StreamEndedError(self.id)
        self._ensure_head()
        message = encode_message(
            payload,
            connection_id=self.id,
            retry=self.retry,
            event=event,
        )
        SSE_MESSAGES_TOTAL.labels(kind="message" if event is None else "event").inc()
        return self.transport.write(message)
