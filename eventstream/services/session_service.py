"""Creates SSE sessions wired to the shared closed-connection registry."""

from __future__ import annotations

import logging

from prometheus_client import Counter
from werkzeug.wrappers import Request

from eventstream.services.closed_registry import ClosedConnectionRegistry
from eventstream.utils.sse import SSESession, is_event_source
from eventstream.utils.stream_transport import StreamTransport

SSE_SESSIONS_TOTAL = Counter(
    "sse_sessions_total",
    "Total SSE sessions opened, by outcome",
    ["outcome"],
)

logger = logging.getLogger(__name__)


class SessionService:
    """Factory for sessions sharing one registry and the configured stream settings."""

    def __init__(
        self,
        registry: ClosedConnectionRegistry,
        retry_milliseconds: int = 0,
        high_water_mark: int = 64,
        heartbeat_seconds: float | None = 15.0,
    ):
        self.registry = registry
        self.retry_milliseconds = retry_milliseconds
        self.high_water_mark = high_water_mark
        self.heartbeat_seconds = heartbeat_seconds

    def is_event_source(self, request: Request) -> bool:
        return is_event_source(request)

    def open_session(self, request: Request) -> SSESession:
        """Create a session for the request.

        The returned session may already be closed (status 204) when the
        client tried to resume an id that was closed by the server.
        """
        session = SSESession(
            request,
            self.registry,
            retry=self.retry_milliseconds,
            transport=StreamTransport(
                high_water_mark=self.high_water_mark,
                heartbeat_interval=self.heartbeat_seconds,
            ),
        )

        outcome = "rejected" if session.closed else "opened"
        SSE_SESSIONS_TOTAL.labels(outcome=outcome).inc()
        logger.debug(
            "Opened SSE session",
            extra={
                "connection_id": session.id,
                "is_new": session.is_new,
                "outcome": outcome,
            },
        )
        return session
