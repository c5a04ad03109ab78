"""Example event streams.

Each route answers an EventSource request with a small stream:

- ``/demo/string``: one text message
- ``/demo/json``: one structured message
- ``/demo/event``: one ``my-event`` event
- ``/demo/timer``: three messages one interval apart, then the stream closes
- ``/demo/custom-id``: sends the session id (use ``?id=...`` to choose it)

Requests that don't come from an EventSource get an empty 200 response.
"""

import logging
import threading
import time
from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, Response, current_app, request

from eventstream.config import Settings
from eventstream.exceptions import RouteNotAvailableException, StreamEndedError
from eventstream.services.container import ServiceContainer
from eventstream.services.session_service import SessionService
from eventstream.utils.sse import SSESession, StructuredPayload, TextPayload

logger = logging.getLogger(__name__)

demo_bp = Blueprint("demo", __name__, url_prefix="/demo")

TIMER_MESSAGE_COUNT = 3


@demo_bp.before_request
def check_demo_enabled() -> Any:
    """Reject requests when demo streams are disabled."""
    settings = current_app.container.config()
    if not settings.sse_demo_enabled:
        raise RouteNotAvailableException()
    return None


def _not_an_event_source() -> Response:
    return Response(status=200)


@demo_bp.route("/string", methods=["GET"])
@inject
def stream_string(
    session_service: SessionService = Provide[ServiceContainer.session_service],
) -> Response:
    if not session_service.is_event_source(request):
        return _not_an_event_source()
    session = session_service.open_session(request)
    if not session.closed:
        session.send(TextPayload("Hello, World!"))
    return session.response()


@demo_bp.route("/json", methods=["GET"])
@inject
def stream_json(
    session_service: SessionService = Provide[ServiceContainer.session_service],
) -> Response:
    if not session_service.is_event_source(request):
        return _not_an_event_source()
    session = session_service.open_session(request)
    if not session.closed:
        session.send(StructuredPayload({"foo": "hello", "bar": "world"}))
    return session.response()


@demo_bp.route("/event", methods=["GET"])
@inject
def stream_event(
    session_service: SessionService = Provide[ServiceContainer.session_service],
) -> Response:
    if not session_service.is_event_source(request):
        return _not_an_event_source()
    session = session_service.open_session(request)
    if not session.closed:
        session.emit("my-event", TextPayload("Hello, World!"))
    return session.response()


@demo_bp.route("/custom-id", methods=["GET"])
@inject
def stream_custom_id(
    session_service: SessionService = Provide[ServiceContainer.session_service],
) -> Response:
    if not session_service.is_event_source(request):
        return _not_an_event_source()
    session = session_service.open_session(request)
    if not session.closed:
        session.send(TextPayload(session.id))
    return session.response()


@demo_bp.route("/timer", methods=["GET"])
@inject
def stream_timer(
    session_service: SessionService = Provide[ServiceContainer.session_service],
    settings: Settings = Provide[ServiceContainer.config],
) -> Response:
    if not session_service.is_event_source(request):
        return _not_an_event_source()
    session = session_service.open_session(request)
    if not session.closed:
        # Head goes out before the worker can race response() for it
        session.write_head(200)
        worker = threading.Thread(
            target=_run_timer,
            args=(session, settings.sse_demo_interval_seconds),
            name=f"sse-timer-{session.id}",
            daemon=True,
        )
        worker.start()
    return session.response()


def _run_timer(session: SSESession, interval: float) -> None:
    try:
        for count in range(1, TIMER_MESSAGE_COUNT + 1):
            time.sleep(interval)
            session.send(TextPayload(f"This is message {count}."))
        session.close()
    except StreamEndedError:
        logger.info(
            "Timer stream ended by client before completion",
            extra={"connection_id": session.id},
        )
