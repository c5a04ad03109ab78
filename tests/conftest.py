from __future__ import annotations

from typing import Any, Callable, Iterable

import pytest
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request

from eventstream import create_app
from eventstream.config import Settings
from eventstream.services.closed_registry import ClosedConnectionRegistry

EVENT_STREAM_HEADERS = {"Accept": "text/event-stream"}


def _build_test_settings() -> Settings:
    """Construct base Settings object for tests."""
    return Settings(
        secret_key="test-secret-key",
        flask_env="testing",
        cors_origins=[],
        sse_retry_milliseconds=0,
        sse_high_water_mark=64,
        sse_heartbeat_seconds=15.0,
        sse_demo_enabled=True,
        sse_demo_interval_seconds=0.01,
    )


def parse_block(block: str) -> dict[str, Any]:
    """Parse one SSE message block the way an EventSource does."""
    event: dict[str, Any] = {"event": "message", "id": None, "retry": None, "data": []}
    for line in block.split("\n"):
        field, _, value = line.partition(": ")
        if field == "data":
            event["data"].append(value)
        elif field in ("event", "id", "retry"):
            event[field] = value
    event["data"] = "\n".join(event["data"])
    return event


def is_comment_block(block: str) -> bool:
    return all(line.startswith(":") for line in block.split("\n"))


def parse_events(text: str) -> list[dict[str, Any]]:
    return [
        parse_block(block)
        for block in text.split("\n\n")
        if block and not is_comment_block(block)
    ]


def read_events(chunks: Iterable[bytes | str], count: int | None = None) -> list[dict[str, Any]]:
    """Collect parsed events from a streaming body, stopping after ``count``."""
    buffer = ""
    events: list[dict[str, Any]] = []
    for chunk in chunks:
        buffer += chunk.decode("utf-8") if isinstance(chunk, bytes) else chunk
        while "\n\n" in buffer:
            block, buffer = buffer.split("\n\n", 1)
            if is_comment_block(block):
                continue
            events.append(parse_block(block))
        if count is not None and len(events) >= count:
            break
    return events


@pytest.fixture
def test_settings() -> Settings:
    return _build_test_settings()


@pytest.fixture
def app(test_settings: Settings):
    flask_app = create_app(test_settings)
    flask_app.testing = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def container(app):
    return app.container


@pytest.fixture
def registry() -> ClosedConnectionRegistry:
    return ClosedConnectionRegistry()


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Build a Werkzeug request for session and identity tests."""

    def _make_request(
        path: str = "/stream",
        *,
        method: str = "GET",
        query: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Request:
        builder = EnvironBuilder(
            path=path,
            method=method,
            query_string=query,
            headers=headers if headers is not None else EVENT_STREAM_HEADERS,
        )
        try:
            return builder.get_request()
        finally:
            builder.close()

    return _make_request


@pytest.fixture
def sse_events() -> Callable[[str], list[dict[str, Any]]]:
    """Parser for a complete SSE body."""
    return parse_events


@pytest.fixture
def stream_reader() -> Callable[..., list[dict[str, Any]]]:
    """Reader that pulls parsed events off a streaming body."""
    return read_events
