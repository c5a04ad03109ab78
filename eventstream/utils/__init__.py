"""Utility functions and helpers."""

import uuid

from flask import g, has_request_context, request


def get_current_correlation_id() -> str | None:
    """Get the current request's correlation ID."""
    if not has_request_context():
        return None
    return getattr(g, "correlation_id", None)


def init_request_id(app):  # type: ignore[no-untyped-def]
    """Register before_request handler to set correlation ID."""

    @app.before_request
    def set_request_id() -> None:
        g.correlation_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
