"""Connection identity resolution for event stream requests."""

from __future__ import annotations

import secrets

from werkzeug.wrappers import Request

from eventstream.consts import CONNECTION_ID_PARAM, LAST_EVENT_ID_HEADER

# 8 random bytes encode to an 11 character URL-safe id
CONNECTION_ID_BYTES = 8

_UNFRAMEABLE = ("\r", "\n", "\0")


def generate_connection_id() -> str:
    """Return a fresh random connection id."""

    return secrets.token_urlsafe(CONNECTION_ID_BYTES)


def _usable(value: str | None) -> str | None:
    if not value:
        return None
    if any(ch in value for ch in _UNFRAMEABLE):
        return None
    return value


def last_event_id(request: Request) -> str | None:
    """Return the client-echoed last event id, if it can be used as an id."""

    return _usable(request.headers.get(LAST_EVENT_ID_HEADER))


def resolve_connection_id(request: Request) -> str:
    """Derive the connection id for a request.

    The explicit ``id`` query parameter wins, then the ``Last-Event-ID``
    header a browser sends when resuming, then a generated id.
    """

    explicit = _usable(request.args.get(CONNECTION_ID_PARAM))
    if explicit is not None:
        return explicit
    resumed = last_event_id(request)
    if resumed is not None:
        return resumed
    return generate_connection_id()


def is_new_connection(request: Request) -> bool:
    """True when the client did not send a last event id."""

    return last_event_id(request) is None
