"""Entry point for running the eventstream backend."""

from __future__ import annotations

import logging
import os

from eventstream import create_app
from eventstream.consts import DEFAULT_BACKEND_PORT

_DEV = "development"
_PROD = "production"
_VALID_ENVS = {_DEV, _PROD, "testing"}


def _resolve_env() -> str:
    value = os.getenv("FLASK_ENV", _DEV).strip().lower()
    if value not in _VALID_ENVS:
        raise SystemExit(
            "FLASK_ENV must be one of {development, production, testing}; "
            f"got '{value or '<empty>'}'"
        )
    return value


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    app = create_app()

    host = os.getenv("EVENTSTREAM_HOST", "0.0.0.0")
    port_value = os.getenv("EVENTSTREAM_PORT", str(DEFAULT_BACKEND_PORT))
    try:
        port = int(port_value)
    except ValueError as exc:  # pragma: no cover - defensive parsing guard
        raise SystemExit(f"Invalid port number '{port_value}'") from exc

    env = _resolve_env()

    if env == _PROD:
        from waitress import serve

        # Each open stream holds a worker thread for its lifetime
        serve(app, host=host, port=port, threads=20)
    else:
        app.run(host=host, port=port, debug=True, threaded=True)


if __name__ == "__main__":
    main()
