"""Thread-safe registry of connection ids whose streams were closed.

A marked id makes the next session constructed with it terminate at once with
HTTP 204, which tells an EventSource client to stop reconnecting. Closing
toggles membership: the first close marks the id, the close performed by the
rejected follow-up session clears it again so later reconnects succeed.

Entries are never pruned on their own. Ids that are closed but never resumed
stay in memory for the lifetime of the process; the size gauge below exists
so that growth is visible.
"""

from __future__ import annotations

import logging
import threading

from prometheus_client import Gauge

SSE_CLOSED_REGISTRY_SIZE = Gauge(
    "sse_closed_registry_size",
    "Number of connection ids currently marked closed",
)

logger = logging.getLogger(__name__)


class ClosedConnectionRegistry:
    """Set of connection ids flagged closed, shared by all sessions."""

    def __init__(self) -> None:
        self._closed: set[str] = set()
        self._lock = threading.Lock()

    def is_marked_closed(self, connection_id: str) -> bool:
        with self._lock:
            return connection_id in self._closed

    def toggle_closed(self, connection_id: str) -> bool:
        """Mark the id if absent, unmark it if present.

        Returns:
            True if the id is marked after the call, False otherwise
        """
        with self._lock:
            if connection_id in self._closed:
                self._closed.remove(connection_id)
                marked = False
            else:
                self._closed.add(connection_id)
                marked = True
            size = len(self._closed)

        SSE_CLOSED_REGISTRY_SIZE.set(size)
        if marked:
            logger.info(
                "Marked connection closed",
                extra={"connection_id": connection_id, "registry_size": size},
            )
        else:
            logger.debug(
                "Cleared closed mark for connection",
                extra={"connection_id": connection_id, "registry_size": size},
            )
        return marked

    def allow_resume(self, connection_id: str) -> bool:
        """Remove the closed mark without toggling.

        Returns:
            True if the id was marked, False if there was nothing to remove
        """
        with self._lock:
            if connection_id not in self._closed:
                return False
            self._closed.remove(connection_id)
            size = len(self._closed)

        SSE_CLOSED_REGISTRY_SIZE.set(size)
        logger.info(
            "Allowed connection to resume",
            extra={"connection_id": connection_id, "registry_size": size},
        )
        return True

    def __contains__(self, connection_id: object) -> bool:
        with self._lock:
            return connection_id in self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._closed)
