"""Closed-connection administration endpoints."""

import logging
from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, jsonify
from spectree import Response as SpectreeResponse

from eventstream.exceptions import RecordNotFoundException
from eventstream.schemas.common import ErrorResponseSchema
from eventstream.schemas.connections import ConnectionStateResponse
from eventstream.services.closed_registry import ClosedConnectionRegistry
from eventstream.services.container import ServiceContainer
from eventstream.utils.spectree_config import api

logger = logging.getLogger(__name__)

connections_bp = Blueprint("connections", __name__, url_prefix="/connections")


@connections_bp.route("/<connection_id>", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=ConnectionStateResponse))
@inject
def get_connection_state(
    connection_id: str,
    registry: ClosedConnectionRegistry = Provide[ServiceContainer.closed_connection_registry],
) -> Any:
    """Report whether the next stream opened with this id will be rejected."""
    state = ConnectionStateResponse(id=connection_id, closed=registry.is_marked_closed(connection_id))
    return jsonify(state.model_dump()), 200


@connections_bp.route("/<connection_id>/closed", methods=["DELETE"])
@api.validate(resp=SpectreeResponse(HTTP_200=ConnectionStateResponse, HTTP_404=ErrorResponseSchema))
@inject
def allow_resume(
    connection_id: str,
    registry: ClosedConnectionRegistry = Provide[ServiceContainer.closed_connection_registry],
) -> Any:
    """Clear the closed mark so the client may reconnect with this id."""
    if not registry.allow_resume(connection_id):
        raise RecordNotFoundException("Closed connection", connection_id)

    logger.info("Closed mark cleared via API", extra={"connection_id": connection_id})
    state = ConnectionStateResponse(id=connection_id, closed=False)
    return jsonify(state.model_dump()), 200
