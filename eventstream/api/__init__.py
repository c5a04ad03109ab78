"""API blueprint factory."""

from __future__ import annotations

from flask import Blueprint

from eventstream.api.connections import connections_bp


def create_api_blueprint() -> Blueprint:
    """Build the /api blueprint with the administration routes nested under it."""
    blueprint = Blueprint("api", __name__, url_prefix="/api")
    blueprint.register_blueprint(connections_bp)
    return blueprint
