"""
Spectree configuration with Pydantic v2 compatibility.
"""
from typing import Any

from flask import Flask, redirect
from spectree import SpecTree

from eventstream.consts import API_DESCRIPTION, API_TITLE

# Shared Spectree instance imported by API modules for their validate()
# decorators. configure_spectree() registers it on each app.
api = SpecTree(
    backend_name="flask",
    title=API_TITLE,
    version="1.0.0",
    description=API_DESCRIPTION,
    path="api/docs",  # OpenAPI docs available at /api/docs
    validation_error_status=400,
)


def configure_spectree(app: Flask) -> SpecTree:
    """
    Register the shared Spectree instance and its documentation routes.

    Returns:
        SpecTree: Configured Spectree instance
    """
    api.register(app)

    @app.route("/api/docs")
    @app.route("/api/docs/")
    def docs_redirect() -> Any:
        return redirect("/api/docs/swagger/", code=302)

    return api
