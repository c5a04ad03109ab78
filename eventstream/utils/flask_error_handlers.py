"""Flask application error handlers.

Provides modular registration of Flask-native error handlers that convert
exceptions into rich JSON error responses:

- register_core_error_handlers: Pydantic ValidationError, BadRequest, HTTP 404/405/500
- register_business_error_handlers: BusinessLogicException subclasses and stream errors
- register_app_error_handlers: Convenience wrapper that calls both of the above
"""

import logging
from typing import Any

from flask import Flask, jsonify
from flask.wrappers import Response
from pydantic import ValidationError
from werkzeug.exceptions import BadRequest

from eventstream.exceptions import (
    BusinessLogicException,
    InvalidFieldError,
    RecordNotFoundException,
    RouteNotAvailableException,
    StreamError,
)
from eventstream.utils import get_current_correlation_id

logger = logging.getLogger(__name__)


def build_error_response(
    error: str, details: dict[str, Any], code: str | None = None, status_code: int = 400
) -> tuple[Response, int]:
    """Build error response with correlation ID and optional error code."""
    response_data: dict[str, Any] = {
        "error": error,
        "details": details,
    }

    if code:
        response_data["code"] = code

    correlation_id = get_current_correlation_id()
    if correlation_id:
        response_data["correlationId"] = correlation_id

    return jsonify(response_data), status_code


def register_core_error_handlers(app: Flask) -> None:
    """Register error handlers for framework-level exceptions."""

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest) -> tuple[Response, int]:
        return build_error_response(
            "Bad request",
            {"message": error.description or "The request could not be understood"},
            status_code=400,
        )

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError) -> tuple[Response, int]:
        """Handle Pydantic validation errors."""
        logger.warning("Pydantic validation error: %s", str(error))
        error_details = []
        for err in error.errors():
            field = ".".join(str(x) for x in err["loc"])
            message = err["msg"]
            error_details.append({"message": message, "field": field})

        return build_error_response(
            "Validation failed",
            {"errors": error_details},
            status_code=400,
        )

    @app.errorhandler(404)
    def handle_not_found(error: Any) -> tuple[Response, int]:
        """Handle 404 Not Found errors (unknown routes)."""
        return build_error_response(
            "Resource not found",
            {"message": "The requested resource could not be found"},
            status_code=404,
        )

    @app.errorhandler(405)
    def handle_method_not_allowed(error: Any) -> tuple[Response, int]:
        return build_error_response(
            "Method not allowed",
            {"message": "The HTTP method is not allowed for this endpoint"},
            status_code=405,
        )

    @app.errorhandler(500)
    def handle_internal_server_error(error: Any) -> tuple[Response, int]:
        return build_error_response(
            "Internal server error",
            {"message": "An unexpected error occurred"},
            status_code=500,
        )


def register_business_error_handlers(app: Flask) -> None:
    """Register error handlers for business logic and stream exceptions.

    Handlers are registered from most-specific to least-specific so Flask's
    MRO-based dispatch picks the right one.
    """

    @app.errorhandler(RecordNotFoundException)
    def handle_record_not_found(error: RecordNotFoundException) -> tuple[Response, int]:
        logger.warning("Record not found: %s", error.message)
        return build_error_response(
            error.message,
            {"message": "The requested resource could not be found"},
            code=error.error_code,
            status_code=404,
        )

    @app.errorhandler(RouteNotAvailableException)
    def handle_route_not_available(error: RouteNotAvailableException) -> tuple[Response, int]:
        logger.warning("Route not available: %s", error.message)
        return build_error_response(
            error.message,
            {"message": "Enable the route with SSE_DEMO_ENABLED outside production"},
            code=error.error_code,
            status_code=404,
        )

    @app.errorhandler(BusinessLogicException)
    def handle_business_logic_exception(error: BusinessLogicException) -> tuple[Response, int]:
        logger.warning("Business logic exception: %s", error.message)
        return build_error_response(
            error.message,
            {"message": "A business logic operation failed"},
            code=error.error_code,
            status_code=400,
        )

    @app.errorhandler(InvalidFieldError)
    def handle_invalid_field(error: InvalidFieldError) -> tuple[Response, int]:
        logger.warning("Invalid SSE field: %s", str(error))
        return build_error_response(
            "Invalid event field",
            {"message": str(error), "field": error.field},
            code="INVALID_FIELD",
            status_code=400,
        )

    @app.errorhandler(StreamError)
    def handle_stream_error(error: StreamError) -> tuple[Response, int]:
        logger.error("Stream misuse: %s", str(error), exc_info=True)
        return build_error_response(
            "Internal server error",
            {"message": str(error)},
            code="STREAM_ERROR",
            status_code=500,
        )


def register_app_error_handlers(app: Flask) -> None:
    """Register all error handlers (convenience wrapper)."""
    register_core_error_handlers(app)
    register_business_error_handlers(app)
