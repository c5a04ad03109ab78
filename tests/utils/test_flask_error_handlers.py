from __future__ import annotations

import pytest
from flask import Flask

import eventstream.exceptions as exceptions
from eventstream.exceptions import (
    BusinessLogicException,
    InvalidFieldError,
    RecordNotFoundException,
    StreamEndedError,
)
from eventstream.utils import init_request_id
from eventstream.utils.flask_error_handlers import register_app_error_handlers


@pytest.fixture
def error_client():
    app = Flask(__name__)
    init_request_id(app)
    register_app_error_handlers(app)

    @app.route("/business")
    def business():
        raise BusinessLogicException("Connection is busy", error_code="CONNECTION_BUSY")

    @app.route("/missing")
    def missing():
        raise RecordNotFoundException("Closed connection", "abc")

    @app.route("/field")
    def field():
        raise InvalidFieldError("event", "bad\nname")

    @app.route("/stream")
    def stream():
        raise StreamEndedError("abc")

    return app.test_client()


def test_business_exception_maps_to_400_with_code(error_client):
    response = error_client.get("/business", headers={"X-Request-ID": "req-1"})
    assert response.status_code == 400
    body = response.get_json()
    assert body["error"] == "Connection is busy"
    assert body["code"] == "CONNECTION_BUSY"
    assert body["correlationId"] == "req-1"


def test_record_not_found_maps_to_404(error_client):
    response = error_client.get("/missing")
    assert response.status_code == 404
    assert response.get_json()["code"] == "RECORD_NOT_FOUND"


def test_invalid_field_maps_to_400(error_client):
    response = error_client.get("/field")
    assert response.status_code == 400
    body = response.get_json()
    assert body["code"] == "INVALID_FIELD"
    assert body["details"]["field"] == "event"


def test_stream_misuse_maps_to_500(error_client):
    response = error_client.get("/stream")
    assert response.status_code == 500
    assert response.get_json()["code"] == "STREAM_ERROR"


def test_only_raised_business_exceptions_are_defined():
    business = {
        name
        for name, value in vars(exceptions).items()
        if isinstance(value, type) and issubclass(value, BusinessLogicException)
    }
    assert business == {
        "BusinessLogicException",
        "RecordNotFoundException",
        "RouteNotAvailableException",
    }
