from __future__ import annotations

from flask import Flask

from eventstream import create_app
from eventstream.utils.cors import configure_cors, parse_allowed_origins


def test_parse_allowed_origins_handles_empty_values():
    assert parse_allowed_origins(None) is None
    assert parse_allowed_origins("   ") is None
    assert parse_allowed_origins([]) is None


def test_parse_allowed_origins_deduplicates_and_trims():
    origins = parse_allowed_origins(" https://a.test ,https://b.test https://a.test")
    assert origins == ("https://a.test", "https://b.test")


def test_parse_allowed_origins_accepts_configured_list():
    origins = parse_allowed_origins(["https://a.test", " https://b.test", "https://a.test"])
    assert origins == ("https://a.test", "https://b.test")


def test_parse_allowed_origins_wildcard_wins():
    origins = parse_allowed_origins("*, https://irrelevant.test")
    assert origins == ("*",)


def test_configure_cors_allows_specific_origin_with_credentials():
    app = Flask(__name__)
    configure_cors(app, ("https://allowed.test",))

    @app.route("/ping", methods=["GET"])
    def _ping():
        return {"ok": True}

    client = app.test_client()
    response = client.get("/ping", headers={"Origin": "https://allowed.test"})

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "https://allowed.test"
    assert response.headers["Access-Control-Allow-Credentials"] == "true"
    assert "Origin" in response.headers.getlist("Vary")

    blocked = client.get("/ping", headers={"Origin": "https://blocked.test"})
    assert "Access-Control-Allow-Origin" not in blocked.headers


def test_preflight_allows_last_event_id_by_default():
    app = Flask(__name__)
    configure_cors(app, ("*",))

    @app.route("/stream", methods=["GET"])
    def _stream():
        return ""

    client = app.test_client()
    response = client.options(
        "/stream",
        headers={"Origin": "https://anything.test", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 204
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert "Last-Event-ID" in response.headers["Access-Control-Allow-Headers"]
    assert response.headers["Access-Control-Allow-Methods"] == "GET"


def test_create_app_applies_configured_origins(test_settings):
    settings = test_settings.model_copy(update={"cors_origins": ["https://allowed.test"]})
    client = create_app(settings).test_client()

    response = client.get("/api/connections/abc", headers={"Origin": "https://allowed.test"})

    assert response.headers["Access-Control-Allow-Origin"] == "https://allowed.test"
