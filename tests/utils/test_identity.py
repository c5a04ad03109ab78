from __future__ import annotations

import pytest

from eventstream.utils.identity import (
    generate_connection_id,
    is_new_connection,
    resolve_connection_id,
)


def test_query_id_wins_over_last_event_id(make_request):
    request = make_request(query={"id": "abc"}, headers={"Last-Event-ID": "resumed"})
    assert resolve_connection_id(request) == "abc"


def test_last_event_id_used_when_no_query_id(make_request):
    request = make_request(headers={"Last-Event-ID": "resumed"})
    assert resolve_connection_id(request) == "resumed"
    assert is_new_connection(request) is False


def test_generated_id_when_nothing_supplied(make_request):
    request = make_request()
    first = resolve_connection_id(request)
    second = resolve_connection_id(request)
    assert first and second
    assert first != second
    assert is_new_connection(request) is True


def test_empty_values_fall_through(make_request):
    request = make_request(query={"id": ""}, headers={"Last-Event-ID": ""})
    connection_id = resolve_connection_id(request)
    assert connection_id != ""
    assert is_new_connection(request) is True


@pytest.mark.parametrize("bad_id", ["a\nb", "a\rb", "a\0b"])
def test_unframeable_query_id_is_ignored(make_request, bad_id: str):
    request = make_request(query={"id": bad_id}, headers={"Last-Event-ID": "resumed"})
    assert resolve_connection_id(request) == "resumed"


def test_query_id_does_not_make_connection_a_resume(make_request):
    request = make_request(query={"id": "abc"})
    assert is_new_connection(request) is True


def test_generated_ids_are_url_safe_and_distinct():
    ids = {generate_connection_id() for _ in range(500)}
    assert len(ids) == 500
    for connection_id in ids:
        assert connection_id.replace("-", "").replace("_", "").isalnum()
