import json

import pytest

from memberkit.response import ApiResponse, ResponseType, StatusError, parse_response

URL = "https://example.com/1.0"


def test_sync_response_is_decoded():
    body = json.dumps(
        {"type": "sync", "status": "Success", "status_code": 200, "metadata": {"k": "v"}}
    )
    response = parse_response(200, body, URL, "200 OK")
    assert response.type is ResponseType.SYNC
    assert response.status == "Success"
    assert response.status_code == 200
    assert response.metadata == {"k": "v"}


def test_error_response_raises_status_error():
    body = json.dumps({"type": "error", "error": "not found", "error_code": 404})
    with pytest.raises(StatusError) as info:
        parse_response(404, body, URL, "404 Not Found")
    assert info.value.status_code == 404
    assert str(info.value) == "not found"


def test_undecodable_body_with_bad_status_mentions_url():
    with pytest.raises(ValueError, match="Failed to fetch") as info:
        parse_response(500, "<html>", URL, "500 Internal Server Error")
    assert URL in str(info.value)


def test_undecodable_body_with_ok_status_raises_decode_error():
    with pytest.raises(json.JSONDecodeError):
        parse_response(200, "not json", URL, "200 OK")


def test_bytes_body_and_trailing_data():
    response = parse_response(200, b'  {"type": "async"} trailing', URL, "200 OK")
    assert response.type is ResponseType.ASYNC


def test_unknown_type_is_kept_as_text():
    response = parse_response(200, '{"type": "custom"}', URL, "200 OK")
    assert response.type == "custom"


def test_null_body_gives_empty_response():
    assert parse_response(200, "null", URL, "200 OK") == ApiResponse()


def test_non_object_body_is_rejected():
    with pytest.raises(ValueError):
        parse_response(200, "[1, 2]", URL, "200 OK")


def test_wrong_field_type_is_rejected():
    with pytest.raises(ValueError):
        parse_response(200, '{"status_code": "x"}', URL, "200 OK")