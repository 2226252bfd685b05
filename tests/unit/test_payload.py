"""Tests for imagerelay.api.payload: inbound JSON body parsing."""

from __future__ import annotations

import pytest
from starlette.requests import Request

from imagerelay.api.payload import PayloadError, is_json_request, parse_json_body


def _request(content_type: str | None) -> Request:
    headers = []
    if content_type is not None:
        headers.append((b"content-type", content_type.encode("latin-1")))
    return Request({"type": "http", "method": "POST", "path": "/generate", "headers": headers})


class TestIsJsonRequest:
    """Verify content-type detection."""

    @pytest.mark.parametrize(
        "content_type",
        ["application/json", "application/json; charset=utf-8", "Application/JSON"],
    )
    def test_json_media_types(self, content_type):
        assert is_json_request(_request(content_type)) is True

    @pytest.mark.parametrize(
        "content_type",
        [None, "text/plain", "application/x-www-form-urlencoded", "multipart/form-data"],
    )
    def test_other_media_types(self, content_type):
        assert is_json_request(_request(content_type)) is False


class TestParseJsonBody:
    """Verify strict JSON decoding of request bodies."""

    def test_object(self):
        assert parse_json_body(b'{"contents": [{"parts": []}]}') == {"contents": [{"parts": []}]}

    def test_array(self):
        assert parse_json_body(b"[1, 2, 3]") == [1, 2, 3]

    def test_leading_whitespace(self):
        assert parse_json_body(b'\n  {"a": 1}') == {"a": 1}

    @pytest.mark.parametrize("raw", [b"", b"   ", b"\n"])
    def test_empty_body_is_empty_object(self, raw):
        assert parse_json_body(raw) == {}

    @pytest.mark.parametrize("raw", [b'"text"', b"42", b"true", b"null"])
    def test_scalars_rejected(self, raw):
        with pytest.raises(PayloadError) as exc_info:
            parse_json_body(raw)
        assert exc_info.value.status_code == 400

    def test_malformed_rejected(self):
        with pytest.raises(PayloadError) as exc_info:
            parse_json_body(b'{"a": }')
        assert exc_info.value.status_code == 400
        assert exc_info.value.message

    @pytest.mark.parametrize("raw", [b'{"x": NaN}', b'{"x": Infinity}', b"[-Infinity]"])
    def test_non_standard_constants_rejected(self, raw):
        with pytest.raises(PayloadError):
            parse_json_body(raw)

    @pytest.mark.parametrize("raw", [b'{"t": 1e400}', b"[-1e999]"])
    def test_overflowing_numbers_rejected(self, raw):
        """Numbers too large for a float would be forwarded as Infinity."""
        with pytest.raises(PayloadError) as exc_info:
            parse_json_body(raw)
        assert exc_info.value.status_code == 400

    def test_invalid_utf8_rejected(self):
        with pytest.raises(PayloadError) as exc_info:
            parse_json_body(b'{"a": "\xff"}')
        assert exc_info.value.status_code == 400

    def test_unicode_preserved(self):
        assert parse_json_body('{"t": "Café 東京"}'.encode()) == {"t": "Café 東京"}
