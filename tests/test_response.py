"""Tests for perch.http.response — immutable Response value."""

import pytest

from perch.http.response import Response


class TestResponse:
    def test_defaults(self) -> None:
        r = Response()
        assert r.status == 200
        assert r.headers == ()
        assert r.body is None
        assert r.body_bytes == b""

    def test_with_status(self) -> None:
        r = Response().with_status(201)
        assert r.status == 201

    def test_with_header_appends(self) -> None:
        r = Response().with_header("X-Custom", "value")
        assert r.headers == (("X-Custom", "value"),)

    def test_with_header_replaces_same_name(self) -> None:
        r = Response(headers=(("content-type", "text/plain"),)).with_header(
            "Content-Type", "text/css"
        )
        assert r.headers == (("Content-Type", "text/css"),)

    def test_with_headers_mapping(self) -> None:
        r = Response().with_headers({"A": "1", "B": "2"})
        assert r.header("a") == "1"
        assert r.header("b") == "2"

    def test_chaining_returns_new_objects(self) -> None:
        r1 = Response(body="hello")
        r2 = r1.with_status(201)
        assert r1.status == 200
        assert r2.status == 201

    def test_header_lookup_default(self) -> None:
        assert Response().header("missing") is None
        assert Response().header("missing", "x") == "x"

    def test_content_type(self) -> None:
        r = Response(headers=(("Content-Type", "application/json"),))
        assert r.content_type == "application/json"

    def test_body_bytes_from_str(self) -> None:
        assert Response(body="héllo").body_bytes == "héllo".encode()

    def test_text_from_bytes(self) -> None:
        assert Response(body=b"hello").text == "hello"

    def test_json(self) -> None:
        assert Response(body='{"a": [1]}').json() == {"a": [1]}

    def test_streaming_body_has_no_bytes(self) -> None:
        r = Response(body=iter([b"a"]))
        assert r.is_streaming is True
        with pytest.raises(TypeError):
            r.body_bytes

    def test_frozen(self) -> None:
        r = Response()
        with pytest.raises(AttributeError):
            r.status = 404  # type: ignore[misc]
