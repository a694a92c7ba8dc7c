"""Tests for perch.http.builder — ResponseBuilder and body encoding."""

import json
from dataclasses import dataclass

import pytest

from perch.config import DEFAULT_HEADERS
from perch.http.builder import ResponseBuilder, body_allowed, encode_body


def _builder() -> ResponseBuilder:
    return ResponseBuilder(DEFAULT_HEADERS)


class TestDefaults:
    def test_status_defaults_to_200(self) -> None:
        assert _builder().send({}).status == 200

    def test_default_headers_present(self) -> None:
        response = _builder().send("x")
        assert response.header("Content-Type") == "application/json"
        assert response.header("Access-Control-Allow-Origin") == "*"
        assert response.header("Access-Control-Allow-Methods") == "GET, POST, PUT, DELETE, OPTIONS"
        assert response.header("Access-Control-Allow-Headers") == "Content-Type, Authorization"

    def test_no_defaults(self) -> None:
        assert ResponseBuilder().send("x").headers == ()


class TestChaining:
    def test_status_is_chainable(self) -> None:
        b = _builder()
        assert b.status(201) is b
        assert b.send({}).status == 201

    def test_set_header_is_chainable(self) -> None:
        b = _builder()
        assert b.set_header("X-Trace", "abc") is b
        assert b.send({}).header("x-trace") == "abc"

    def test_set_header_overwrites_case_insensitively(self) -> None:
        response = _builder().set_header("content-type", "text/plain").send("hi")
        values = [v for n, v in response.headers if n.lower() == "content-type"]
        assert values == ["text/plain"]

    def test_no_status_validation(self) -> None:
        assert _builder().status(799).send("x").status == 799


class TestSendBodies:
    def test_dict_serialized_as_json(self) -> None:
        payload = {"success": True, "items": [1, 2, {"nested": None}]}
        response = _builder().send(payload)
        assert json.loads(response.body_bytes) == payload

    def test_list_serialized_as_json(self) -> None:
        assert _builder().send([1, "two"]).json() == [1, "two"]

    def test_string_passed_through(self) -> None:
        assert _builder().send("hello").body == "hello"

    def test_json_looking_string_not_reencoded(self) -> None:
        assert _builder().send('{"a": 1}').body == '{"a": 1}'

    def test_numbers_coerced_to_text(self) -> None:
        assert _builder().send(42).body == "42"
        assert _builder().send(1.5).body == "1.5"

    def test_bools_coerced_to_json_text(self) -> None:
        assert _builder().send(True).body == "true"
        assert _builder().send(False).body == "false"

    def test_default_body_is_json_null(self) -> None:
        response = _builder().send()
        assert response.body == "null"
        assert response.json() is None

    def test_bytes_preserved_with_custom_content_type(self) -> None:
        data = bytes(range(256))
        response = (
            _builder()
            .set_header("Content-Type", "application/octet-stream")
            .send(data)
        )
        assert response.body == data
        assert response.content_type == "application/octet-stream"

    def test_bytearray_and_memoryview(self) -> None:
        assert _builder().send(bytearray(b"Hello")).body == b"Hello"
        assert _builder().send(memoryview(b"Buffer")).body == b"Buffer"

    def test_text_encoded_bytes_round_trip(self) -> None:
        response = _builder().send("Hello Buffer".encode())
        assert response.body_bytes.decode() == "Hello Buffer"

    def test_generator_kept_as_stream(self) -> None:
        def chunks():
            yield b"a"
            yield b"b"

        response = _builder().send(chunks())
        assert response.is_streaming is True

    def test_async_iterable_kept_as_stream(self) -> None:
        async def chunks():
            yield b"a"

        assert _builder().send(chunks()).is_streaming is True

    def test_dataclass_serialized(self) -> None:
        @dataclass
        class User:
            id: int
            name: str

        assert _builder().send(User(1, "ada")).json() == {"id": 1, "name": "ada"}
        assert _builder().send({"users": [User(2, "bo")]}).json() == {"users": [{"id": 2, "name": "bo"}]}

    def test_unserializable_raises(self) -> None:
        with pytest.raises(TypeError):
            _builder().send({"when": object()})


class TestEmptyStatuses:
    @pytest.mark.parametrize("status", [204, 304, 101])
    def test_body_dropped(self, status: int) -> None:
        response = _builder().status(status).send({"ignored": True})
        assert response.status == status
        assert response.body is None
        assert response.header("Access-Control-Allow-Origin") == "*"

    def test_body_allowed(self) -> None:
        assert body_allowed(200) is True
        assert body_allowed(404) is True
        assert body_allowed(204) is False
        assert body_allowed(304) is False
        assert body_allowed(100) is False


class TestEncodeBody:
    def test_tuple_is_json_array(self) -> None:
        assert encode_body((1, 2)) == "[1, 2]"

    def test_none(self) -> None:
        assert encode_body(None) == "null"
