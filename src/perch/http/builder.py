"""Per-request response builder.

A ResponseBuilder is created by the router for exactly one handler
invocation and is never retained afterward. It accumulates status and
headers, then ``send()`` produces the immutable ``Response``.
"""

import json as json_module
from collections.abc import AsyncIterable, Iterable, Iterator
from dataclasses import asdict, is_dataclass
from typing import Any, Self

from perch.http.response import Body, Response


def body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _json_default(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def encode_body(data: Any) -> Body:
    """Turn a handler-supplied payload into a response body.

    - binary buffers pass through untranscoded (copied to ``bytes``);
    - chunk iterators and async iterables are kept as streamed bodies;
    - strings are used as-is;
    - ``None`` becomes the JSON text ``null``;
    - booleans and numbers become their JSON-style text;
    - everything else is serialized with ``json.dumps``; dataclass
      instances (nested or not) serialize as objects.
    """
    match data:
        case bytes():
            return data
        case bytearray() | memoryview():
            return bytes(data)
        case str():
            return data
        case None:
            return "null"
        case bool():
            return "true" if data else "false"
        case int() | float():
            return str(data)
        case Iterator() | AsyncIterable():
            return data
        case _:
            return json_module.dumps(data, default=_json_default)


class ResponseBuilder:
    """Mutable accumulator for one response.

    Usage inside a handler::

        def create(req, res):
            return res.status(201).set_header("Location", "/users/7").send({"id": 7})
    """

    __slots__ = ("_code", "_headers")

    def __init__(self, default_headers: Iterable[tuple[str, str]] = ()) -> None:
        self._code = 200
        # lowercased name -> (original name, value)
        self._headers: dict[str, tuple[str, str]] = {}
        for name, value in default_headers:
            self._headers[name.lower()] = (name, value)

    def status(self, code: int) -> Self:
        """Set the status code for the eventual response."""
        self._code = code
        return self

    def set_header(self, name: str, value: str) -> Self:
        """Set or overwrite a header (case-insensitive)."""
        self._headers[name.lower()] = (name, value)
        return self

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        """The headers accumulated so far."""
        return tuple(self._headers.values())

    @property
    def status_code(self) -> int:
        """The status code set so far."""
        return self._code

    def send(self, data: Any = None) -> Response:
        """Produce the final response with *data* as its body.

        Statuses that carry no body (1xx, 204, 304) ignore *data*.
        """
        if not body_allowed(self._code):
            return Response(status=self._code, headers=self.headers)
        return Response(status=self._code, headers=self.headers, body=encode_body(data))
