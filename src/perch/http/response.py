"""HTTP response value with chainable .with_*() transformation API.

Each transformation returns a new Response. Handlers normally build one
through ``ResponseBuilder.send()``; the router's fallbacks and the static
delegate construct them directly.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncIterable, Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any, TypeAlias

# Streamed bodies are passed to the server chunk by chunk
BodyStream: TypeAlias = Iterable[bytes] | AsyncIterable[bytes]
Body: TypeAlias = bytes | str | BodyStream | None


@dataclass(frozen=True, slots=True)
class Response:
    """An immutable HTTP response.

    ``body`` is ``None`` when the response carries no body (204, 304),
    ``bytes`` for binary payloads, ``str`` for text, or an iterable of
    byte chunks for streamed payloads.
    """

    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()
    body: Body = None

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with *name* set to *value*.

        Replaces any existing header of the same name (case-insensitive).
        """
        lower = name.lower()
        kept = tuple((n, v) for n, v in self.headers if n.lower() != lower)
        return replace(self, headers=(*kept, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with every header in *headers* set."""
        response = self
        for name, value in headers.items():
            response = response.with_header(name, value)
        return response

    # -- Header access --

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the value of header *name* (case-insensitive)."""
        lower = name.lower()
        for n, v in self.headers:
            if n.lower() == lower:
                return v
        return default

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.header("Content-Type")

    # -- Body helpers --

    @property
    def is_streaming(self) -> bool:
        """True if the body is an iterator of chunks rather than a buffer."""
        return self.body is not None and not isinstance(self.body, (bytes, str))

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes (empty when there is no body).

        Raises ``TypeError`` for streamed bodies, which can only be consumed
        once by the server.
        """
        if self.body is None:
            return b""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        if isinstance(self.body, bytes):
            return self.body
        msg = "Streamed response bodies have no buffered bytes."
        raise TypeError(msg)

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, str):
            return self.body
        return self.body_bytes.decode("utf-8")

    def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(self.body_bytes)
