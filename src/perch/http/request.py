"""Immutable HTTP request.

Frozen metadata with async body access. The request is honest about
what it is: received data that doesn't change.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, unquote, urlsplit

from perch._internal.asgi import Message, Receive
from perch.http.headers import Headers
from perch.http.query import parse_query


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, query) is frozen at creation.
    Body is accessed asynchronously via ``.body()``, ``.text()``, ``.json()``.

    ``path`` is percent-decoded; ``raw_path`` keeps the encoded form so the
    router can split segments before decoding (``%2F`` stays inside one
    segment).
    """

    method: str
    path: str
    raw_path: str
    query_string: bytes
    headers: Headers
    query: dict[str, str]
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: mutable cache for the body
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """The Content-Length header as int."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def url(self) -> str:
        """Request target as received (raw path + query string)."""
        if self.query_string:
            return f"{self.raw_path}?{self.query_string.decode('latin-1')}"
        return self.raw_path

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached: the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes, None]:
        """Stream the request body in chunks."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                break
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        raw = await self.body()
        return json_module.loads(raw)

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    # -- Factories --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        path = scope["path"]
        raw = scope.get("raw_path")
        raw_path = raw.decode("latin-1") if raw else quote(path, safe="/:@!$&'()*+,;=-._~")
        server = scope.get("server")
        client = scope.get("client")
        query_string = scope.get("query_string", b"")
        return cls(
            method=scope["method"],
            path=path,
            raw_path=raw_path,
            query_string=query_string,
            headers=Headers(tuple(scope.get("headers", ()))),
            query=parse_query(query_string),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> Request:
        """Create a Request directly, without an ASGI server.

        *url* may be a bare path (``/users/1?full=1``) or an absolute URL
        (``http://localhost/users/1``); scheme and host are ignored.
        """
        parts = urlsplit(url)
        raw_path = parts.path or "/"
        sent = False

        async def receive() -> Message:
            nonlocal sent
            if sent:
                return {"type": "http.disconnect"}
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}

        return cls(
            method=method.upper(),
            path=unquote(raw_path),
            raw_path=raw_path,
            query_string=parts.query.encode("latin-1"),
            headers=Headers.from_mapping(headers or {}),
            query=parse_query(parts.query),
            _receive=receive,
        )
