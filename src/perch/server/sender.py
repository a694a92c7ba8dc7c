"""ASGI response sending: translates perch Responses to ASGI messages.

Handles both buffered bodies and streamed (chunk iterator) bodies.
"""

import logging
from collections.abc import AsyncIterable, Iterable

from perch._internal.asgi import Send
from perch.http.builder import body_allowed
from perch.http.response import Response

logger = logging.getLogger("perch.server")


def _raw_headers(response: Response) -> list[tuple[bytes, bytes]]:
    return [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
    ]


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Translate a perch Response into ASGI send() calls.

    With *head* set the headers are sent as for GET but the body is not.
    """
    if response.is_streaming and body_allowed(response.status) and not head:
        await send_streaming_response(response, send)
        return

    raw_headers = _raw_headers(response)
    body = response.body_bytes if body_allowed(response.status) and not response.is_streaming else b""

    # 1xx, 204 and 304 carry no Content-Length
    if body_allowed(response.status) and response.header("Content-Length") is None:
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": b"" if head else body,
        }
    )


async def send_streaming_response(response: Response, send: Send) -> None:
    """Send a streamed body chunk by chunk.

    Sends headers immediately, then each chunk as an ASGI body message
    with ``more_body=True``. Closes with an empty body. A failure in the
    middle of the stream is logged and the stream is closed early, since
    the status line has already gone out.
    """
    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": _raw_headers(response),
        }
    )

    chunks = response.body
    try:
        if isinstance(chunks, AsyncIterable):
            async for chunk in chunks:
                if chunk:
                    await send({"type": "http.response.body", "body": bytes(chunk), "more_body": True})
        elif isinstance(chunks, Iterable):
            for chunk in chunks:
                if chunk:
                    await send({"type": "http.response.body", "body": bytes(chunk), "more_body": True})
    except Exception:
        logger.exception("Response stream failed after headers were sent")

    # Close the stream
    await send({"type": "http.response.body", "body": b"", "more_body": False})
