"""ASGI handler: translates ASGI scope/messages to perch types.

The only component that touches raw ASGI directly. Converts scope dicts
to Request objects, dispatches through the router, and sends the
Response back through ASGI send().
"""

from typing import TYPE_CHECKING

from perch._internal.asgi import Receive, Scope, Send
from perch.http.request import Request
from perch.server.sender import send_response

if TYPE_CHECKING:
    from perch.routing.router import Router


async def handle_asgi(router: "Router", scope: Scope, receive: Receive, send: Send) -> None:
    """Serve one ASGI connection scope with *router*."""
    if scope["type"] == "lifespan":
        await handle_lifespan(receive, send)
        return

    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    response = await router.dispatch(request)
    await send_response(response, send, head=request.method == "HEAD")


async def handle_lifespan(receive: Receive, send: Send) -> None:
    """Acknowledge lifespan startup and shutdown.

    Routers hold no resources that need opening or closing, so both
    phases complete immediately.
    """
    while True:
        message = await receive()
        msg_type = message["type"]

        if msg_type == "lifespan.startup":
            await send({"type": "lifespan.startup.complete"})
        elif msg_type == "lifespan.shutdown":
            await send({"type": "lifespan.shutdown.complete"})
            return
