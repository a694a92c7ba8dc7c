"""Perch: a small async HTTP router.

Matches requests to handlers by method and path pattern, extracts path
and query parameters, and builds responses with default headers.

Basic usage::

    from perch import Router

    router = Router()

    @router.get("/users/:id")
    def user(req, res, params):
        return res.send({"id": params["id"]})

    router.run()

A Router is an ASGI app, so any ASGI server can host it as well.
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "PerchError",
    "Request",
    "Response",
    "ResponseBuilder",
    "Route",
    "Router",
    "RouterConfig",
    "ServeDirOptions",
    "serve_dir",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from perch.routing.router import Router

        return Router

    if name == "Route":
        from perch.routing.route import Route

        return Route

    if name == "RouterConfig":
        from perch.config import RouterConfig

        return RouterConfig

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name == "ResponseBuilder":
        from perch.http.builder import ResponseBuilder

        return ResponseBuilder

    if name in ("ServeDirOptions", "serve_dir"):
        from perch import static as _static

        return getattr(_static, name)

    if name in ("ConfigurationError", "PerchError"):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
