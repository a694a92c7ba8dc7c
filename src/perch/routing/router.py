"""Ordered route table with first-match-wins dispatch.

Routes are registered during setup and scanned in registration order for
every request. The table is frozen on the first dispatch; registering
afterwards raises ``ConfigurationError``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from perch._internal.invoke import invoke, positional_arity
from perch._internal.types import Handler
from perch.config import RouterConfig
from perch.errors import ConfigurationError
from perch.http.builder import ResponseBuilder
from perch.http.request import Request
from perch.http.response import Response
from perch.routing.pattern import PathPattern
from perch.routing.route import Route, RouteMatch
from perch.static import ServeDirOptions, serve_dir

if TYPE_CHECKING:
    from perch._internal.asgi import Receive, Scope, Send

logger = logging.getLogger("perch.router")


class Router:
    """Request router and dispatcher.

    Usage::

        router = Router()

        @router.get("/users/:id")
        async def user(req, res, params):
            return res.send({"id": params["id"]})

        router.mount_static("/assets", "./public")
        router.enable_cors()

        response = await router.dispatch(Request.build("GET", "/users/7"))

    A Router is also an ASGI 3 application, so any ASGI server can host it.

    Thread safety:
        Registration is single-threaded setup work. Once dispatch begins the
        table is read-only, so concurrent dispatches share it without locks.
    """

    __slots__ = ("_frozen", "_routes", "config")

    def __init__(self, config: RouterConfig | None = None) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self._routes: list[Route] = []
        self._frozen: bool = False

    # -- Route registration --

    def register(self, method: str, path: str, handler: Handler) -> Route:
        """Append a route entry for *method* and path template *path*.

        Malformed templates raise ``ConfigurationError`` here, not at
        dispatch. Duplicate registrations are kept; the earlier one wins.
        """
        route = Route(
            method=method.upper(),
            pattern=PathPattern.compile(path),
            handler=handler,
            arity=positional_arity(handler),
        )
        self._append(route)
        return route

    add_route = register

    def route(
        self,
        path: str,
        *,
        methods: Iterable[str] = ("GET",),
    ) -> Callable[[Handler], Handler]:
        """Register a handler for *path* under each of *methods*.

        Usage::

            @router.route("/items", methods=["GET", "HEAD"])
            def items(req, res):
                return res.send([])
        """

        def decorator(func: Handler) -> Handler:
            for method in methods:
                self.register(method, path, func)
            return func

        return decorator

    def _shorthand(self, method: str, path: str, handler: Handler | None) -> Any:
        if handler is None:
            return self.route(path, methods=(method,))
        self.register(method, path, handler)
        return handler

    def get(self, path: str, handler: Handler | None = None) -> Any:
        """Register a GET route. Usable directly or as a decorator."""
        return self._shorthand("GET", path, handler)

    def post(self, path: str, handler: Handler | None = None) -> Any:
        """Register a POST route. Usable directly or as a decorator."""
        return self._shorthand("POST", path, handler)

    def put(self, path: str, handler: Handler | None = None) -> Any:
        """Register a PUT route. Usable directly or as a decorator."""
        return self._shorthand("PUT", path, handler)

    def patch(self, path: str, handler: Handler | None = None) -> Any:
        """Register a PATCH route. Usable directly or as a decorator."""
        return self._shorthand("PATCH", path, handler)

    def delete(self, path: str, handler: Handler | None = None) -> Any:
        """Register a DELETE route. Usable directly or as a decorator."""
        return self._shorthand("DELETE", path, handler)

    def head(self, path: str, handler: Handler | None = None) -> Any:
        """Register a HEAD route. Usable directly or as a decorator."""
        return self._shorthand("HEAD", path, handler)

    def options(self, path: str, handler: Handler | None = None) -> Any:
        """Register an OPTIONS route. Usable directly or as a decorator."""
        return self._shorthand("OPTIONS", path, handler)

    def mount_static(
        self,
        base_path: str,
        directory: str | Path,
        options: Mapping[str, Any] | None = None,
    ) -> Route:
        """Serve files under *directory* at ``base_path/*``.

        Defaults: directory listings on, CORS on, request logging on, and
        *base_path* stripped before resolving files. *options* overrides
        any ``ServeDirOptions`` field (shallow merge).
        """
        base = "/" + base_path.strip("/")
        serve_options = ServeDirOptions(
            fs_root=directory,
            url_root=base,
            show_dir_listing=True,
            enable_cors=True,
            quiet=False,
        ).merged(options)

        async def serve(request: Request) -> Response:
            return await serve_dir(request, serve_options)

        route = Route(
            method="GET",
            pattern=PathPattern.compile(base.rstrip("/") + "/*"),
            handler=serve,
            arity=1,
        )
        self._append(route)
        return route

    def enable_cors(self) -> Route:
        """Answer every OPTIONS request with 204 and the default headers.

        The entry is prepended, so it shadows any other OPTIONS route,
        whether registered before or after this call.
        """
        config = self.config

        def preflight(request: Request, res: ResponseBuilder) -> Response:
            return res.status(config.cors_status).send()

        route = Route(
            method="OPTIONS",
            pattern=PathPattern.compile("/*"),
            handler=preflight,
            arity=2,
        )
        self._check_mutable()
        self._routes.insert(0, route)
        return route

    enable_cors_for_all_origins = enable_cors

    def _append(self, route: Route) -> None:
        self._check_mutable()
        self._routes.append(route)

    def _check_mutable(self) -> None:
        if self._frozen:
            msg = "Cannot register routes after the router has started dispatching."
            raise ConfigurationError(msg)

    @property
    def routes(self) -> tuple[Route, ...]:
        """The route table in match order."""
        return tuple(self._routes)

    # -- Matching and dispatch --

    def match(self, method: str, raw_path: str) -> RouteMatch | None:
        """Return the first route matching *method* and *raw_path*, if any."""
        for route in self._routes:
            if route.method != method:
                continue
            params = route.pattern.match(raw_path)
            if params is not None:
                return RouteMatch(route=route, path_params=params)
        return None

    async def dispatch(self, request: Request) -> Response:
        """Run one request through the route table.

        Always returns a response: 404 when nothing matches, 500 when the
        matched handler raises. The exception never reaches the caller.
        """
        self._frozen = True

        found = self.match(request.method, request.raw_path)
        if found is None:
            logger.debug("404 %s %s", request.method, request.path)
            return self._fallback(404, self.config.not_found_body)

        route = found.route
        builder = ResponseBuilder(self.config.default_headers)
        try:
            result = await invoke(
                route.handler,
                route.arity,
                request,
                builder,
                found.path_params,
                dict(request.query),
            )
            return _to_response(result, builder)
        except Exception:
            logger.exception(
                "500 %s %s (route %s %s)",
                request.method,
                request.path,
                route.method,
                route.path,
            )
            return self._fallback(500, self.config.error_body)

    @property
    def handler(self) -> Callable[[Request], Any]:
        """The dispatch coroutine function, for hosts that take a callable."""
        return self.dispatch

    def _fallback(self, status: int, body: str) -> Response:
        return Response(
            status=status,
            headers=(("Content-Type", self.config.fallback_content_type),),
            body=body,
        )

    # -- Hosting --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        from perch.server.handler import handle_asgi

        await handle_asgi(self, scope, receive, send)

    def run(self, host: str = "127.0.0.1", port: int = 8000, *, workers: int = 1) -> None:
        """Serve this router with pounce (``pip install perch[server]``)."""
        from perch.server.launch import run_server

        run_server(self, host, port, workers=workers)


def _to_response(result: Any, builder: ResponseBuilder) -> Response:
    """Normalize a handler's return value into a Response."""
    if isinstance(result, Response):
        return result
    if result is None:
        msg = "Handler returned None; return res.send(...) or a Response."
        raise TypeError(msg)
    return builder.send(result)
