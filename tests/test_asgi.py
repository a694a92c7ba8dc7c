"""Tests for the ASGI seam — Router.__call__ and the TestClient."""

from perch.routing.router import Router
from perch.testing import TestClient


def _app() -> Router:
    app = Router()

    @app.get("/users/:id")
    def user(req, res, params, queries):
        return res.send({"id": params["id"], "q": queries})

    @app.post("/echo")
    async def echo(req, res):
        return res.status(201).send(await req.json())

    @app.get("/bytes")
    def raw(req, res):
        return res.set_header("Content-Type", "application/octet-stream").send(b"\x00\xffdata")

    @app.get("/stream")
    def stream(req, res):
        def chunks():
            yield b"one,"
            yield b"two"

        return res.set_header("Content-Type", "text/plain").send(chunks())

    @app.get("/boom")
    def boom(req, res):
        raise RuntimeError("x")

    return app


class TestClientRoundTrip:
    async def test_json_route(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/users/42?verbose=1")
            assert response.status == 200
            assert response.json() == {"id": "42", "q": {"verbose": "1"}}
            assert response.header("content-type") == "application/json"
            assert response.header("access-control-allow-origin") == "*"

    async def test_encoded_param(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/users/a%2Fb")
            assert response.json()["id"] == "a/b"

    async def test_post_json(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.post("/echo", json={"name": "ada"})
            assert response.status == 201
            assert response.json() == {"name": "ada"}

    async def test_binary_round_trip(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/bytes")
            assert response.body_bytes == b"\x00\xffdata"
            assert response.content_type == "application/octet-stream"

    async def test_streamed_body(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/stream")
            assert response.text == "one,two"

    async def test_not_found(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.delete("/users/1")
            assert response.status == 404
            assert response.text == "404"

    async def test_server_error(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/boom")
            assert response.status == 500
            assert response.text == "Internal Server Error"

    async def test_cors_preflight_has_empty_body(self) -> None:
        app = _app()
        app.enable_cors()
        async with TestClient(app) as client:
            response = await client.options("/users/1")
            assert response.status == 204
            assert response.body_bytes == b""
            assert response.header("content-length") is None

    async def test_head_request_without_route(self) -> None:
        async with TestClient(_app()) as client:
            assert (await client.head("/users/1")).status == 404


class TestLifespan:
    async def test_startup_and_shutdown(self) -> None:
        incoming = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict] = []

        async def receive() -> dict:
            return incoming.pop(0)

        async def send(message: dict) -> None:
            sent.append(message)

        await Router()({"type": "lifespan"}, receive, send)

        assert sent == [
            {"type": "lifespan.startup.complete"},
            {"type": "lifespan.shutdown.complete"},
        ]

    async def test_websocket_scope_ignored(self) -> None:
        sent: list[dict] = []

        async def receive() -> dict:
            return {"type": "websocket.connect"}

        async def send(message: dict) -> None:
            sent.append(message)

        await Router()({"type": "websocket"}, receive, send)

        assert sent == []
