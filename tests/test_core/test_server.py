"""Tests for httproute.server — ASGI entry point, listeners, error responses."""

import asyncio
import logging

import pytest

from httproute.exceptions import NotFound
from httproute.route import route
from httproute.router import Router
from httproute.server import Server

from tests.conftest import ResponseCapture, make_receive, make_scope, ok


class TestListeners:
    def test_constructor_registers_request_listener(self) -> None:
        server = Server(ok)
        assert server.listeners("request") == [ok]

    def test_router_is_adapted(self) -> None:
        router = Router()
        server = Server(router)
        assert server.listeners("request") == [router.dispatch]

    def test_on_chains(self) -> None:
        server = Server().on("request", ok)
        assert server.listeners("request") == [ok]
        assert server.listeners("close") == []

    def test_listeners_returns_copy(self) -> None:
        server = Server(ok)
        server.listeners("request").clear()
        assert server.listeners("request") == [ok]


class TestHTTP:
    @pytest.mark.asyncio
    async def test_method_route(self) -> None:
        server = Server(route("GET", ok))

        cap = ResponseCapture()
        await server(make_scope("GET", "/"), make_receive(), cap)
        assert cap.status == 200
        assert cap.body == b"GET"

        cap = ResponseCapture()
        await server(make_scope("POST", "/"), make_receive(), cap)
        assert cap.status == 404
        assert cap.body == b"Not Found"

    @pytest.mark.asyncio
    async def test_head_fallthrough_has_no_body(self) -> None:
        cap = ResponseCapture()
        await Server(route("GET", ok))(make_scope("HEAD", "/"), make_receive(), cap)
        assert cap.status == 404
        assert cap.body == b""

    @pytest.mark.asyncio
    async def test_second_listener_only_runs_on_continuation(self) -> None:
        cap = ResponseCapture()
        server = Server().on("request", ok).on("request", ok)
        await server(make_scope("GET", "/"), make_receive(), cap)
        assert [m["type"] for m in cap.messages] == ["http.response.start", "http.response.body"]

    @pytest.mark.asyncio
    async def test_listeners_chain_through_continuation(self) -> None:
        seen: list[str] = []

        async def first(request, send, call_next):
            seen.append("first")
            await call_next()

        cap = ResponseCapture()
        await Server().on("request", first).on("request", ok)(make_scope("GET", "/"), make_receive(), cap)
        assert seen == ["first"]
        assert cap.status == 200
        assert cap.body == b"GET"

    @pytest.mark.asyncio
    async def test_no_listener_is_404(self) -> None:
        cap = ResponseCapture()
        await Server()(make_scope("GET", "/"), make_receive(), cap)
        assert cap.status == 404

    @pytest.mark.asyncio
    async def test_waits_for_async_completion(self) -> None:
        pending: list[asyncio.Task] = []

        async def slow(request, send, call_next):
            async def later():
                await asyncio.sleep(0.01)
                await call_next()

            pending.append(asyncio.create_task(later()))

        cap = ResponseCapture()
        await Server(route("/foo", slow))(make_scope("GET", "/foo/bar"), make_receive(), cap)
        assert cap.status == 404


class TestErrors:
    @pytest.mark.asyncio
    async def test_raised_exception_is_500(self, caplog: pytest.LogCaptureFixture) -> None:
        async def broken(request, send, call_next):
            raise RuntimeError("secret database password 1234")

        cap = ResponseCapture()
        with caplog.at_level(logging.ERROR, logger="httproute.server"):
            await Server(broken)(make_scope(), make_receive(), cap)

        assert cap.status == 500
        assert b"secret" not in cap.body
        assert cap.body == b"Internal Server Error"
        assert "Unhandled exception" in caplog.text

    @pytest.mark.asyncio
    async def test_error_via_continuation_is_500(self) -> None:
        async def broken(request, send, call_next):
            await call_next(ValueError("bad"))

        cap = ResponseCapture()
        await Server(route("/foo", broken))(make_scope("GET", "/foo"), make_receive(), cap)
        assert cap.status == 500

    @pytest.mark.asyncio
    async def test_http_exception_keeps_status(self) -> None:
        async def missing(request, send, call_next):
            raise NotFound("No such user")

        cap = ResponseCapture()
        await Server(missing)(make_scope(), make_receive(), cap)
        assert cap.status == 404
        assert cap.body == b"No such user"

    @pytest.mark.asyncio
    async def test_debug_reraises(self) -> None:
        async def broken(request, send, call_next):
            raise RuntimeError("boom")

        cap = ResponseCapture()
        with pytest.raises(RuntimeError, match="boom"):
            await Server(broken, debug=True)(make_scope(), make_receive(), cap)
        assert cap.status == 500


class TestLifespan:
    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self) -> None:
        messages = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict] = []

        async def receive():
            return messages.pop(0)

        async def send(message):
            sent.append(message)

        await Server(ok)({"type": "lifespan"}, receive, send)
        assert sent == [
            {"type": "lifespan.startup.complete"},
            {"type": "lifespan.shutdown.complete"},
        ]
