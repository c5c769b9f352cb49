"""
ASGI server adapter for httproute.

A :class:`Server` is the bridge between an ASGI server such as uvicorn
and a handler pipeline. It keeps its handlers as ``"request"`` listeners,
so a server can itself be nested inside a route.

Usage:
    server = Server(Router(
        route("GET /", index),
        route("/users", users),
    ))

    # Run with: uvicorn main:server
"""

import asyncio
import logging
from collections import defaultdict
from functools import partial
from typing import Any

from httproute.adapter import adapt
from httproute.exceptions import HTTPException
from httproute.request import Request
from httproute.response import TextResponse, send_not_found
from httproute.types import Handler, Message, Receive, Scope, Send

logger = logging.getLogger("httproute.server")


class _Exchange:
    """Tracks one request's response so the server knows when it is done."""

    __slots__ = ("_send", "_done", "started", "error")

    def __init__(self, send: Send) -> None:
        self._send = send
        self._done = asyncio.Event()
        self.started = False
        self.error: BaseException | None = None

    async def send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.started = True
        await self._send(message)
        if message["type"] == "http.response.body" and not message.get("more_body", False):
            self._done.set()

    def fail(self, error: BaseException) -> None:
        self.error = error
        self._done.set()

    async def wait(self) -> None:
        await self._done.wait()


class Server:
    """
    ASGI application dispatching requests to its ``"request"`` listeners.

    Listeners are handlers ``(request, send, call_next)``. A request that
    falls through every listener gets a 404. An error passed to the final
    continuation, or raised by a listener, is logged and answered with a
    500 (or the status of an ``HTTPException``). With ``debug`` the error
    is re-raised after the response so the ASGI server reports it too.
    """

    def __init__(self, handler: Any = None, debug: bool = False) -> None:
        self.debug = debug
        self._listeners: defaultdict[str, list[Handler]] = defaultdict(list)
        if handler is not None:
            self.on("request", adapt(handler).call)

    def on(self, event: str, callback: Handler) -> "Server":
        """Register ``callback`` for ``event``. Returns self for chaining."""
        self._listeners[event].append(callback)
        return self

    def listeners(self, event: str) -> list[Handler]:
        """Callbacks registered for ``event``."""
        return list(self._listeners.get(event, ()))

    # -------------------------------------------------------------------------
    # ASGI Interface
    # -------------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI application entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
        elif scope["type"] == "http":
            await self._handle_request(scope, receive, send)
        else:
            logger.warning("Unsupported scope type: %s", scope["type"])
            await send({"type": "websocket.close", "code": 1008})

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Acknowledge startup and shutdown."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                logger.info("Server starting with %d request listener(s)", len(self.listeners("request")))
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        """
        Run the request listeners and wait until the response is complete.

        Listeners run in registration order. A listener only reaches the
        next one by calling its continuation, so at most one responds.
        """
        request = Request(scope, receive)
        exchange = _Exchange(send)

        async def finish(error: BaseException | None = None) -> None:
            if error is not None:
                exchange.fail(error)
                return
            await send_not_found(request, exchange.send)

        callbacks = self.listeners("request")

        async def step(index: int, error: BaseException | None = None) -> None:
            if error is not None or index == len(callbacks):
                await finish(error)
                return
            await callbacks[index](request, exchange.send, partial(step, index + 1))

        try:
            await step(0)
            # Handlers may complete from another task
            await exchange.wait()
            if exchange.error is not None:
                raise exchange.error
        except HTTPException as exc:
            log = logger.error if exc.status_code >= 500 else logger.warning
            log("%s %s status=%d detail=%s", request.method, request.original_path, exc.status_code, exc.detail)
            if not exchange.started:
                response = TextResponse(exc.detail, status_code=exc.status_code, headers=exc.headers)
                await response(send, head=request.method == "HEAD")
        except Exception as exc:
            # Always log full traceback server-side
            logger.exception("Unhandled exception for %s %s: %s", request.method, request.original_path, exc)
            if not exchange.started:
                response = TextResponse("Internal Server Error", status_code=500)
                await response(send, head=request.method == "HEAD")
            if self.debug:
                raise

    def run(
        self,
        host: str = "localhost",
        port: int = 8000,
        log_level: str = "info",
    ) -> None:
        """
        Run the server using uvicorn.

        Args:
            host: Host to bind to.
            port: Port to bind to.
            log_level: Logging level.
        """
        import uvicorn

        uvicorn.run(
            self,
            host=host,
            port=port,
            log_level=log_level,
        )
