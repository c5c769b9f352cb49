"""
Composite router for httproute.

A router is a stack of handlers run in order, each one passing control to
the next through its continuation. Routers can be nested inside routes,
which is how sub-paths are mounted:

    api = Router()

    @api.get("/users/:id")
    async def show_user(request, send, call_next):
        ...

    app = Router(log_request).mount("/api", api)
"""

import logging
from collections.abc import Callable
from functools import partial
from typing import Any

from httproute.adapter import adapt
from httproute.conditions import ConditionSpec
from httproute.request import Request
from httproute.response import send_not_found
from httproute.route import Route
from httproute.types import Handler, Next, Send

logger = logging.getLogger("httproute.router")


class Router:
    """
    Stack of handlers dispatched in order.

    Implements the Composite pattern: a router is itself a handler target
    for :func:`~httproute.route.route` and :class:`~httproute.server.Server`.
    """

    def __init__(self, *handlers: Any) -> None:
        self._stack: list[Handler] = []
        for handler in handlers:
            self.use(handler)

    def use(self, handler: Any) -> "Router":
        """Append a handler to the stack. Returns self for chaining."""
        self._stack.append(adapt(handler).call)
        return self

    def mount(self, condition: ConditionSpec, handler: Any) -> "Router":
        """Run ``handler`` for requests matching ``condition``."""
        return self.use(Route(condition, handler))

    def route(self, condition: ConditionSpec, handler: Any) -> "Router":
        """
        Like :meth:`mount`, but ``handler`` only runs when the condition
        consumes the whole path.
        """
        endpoint = adapt(handler).call

        async def exact(request: Request, send: Send, call_next: Next) -> None:
            if request.path != "/":
                await call_next()
                return
            await endpoint(request, send, call_next)

        return self.use(Route(condition, exact))

    async def dispatch(
        self,
        request: Request,
        send: Send,
        call_next: Next | None = None,
    ) -> None:
        """
        Run the stack for ``request``.

        An error passed to a continuation skips the remaining handlers and
        is handed to ``call_next``, as is the request when every handler
        has passed it on.
        """
        if call_next is None:
            call_next = partial(send_not_found, request, send)

        stack = tuple(self._stack)

        async def step(index: int, error: BaseException | None = None) -> None:
            if error is not None:
                logger.debug("Skipping %d handler(s) after error: %r", len(stack) - index, error)
                await call_next(error)
                return
            if index == len(stack):
                await call_next()
                return
            await stack[index](request, send, partial(step, index + 1))

        await step(0)

    # Decorator shortcuts
    def _method_route(self, method: str, path: str) -> Callable[[Handler], Handler]:
        def decorator(handler: Handler) -> Handler:
            self.mount(f"{method} {path}", handler)
            return handler
        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        """Decorator for GET routes."""
        return self._method_route("GET", path)

    def post(self, path: str) -> Callable[[Handler], Handler]:
        """Decorator for POST routes."""
        return self._method_route("POST", path)

    def put(self, path: str) -> Callable[[Handler], Handler]:
        """Decorator for PUT routes."""
        return self._method_route("PUT", path)

    def patch(self, path: str) -> Callable[[Handler], Handler]:
        """Decorator for PATCH routes."""
        return self._method_route("PATCH", path)

    def delete(self, path: str) -> Callable[[Handler], Handler]:
        """Decorator for DELETE routes."""
        return self._method_route("DELETE", path)
