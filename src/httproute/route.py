"""
Conditional routes.

A route wraps a handler so it only runs for requests that satisfy a
condition. Request fields rewritten by the condition (the current path,
path parameters and base path) are restored when the handler calls its
continuation, after which control passes to the caller's continuation.

Usage:
    async def show_user(request, send, call_next):
        await JSONResponse({"id": request.params["id"]})(send)

    users = route("/users", Router(
        route("GET /:id", show_user),
    ))

    server = Server(users)
"""

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from httproute.adapter import AdaptedHandler, HandlerKind, adapt
from httproute.conditions import ConditionSpec, Evaluator, Result, evaluate, parse_condition
from httproute.exceptions import ContinuationError
from httproute.overlay import Overlay
from httproute.request import Request
from httproute.response import send_not_found
from httproute.types import Next, Send

logger = logging.getLogger("httproute.route")


@dataclass(slots=True)
class Route:
    """
    A handler guarded by a condition.

    The condition is parsed and the handler adapted on construction, so an
    invalid route fails with ``ConfigurationError`` before any request is
    handled. A route keeps no per-request state and can serve any number
    of requests concurrently.
    """

    condition: ConditionSpec
    handler: Any
    _evaluators: list[Evaluator] = field(default_factory=list, init=False, repr=False)
    _adapted: AdaptedHandler | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self._evaluators = parse_condition(self.condition)
        self._adapted = adapt(self.handler)

    @property
    def kind(self) -> HandlerKind:
        """The kind of handler this route wraps."""
        # pyrefly: ignore [missing-attribute]
        return self._adapted.kind

    def match(self, request: Request) -> Result:
        """Evaluate the condition against ``request``."""
        return evaluate(self._evaluators, request)

    async def __call__(
        self,
        request: Request,
        send: Send,
        call_next: Next | None = None,
    ) -> None:
        if call_next is None:
            call_next = partial(send_not_found, request, send)

        result = self.match(request)
        if not result:
            logger.debug("%s %s does not match %r", request.method, request.path, self.condition)
            await call_next()
            return

        logger.debug("%s %s matches %r", request.method, request.path, self.condition)
        # pyrefly: ignore [missing-attribute]
        overlay = Overlay.apply(request.scope, result.patch)

        async def resume(error: BaseException | None = None) -> None:
            if overlay.released:
                logger.warning(
                    "Handler for %r called its continuation more than once",
                    self.condition,
                )
                raise ContinuationError("Continuation called more than once")
            overlay.undo()
            await call_next(error)

        try:
            # pyrefly: ignore [missing-attribute]
            await self._adapted.call(request, send, resume)
        except BaseException:
            if not overlay.released:
                overlay.undo()
            raise


def route(condition: ConditionSpec, handler: Any) -> Route:
    """
    Create a route running ``handler`` for requests matching ``condition``.

    Raises:
        ConfigurationError: If the condition or the handler is invalid.
    """
    return Route(condition, handler)
