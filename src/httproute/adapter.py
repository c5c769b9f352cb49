"""
Handler adaptation.

Routes accept three kinds of handler targets and resolve which one they
were given once, when the route is built:

* ``FUNCTION`` - an async callable ``(request, send, call_next)``
* ``COMPOSITE`` - an object with ``dispatch(request, send, call_next)``,
  such as :class:`~httproute.router.Router`
* ``LISTENER`` - an object whose ``listeners("request")`` holds exactly
  one callback, such as :class:`~httproute.server.Server`
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from httproute.exceptions import ConfigurationError
from httproute.types import Handler


class HandlerKind(Enum):
    """The shape of a handler target."""

    FUNCTION = "function"
    COMPOSITE = "composite"
    LISTENER = "listener"


@dataclass(frozen=True, slots=True)
class AdaptedHandler:
    """A handler target together with the uniform callable it resolves to."""

    kind: HandlerKind
    target: Any
    call: Handler


def handler_kind(target: Any) -> HandlerKind:
    """
    Classify ``target``.

    Composites and listeners are checked before plain callables, since
    they are usually callable themselves (as ASGI applications).

    Raises:
        ConfigurationError: If ``target`` is missing or not a handler.
    """
    if target is None:
        raise ConfigurationError("No handler given")
    if isinstance(target, type):
        raise ConfigurationError(f"Expected a handler instance, got class {target.__name__}")
    if callable(getattr(target, "dispatch", None)):
        return HandlerKind.COMPOSITE
    if callable(getattr(target, "listeners", None)):
        return HandlerKind.LISTENER
    if callable(target):
        return HandlerKind.FUNCTION
    raise ConfigurationError(f"Not a handler: {target!r}")


def adapt(target: Any) -> AdaptedHandler:
    """
    Resolve ``target`` into an :class:`AdaptedHandler`.

    Raises:
        ConfigurationError: If ``target`` is not a handler, or is a
            listener without exactly one request callback.
    """
    kind = handler_kind(target)

    if kind is HandlerKind.COMPOSITE:
        return AdaptedHandler(kind, target, target.dispatch)

    if kind is HandlerKind.LISTENER:
        callbacks = list(target.listeners("request"))
        if len(callbacks) != 1:
            raise ConfigurationError(
                f"Listener must have exactly one request callback, "
                f"found {len(callbacks)}"
            )
        return AdaptedHandler(kind, target, callbacks[0])

    return AdaptedHandler(kind, target, target)
